# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from pathlib import Path
from typing import Union

from pydantic import Field, field_validator

from scaledef.utils.pydantic import BaseModel


class CodecSettings(BaseModel):
    """Limits and switches of the type parser and the codec."""

    # Maximum bracket depth accepted by the lexer and maximum value depth walked by the encoder and decoder.
    MAX_NESTING_DEPTH: int = Field(default=128, gt=0)

    # Maximum number of alias hops followed while resolving a type reference.
    MAX_ALIAS_DEPTH: int = Field(default=64, gt=0)

    # Whether hex strings given for byte sequences may start with `0x`.
    ACCEPT_HEX_PREFIX: bool = True

    @field_validator('MAX_NESTING_DEPTH')
    @classmethod
    def _check_nesting_depth(cls, value: int) -> int:
        # each level costs several interpreter frames, overflow is reported as NestingTooDeepError
        if value > 256:
            raise ValueError('MAX_NESTING_DEPTH must be at most 256')
        return value

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'CodecSettings':
        """Takes a filepath to a yaml file and returns a validated CodecSettings instance."""
        from scaledef.conf import _CONF_DIR
        from scaledef.utils.yaml import model_from_extended_yaml
        return model_from_extended_yaml(cls, filepath=filepath, custom_root=_CONF_DIR)
