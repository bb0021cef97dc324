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

"""
Encoding and decoding of values as described by a type registry.
"""

from scaledef.codec.api import (
    Codec,
    append_types,
    as_registry,
    as_type_id,
    codec,
    decode,
    decode_all,
    encode,
    encode_all,
    parse_types,
)
from scaledef.codec.decoder import Decoder
from scaledef.codec.encoder import Encoder
from scaledef.codec.values import PY_VALUES, PyValueModel, ValueModel

__all__ = [
    'Codec',
    'Decoder',
    'Encoder',
    'PY_VALUES',
    'PyValueModel',
    'ValueModel',
    'append_types',
    'as_registry',
    'as_type_id',
    'codec',
    'decode',
    'decode_all',
    'encode',
    'encode_all',
    'parse_types',
]
