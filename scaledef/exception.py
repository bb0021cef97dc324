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

from typing import Iterable


class ScaleDefError(Exception):
    """General error class"""


class LexError(ScaleDefError):
    """Type definition source contains an invalid character or number literal"""


class ParseError(ScaleDefError):
    """Type definition source does not match the grammar.

    All the problems found in a single parse are collected in `errors`, the message joins them one per line.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: list[str] = list(errors)
        super().__init__('\n'.join(self.errors))


class ResolutionError(ScaleDefError):
    """A type reference could not be resolved: unknown name or index, wrong number of type arguments, alias cycle"""


class TypeMismatchError(ScaleDefError):
    """A value does not have the shape required by the type it is being encoded as"""


class NestingTooDeepError(TypeMismatchError):
    """Value or type nesting went beyond the configured maximum depth"""


class BufferUnderrunError(ScaleDefError):
    """Decoding needs more bytes than what is left in the buffer"""


class InvalidDataError(ScaleDefError):
    """The bytes being decoded are present but malformed: bad bool byte, non-canonical compact, invalid UTF-8"""
