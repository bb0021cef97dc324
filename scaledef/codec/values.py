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
Access to the values being encoded and construction of the values being decoded.

The encoder and the decoder never look into values directly, they go through a `ValueModel`. `PyValueModel` works with
plain Python values:

- integers are `int` (decimal or `0x` hex strings are accepted when encoding, `bool` is not an integer here)
- `bool` and `str` for the types of the same name
- byte sequences are `bytes` (`bytearray`, `memoryview` or a hex string are accepted when encoding)
- tuples, arrays and sequences are lists (any sequence that is not a string is accepted when encoding)
- structs are dicts (any mapping or an object with the fields as attributes is accepted when encoding)
- enums are single key dicts, `{'Variant': payload}`, with `None` as the payload of variants that have none

>>> PY_VALUES.to_int('0xff', bits=8, signed=False)
255
>>> PY_VALUES.as_bytes('0x0102')
b'\\x01\\x02'
>>> PY_VALUES.to_int(128, bits=8, signed=True)
Traceback (most recent call last):
...
scaledef.exception.TypeMismatchError: 128 does not fit in i8
"""

import operator
import string
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from typing_extensions import override

from scaledef.exception import TypeMismatchError


class ValueModel(ABC):
    @abstractmethod
    def to_int(self, value: Any, *, bits: int, signed: bool) -> int:
        """Coerce to an integer that fits in the given width, raises `TypeMismatchError` when it doesn't."""
        raise NotImplementedError

    @abstractmethod
    def to_bool(self, value: Any) -> bool:
        raise NotImplementedError

    @abstractmethod
    def to_str(self, value: Any) -> str:
        raise NotImplementedError

    @abstractmethod
    def as_bytes(self, value: Any, *, accept_hex_prefix: bool = True) -> Optional[bytes]:
        """Read a byte buffer or a hex string, `None` when the value is neither."""
        raise NotImplementedError

    @abstractmethod
    def get_field(self, value: Any, name: str) -> Any:
        raise NotImplementedError

    @abstractmethod
    def entries(self, value: Any) -> list[tuple[str, Any]]:
        """Key/value pairs of a value that stands for an enum."""
        raise NotImplementedError

    @abstractmethod
    def get_index(self, value: Any, index: int) -> Any:
        raise NotImplementedError

    @abstractmethod
    def length(self, value: Any) -> int:
        raise NotImplementedError

    @abstractmethod
    def from_int(self, value: int) -> Any:
        raise NotImplementedError

    @abstractmethod
    def from_bool(self, value: bool) -> Any:
        raise NotImplementedError

    @abstractmethod
    def from_str(self, value: str) -> Any:
        raise NotImplementedError

    @abstractmethod
    def from_bytes(self, value: bytes) -> Any:
        raise NotImplementedError

    @abstractmethod
    def null(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def new_list(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def list_append(self, target: Any, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def new_object(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    def set_field(self, target: Any, name: str, value: Any) -> None:
        raise NotImplementedError


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


class PyValueModel(ValueModel):
    @override
    def to_int(self, value: Any, *, bits: int, signed: bool) -> int:
        number: int
        if isinstance(value, bool):
            raise TypeMismatchError(f'{value!r} is a bool, not an integer')
        elif isinstance(value, str):
            number = self._parse_int(value)
        else:
            try:
                number = operator.index(value)
            except TypeError:
                raise TypeMismatchError(f'{value!r} is not an integer')
        if signed:
            low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        else:
            low, high = 0, (1 << bits) - 1
        if not low <= number <= high:
            raise TypeMismatchError(f'{value!r} does not fit in {"i" if signed else "u"}{bits}')
        return number

    @staticmethod
    def _parse_int(text: str) -> int:
        negative = text.startswith('-')
        digits = text[1:] if negative else text
        if digits[:2].lower() == '0x' and digits[2:] and all(c in string.hexdigits for c in digits[2:]):
            number = int(digits[2:], 16)
        elif digits.isascii() and digits.isdigit():
            number = int(digits, 10)
        else:
            raise TypeMismatchError(f'{text!r} is not an integer')
        return -number if negative else number

    @override
    def to_bool(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise TypeMismatchError(f'{value!r} is not a bool')
        return value

    @override
    def to_str(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeMismatchError(f'{value!r} is not a str')
        return value

    @override
    def as_bytes(self, value: Any, *, accept_hex_prefix: bool = True) -> Optional[bytes]:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if not isinstance(value, str):
            return None
        text = value
        if accept_hex_prefix and text[:2].lower() == '0x':
            text = text[2:]
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise TypeMismatchError(f'{value!r} is not a hex string')

    @override
    def get_field(self, value: Any, name: str) -> Any:
        if isinstance(value, Mapping):
            if name not in value:
                raise TypeMismatchError(f'Missing field {name}')
            return value[name]
        try:
            return getattr(value, name)
        except AttributeError:
            raise TypeMismatchError(f'Missing field {name}')

    @override
    def entries(self, value: Any) -> list[tuple[str, Any]]:
        if not isinstance(value, Mapping):
            raise TypeMismatchError(f'Expected a mapping for an enum, got {value!r}')
        return list(value.items())

    @override
    def get_index(self, value: Any, index: int) -> Any:
        if not _is_sequence(value):
            raise TypeMismatchError(f'Expected a sequence, got {value!r}')
        try:
            return value[index]
        except IndexError:
            raise TypeMismatchError(f'Missing element {index}')

    @override
    def length(self, value: Any) -> int:
        if not _is_sequence(value):
            raise TypeMismatchError(f'Expected a sequence, got {value!r}')
        return len(value)

    @override
    def from_int(self, value: int) -> int:
        return value

    @override
    def from_bool(self, value: bool) -> bool:
        return value

    @override
    def from_str(self, value: str) -> str:
        return value

    @override
    def from_bytes(self, value: bytes) -> bytes:
        return value

    @override
    def null(self) -> None:
        return None

    @override
    def new_list(self) -> list[Any]:
        return []

    @override
    def list_append(self, target: list[Any], value: Any) -> None:
        target.append(value)

    @override
    def new_object(self) -> dict[str, Any]:
        return {}

    @override
    def set_field(self, target: dict[str, Any], name: str, value: Any) -> None:
        target[name] = value


PY_VALUES = PyValueModel()
