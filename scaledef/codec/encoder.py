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

from typing import Any, Optional

from typing_extensions import assert_never

from scaledef.codec.values import PY_VALUES, ValueModel
from scaledef.conf import CodecSettings
from scaledef.exception import NestingTooDeepError, TypeMismatchError
from scaledef.serialization import SerializationError, Serializer
from scaledef.serialization.compound_encoding import Encoder as ItemEncoder
from scaledef.serialization.compound_encoding.collection import encode_collection
from scaledef.serialization.compound_encoding.tuple import encode_tuple
from scaledef.serialization.encoding.bool import encode_bool
from scaledef.serialization.encoding.bytes import encode_bytes
from scaledef.serialization.encoding.compact import encode_compact
from scaledef.serialization.encoding.int import encode_int
from scaledef.serialization.encoding.utf8 import encode_utf8
from scaledef.typedef.model import (
    AliasType,
    ArrayType,
    CompactType,
    EnumType,
    PrimitiveKind,
    PrimitiveType,
    SeqType,
    StructType,
    TupleType,
    TypeId,
)
from scaledef.typedef.registry import TypeRegistry

# enum discriminants are written as a single byte
MAX_DISCRIMINANT = 0xff


class Encoder:
    """Writes values as the bytes of the type they are encoded as.

    Every value is resolved through the registry with the literal fallback enabled, so type expressions can be used as
    references anywhere. Element types are peeked without the fallback to detect byte sequences.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        *,
        values: ValueModel = PY_VALUES,
        settings: Optional[CodecSettings] = None,
    ) -> None:
        self._registry = registry
        self._values = values
        self._settings = settings or registry.settings

    def encode(self, serializer: Serializer, value: Any, type_id: TypeId) -> None:
        try:
            self._encode_value(serializer, value, type_id, 0)
        except SerializationError as e:
            raise TypeMismatchError(f'{e} while encoding {type_id}') from e
        except RecursionError as e:
            raise NestingTooDeepError(f'Value nested too deep for the interpreter while encoding {type_id}') from e

    def _encode_value(self, serializer: Serializer, value: Any, type_id: TypeId, depth: int) -> None:
        if depth > self._settings.MAX_NESTING_DEPTH:
            raise NestingTooDeepError(f'Value nested deeper than {self._settings.MAX_NESTING_DEPTH} levels')
        type_ = self._registry.resolve_type(type_id, fallback=True)
        match type_:
            case PrimitiveType(kind=kind):
                self._encode_primitive(serializer, value, kind)
            case CompactType(inner=inner):
                self._encode_compact(serializer, value, inner)
            case SeqType(elem=elem):
                if self._is_u8(elem):
                    data = self._values.as_bytes(value, accept_hex_prefix=self._settings.ACCEPT_HEX_PREFIX)
                    if data is not None:
                        encode_bytes(serializer, data)
                        return
                items = self._items(value, self._values.length(value))
                encode_collection(serializer, items, self._encoder_for(elem, depth))
            case TupleType(elems=elems):
                items = self._items(value, len(elems), kind='tuple')
                encoders = [self._encoder_for(elem, depth) for elem in elems]
                encode_tuple(serializer, items, encoders)
            case ArrayType(elem=elem, length=length):
                if self._is_u8(elem):
                    data = self._values.as_bytes(value, accept_hex_prefix=self._settings.ACCEPT_HEX_PREFIX)
                    if data is not None:
                        if len(data) != length:
                            raise TypeMismatchError(f'Expected array of length {length}, got {len(data)}')
                        serializer.write_bytes(data)
                        return
                items = self._items(value, length, kind='array')
                encode_tuple(serializer, items, [self._encoder_for(elem, depth)] * length)
            case EnumType():
                self._encode_enum(serializer, value, type_, depth)
            case StructType(fields=fields):
                for field in fields:
                    self._encode_value(serializer, self._values.get_field(value, field.name), field.type_id, depth + 1)
            case AliasType():
                raise AssertionError('aliases are resolved by the registry')
            case _:
                assert_never(type_)

    def _encoder_for(self, type_id: TypeId, depth: int) -> ItemEncoder[Any]:
        return lambda se, item: self._encode_value(se, item, type_id, depth + 1)

    def _items(self, value: Any, length: int, *, kind: Optional[str] = None) -> list[Any]:
        if kind is not None:
            actual = self._values.length(value)
            if actual != length:
                raise TypeMismatchError(f'Expected {kind} of length {length}, got {actual}')
        return [self._values.get_index(value, i) for i in range(length)]

    def _is_u8(self, elem: TypeId) -> bool:
        return self._registry.resolve_type(elem, fallback=False) == PrimitiveType(PrimitiveKind.U8)

    def _encode_primitive(self, serializer: Serializer, value: Any, kind: PrimitiveKind) -> None:
        match kind:
            case PrimitiveKind.BOOL:
                encode_bool(serializer, self._values.to_bool(value))
            case PrimitiveKind.STR:
                encode_utf8(serializer, self._values.to_str(value))
            case _:
                number = self._values.to_int(value, bits=kind.bits, signed=kind.signed)
                encode_int(serializer, number, length=kind.byte_length, signed=kind.signed)

    def _encode_compact(self, serializer: Serializer, value: Any, inner: TypeId) -> None:
        inner_type = self._registry.resolve_type(inner, fallback=False)
        match inner_type:
            case PrimitiveType(kind=kind) if kind.is_integer and not kind.signed:
                encode_compact(serializer, self._values.to_int(value, bits=kind.bits, signed=False))
            case TupleType(elems=()):
                # compact of the unit type takes no bytes
                pass
            case _:
                raise TypeMismatchError(f'Compact needs an unsigned integer or (), got {inner_type}')

    def _encode_enum(self, serializer: Serializer, value: Any, enum: EnumType, depth: int) -> None:
        for key, payload in self._values.entries(value):
            found = enum.variant_by_name(key) if isinstance(key, str) else None
            if found is None:
                continue
            variant, discriminant = found
            if discriminant > MAX_DISCRIMINANT:
                raise TypeMismatchError(f'Variant index {discriminant} is too large')
            encode_int(serializer, discriminant, length=1, signed=False)
            if variant.payload is not None:
                self._encode_value(serializer, payload, variant.payload, depth + 1)
            return
        names = ', '.join(variant.name for variant in enum.variants)
        raise TypeMismatchError(f'Expected an enum with any variant of {names}')
