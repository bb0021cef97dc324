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

from collections.abc import Iterable
from typing import Any, Optional

from typing_extensions import assert_never

from scaledef.codec.values import PY_VALUES, ValueModel
from scaledef.conf import CodecSettings
from scaledef.exception import BufferUnderrunError, InvalidDataError, NestingTooDeepError, TypeMismatchError
from scaledef.serialization import Deserializer, OutOfDataError, SerializationError
from scaledef.serialization.compound_encoding import Decoder as ItemDecoder
from scaledef.serialization.compound_encoding.collection import decode_collection
from scaledef.serialization.compound_encoding.tuple import decode_tuple
from scaledef.serialization.encoding.bool import decode_bool
from scaledef.serialization.encoding.bytes import decode_bytes
from scaledef.serialization.encoding.compact import decode_compact
from scaledef.serialization.encoding.int import decode_int
from scaledef.serialization.encoding.utf8 import decode_utf8
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


class Decoder:
    """Reads values from bytes, the mirror of `Encoder`.

    The deserializer only moves forward, decoding several values from the same deserializer reads them one after the
    other. Bytes left after the last value are not an error.
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

    def decode(self, deserializer: Deserializer, type_id: TypeId) -> Any:
        try:
            return self._decode_value(deserializer, type_id, 0)
        except OutOfDataError as e:
            raise BufferUnderrunError(
                f'unexpected end of buffer at byte {deserializer.cur_pos()} while decoding {type_id}'
            ) from e
        except SerializationError as e:
            raise InvalidDataError(f'{e} at byte {deserializer.cur_pos()} while decoding {type_id}') from e
        except RecursionError as e:
            raise NestingTooDeepError(f'Value nested too deep for the interpreter while decoding {type_id}') from e

    def _decode_value(self, deserializer: Deserializer, type_id: TypeId, depth: int) -> Any:
        if depth > self._settings.MAX_NESTING_DEPTH:
            raise NestingTooDeepError(f'Value nested deeper than {self._settings.MAX_NESTING_DEPTH} levels')
        type_ = self._registry.resolve_type(type_id, fallback=True)
        match type_:
            case PrimitiveType(kind=kind):
                return self._decode_primitive(deserializer, kind)
            case CompactType(inner=inner):
                return self._decode_compact(deserializer, inner)
            case SeqType(elem=elem):
                if self._is_u8(elem):
                    return self._values.from_bytes(decode_bytes(deserializer))
                return decode_collection(deserializer, self._decoder_for(elem, depth), self._build_list)
            case TupleType(elems=elems):
                items = decode_tuple(deserializer, [self._decoder_for(elem, depth) for elem in elems])
                return self._build_list(items)
            case ArrayType(elem=elem, length=length):
                if self._is_u8(elem):
                    return self._values.from_bytes(bytes(deserializer.read_bytes(length)))
                items = decode_tuple(deserializer, [self._decoder_for(elem, depth)] * length)
                return self._build_list(items)
            case EnumType():
                return self._decode_enum(deserializer, type_, depth)
            case StructType(fields=fields):
                result = self._values.new_object()
                for field in fields:
                    self._values.set_field(
                        result, field.name, self._decode_value(deserializer, field.type_id, depth + 1)
                    )
                return result
            case AliasType():
                raise AssertionError('aliases are resolved by the registry')
            case _:
                assert_never(type_)

    def _decoder_for(self, type_id: TypeId, depth: int) -> ItemDecoder[Any]:
        return lambda de: self._decode_value(de, type_id, depth + 1)

    def _build_list(self, items: Iterable[Any]) -> Any:
        result = self._values.new_list()
        for item in items:
            self._values.list_append(result, item)
        return result

    def _is_u8(self, elem: TypeId) -> bool:
        return self._registry.resolve_type(elem, fallback=False) == PrimitiveType(PrimitiveKind.U8)

    def _decode_primitive(self, deserializer: Deserializer, kind: PrimitiveKind) -> Any:
        match kind:
            case PrimitiveKind.BOOL:
                return self._values.from_bool(decode_bool(deserializer))
            case PrimitiveKind.STR:
                return self._values.from_str(decode_utf8(deserializer))
            case _:
                number = decode_int(deserializer, length=kind.byte_length, signed=kind.signed)
                return self._values.from_int(number)

    def _decode_compact(self, deserializer: Deserializer, inner: TypeId) -> Any:
        inner_type = self._registry.resolve_type(inner, fallback=False)
        match inner_type:
            case PrimitiveType(kind=kind) if kind.is_integer and not kind.signed:
                return self._values.from_int(decode_compact(deserializer, max_bits=kind.bits))
            case TupleType(elems=()):
                return self._values.new_list()
            case _:
                raise TypeMismatchError(f'Compact needs an unsigned integer or (), got {inner_type}')

    def _decode_enum(self, deserializer: Deserializer, enum: EnumType, depth: int) -> Any:
        tag = decode_int(deserializer, length=1, signed=False)
        variant = enum.variant_by_tag(tag)
        if variant is None:
            raise InvalidDataError(f'Unknown variant {tag}')
        payload = self._values.null()
        if variant.payload is not None:
            payload = self._decode_value(deserializer, variant.payload, depth + 1)
        result = self._values.new_object()
        self._values.set_field(result, variant.name, payload)
        return result
