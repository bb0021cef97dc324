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
Functions to encode and decode values given a type reference and a registry.

Wherever a registry is expected, type definition source can be given instead (it is parsed into a new registry) or
`None` for an empty one, enough for primitives and type expressions. Type references can be names, type expressions
or positions in the registry:

>>> types = 'Msg={id:u32,tag:<Ping,Pong:str>}'
>>> encode({'id': 1, 'tag': {'Pong': 'hi'}}, 'Msg', types).hex()
'0100000001086869'
>>> decode(bytes.fromhex('0100000001086869'), 'Msg', types)
{'id': 1, 'tag': {'Pong': 'hi'}}
>>> encode_all([7, b'ab'], ['u16', '[u8]']).hex()
'0700086162'
>>> decode_all(bytes.fromhex('0700086162'), ['u16', '[u8]'])
[7, b'ab']
"""

from collections.abc import Sequence
from typing import Any, Optional, TypeAlias, Union

from structlog import get_logger

from scaledef.codec.decoder import Decoder
from scaledef.codec.encoder import Encoder
from scaledef.codec.values import PY_VALUES, ValueModel
from scaledef.exception import TypeMismatchError
from scaledef.serialization import Deserializer, Serializer
from scaledef.serialization.types import Buffer
from scaledef.typedef.model import InlineId, NameId, NumId, TypeId
from scaledef.typedef.registry import TypeRegistry

logger = get_logger()

RegistryLike: TypeAlias = Union[TypeRegistry, str, None]
TypeIdLike: TypeAlias = Union[NameId, NumId, InlineId, str, int]


def as_registry(registry: RegistryLike) -> TypeRegistry:
    """Get a registry from a registry, from type definition source or from nothing."""
    if registry is None:
        return TypeRegistry()
    if isinstance(registry, str):
        return TypeRegistry.from_source(registry)
    if isinstance(registry, TypeRegistry):
        return registry
    raise TypeError(f'expected a TypeRegistry, type definitions or None, got {type(registry).__name__}')


def as_type_id(type_id: TypeIdLike) -> TypeId:
    """Get a type reference: strings are names or type expressions and integers are positions."""
    if isinstance(type_id, (NameId, NumId, InlineId)):
        return type_id
    if isinstance(type_id, str):
        return NameId(type_id)
    if isinstance(type_id, int) and not isinstance(type_id, bool):
        return NumId(type_id)
    raise TypeError(f'expected a type reference, got {type_id!r}')


def parse_types(source: str) -> TypeRegistry:
    return TypeRegistry.from_source(source)


def append_types(registry: TypeRegistry, source: str) -> None:
    registry.append_source(source)


def encode(value: Any, type_id: TypeIdLike, registry: RegistryLike = None, *,
           value_model: ValueModel = PY_VALUES) -> bytes:
    return _encode_values(as_registry(registry), [value], [as_type_id(type_id)], value_model)


def encode_all(values: Sequence[Any], type_ids: Sequence[TypeIdLike], registry: RegistryLike = None, *,
               value_model: ValueModel = PY_VALUES) -> bytes:
    """Encode each value with the type at the same position, the bytes are concatenated."""
    return _encode_values(as_registry(registry), values, [as_type_id(t) for t in type_ids], value_model)


def decode(data: Buffer, type_id: TypeIdLike, registry: RegistryLike = None, *,
           value_model: ValueModel = PY_VALUES) -> Any:
    (value,) = _decode_values(as_registry(registry), data, [as_type_id(type_id)], value_model)
    return value


def decode_all(data: Buffer, type_ids: Sequence[TypeIdLike], registry: RegistryLike = None, *,
               value_model: ValueModel = PY_VALUES) -> list[Any]:
    """Decode one value of each type, one after the other, from the same bytes."""
    return _decode_values(as_registry(registry), data, [as_type_id(t) for t in type_ids], value_model)


def codec(type_id: Union[TypeIdLike, Sequence[TypeIdLike]], registry: RegistryLike = None, *,
          value_model: ValueModel = PY_VALUES) -> 'Codec':
    return Codec(type_id, registry, value_model=value_model)


class Codec:
    """An encode/decode pair bound to a type and a registry.

    A list or tuple of type references makes it encode and decode lists of values, like `encode_all` and
    `decode_all`. Type definition source given as the registry is parsed the first time it is needed.

    >>> pair = Codec(['u8', 'bool'])
    >>> pair.encode([1, True]).hex()
    '0101'
    >>> pair.decode(b'\\x02\\x00')
    [2, False]
    """

    def __init__(self, type_id: Union[TypeIdLike, Sequence[TypeIdLike]], registry: RegistryLike = None, *,
                 value_model: ValueModel = PY_VALUES) -> None:
        self._log = logger.new()
        self.is_multi = isinstance(type_id, (list, tuple))
        if isinstance(type_id, (list, tuple)):
            self.type_ids = [as_type_id(t) for t in type_id]
        else:
            self.type_ids = [as_type_id(type_id)]
        self._registry_source = registry
        self._registry: Optional[TypeRegistry] = registry if isinstance(registry, TypeRegistry) else None
        self._value_model = value_model
        self._log.debug('codec created', type_ids=[str(t) for t in self.type_ids], multi=self.is_multi)

    @property
    def registry(self) -> TypeRegistry:
        if self._registry is None:
            self._registry = as_registry(self._registry_source)
            self._log.debug('codec registry loaded', types=len(self._registry))
        return self._registry

    def encode(self, value: Any) -> bytes:
        if self.is_multi:
            return _encode_values(self.registry, value, self.type_ids, self._value_model)
        return _encode_values(self.registry, [value], self.type_ids, self._value_model)

    def decode(self, data: Buffer) -> Any:
        values = _decode_values(self.registry, data, self.type_ids, self._value_model)
        if self.is_multi:
            return values
        (value,) = values
        return value


def _encode_values(registry: TypeRegistry, values: Sequence[Any], type_ids: Sequence[TypeId],
                   value_model: ValueModel) -> bytes:
    if len(values) != len(type_ids):
        raise TypeMismatchError(f'Expected {len(type_ids)} values, got {len(values)}')
    encoder = Encoder(registry, values=value_model)
    serializer = Serializer.build_bytes_serializer()
    for value, type_id in zip(values, type_ids):
        encoder.encode(serializer, value, type_id)
    return bytes(serializer.finalize())


def _decode_values(registry: TypeRegistry, data: Buffer, type_ids: Sequence[TypeId],
                   value_model: ValueModel) -> list[Any]:
    decoder = Decoder(registry, values=value_model)
    deserializer = Deserializer.build_bytes_deserializer(data)
    return [decoder.decode(deserializer, type_id) for type_id in type_ids]
