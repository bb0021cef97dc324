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

from collections.abc import Iterable, Iterator
from typing import Optional, Union

from structlog import get_logger
from typing_extensions import Self, assert_never

from scaledef.conf import CodecSettings, get_settings
from scaledef.exception import ResolutionError
from scaledef.typedef.generics import GenericLookup
from scaledef.typedef.model import AliasType, InlineId, NameId, NumId, PrimitiveKind, PrimitiveType, Type, TypeDef, TypeId
from scaledef.typedef.parser import parse_type, parse_types

logger = get_logger()


class TypeRegistry:
    """Ordered list of type definitions, looked up by name or by position.

    The registry only grows: `append` adds definitions at the end and a name defined again points to the newest
    definition from then on. Nothing is validated when appending, references are resolved when a type is used.

    There is no locking, a registry shared between threads must not be appended to while other threads use it.
    """

    def __init__(self, typedefs: Iterable[TypeDef] = (), *, settings: Optional[CodecSettings] = None) -> None:
        self._log = logger.new()
        self._settings = settings or get_settings()
        self._types: list[TypeDef] = []
        self._lookup: dict[str, int] = {}
        self.append(typedefs)

    @classmethod
    def from_source(cls, source: str, *, settings: Optional[CodecSettings] = None) -> Self:
        """Create a registry with the definitions parsed from `source`."""
        registry = cls(settings=settings)
        registry.append_source(source)
        return registry

    @property
    def settings(self) -> CodecSettings:
        return self._settings

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[TypeDef]:
        return iter(self._types)

    def names(self) -> list[str]:
        """Names with a definition, in the order they were first defined."""
        return list(self._lookup)

    def get_typedef(self, key: Union[str, int]) -> TypeDef:
        """Get a definition as it was registered, by name or by position."""
        if isinstance(key, str):
            if key not in self._lookup:
                raise ResolutionError(f'Unknown type {key}')
            return self._types[self._lookup[key]]
        if not 0 <= key < len(self._types):
            raise ResolutionError(f'Unknown type {key}')
        return self._types[key]

    def append(self, typedefs: Iterable[TypeDef]) -> None:
        count = 0
        for typedef in typedefs:
            if typedef.name is not None:
                self._lookup[typedef.name] = len(self._types)
            self._types.append(typedef)
            count += 1
        if count:
            self._log.debug('types appended', count=count, total=len(self._types))

    def append_source(self, source: str) -> None:
        """Parse the type definitions in `source` and append them."""
        self.append(parse_types(source, settings=self._settings))

    def resolve_type(self, type_id: TypeId, *, fallback: bool) -> Type:
        """Resolve a reference to a shape that is not an alias.

        With `fallback` a name that can't be resolved is parsed as a type expression, so `"[u8;4]"` or `"Pair<u8>"`
        can be used as references without being registered. When that expression is itself a reference, it is resolved
        without falling back again.
        """
        try:
            return self.get_type(type_id)
        except ResolutionError:
            if not fallback or not isinstance(type_id, NameId):
                raise
            self._log.debug('resolving type literal', literal=type_id.name)
            type_ = parse_type(type_id.name, settings=self._settings)
            if isinstance(type_, AliasType):
                return self.resolve_type(type_.target, fallback=False)
            return type_

    def get_type(self, type_id: TypeId) -> Type:
        """Resolve a reference following aliases until a shape is reached."""
        max_depth = self._settings.MAX_ALIAS_DEPTH
        visited: set[TypeId] = set()
        current = type_id
        type_ = self.get_type_shallow(current)
        while isinstance(type_, AliasType):
            visited.add(current)
            current = type_.target
            if current in visited:
                raise ResolutionError(f'Alias cycle while resolving {type_id}, {current} refers back to itself')
            if len(visited) > max_depth:
                raise ResolutionError(f'Too many aliases while resolving {type_id}, the maximum is {max_depth}')
            type_ = self.get_type_shallow(current)
        return type_

    def get_type_shallow(self, type_id: TypeId) -> Type:
        """Resolve a reference one level, the result can still be an alias."""
        index: int
        match type_id:
            case NameId(name=name):
                if name not in self._lookup:
                    kind = PrimitiveKind.from_name(name)
                    if kind is None:
                        raise ResolutionError(f'Unknown type {name}')
                    if type_id.type_args:
                        raise ResolutionError(f'Primitive type {name} can not have type arguments')
                    return PrimitiveType(kind)
                index = self._lookup[name]
            case NumId(index=index):
                if not 0 <= index < len(self._types):
                    raise ResolutionError(f'Unknown type {index}')
            case InlineId(type=inline):
                return inline
            case _:
                assert_never(type_id)
        return self._resolve_generic(type_id, self._types[index])

    def _resolve_generic(self, type_id: TypeId, typedef: TypeDef) -> Type:
        type_args = type_id.type_args if isinstance(type_id, NameId) else ()
        if len(typedef.type_params) != len(type_args):
            raise ResolutionError(
                f'Type {typedef.label} expected {len(typedef.type_params)} type parameters, got {len(type_args)}'
            )
        if not type_args:
            return typedef.type
        return GenericLookup(typedef.type_params, type_args).resolve_type(typedef.type)
