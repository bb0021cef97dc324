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
Data model of the type definition language.

A type is referenced through a `TypeId` (a name, possibly with generic arguments, a positional index or an inline
shape) and described by one of the `Type` variants. All of them are frozen dataclasses, so they are hashable and can be
shared freely between registries. `str()` renders any of them back to type definition language text:

>>> u32 = NameId('u32')
>>> point = StructType((Field('x', u32), Field('y', u32)))
>>> str(point)
'{x:u32,y:u32}'
>>> str(TypeDef('Pair', ('T',), StructType((Field('a', NameId('T')), Field('b', NameId('T'))))))
'Pair<T>={a:T,b:T}'
>>> str(EnumType((Variant('A'), Variant('B', payload=u32), Variant('C', index=5))))
'<A,B:u32,C::5>'
>>> str(ArrayType(NameId('u8'), 32))
'[u8;32]'
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TypeAlias, Union


class PrimitiveKind(Enum):
    U8 = 'u8'
    U16 = 'u16'
    U32 = 'u32'
    U64 = 'u64'
    U128 = 'u128'
    I8 = 'i8'
    I16 = 'i16'
    I32 = 'i32'
    I64 = 'i64'
    I128 = 'i128'
    BOOL = 'bool'
    STR = 'str'

    @classmethod
    def from_name(cls, name: str) -> Optional['PrimitiveKind']:
        """Get the kind from its keyword, `None` when `name` is not a primitive keyword.

        >>> PrimitiveKind.from_name('u128')
        <PrimitiveKind.U128: 'u128'>
        >>> PrimitiveKind.from_name('u256') is None
        True
        """
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def is_integer(self) -> bool:
        return self not in (PrimitiveKind.BOOL, PrimitiveKind.STR)

    @property
    def signed(self) -> bool:
        return self.value.startswith('i')

    @property
    def bits(self) -> int:
        """Bit width of an integer kind.

        >>> PrimitiveKind.I64.bits
        64
        """
        assert self.is_integer, f'{self.value} is not an integer'
        return int(self.value[1:])

    @property
    def byte_length(self) -> int:
        return self.bits // 8


@dataclass(frozen=True)
class NameId:
    """Reference by name, `type_args` is non-empty for generic instantiations (`Pair<u8>`)."""
    name: str
    type_args: tuple['TypeId', ...] = ()

    def __str__(self) -> str:
        if not self.type_args:
            return self.name
        return f'{self.name}<{",".join(str(arg) for arg in self.type_args)}>'


@dataclass(frozen=True)
class NumId:
    """Reference by position in the registry, counting anonymous definitions too."""
    index: int

    def __str__(self) -> str:
        return str(self.index)


@dataclass(frozen=True)
class InlineId:
    """An anonymous type used where a reference is expected (`[(u8,u16)]`)."""
    type: 'Type'

    def __str__(self) -> str:
        return str(self.type)


TypeId: TypeAlias = Union[NameId, NumId, InlineId]


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind

    def __str__(self) -> str:
        return f'#{self.kind.value}'


@dataclass(frozen=True)
class CompactType:
    inner: TypeId

    def __str__(self) -> str:
        return f'@{self.inner}'


@dataclass(frozen=True)
class SeqType:
    elem: TypeId

    def __str__(self) -> str:
        return f'[{self.elem}]'


@dataclass(frozen=True)
class TupleType:
    elems: tuple[TypeId, ...]

    def __str__(self) -> str:
        return f'({",".join(str(elem) for elem in self.elems)})'


@dataclass(frozen=True)
class ArrayType:
    elem: TypeId
    length: int

    def __str__(self) -> str:
        return f'[{self.elem};{self.length}]'


@dataclass(frozen=True)
class Variant:
    name: str
    payload: Optional[TypeId] = None
    # explicit discriminant, the declaration index is used when not set
    index: Optional[int] = None

    def __str__(self) -> str:
        if self.index is None:
            return self.name if self.payload is None else f'{self.name}:{self.payload}'
        return f'{self.name}:{"" if self.payload is None else self.payload}:{self.index}'


@dataclass(frozen=True)
class EnumType:
    variants: tuple[Variant, ...]

    def __str__(self) -> str:
        return f'<{",".join(str(variant) for variant in self.variants)}>'

    def variant_by_name(self, name: str) -> Optional[tuple[Variant, int]]:
        """Find a variant and its discriminant by the variant's name."""
        for position, variant in enumerate(self.variants):
            if variant.name == name:
                return variant, position if variant.index is None else variant.index
        return None

    def variant_by_tag(self, tag: int) -> Optional[Variant]:
        """Find the variant a discriminant byte stands for.

        The variant at position `tag` is tried first, it matches if it has no explicit discriminant or if its explicit
        discriminant is `tag`. Otherwise the variants with an explicit discriminant are scanned in order.

        >>> enum = EnumType((Variant('A'), Variant('B', index=0), Variant('C', index=5)))
        >>> enum.variant_by_tag(0).name
        'A'
        >>> enum.variant_by_tag(5).name
        'C'
        >>> enum.variant_by_tag(1) is None
        True
        """
        if tag < len(self.variants):
            variant = self.variants[tag]
            if variant.index is None or variant.index == tag:
                return variant
        for variant in self.variants:
            if variant.index is not None and variant.index == tag:
                return variant
        return None


@dataclass(frozen=True)
class Field:
    name: str
    type_id: TypeId

    def __str__(self) -> str:
        return f'{self.name}:{self.type_id}'


@dataclass(frozen=True)
class StructType:
    fields: tuple[Field, ...]

    def __str__(self) -> str:
        return f'{{{",".join(str(field) for field in self.fields)}}}'


@dataclass(frozen=True)
class AliasType:
    """Transparent forward to another type, the registry always resolves it away."""
    target: TypeId

    def __str__(self) -> str:
        return str(self.target)


Type: TypeAlias = Union[
    PrimitiveType,
    CompactType,
    SeqType,
    TupleType,
    ArrayType,
    EnumType,
    StructType,
    AliasType,
]


@dataclass(frozen=True)
class TypeDef:
    name: Optional[str]
    type_params: tuple[str, ...]
    type: Type

    @property
    def label(self) -> str:
        return self.name if self.name is not None else str(self.type)

    def __str__(self) -> str:
        if self.name is None:
            return str(self.type)
        params = f'<{",".join(self.type_params)}>' if self.type_params else ''
        return f'{self.name}{params}={self.type}'
