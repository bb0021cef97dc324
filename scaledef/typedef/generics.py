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
Instantiation of generic type definitions.

A `GenericLookup` maps the parameters of a definition to the arguments given where it is used, and rebuilds the
definition's shape with every occurrence of a parameter replaced by its argument:

>>> T, u8 = NameId('T'), NameId('u8')
>>> pair = StructType((Field('a', T), Field('b', InlineId(SeqType(T)))))
>>> str(GenericLookup(['T'], [u8]).resolve_type(pair))
'{a:u8,b:[u8]}'

Parameters can be passed along to other generic types, but can't take arguments themselves:

>>> str(GenericLookup(['T'], [u8]).resolve_type(AliasType(NameId('Option', (T,)))))
'Option<u8>'
>>> GenericLookup(['T'], [u8]).resolve_type(SeqType(NameId('T', (u8,))))
Traceback (most recent call last):
...
scaledef.exception.ResolutionError: Generic type T can not have type arguments
"""

from collections.abc import Sequence
from dataclasses import replace
from typing import Optional

from typing_extensions import assert_never

from scaledef.exception import ResolutionError
from scaledef.typedef.model import (
    AliasType,
    ArrayType,
    CompactType,
    EnumType,
    Field,
    InlineId,
    NameId,
    NumId,
    PrimitiveType,
    SeqType,
    StructType,
    TupleType,
    Type,
    TypeId,
)


class GenericLookup:
    def __init__(self, type_params: Sequence[str], type_args: Sequence[TypeId]) -> None:
        assert len(type_params) == len(type_args)
        self._map: dict[str, TypeId] = dict(zip(type_params, type_args))

    def get(self, name: str) -> Optional[TypeId]:
        return self._map.get(name)

    def resolve_id(self, type_id: TypeId) -> TypeId:
        match type_id:
            case NameId(name=name, type_args=type_args):
                arg = self.get(name)
                if arg is not None:
                    if type_args:
                        raise ResolutionError(f'Generic type {name} can not have type arguments')
                    return arg
                if not type_args:
                    return type_id
                return NameId(name, tuple(self.resolve_id(type_arg) for type_arg in type_args))
            case NumId():
                return type_id
            case InlineId(type=inner):
                return InlineId(self.resolve_type(inner))
            case _:
                assert_never(type_id)

    def resolve_type(self, type_: Type) -> Type:
        match type_:
            case PrimitiveType():
                return type_
            case CompactType(inner=inner):
                return CompactType(self.resolve_id(inner))
            case SeqType(elem=elem):
                return SeqType(self.resolve_id(elem))
            case TupleType(elems=elems):
                return TupleType(tuple(self.resolve_id(elem) for elem in elems))
            case ArrayType(elem=elem, length=length):
                return ArrayType(self.resolve_id(elem), length)
            case EnumType(variants=variants):
                return EnumType(tuple(
                    variant if variant.payload is None else replace(variant, payload=self.resolve_id(variant.payload))
                    for variant in variants
                ))
            case StructType(fields=fields):
                return StructType(tuple(Field(field.name, self.resolve_id(field.type_id)) for field in fields))
            case AliasType(target=target):
                return AliasType(self.resolve_id(target))
            case _:
                assert_never(type_)
