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

import pytest

from scaledef.conf import CodecSettings
from scaledef.exception import ParseError, ResolutionError
from scaledef.typedef.model import (
    ArrayType,
    EnumType,
    InlineId,
    NameId,
    NumId,
    PrimitiveKind,
    PrimitiveType,
    SeqType,
    TupleType,
    Variant,
)
from scaledef.typedef.registry import TypeRegistry

u8 = NameId('u8')
U8 = PrimitiveType(PrimitiveKind.U8)
U16 = PrimitiveType(PrimitiveKind.U16)


def test_primitives_without_definitions():
    registry = TypeRegistry()
    assert len(registry) == 0
    for kind in PrimitiveKind:
        assert registry.get_type(NameId(kind.value)) == PrimitiveType(kind)


def test_lookup_by_name_and_position():
    registry = TypeRegistry.from_source('A=u8; [u16]; B=(A, 1)')
    assert len(registry) == 3
    assert registry.names() == ['A', 'B']
    assert registry.get_type(NumId(1)) == SeqType(NameId('u16'))
    assert registry.get_typedef(1).name is None
    assert registry.get_typedef('B').type == TupleType((NameId('A'), NumId(1)))


def test_aliases_are_followed():
    registry = TypeRegistry.from_source('A=B; B=C; C=[u8]')
    assert registry.get_type(NameId('A')) == registry.get_type(NameId('C')) == SeqType(u8)
    assert registry.get_type_shallow(NameId('A')) != SeqType(u8)


def test_names_can_be_shadowed():
    registry = TypeRegistry.from_source('A=u8')
    registry.append_source('A=u16')
    assert len(registry) == 2
    assert registry.names() == ['A']
    assert registry.get_type(NameId('A')) == U16
    assert registry.get_type(NumId(0)) == U8


def test_definitions_can_shadow_primitives():
    registry = TypeRegistry.from_source('u8=u16')
    assert registry.get_type(u8) == U16


@pytest.mark.parametrize('type_id, message', [
    (NameId('Nope'), 'Unknown type Nope'),
    (NumId(5), 'Unknown type 5'),
    (NameId('u8', (u8,)), 'Primitive type u8 can not have type arguments'),
])
def test_unknown_references(type_id, message):
    registry = TypeRegistry.from_source('A=u8')
    with pytest.raises(ResolutionError, match=message):
        registry.get_type(type_id)


def test_undefined_reference_is_found_when_used():
    registry = TypeRegistry.from_source('A=Missing')
    with pytest.raises(ResolutionError, match='Unknown type Missing'):
        registry.get_type(NameId('A'))


@pytest.mark.parametrize('source', ['A=A', 'A=B; B=A', 'A=B; B=C; C=A', 'A=1; B=0'])
def test_alias_cycles(source):
    registry = TypeRegistry.from_source(source)
    with pytest.raises(ResolutionError, match='Alias cycle while resolving A'):
        registry.get_type(NameId('A'))
    with pytest.raises(ResolutionError, match='Alias cycle'):
        registry.resolve_type(NameId('A'), fallback=True)


def test_alias_depth():
    settings = CodecSettings(MAX_ALIAS_DEPTH=2)
    assert TypeRegistry.from_source('A=B; B=u8', settings=settings).get_type(NameId('A')) == U8
    registry = TypeRegistry.from_source('A=B; B=C; C=u8', settings=settings)
    with pytest.raises(ResolutionError, match='Too many aliases while resolving A, the maximum is 2'):
        registry.get_type(NameId('A'))


def test_generics():
    registry = TypeRegistry.from_source('Pair<T>=(T, T); Opt<T>=<None, Some:T>; Bytes=Opt<[u8]>')
    assert registry.get_type(NameId('Pair', (u8,))) == TupleType((u8, u8))
    assert registry.get_type(NameId('Bytes')) == EnumType((
        Variant('None'),
        Variant('Some', InlineId(SeqType(u8))),
    ))


@pytest.mark.parametrize('type_id, message', [
    (NameId('Pair'), 'Type Pair expected 1 type parameters, got 0'),
    (NameId('Pair', (u8, u8)), 'Type Pair expected 1 type parameters, got 2'),
    (NameId('A', (u8,)), 'Type A expected 0 type parameters, got 1'),
])
def test_generic_argument_count(type_id, message):
    registry = TypeRegistry.from_source('Pair<T>=(T, T); A=u8')
    with pytest.raises(ResolutionError, match=message):
        registry.get_type(type_id)


def test_type_literal_fallback():
    registry = TypeRegistry.from_source('Pair<T>=(T, T)')
    assert registry.resolve_type(NameId('[u8;4]'), fallback=True) == ArrayType(u8, 4)
    assert registry.resolve_type(NameId('Pair<u8>'), fallback=True) == TupleType((u8, u8))
    assert registry.resolve_type(NameId('(u8)'), fallback=True) == TupleType((u8,))
    with pytest.raises(ResolutionError):
        registry.resolve_type(NameId('[u8;4]'), fallback=False)


def test_type_literal_fallback_errors():
    registry = TypeRegistry()
    with pytest.raises(ResolutionError, match='Unknown type Nope'):
        registry.resolve_type(NameId('Nope'), fallback=True)
    with pytest.raises(ParseError):
        registry.resolve_type(NameId('[u8'), fallback=True)


def test_append_does_not_validate():
    registry = TypeRegistry()
    registry.append_source('A=Missing; B=u8')
    assert registry.get_type(NameId('B')) == U8


def test_append_parse_error_keeps_registry():
    registry = TypeRegistry.from_source('A=u8')
    with pytest.raises(ParseError):
        registry.append_source('B=u16; C=')
    assert len(registry) == 1
    assert registry.names() == ['A']


def test_alias_to_primitive_and_generic_struct():
    registry = TypeRegistry.from_source('A=B; B=u32; Pair<T>={a:T,b:T}')
    assert registry.get_type(NameId('A')) == PrimitiveType(PrimitiveKind.U32)
    assert str(registry.get_type(NameId('Pair', (u8,)))) == '{a:u8,b:u8}'
