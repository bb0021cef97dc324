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
from scaledef.exception import LexError, ParseError
from scaledef.typedef.model import (
    AliasType,
    ArrayType,
    CompactType,
    EnumType,
    Field,
    InlineId,
    NameId,
    NumId,
    PrimitiveKind,
    PrimitiveType,
    SeqType,
    StructType,
    TupleType,
    TypeDef,
    Variant,
)
from scaledef.typedef.parser import parse_type, parse_types

u8 = NameId('u8')
u16 = NameId('u16')
u32 = NameId('u32')


def test_empty_source():
    assert parse_types('') == []
    assert parse_types('  // only a comment\n') == []


def test_definitions():
    typedefs = parse_types('''
        Point = { x: u32, y: u32 };
        Points = [Point];
        Flags = (bool, bool,);
        Hash = [u8; 32];
        Amount = @u128;
        Byte = #u8;
        First = 0;
    ''')
    assert typedefs == [
        TypeDef('Point', (), StructType((Field('x', u32), Field('y', u32)))),
        TypeDef('Points', (), SeqType(NameId('Point'))),
        TypeDef('Flags', (), TupleType((NameId('bool'), NameId('bool')))),
        TypeDef('Hash', (), ArrayType(u8, 32)),
        TypeDef('Amount', (), CompactType(NameId('u128'))),
        TypeDef('Byte', (), PrimitiveType(PrimitiveKind.U8)),
        TypeDef('First', (), AliasType(NumId(0))),
    ]


def test_anonymous_definitions():
    typedefs = parse_types('u8; [u16]')
    assert typedefs == [
        TypeDef(None, (), AliasType(u8)),
        TypeDef(None, (), SeqType(u16)),
    ]


def test_inline_types_are_wrapped():
    assert parse_type('[(u8, [u16])]') == SeqType(InlineId(TupleType((u8, InlineId(SeqType(u16))))))


def test_unit_and_empty_shapes():
    assert parse_type('()') == TupleType(())
    assert parse_type('{}') == StructType(())
    assert parse_type('<>') == EnumType(())


@pytest.mark.parametrize('source, variants', [
    ('<A, B>', (Variant('A'), Variant('B'))),
    ('<A | B | C>', (Variant('A'), Variant('B'), Variant('C'))),
    ('<A, B:u32, C::5>', (Variant('A'), Variant('B', u32), Variant('C', index=5))),
    ('<A:u8:3, B:>', (Variant('A', u8, 3), Variant('B'))),
    ('<A,>', (Variant('A'),)),
])
def test_enum_variants(source, variants):
    assert parse_type(source) == EnumType(variants)


def test_generic_definitions():
    (pair,) = parse_types('Pair<T> = (T, T)')
    assert pair == TypeDef('Pair', ('T',), TupleType((NameId('T'), NameId('T'))))
    (either,) = parse_types('Either<L, R> = <Left: L, Right: R>')
    assert either.type_params == ('L', 'R')


def test_generic_references():
    assert parse_type('Pair<u8>') == AliasType(NameId('Pair', (u8,)))
    assert parse_type('[Map<str, [u8]>]') == SeqType(NameId('Map', (NameId('str'), InlineId(SeqType(u8)))))


def test_round_trip_through_str():
    source = 'Msg={id:u32,tag:<Ping,Pong:str,Big:[u8;4]:9>,rest:[(u8,@u64)]}'
    (typedef,) = parse_types(source)
    assert str(typedef) == source
    assert parse_types(str(typedef)) == [typedef]


def test_missing_separator():
    with pytest.raises(ParseError) as e:
        parse_types('A=u8 B=u16')
    assert e.value.errors[0].startswith("Unexpected 'B' at line 1, column 6")


def test_unexpected_token_lists_expected():
    with pytest.raises(ParseError) as e:
        parse_types('A={x:}')
    assert e.value.errors[0].startswith("Unexpected '}' at line 1, column 6, expected one of: ")


def test_unexpected_end():
    with pytest.raises(ParseError, match='Unexpected end of input'):
        parse_types('A=[u8')


def test_errors_are_collected():
    with pytest.raises(ParseError) as e:
        parse_types('A=(u8,,u16); B=#u256; C=#u8')
    assert len(e.value.errors) == 2
    assert e.value.errors[0].startswith("Unexpected ','")
    assert e.value.errors[1].startswith('Unknown primitive type u256')
    assert str(e.value) == '\n'.join(e.value.errors)


@pytest.mark.parametrize('source, message', [
    ('[u8]=u32', 'Invalid type definition name [u8], expected an identifier'),
    ('3=u32', 'Invalid type definition name 3, expected an identifier'),
    ('P<T, T>=(T, T)', 'Duplicated type parameter T in the definition of P'),
    ('P<[u8]>=u8', 'Invalid type parameter [u8] in the definition of P'),
    ('P<Q<T>>=u8', 'Invalid type parameter Q<T> in the definition of P'),
    ('A=#u256', 'Unknown primitive type u256 at line 1, column 4'),
])
def test_invalid_definitions(source, message):
    with pytest.raises(ParseError) as e:
        parse_types(source)
    assert e.value.errors == [message]


def test_lex_errors_are_raised_before_parsing():
    with pytest.raises(LexError):
        parse_types('A=[u8; 99999999999]')


def test_nesting_at_maximum_depth():
    settings = CodecSettings(MAX_NESTING_DEPTH=256)
    source = '[' * 256 + 'u8' + ']' * 256
    try:
        result = parse_type(source, settings=settings)
    except ParseError as e:
        assert e.errors == ['Type nested too deep to build']
    else:
        assert isinstance(result, SeqType)


def test_nesting_past_maximum_depth():
    settings = CodecSettings(MAX_NESTING_DEPTH=256)
    with pytest.raises(ParseError, match='Nesting deeper than 256'):
        parse_type('[' * 257 + 'u8' + ']' * 257, settings=settings)
