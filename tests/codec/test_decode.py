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

from scaledef.codec import decode, decode_all, encode
from scaledef.conf import CodecSettings
from scaledef.exception import BufferUnderrunError, InvalidDataError, NestingTooDeepError, ResolutionError
from scaledef.typedef.registry import TypeRegistry

TYPES = '''
    Point = {x: u32, y: u32};
    Choice = <A, B: u32, C::5>;
    Msg = {id: u32, tag: <Ping, Pong: str>};
    Pair<T> = (T, T);
    List = <Nil, Cons: (u8, List)>;
    Hash = [u8; 32];
'''


@pytest.fixture
def registry():
    return TypeRegistry.from_source(TYPES)


@pytest.mark.parametrize('data, type_id, expected', [
    ('ff', 'u8', 255),
    ('ff', 'i8', -1),
    ('3412', 'u16', 0x1234),
    ('feffffff', 'i32', -2),
    ('ff' * 16, 'u128', 2**128 - 1),
    ('01', 'bool', True),
    ('00', 'bool', False),
    ('086869', 'str', 'hi'),
    ('0101', '@u32', 64),
    ('0300000040', '@u64', 2**30),
    ('', '@()', []),
    ('080102', '[u8]', b'\x01\x02'),
    ('0102', '[u8;2]', b'\x01\x02'),
    ('0c010002000300', '[u16]', [1, 2, 3]),
    ('01000200', '[u16;2]', [1, 2]),
    ('070001', '(u16,bool)', [7, True]),
    ('', '()', []),
    ('08040100', '[[u8]]', [b'\x01', b'']),
])
def test_values(data, type_id, expected):
    assert decode(bytes.fromhex(data), type_id) == expected


def test_struct(registry):
    assert decode(bytes.fromhex('0100000002000000'), 'Point', registry) == {'x': 1, 'y': 2}


def test_enum(registry):
    assert decode(bytes.fromhex('00'), 'Choice', registry) == {'A': None}
    assert decode(bytes.fromhex('0107000000'), 'Choice', registry) == {'B': 7}
    assert decode(bytes.fromhex('05'), 'Choice', registry) == {'C': None}


@pytest.mark.parametrize('data', ['02', '03', '06', 'ff'])
def test_unknown_variant(registry, data):
    with pytest.raises(InvalidDataError, match=f'Unknown variant {int(data, 16)}'):
        decode(bytes.fromhex(data), 'Choice', registry)


def test_message(registry):
    assert decode(bytes.fromhex('0100000001086869'), 'Msg', registry) == {'id': 1, 'tag': {'Pong': 'hi'}}


def test_generics_and_recursion(registry):
    assert decode(bytes.fromhex('0102'), 'Pair<u8>', registry) == [1, 2]
    assert decode(bytes.fromhex('0101010200'), 'List', registry) == {'Cons': [1, {'Cons': [2, {'Nil': None}]}]}


def test_byte_array(registry):
    data = bytes(range(32))
    assert decode(data, 'Hash', registry) == data


def test_trailing_bytes_are_ignored():
    assert decode(b'\x01\x02\x03', 'u8') == 1


@pytest.mark.parametrize('data, type_id, message', [
    ('0100', 'u32', 'unexpected end of buffer at byte 0 while decoding u32'),
    ('01000000020000', 'Point', 'unexpected end of buffer at byte 4 while decoding Point'),
    ('0c0100', '[u16]', 'unexpected end of buffer'),
    ('feffffff', '[u8]', 'unexpected end of buffer'),
    ('0c', 'str', 'unexpected end of buffer'),
    ('01', 'Choice', 'unexpected end of buffer'),
    ('', '@u32', 'unexpected end of buffer'),
])
def test_buffer_underrun(registry, data, type_id, message):
    with pytest.raises(BufferUnderrunError, match=message):
        decode(bytes.fromhex(data), type_id, registry)


@pytest.mark.parametrize('data, type_id, message', [
    ('02', 'bool', 'is not a valid boolean'),
    ('0100', '@u32', 'non-canonical compact encoding of 0'),
    ('0104', '@u8', 'compact value 256 does not fit in 8 bits'),
    ('04ff', 'str', 'invalid utf-8 string'),
    ('070000000001', '[u8]', 'does not fit in 32 bits'),
])
def test_invalid_data(data, type_id, message):
    with pytest.raises(InvalidDataError, match=message):
        decode(bytes.fromhex(data), type_id)


def test_nesting_too_deep(registry):
    data = bytes.fromhex('0100' * 200 + '00')
    with pytest.raises(NestingTooDeepError):
        decode(data, 'List', registry)


def test_nesting_at_maximum_depth():
    settings = CodecSettings(MAX_NESTING_DEPTH=256)
    registry = TypeRegistry.from_source('L = [L]; List = <Nil, Cons: (u8, List)>', settings=settings)
    expected: list = []
    for _ in range(60):
        expected = [expected]
    assert decode(bytes.fromhex('04' * 60 + '00'), 'L', registry) == expected
    with pytest.raises(NestingTooDeepError):
        decode(bytes.fromhex('04' * 1000 + '00'), 'L', registry)
    with pytest.raises(NestingTooDeepError):
        decode(bytes.fromhex('0100' * 250 + '00'), 'List', registry)


def test_unknown_type():
    with pytest.raises(ResolutionError, match='Unknown type Nope'):
        decode(b'\x00', 'Nope')


def test_decode_all():
    assert decode_all(bytes.fromhex('0700086162'), ['u16', '[u8]']) == [7, b'ab']
    assert decode_all(b'', []) == []
    with pytest.raises(BufferUnderrunError, match='at byte 2 while decoding'):
        decode_all(bytes.fromhex('0700'), ['u16', '[u8]'])


@pytest.mark.parametrize('value, type_id', [
    ({'x': 0, 'y': 2**32 - 1}, 'Point'),
    ({'B': 2**32 - 1}, 'Choice'),
    ({'id': 7, 'tag': {'Ping': None}}, 'Msg'),
    ([[1, 2], [3]], 'Pair<[u16]>'),
    ([b'', b'\x00' * 300], '[[u8]]'),
    (2**64 - 1, '@u64'),
    ([-1, 'π😎', False], '(i64, str, bool)'),
])
def test_round_trip(registry, value, type_id):
    assert decode(encode(value, type_id, registry), type_id, registry) == value
