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

import re

import pytest

from scaledef.conf import CodecSettings
from scaledef.exception import LexError, ParseError
from scaledef.typedef.lexer import TokenKind, tokenize


def test_token_kinds():
    tokens = tokenize('A = [u8; 4]')
    assert [token.kind for token in tokens] == [
        TokenKind.IDENT,
        TokenKind.OP,
        TokenKind.OP,
        TokenKind.IDENT,
        TokenKind.OP,
        TokenKind.NUMBER,
        TokenKind.OP,
    ]
    assert tokens[5].value == 4


def test_positions():
    tokens = tokenize('A=u8;\n  B=u16')
    b = tokens[4]
    assert b.value == 'B'
    assert (b.line, b.column) == (2, 3)


def test_comments_and_whitespace_are_skipped():
    assert [str(token) for token in tokenize('// nothing here\n  \t')] == []
    assert [str(token) for token in tokenize('A=u8 // trailing\n')] == ['A', '=', 'u8']


def test_largest_number():
    (token,) = tokenize('4294967295')
    assert token.value == 2**32 - 1


def test_number_overflow():
    with pytest.raises(LexError, match='Number 4294967296 at line 1, column 6 does not fit in 32 bits'):
        tokenize('[u8; 4294967296]')


@pytest.mark.parametrize('source, char', [
    ('A=$', '$'),
    ('A={x:u8} + B', '+'),
    ('A=u8\nB=é', 'é'),
])
def test_unexpected_character(source, char):
    with pytest.raises(LexError, match=re.escape(f'Unexpected character {char!r}')):
        tokenize(source)


def test_nesting_depth():
    settings = CodecSettings(MAX_NESTING_DEPTH=3)
    tokenize('[[[u8]]]', settings=settings)
    tokenize('([u8], [u8], [u8])', settings=settings)
    with pytest.raises(ParseError, match='Nesting deeper than 3'):
        tokenize('[[[[u8]]]]', settings=settings)
