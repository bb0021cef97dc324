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
Tokenizer of the type definition language.

The tokens are produced by the same lark grammar the parser uses, this module adds the checks lark can't express:
number literals must fit in 32 bits and brackets can't be nested deeper than the configured maximum.

>>> [str(token) for token in tokenize('Point={x:u32, y:u32} // a comment')]
['Point', '=', '{', 'x', ':', 'u32', ',', 'y', ':', 'u32', '}']
>>> tokenize('[u8;32]')[3]
Token(kind=<TokenKind.NUMBER: 'number'>, value=32, line=1, column=5)
"""

from enum import Enum
from pathlib import Path
from typing import NamedTuple, Optional, Union

from lark import Lark, UnexpectedCharacters

from scaledef.conf import CodecSettings, get_settings
from scaledef.exception import LexError, ParseError

GRAMMAR_PATH = Path(__file__).parent / 'grammar.lark'

MAX_NUMBER = 2**32 - 1
OPENING_BRACKETS = frozenset('([{<')
CLOSING_BRACKETS = frozenset(')]}>')

_lark: Optional[Lark] = None


def get_lark() -> Lark:
    """Get or create the lark parser of the type definition language.

    Both entry points of the grammar are enabled: `defs` for a list of definitions and `start_type` for a single type
    expression.
    """
    global _lark
    if _lark is None:
        _lark = Lark.open(
            str(GRAMMAR_PATH),
            start=['defs', 'start_type'],
            parser='lalr',
            lexer='basic',
            propagate_positions=True,
            maybe_placeholders=False,
        )
    return _lark


class TokenKind(Enum):
    NUMBER = 'number'
    OP = 'op'
    IDENT = 'ident'


class Token(NamedTuple):
    kind: TokenKind
    value: Union[int, str]
    line: int
    column: int

    def __str__(self) -> str:
        return str(self.value)


def tokenize(source: str, *, settings: Optional[CodecSettings] = None) -> list[Token]:
    """Split the source into tokens, raising `LexError` on anything that is not a token."""
    settings = settings or get_settings()
    tokens: list[Token] = []
    depth = 0
    try:
        for lark_token in get_lark().lex(source):
            line, column = lark_token.line or 0, lark_token.column or 0
            value: Union[int, str]
            match lark_token.type:
                case 'IDENT':
                    kind, value = TokenKind.IDENT, str(lark_token)
                case 'NUMBER':
                    kind, value = TokenKind.NUMBER, int(lark_token)
                    if value > MAX_NUMBER:
                        raise LexError(f'Number {lark_token} at line {line}, column {column} does not fit in 32 bits')
                case _:
                    kind, value = TokenKind.OP, str(lark_token)
                    if value in OPENING_BRACKETS:
                        depth += 1
                        if depth > settings.MAX_NESTING_DEPTH:
                            raise ParseError([
                                f'Nesting deeper than {settings.MAX_NESTING_DEPTH} at line {line}, column {column}'
                            ])
                    elif value in CLOSING_BRACKETS:
                        depth = max(0, depth - 1)
            tokens.append(Token(kind, value, line, column))
    except UnexpectedCharacters as e:
        raise LexError(f'Unexpected character {e.char!r} at line {e.line}, column {e.column}') from e
    return tokens
