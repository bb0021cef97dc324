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
Parser of the type definition language.

`parse_types` parses a list of definitions separated by `;`, `parse_type` parses a single type expression. Both raise
`ParseError` with every problem found in the source, not only the first one:

>>> [str(typedef) for typedef in parse_types('Point={x:u32,y:u32}; Points=[Point]; Choice=<A,B:u32,C::5>')]
['Point={x:u32,y:u32}', 'Points=[Point]', 'Choice=<A,B:u32,C::5>']
>>> parse_type('[u8;4]')
ArrayType(elem=NameId(name='u8', type_args=()), length=4)
>>> try:
...     parse_types('A=(u8,,u16); B=#u256')
... except ParseError as e:
...     print(len(e.errors))
2
"""

from typing import Any, Optional, Union

from lark import Token as LarkToken, Transformer, UnexpectedInput, UnexpectedToken

from scaledef.conf import CodecSettings
from scaledef.exception import ParseError
from scaledef.typedef.lexer import get_lark, tokenize
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
    Type,
    TypeDef,
    TypeId,
    Variant,
)


def parse_types(source: str, *, settings: Optional[CodecSettings] = None) -> list[TypeDef]:
    """Parse a list of type definitions, an empty source gives an empty list."""
    return _parse(source, 'defs', settings)


def parse_type(source: str, *, settings: Optional[CodecSettings] = None) -> Type:
    """Parse a single type expression, a bare reference gives an `AliasType`."""
    return _parse(source, 'start_type', settings)


def _parse(source: str, start: str, settings: Optional[CodecSettings]) -> Any:
    tokenize(source, settings=settings)

    errors: list[str] = []

    def on_error(e: UnexpectedInput) -> bool:
        # record and skip the offending token, the parser resumes with the next one
        errors.append(_describe_error(e))
        return True

    tree = None
    try:
        tree = get_lark().parse(source, start=start, on_error=on_error)
    except UnexpectedInput as e:
        # raised again at the end of input once nothing else can be skipped
        if not errors:
            errors.append(_describe_error(e))

    result = None
    if tree is not None:
        builder = _ModelBuilder()
        try:
            result = builder.transform(tree)
        except RecursionError:
            errors.append('Type nested too deep to build')
        errors.extend(builder.errors)
    if errors:
        raise ParseError(errors)
    return result


def _describe_error(e: UnexpectedInput) -> str:
    if not isinstance(e, UnexpectedToken):
        return str(e)
    expected = ', '.join(sorted(_describe_terminal(name) for name in e.expected))
    if e.token.type == '$END':
        return f'Unexpected end of input, expected one of: {expected}'
    return f"Unexpected '{e.token}' at line {e.line}, column {e.column}, expected one of: {expected}"


def _describe_terminal(name: str) -> str:
    try:
        terminal = get_lark().get_terminal(name)
    except KeyError:
        return name
    if terminal.pattern.type == 'str':
        return repr(terminal.pattern.value)
    return name


def _as_id(value: Union[TypeId, Type]) -> TypeId:
    if isinstance(value, (NameId, NumId, InlineId)):
        return value
    return InlineId(value)


def _as_type(value: Union[TypeId, Type]) -> Type:
    if isinstance(value, (NameId, NumId)):
        return AliasType(value)
    assert not isinstance(value, InlineId)
    return value


class _ModelBuilder(Transformer):
    """Turns the lark tree into the model, collecting the problems the grammar does not catch."""

    def __init__(self) -> None:
        super().__init__()
        self.errors: list[str] = []

    def defs(self, children: list[TypeDef]) -> list[TypeDef]:
        return list(children)

    def start_type(self, children: list[Any]) -> Type:
        (type_id,) = children
        return _as_type(type_id)

    def typedef(self, children: list[Any]) -> TypeDef:
        if len(children) == 1:
            return TypeDef(None, (), _as_type(children[0]))
        head, body = children
        name, type_params = self._definition_head(head)
        return TypeDef(name, type_params, _as_type(body))

    def _definition_head(self, head: Union[TypeId, Type]) -> tuple[str, tuple[str, ...]]:
        if not isinstance(head, NameId):
            self.errors.append(f'Invalid type definition name {head}, expected an identifier')
            return str(head), ()
        type_params: list[str] = []
        for arg in head.type_args:
            if not isinstance(arg, NameId) or arg.type_args:
                self.errors.append(f'Invalid type parameter {arg} in the definition of {head.name}')
            elif arg.name in type_params:
                self.errors.append(f'Duplicated type parameter {arg.name} in the definition of {head.name}')
            else:
                type_params.append(arg.name)
        return head.name, tuple(type_params)

    def name_ref(self, children: list[Any]) -> NameId:
        ident, *rest = children
        type_args = tuple(_as_id(arg) for arg in rest[0]) if rest else ()
        return NameId(str(ident), type_args)

    def generic_args(self, children: list[Any]) -> list[Any]:
        return list(children)

    def num_ref(self, children: list[LarkToken]) -> NumId:
        return NumId(int(children[0]))

    def primitive(self, children: list[LarkToken]) -> PrimitiveType:
        (keyword,) = children
        kind = PrimitiveKind.from_name(str(keyword))
        if kind is None:
            self.errors.append(f'Unknown primitive type {keyword} at line {keyword.line}, column {keyword.column}')
            # placeholder, the result is discarded
            kind = PrimitiveKind.U8
        return PrimitiveType(kind)

    def compact(self, children: list[Any]) -> CompactType:
        return CompactType(_as_id(children[0]))

    def seq(self, children: list[Any]) -> SeqType:
        return SeqType(_as_id(children[0]))

    def array(self, children: list[Any]) -> ArrayType:
        elem, length = children
        return ArrayType(_as_id(elem), int(length))

    def tuple(self, children: list[Any]) -> TupleType:
        return TupleType(tuple(_as_id(child) for child in children))

    def enum(self, children: list[Variant]) -> EnumType:
        return EnumType(tuple(children))

    def variant(self, children: list[Any]) -> Variant:
        name, *rest = children
        payload: Optional[TypeId] = None
        index: Optional[int] = None
        for child in rest:
            if isinstance(child, LarkToken):
                index = int(child)
            else:
                payload = _as_id(child)
        return Variant(str(name), payload, index)

    def struct(self, children: list[Field]) -> StructType:
        return StructType(tuple(children))

    def field(self, children: list[Any]) -> Field:
        name, type_id = children
        return Field(str(name), _as_id(type_id))
