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

import sys
from argparse import ArgumentParser, FileType, Namespace
from typing import TYPE_CHECKING

from structlog import get_logger
from typing_extensions import assert_never

if TYPE_CHECKING:
    from scaledef.typedef.model import Type, TypeId
    from scaledef.typedef.registry import TypeRegistry

logger = get_logger()


def create_parser() -> ArgumentParser:
    from scaledef.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('file', type=FileType('r', encoding='UTF-8'), help='File with type definitions')
    parser.add_argument('--resolve', action='store_true',
                        help='Also resolve every reference of the non-generic definitions')
    return parser


def execute(args: Namespace) -> int:
    from scaledef.exception import LexError, ParseError, ResolutionError
    from scaledef.typedef.model import NumId
    from scaledef.typedef.registry import TypeRegistry

    with args.file as file:
        source = file.read()

    try:
        registry = TypeRegistry.from_source(source)
    except ParseError as e:
        for error in e.errors:
            print(error, file=sys.stderr)
        return 1
    except LexError as e:
        print(e, file=sys.stderr)
        return 1

    failed = False
    for index, typedef in enumerate(registry):
        name = typedef.name if typedef.name is not None else '<anonymous>'
        params = f'<{", ".join(typedef.type_params)}>' if typedef.type_params else ''
        print(f'{index}: {name}{params} = {typedef.type}')
        if args.resolve and not typedef.type_params:
            try:
                # by position, a name may be shadowed by a later definition
                check_references(registry, NumId(index))
            except ResolutionError as e:
                print(f'{index}: {e}', file=sys.stderr)
                failed = True

    logger.debug('types checked', count=len(registry), names=len(registry.names()))
    return 1 if failed else 0


def check_references(registry: 'TypeRegistry', type_id: 'TypeId') -> None:
    """Resolve `type_id` and every reference reachable from it, raising the first `ResolutionError`."""
    seen: set['TypeId'] = set()
    pending = [type_id]
    while pending:
        current = pending.pop()
        if current in seen:
            continue
        seen.add(current)
        pending.extend(_references(registry.resolve_type(current, fallback=False)))


def _references(type_: 'Type') -> list['TypeId']:
    from scaledef.typedef.model import (
        AliasType,
        ArrayType,
        CompactType,
        EnumType,
        PrimitiveType,
        SeqType,
        StructType,
        TupleType,
    )
    match type_:
        case PrimitiveType():
            return []
        case CompactType(inner=inner):
            return [inner]
        case SeqType(elem=elem) | ArrayType(elem=elem):
            return [elem]
        case TupleType(elems=elems):
            return list(elems)
        case EnumType(variants=variants):
            return [variant.payload for variant in variants if variant.payload is not None]
        case StructType(fields=fields):
            return [field.type_id for field in fields]
        case AliasType(target=target):
            return [target]
        case _:
            assert_never(type_)


def main() -> int:
    parser = create_parser()
    args = parser.parse_args(sys.argv[1:])
    return execute(args)
