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

import json
import sys
from argparse import ArgumentParser, Namespace
from typing import Any


def create_parser() -> ArgumentParser:
    from scaledef.cli.util import add_registry_args, create_parser
    parser = create_parser()
    add_registry_args(parser)
    parser.add_argument('type', type=str, help='Type to decode as: a name, a position or a type expression')
    parser.add_argument('data', type=str, help='Bytes to decode in hex, optionally prefixed with 0x')
    parser.add_argument('--indent', type=int, default=None, help='Indent the JSON output')
    return parser


def to_json(value: Any) -> str:
    """Render a decoded value as JSON, byte sequences become 0x prefixed hex strings.

    >>> to_json({'id': 1, 'data': b'\\xca\\xfe', 'tag': {'Ping': None}})
    '{"id": 1, "data": "0xcafe", "tag": {"Ping": null}}'
    """
    def default(obj: Any) -> Any:
        if isinstance(obj, bytes):
            return '0x' + obj.hex()
        raise TypeError(f'{type(obj).__name__} is not JSON serializable')
    return json.dumps(value, default=default)


def execute(args: Namespace) -> int:
    from scaledef.cli.util import check_or_exit, registry_from_args
    from scaledef.codec.api import as_type_id, decode
    from scaledef.exception import ScaleDefError

    hex_data = args.data[2:] if args.data[:2].lower() == '0x' else args.data
    try:
        data = bytes.fromhex(hex_data)
    except ValueError:
        data = None
    check_or_exit(data is not None, f'invalid hex data: {args.data}')
    assert data is not None

    type_ref: str | int = int(args.type) if args.type.isdigit() else args.type
    try:
        registry = registry_from_args(args)
        value = decode(data, as_type_id(type_ref), registry)
    except ScaleDefError as e:
        print(e, file=sys.stderr)
        return 1

    if args.indent is None:
        print(to_json(value))
    else:
        print(json.dumps(json.loads(to_json(value)), indent=args.indent))
    return 0


def main() -> int:
    parser = create_parser()
    args = parser.parse_args(sys.argv[1:])
    return execute(args)
