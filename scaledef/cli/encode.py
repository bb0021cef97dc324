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


def create_parser() -> ArgumentParser:
    from scaledef.cli.util import add_registry_args, create_parser
    parser = create_parser()
    add_registry_args(parser)
    parser.add_argument('type', type=str, help='Type to encode as: a name, a position or a type expression')
    parser.add_argument('value', type=str, help='Value to encode as JSON, byte sequences can be given as hex strings')
    return parser


def execute(args: Namespace) -> int:
    from scaledef.cli.util import registry_from_args
    from scaledef.codec.api import as_type_id, encode
    from scaledef.exception import ScaleDefError

    try:
        value = json.loads(args.value)
    except json.JSONDecodeError as e:
        print(f'invalid JSON value: {e}', file=sys.stderr)
        return 1

    type_ref: str | int = int(args.type) if args.type.isdigit() else args.type
    try:
        registry = registry_from_args(args)
        data = encode(value, as_type_id(type_ref), registry)
    except ScaleDefError as e:
        print(e, file=sys.stderr)
        return 1

    print(data.hex())
    return 0


def main() -> int:
    parser = create_parser()
    args = parser.parse_args(sys.argv[1:])
    return execute(args)
