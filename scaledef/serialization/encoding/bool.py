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

r"""
SCALE booleans: a single byte, `00` for false and `01` for true. Decoding is strict, every other byte is rejected
instead of being read as true.

>>> se = Serializer.build_bytes_serializer()
>>> for flag in (True, False, True):
...     encode_bool(se, flag)
>>> bytes(se.finalize()).hex()
'010001'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('010001'))
>>> [decode_bool(de) for _ in range(3)]
[True, False, True]

>>> try:
...     decode_bool(Deserializer.build_bytes_deserializer(b'\x02'))
... except ValueError as e:
...     print(*e.args)
b'\x02' is not a valid boolean
"""

from scaledef.serialization import Deserializer, Serializer
from scaledef.serialization.exceptions import BadDataError

_FALSE_BYTE = 0x00
_TRUE_BYTE = 0x01


def encode_bool(serializer: Serializer, value: bool) -> None:
    assert isinstance(value, bool)
    serializer.write_byte(_TRUE_BYTE if value else _FALSE_BYTE)


def decode_bool(deserializer: Deserializer) -> bool:
    byte = deserializer.read_byte()
    if byte not in (_FALSE_BYTE, _TRUE_BYTE):
        raise BadDataError(f'{bytes([byte])!r} is not a valid boolean')
    return byte == _TRUE_BYTE
