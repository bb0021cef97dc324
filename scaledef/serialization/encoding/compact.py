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
This module implements the SCALE compact encoding of unsigned integers.

The two least significant bits of the first byte select the mode:

- `0b00`: single byte, the value is in the upper six bits (0 to 63)
- `0b01`: two bytes little-endian, the value is in the upper 14 bits (64 to 2**14-1)
- `0b10`: four bytes little-endian, the value is in the upper 30 bits (2**14 to 2**30-1)
- `0b11`: big-integer mode, the upper six bits of the first byte hold `n - 4` and the value follows as `n`
  little-endian bytes, `n` is the minimal byte length of the value but at least 4

Every value has exactly one valid encoding, decoding rejects anything that is not the minimal one.

>>> se = Serializer.build_bytes_serializer()
>>> encode_compact(se, 0)  # writes 00
>>> encode_compact(se, 1)  # writes 04
>>> encode_compact(se, 63)  # writes fc
>>> encode_compact(se, 64)  # writes 0101
>>> encode_compact(se, 16383)  # writes fdff
>>> encode_compact(se, 16384)  # writes 02000100
>>> encode_compact(se, 2**30 - 1)  # writes feffffff
>>> encode_compact(se, 2**30)  # writes 0300000040
>>> encode_compact(se, 2**32)  # writes 070000000001
>>> bytes(se.finalize()).hex()
'0004fc0101fdff02000100feffffff0300000040070000000001'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0004fc0101fdff02000100feffffff0300000040070000000001'))
>>> [decode_compact(de) for _ in range(9)]
[0, 1, 63, 64, 16383, 16384, 1073741823, 1073741824, 4294967296]
>>> de.finalize()

Non-minimal encodings are rejected:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0100'))
>>> try:
...     decode_compact(de)
... except ValueError as e:
...     print(*e.args)
non-canonical compact encoding of 0

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('07ffffffff00'))
>>> try:
...     decode_compact(de)
... except ValueError as e:
...     print(*e.args)
non-canonical compact encoding of 4294967295

The decoded value can be checked against the width of the integer it stands for:

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('0101'))
>>> try:
...     decode_compact(de, max_bits=6)
... except ValueError as e:
...     print(*e.args)
compact value 64 does not fit in 6 bits
"""

from typing import Optional

from scaledef.serialization import Deserializer, Serializer
from scaledef.serialization.exceptions import BadDataError, SerializationError, TooLongError

SINGLE_BYTE_LIMIT = 1 << 6
TWO_BYTE_LIMIT = 1 << 14
FOUR_BYTE_LIMIT = 1 << 30
# header holds n - 4 in six bits
MAX_BIG_INT_BYTES = 4 + 63


def encode_compact(serializer: Serializer, value: int) -> None:
    """ Encode an unsigned int using the SCALE compact format.

    This modules's docstring has more details and examples.
    """
    if value < 0:
        raise SerializationError('cannot encode a negative number as compact')
    if value < SINGLE_BYTE_LIMIT:
        serializer.write_byte(value << 2)
    elif value < TWO_BYTE_LIMIT:
        serializer.write_bytes(((value << 2) | 0b01).to_bytes(2, byteorder='little'))
    elif value < FOUR_BYTE_LIMIT:
        serializer.write_bytes(((value << 2) | 0b10).to_bytes(4, byteorder='little'))
    else:
        n = max(4, (value.bit_length() + 7) // 8)
        if n > MAX_BIG_INT_BYTES:
            raise TooLongError('too big to encode')
        serializer.write_byte(((n - 4) << 2) | 0b11)
        serializer.write_bytes(value.to_bytes(n, byteorder='little'))


def decode_compact(deserializer: Deserializer, *, max_bits: Optional[int] = None) -> int:
    """ Decode an unsigned int in the SCALE compact format, optionally bounded to `max_bits`.

    This modules's docstring has more details and examples.
    """
    first = deserializer.read_byte()
    mode = first & 0b11
    canonical: bool
    if mode == 0b00:
        value = first >> 2
        canonical = True
    elif mode == 0b01:
        raw = first | (deserializer.read_byte() << 8)
        value = raw >> 2
        canonical = value >= SINGLE_BYTE_LIMIT
    elif mode == 0b10:
        raw = first | (int.from_bytes(deserializer.read_bytes(3), byteorder='little') << 8)
        value = raw >> 2
        canonical = value >= TWO_BYTE_LIMIT
    else:
        n = (first >> 2) + 4
        data = bytes(deserializer.read_bytes(n))
        value = int.from_bytes(data, byteorder='little')
        if n == 4:
            canonical = value >= FOUR_BYTE_LIMIT
        else:
            canonical = data[-1] != 0
    if not canonical:
        raise BadDataError(f'non-canonical compact encoding of {value}')
    if max_bits is not None and value.bit_length() > max_bits:
        raise BadDataError(f'compact value {value} does not fit in {max_bits} bits')
    return value
