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
A tuple here is a fixed-length heterogeneous sequence: the number of items and the type of each item are known by both
sides, so nothing but the items themselves is written.

The encoding of `(A, B, C)` is just the encoding of A concatenated with B concatenated with C. Fixed-length arrays
are the same thing with every encoder being the same one.

>>> from scaledef.serialization.encoding.utf8 import encode_utf8, decode_utf8
>>> from scaledef.serialization.encoding.bool import encode_bool, decode_bool
>>> from scaledef.serialization.encoding.bytes import decode_bytes, encode_bytes
>>> se = Serializer.build_bytes_serializer()
>>> values = ('foobar', False, b'test')
>>> encode_tuple(se, values, (encode_utf8, encode_bool, encode_bytes))
>>> bytes(se.finalize()).hex()
'18666f6f626172001074657374'

Breakdown of the result:

    18666f6f626172: 'foobar'
    00: False
    1074657374: b'test'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('18666f6f626172001074657374'))
>>> decode_tuple(de, (decode_utf8, decode_bool, decode_bytes))
('foobar', False, b'test')
"""

from collections.abc import Sequence
from typing import Any

from scaledef.serialization import Deserializer, Serializer

from . import Decoder, Encoder


def encode_tuple(serializer: Serializer, values: Sequence[Any], encoders: Sequence[Encoder[Any]]) -> None:
    assert len(values) == len(encoders)
    for value, encoder in zip(values, encoders):
        encoder(serializer, value)


def decode_tuple(deserializer: Deserializer, decoders: Sequence[Decoder[Any]]) -> tuple[Any, ...]:
    return tuple(decoder(deserializer) for decoder in decoders)
