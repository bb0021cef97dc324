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
The type definition language: model, lexer, parser and the registry that resolves references.
"""

from scaledef.typedef.model import TypeDef, TypeId
from scaledef.typedef.parser import parse_type, parse_types
from scaledef.typedef.registry import TypeRegistry

__all__ = [
    'TypeDef',
    'TypeId',
    'TypeRegistry',
    'parse_type',
    'parse_types',
]
