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
SCALE codec driven by a small type-definition language.

The host-facing functions live in `scaledef.codec`, this module only exposes the version so `setup.py` can read
it with nothing but structlog installed.
"""

from scaledef.version import __version__

__all__ = [
    '__version__',
]
