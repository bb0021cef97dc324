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

from pathlib import Path

import pytest
from pydantic import ValidationError

from scaledef.conf import DEFAULT_SETTINGS_FILEPATH, CodecSettings, get_settings, get_settings_source
from scaledef.conf.get_settings import SETTINGS_ENV_VAR
from scaledef.typedef.registry import TypeRegistry

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


def test_default_settings():
    settings = get_settings()
    assert settings == CodecSettings()
    assert settings.MAX_NESTING_DEPTH == 128
    assert settings.MAX_ALIAS_DEPTH == 64
    assert settings.ACCEPT_HEX_PREFIX is True
    assert get_settings_source() == DEFAULT_SETTINGS_FILEPATH
    assert get_settings() is settings


@pytest.mark.parametrize('filepath, expected', [
    ('custom_settings_fixture.yml', CodecSettings(MAX_ALIAS_DEPTH=8, ACCEPT_HEX_PREFIX=False)),
    ('standalone_settings_fixture.yml', CodecSettings(MAX_NESTING_DEPTH=16)),
    ('empty_settings_fixture.yml', CodecSettings()),
])
def test_settings_from_yaml(filepath, expected):
    assert CodecSettings.from_yaml(filepath=FIXTURES_DIR / filepath) == expected


@pytest.mark.parametrize('filepath, error', [
    ('invalid_depth_settings_fixture.yml', 'Value error, MAX_NESTING_DEPTH must be at most 256'),
    ('unknown_key_settings_fixture.yml', 'Extra inputs are not permitted'),
])
def test_invalid_settings_from_yaml(filepath, error):
    with pytest.raises(ValidationError) as e:
        CodecSettings.from_yaml(filepath=FIXTURES_DIR / filepath)
    errors = e.value.errors()
    assert errors[0]['msg'] == error


def test_missing_file():
    with pytest.raises(ValueError, match='is not a file'):
        CodecSettings.from_yaml(filepath=FIXTURES_DIR / 'missing.yml')


@pytest.mark.parametrize('field', ['MAX_NESTING_DEPTH', 'MAX_ALIAS_DEPTH'])
def test_depths_must_be_positive(field):
    with pytest.raises(ValidationError):
        CodecSettings(**{field: 0})


def test_settings_are_frozen():
    settings = CodecSettings()
    with pytest.raises(ValidationError):
        settings.MAX_ALIAS_DEPTH = 1  # type: ignore[misc]


def test_settings_from_env(monkeypatch):
    filepath = str(FIXTURES_DIR / 'custom_settings_fixture.yml')
    monkeypatch.setenv(SETTINGS_ENV_VAR, filepath)
    settings = get_settings()
    assert settings.MAX_ALIAS_DEPTH == 8
    assert get_settings_source() == filepath
    assert TypeRegistry().settings is settings


def test_settings_loaded_twice(monkeypatch):
    get_settings()
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(FIXTURES_DIR / 'custom_settings_fixture.yml'))
    with pytest.raises(Exception, match='loading config twice with a different file'):
        get_settings()
