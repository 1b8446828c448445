"""Unit tests for sharedrive.api.config module."""
import os
from pathlib import Path

import pytest

from sharedrive.api import create_app
from sharedrive.api.config import APIConfig, ConfigValidationError, SHARE_DURATION_HOURS, load_config


class TestAPIConfig:
    """Tests for APIConfig dataclass."""

    def test_default_values(self, tmp_path, monkeypatch):
        for name in ('CORS_ORIGINS', 'PUBLIC_BASE_URL', 'STATIC_DIR', 'HOST', 'PORT'):
            monkeypatch.delenv(name, raising=False)
        config = APIConfig(storage_root=tmp_path)
        assert config.cors_origins == ['*']
        assert config.public_base_url is None
        assert config.static_dir is None
        assert config.share_duration_hours == SHARE_DURATION_HOURS == 1
        assert config.host == '0.0.0.0'
        assert config.port == 5000

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv('CORS_ORIGINS', 'http://a.test, http://b.test')
        monkeypatch.setenv('PUBLIC_BASE_URL', 'https://files.example.com')
        config = APIConfig(storage_root=tmp_path)
        assert config.cors_origins == ['http://a.test', 'http://b.test']
        assert config.public_base_url == 'https://files.example.com'

    def test_storage_root_is_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = APIConfig(storage_root=Path('relative'))
        assert config.storage_root == (tmp_path / 'relative').resolve()
        assert config.storage_root.is_absolute()


class TestValidateStartup:

    def test_creates_missing_root(self, tmp_path):
        config = APIConfig(storage_root=tmp_path / 'a' / 'b')
        config.validate_startup()
        assert (tmp_path / 'a' / 'b').is_dir()

    def test_existing_root(self, storage_root):
        APIConfig(storage_root=storage_root).validate_startup()

    def test_root_is_a_file(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('')
        config = APIConfig(storage_root=blocker)
        with pytest.raises(ConfigValidationError):
            config.validate_startup()

    def test_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('')
        config = APIConfig(storage_root=blocker / 'child')
        with pytest.raises(ConfigValidationError, match='Could not create or access'):
            config.validate_startup()

    @pytest.mark.skipif(os.geteuid() == 0, reason='root ignores permission bits')
    def test_unwritable_root(self, tmp_path):
        root = tmp_path / 'ro'
        root.mkdir()
        root.chmod(0o500)
        try:
            with pytest.raises(ConfigValidationError, match='not readable and writable'):
                APIConfig(storage_root=root).validate_startup()
        finally:
            root.chmod(0o700)

    def test_create_app_refuses_bad_root(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('')
        with pytest.raises(ConfigValidationError):
            create_app(APIConfig(storage_root=blocker))


class TestLoadConfig:

    def test_requires_storage_path(self, monkeypatch):
        monkeypatch.delenv('STORAGE_PATH', raising=False)
        with pytest.raises(ConfigValidationError, match='STORAGE_PATH is not defined'):
            load_config()

    def test_blank_storage_path(self, monkeypatch):
        monkeypatch.setenv('STORAGE_PATH', '   ')
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_reads_storage_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv('STORAGE_PATH', str(tmp_path))
        assert load_config().storage_root == tmp_path.resolve()

    def test_reads_port(self, tmp_path, monkeypatch):
        monkeypatch.setenv('STORAGE_PATH', str(tmp_path))
        monkeypatch.setenv('PORT', '8080')
        assert load_config().port == 8080

    def test_port_defaults_to_5000(self, tmp_path, monkeypatch):
        monkeypatch.setenv('STORAGE_PATH', str(tmp_path))
        monkeypatch.delenv('PORT', raising=False)
        assert load_config().port == 5000

    @pytest.mark.parametrize('raw', ['http', '80.5', '0', '70000', '-1'])
    def test_invalid_port(self, tmp_path, monkeypatch, raw):
        monkeypatch.setenv('STORAGE_PATH', str(tmp_path))
        monkeypatch.setenv('PORT', raw)
        with pytest.raises(ConfigValidationError, match='PORT must be an integer'):
            load_config()
