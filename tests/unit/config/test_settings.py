"""
Unit tests for AppConfig loading, layering and validation.
"""

import json

import pytest

from gridbin.config.settings import AppConfig, ConfigurationError


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run each test where no stray config.json can be picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_config(path, document):
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults(self):
        config = AppConfig(environ={})

        assert config.mongo_uri == "mongodb://localhost:27017"
        assert config.mongo_database == "gridbin"
        assert config.bucket_name == "fs"
        assert (config.host, config.port) == ("0.0.0.0", 8080)
        assert config.max_upload_size == 100 * 1024 * 1024
        assert config.base_url == "http://localhost:8080"
        assert config.storage_backend == "gridfs"
        assert config.log_level == "INFO"
        assert config.debug is False
        assert config.config_file is None


class TestConfigFile:
    def test_nested_json_shape(self, isolated_cwd):
        path = _write_config(
            isolated_cwd / "settings.json",
            {
                "mongodb": {"uri": "mongodb://db:27017", "database": "files"},
                "server": {"host": "127.0.0.1", "port": 9000},
                "upload": {"maxSize": 2048, "baseURL": "https://files.example.com"},
            },
        )

        config = AppConfig(config_file=str(path), environ={})

        assert config.mongo_uri == "mongodb://db:27017"
        assert config.mongo_database == "files"
        assert (config.host, config.port) == ("127.0.0.1", 9000)
        assert config.max_upload_size == 2048
        assert config.base_url == "https://files.example.com"

    def test_partial_file_keeps_defaults(self, isolated_cwd):
        path = _write_config(isolated_cwd / "settings.json", {"server": {"port": 9000}})

        config = AppConfig(config_file=str(path), environ={})

        assert config.port == 9000
        assert config.mongo_database == "gridbin"

    def test_config_json_in_working_directory_is_picked_up(self, isolated_cwd):
        _write_config(isolated_cwd / "config.json", {"mongodb": {"database": "fromfile"}})

        config = AppConfig(environ={})

        assert config.mongo_database == "fromfile"
        assert config.config_file.name == "config.json"

    def test_path_from_environment(self, isolated_cwd):
        path = _write_config(isolated_cwd / "other.json", {"server": {"port": 7000}})

        config = AppConfig(environ={"GRIDBIN_CONFIG_FILE": str(path)})

        assert config.port == 7000

    def test_explicit_missing_file(self, isolated_cwd):
        with pytest.raises(ConfigurationError, match="not found"):
            AppConfig(config_file=str(isolated_cwd / "absent.json"), environ={})

    def test_malformed_json(self, isolated_cwd):
        path = isolated_cwd / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            AppConfig(config_file=str(path), environ={})

    def test_top_level_must_be_object(self, isolated_cwd):
        path = _write_config(isolated_cwd / "list.json", [1, 2])

        with pytest.raises(ConfigurationError, match="JSON object"):
            AppConfig(config_file=str(path), environ={})

    def test_wrong_type_in_file(self, isolated_cwd):
        path = _write_config(isolated_cwd / "bad.json", {"mongodb": {"uri": 42}})

        with pytest.raises(ConfigurationError, match="mongo_uri"):
            AppConfig(config_file=str(path), environ={})


class TestLayering:
    def test_environment_overrides_file(self, isolated_cwd):
        path = _write_config(isolated_cwd / "settings.json", {"server": {"port": 9000}})

        config = AppConfig(config_file=str(path), environ={"SERVER_PORT": "9100"})

        assert config.port == 9100

    def test_empty_environment_value_is_ignored(self):
        config = AppConfig(environ={"SERVER_PORT": "", "MONGODB_DATABASE": ""})

        assert config.port == 8080
        assert config.mongo_database == "gridbin"

    def test_overrides_win(self):
        config = AppConfig(environ={"SERVER_PORT": "9100"}, port=9200)

        assert config.port == 9200

    def test_unknown_override(self):
        with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
            AppConfig(environ={}, colour="blue")

    def test_environment_coercion(self):
        config = AppConfig(
            environ={
                "UPLOAD_MAX_SIZE": "1048576",
                "STORE_TIMEOUT_SECONDS": "2.5",
                "MONGODB_CONNECT_TIMEOUT_SECONDS": "3",
                "STORAGE_BACKEND": " Local ",
                "LOG_LEVEL": "debug",
                "FLASK_DEBUG": "true",
                "GRIDFS_BUCKET": "uploads",
            }
        )

        assert config.max_upload_size == 1048576
        assert config.operation_timeout == 2.5
        assert config.connect_timeout == 3.0
        assert config.storage_backend == "local"
        assert config.log_level == "DEBUG"
        assert config.debug is True
        assert config.bucket_name == "uploads"

    @pytest.mark.parametrize("raw", ["0", "no", "off", "false"])
    def test_debug_false_spellings(self, raw):
        assert AppConfig(environ={"FLASK_DEBUG": raw}).debug is False


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"port": 0},
            {"port": 70000},
            {"max_upload_size": 0},
            {"storage_backend": "s3"},
            {"operation_timeout": 0},
            {"connect_timeout": -1},
            {"log_level": "LOUD"},
            {"base_url": ""},
            {"mongo_uri": ""},
        ],
    )
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            AppConfig(environ={}, **overrides)

    @pytest.mark.parametrize("raw", ["abc", "12.5"])
    def test_non_integer_port_from_environment(self, raw):
        with pytest.raises(ConfigurationError, match="port"):
            AppConfig(environ={"SERVER_PORT": raw})

    def test_float_size_is_rejected(self):
        with pytest.raises(ConfigurationError):
            AppConfig(environ={}, max_upload_size=1.5)

    def test_local_backend_does_not_need_mongo(self):
        config = AppConfig(environ={}, storage_backend="local", mongo_uri="")

        assert config.storage_backend == "local"


class TestRedaction:
    def test_credentials_are_masked(self):
        config = AppConfig(environ={"MONGODB_URI": "mongodb://admin:hunter2@db:27017/?authSource=admin"})

        assert config.redacted_mongo_uri == "mongodb://***@db:27017/?authSource=admin"
        assert "hunter2" not in repr(config)

    def test_uri_without_credentials_is_unchanged(self):
        config = AppConfig(environ={})

        assert config.redacted_mongo_uri == "mongodb://localhost:27017"
