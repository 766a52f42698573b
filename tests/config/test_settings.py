from configparser import ConfigParser
from pathlib import Path
from typing import Dict, Optional

import pytest

from hecpump.config import DeliveryPolicy, SplunkPumpConfig, decode_config, get_pump_config
from hecpump.config.settings import _settings_from_config_ini, _settings_from_env
from hecpump.errors import InvalidSettingsError


@pytest.fixture
def config_file_factory(tmp_path: Path):
    """
    Factory fixture to create config.ini files with custom content.
    """

    def _create_config(splunk_section: Optional[Dict[str, str]] = None) -> Path:
        config = ConfigParser()
        if splunk_section is not None:
            config["splunk"] = splunk_section

        config_path = tmp_path / "config.ini"
        with open(config_path, "w") as f:
            config.write(f)
        return config_path

    return _create_config


@pytest.mark.unit
class TestDecodeConfig:
    """
    Tests for decoding host-provided settings.
    """

    def test_defaults(self) -> None:
        config = decode_config({})

        assert config.collector_token == ""
        assert config.fields == []
        assert config.obfuscate_api_keys is False
        assert config.delivery_policy is DeliveryPolicy.FIRE_AND_FORGET
        assert config.max_concurrency == 1
        assert config.timeout == 30.0

    def test_none_is_empty(self) -> None:
        assert decode_config(None) == SplunkPumpConfig()

    def test_passes_through_model(self) -> None:
        config = SplunkPumpConfig(collector_token="tok")
        assert decode_config(config) is config

    def test_ignores_unknown_keys(self) -> None:
        config = decode_config({"collector_token": "tok", "meta": {"a": 1}})
        assert config.collector_token == "tok"

    def test_coerces_strings(self) -> None:
        config = decode_config(
            {
                "ssl_insecure_skip_verify": "true",
                "obfuscate_api_keys": "1",
                "obfuscate_api_keys_length": "4",
                "max_concurrency": "8",
            }
        )

        assert config.ssl_insecure_skip_verify is True
        assert config.obfuscate_api_keys is True
        assert config.obfuscate_api_keys_length == 4
        assert config.max_concurrency == 8

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("method, path,api_key", ["method", "path", "api_key"]),
            ("", []),
            (None, []),
            (["method", "path"], ["method", "path"]),
        ],
    )
    def test_fields(self, raw, expected) -> None:
        assert decode_config({"fields": raw}).fields == expected

    @pytest.mark.parametrize("raw", ["aggregate", "Aggregate", " AGGREGATE "])
    def test_policy_normalized(self, raw: str) -> None:
        assert decode_config({"delivery_policy": raw}).delivery_policy is DeliveryPolicy.AGGREGATE

    def test_fire_and_forget_with_dash(self) -> None:
        config = decode_config({"delivery_policy": "fire-and-forget"})
        assert config.delivery_policy is DeliveryPolicy.FIRE_AND_FORGET

    @pytest.mark.parametrize(
        "raw",
        [
            {"obfuscate_api_keys_length": -1},
            {"obfuscate_api_keys_length": "four"},
            {"delivery_policy": "retry"},
            {"timeout": 0},
            {"ssl_insecure_skip_verify": "maybe"},
        ],
    )
    def test_invalid(self, raw: dict) -> None:
        with pytest.raises(InvalidSettingsError):
            decode_config(raw)

    def test_as_dict_masks_token(self) -> None:
        data = SplunkPumpConfig(collector_token="secret").as_dict()

        assert data["collector_token"] == "****"
        assert data["delivery_policy"] == "fire_and_forget"

    def test_settings_are_frozen(self) -> None:
        config = SplunkPumpConfig()
        with pytest.raises(Exception):
            config.collector_token = "tok"  # type: ignore[misc]


@pytest.mark.unit
class TestSettingsSources:
    """
    Tests for reading settings from INI files and the environment.
    """

    def test_ini_missing_file(self, tmp_path: Path) -> None:
        assert _settings_from_config_ini(tmp_path / "absent.ini") == {}

    def test_ini_missing_section(self, config_file_factory) -> None:
        assert _settings_from_config_ini(config_file_factory()) == {}

    def test_ini_section(self, config_file_factory) -> None:
        path = config_file_factory({"collector_url": " https://h:8088 ", "fields": "method"})

        assert _settings_from_config_ini(path) == {
            "collector_url": "https://h:8088",
            "fields": "method",
        }

    def test_env(self) -> None:
        environ = {
            "HECPUMP_COLLECTOR_TOKEN": "tok",
            "HECPUMP_FIELDS": "method,path",
            "OTHER": "x",
        }

        assert _settings_from_env(environ) == {"collector_token": "tok", "fields": "method,path"}

    def test_precedence(self, config_file_factory) -> None:
        path = config_file_factory(
            {
                "collector_token": "from-ini",
                "collector_url": "https://ini:8088",
                "obfuscate_api_keys_length": "2",
            }
        )
        environ = {"HECPUMP_COLLECTOR_TOKEN": "from-env", "HECPUMP_COLLECTOR_URL": "https://env:8088"}

        config = get_pump_config(
            overrides={"collector_url": "https://cli:8088", "collector_token": None},
            config_path=path,
            environ=environ,
        )

        assert config.collector_token == "from-env"
        assert config.collector_url == "https://cli:8088"
        assert config.obfuscate_api_keys_length == 2

    def test_uses_process_environment(self, config_file_factory, monkeypatch) -> None:
        monkeypatch.setenv("HECPUMP_STRICT_STATUS", "yes")

        config = get_pump_config(config_path=config_file_factory())

        assert config.strict_status is True

    def test_config_path_from_env(self, config_file_factory, monkeypatch) -> None:
        path = config_file_factory({"collector_token": "tok"})
        monkeypatch.setenv("HECPUMP_CONFIG", str(path))

        assert get_pump_config().collector_token == "tok"
