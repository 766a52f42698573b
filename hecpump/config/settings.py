import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import configparser

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from hecpump.constants import (
    CONFIG_SECTION_NAME,
    DEFAULT_MAX_CONCURRENCY,
    ENV_PREFIX,
    REQUEST_TIMEOUT,
    get_config_path,
)
from hecpump.errors import InvalidSettingsError
from .log_codes import (
    SETTINGS_RESOLVED,
    SETTINGS_FILE_MISSING,
    SETTINGS_FILE_MISSING_SECTION,
)

import logging

logger = logging.getLogger(__name__)


class DeliveryPolicy(str, Enum):
    """
    What a batch call reports when individual events fail.
    """

    FIRE_AND_FORGET = "fire_and_forget"
    AGGREGATE = "aggregate"


class SplunkPumpConfig(BaseModel):
    """
    Settings of the Splunk pump, as found in the host's pump configuration.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    collector_token: str = ""
    collector_url: str = ""
    ssl_insecure_skip_verify: bool = False
    ssl_cert_file: str = ""
    ssl_key_file: str = ""
    ssl_server_name: str = ""
    obfuscate_api_keys: bool = False
    obfuscate_api_keys_length: int = Field(default=0, ge=0)
    fields: List[str] = Field(default_factory=list)
    delivery_policy: DeliveryPolicy = DeliveryPolicy.FIRE_AND_FORGET
    strict_status: bool = False
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    timeout: float = Field(default=REQUEST_TIMEOUT, gt=0)

    @field_validator("fields", mode="before")
    @classmethod
    def _split_fields(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    @field_validator("delivery_policy", mode="before")
    @classmethod
    def _normalize_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace("-", "_")
        return value

    def as_dict(self) -> Dict[str, Any]:
        """
        Settings safe to log: the collector token is masked.
        """
        data = self.model_dump(mode="json")
        if data.get("collector_token"):
            data["collector_token"] = "****"
        return data


def decode_config(config: Union[SplunkPumpConfig, Mapping[str, Any], None]) -> SplunkPumpConfig:
    """
    Decode the settings handed over by the host.

    Args:
        config: Either a ready SplunkPumpConfig or a raw mapping of settings.

    Returns:
        SplunkPumpConfig: The validated settings.

    Raises:
        InvalidSettingsError: If a setting has the wrong type or is out of range.
    """
    if isinstance(config, SplunkPumpConfig):
        return config

    try:
        return SplunkPumpConfig.model_validate(dict(config or {}))
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidSettingsError(
            reason=reasons, message="Invalid Splunk pump settings."
        ) from e


def _settings_from_config_ini(config_path: Path) -> Dict[str, str]:
    """
    Retrieve the settings from the [splunk] section of an INI file.

    Args:
        config_path (Path): The path to the INI file.

    Returns:
        Dict[str, str]: Raw settings, empty if the file or section is missing.
    """
    config = configparser.ConfigParser()
    config_files = config.read([config_path])

    if not config_files:
        logger.debug(SETTINGS_FILE_MISSING, extra={"config_path": str(config_path)})
        return {}

    if not config.has_section(CONFIG_SECTION_NAME):
        logger.debug(
            SETTINGS_FILE_MISSING_SECTION,
            extra={"config_path": str(config_path), "section": CONFIG_SECTION_NAME},
        )
        return {}

    return {key: value.strip() for key, value in config[CONFIG_SECTION_NAME].items()}


def _settings_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Retrieve the settings from HECPUMP_* environment variables.

    Environment variables:
        HECPUMP_COLLECTOR_TOKEN, HECPUMP_COLLECTOR_URL, HECPUMP_FIELDS, ...
        One per setting, named after the upper-cased setting key.

    Returns:
        Dict[str, str]: Raw settings found in the environment.
    """
    environ = os.environ if environ is None else environ
    settings = {}

    for key in SplunkPumpConfig.model_fields:
        value = environ.get(f"{ENV_PREFIX}{key.upper()}")
        if value is not None:
            settings[key] = value

    return settings


def get_pump_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SplunkPumpConfig:
    """
    Resolve the effective pump settings.

    Resolution order (later sources override earlier ones, key by key):
      1. INI file [splunk] section
      2. Environment variables (HECPUMP_<KEY>)
      3. Explicit overrides

    Args:
        overrides (Optional[Mapping[str, Any]]): Settings given explicitly.
        config_path (Optional[Path]): INI path, defaults to HECPUMP_CONFIG or ~/.hecpump/config.ini.
        environ (Optional[Mapping[str, str]]): Environment to read, defaults to os.environ.

    Returns:
        SplunkPumpConfig: The settings.

    Raises:
        InvalidSettingsError: If a setting is malformed.
    """
    config_path = config_path or get_config_path()

    raw: Dict[str, Any] = {}
    raw.update(_settings_from_config_ini(config_path))
    raw.update(_settings_from_env(environ))
    raw.update({k: v for k, v in (overrides or {}).items() if v is not None})

    config = decode_config(raw)
    logger.info(SETTINGS_RESOLVED, extra={"config_path": str(config_path), **config.as_dict()})
    return config
