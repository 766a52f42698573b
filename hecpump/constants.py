# -*- coding: utf-8 -*-
import os
from pathlib import Path

PUMP_NAME = "Splunk Pump"
PUMP_PREFIX = "splunk-pump"

# HTTP Event Collector wire protocol
DEFAULT_COLLECTOR_PATH = "/services/collector/event/1.0"
AUTH_HEADER_NAME = "authorization"
AUTH_HEADER_PREFIX = "Splunk "

API_KEY_MASK = "****"

REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_CONCURRENCY = 1

# Configuration sources
CONFIG_SECTION_NAME = "splunk"
ENV_PREFIX = "HECPUMP_"
ENV_CONFIG_PATH = "HECPUMP_CONFIG"

DIR_NAME = ".hecpump"
USER_CONFIG_DIR = Path("~", DIR_NAME).expanduser()
CONFIG_FILE_USER = USER_CONFIG_DIR / "config.ini"


def get_config_path() -> Path:
    """
    Get the path of the INI configuration file.

    Returns:
        Path: The path from HECPUMP_CONFIG if set, the user config file otherwise.
    """
    raw = os.getenv(ENV_CONFIG_PATH)
    if raw:
        return Path(raw).expanduser()
    return CONFIG_FILE_USER


# Exit codes
EXIT_CODE_OK = 0
EXIT_CODE_FAILURE = 1
EXIT_CODE_INVALID_CONFIGURATION = 2
