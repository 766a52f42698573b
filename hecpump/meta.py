from importlib.metadata import PackageNotFoundError, version
import logging
import platform
from typing import Dict, Optional


LOG = logging.getLogger(__name__)


def get_version() -> Optional[str]:
    """
    Get the version of the hecpump package.

    Returns:
      Optional[str]: The version if the package is installed, otherwise None.
    """
    try:
        return version("hecpump")
    except PackageNotFoundError:
        LOG.debug("Unable to get hecpump version.")
        return None


def get_user_agent() -> str:
    """
    Get the user agent string for HTTP requests.

    Returns:
      str: The user agent in the format: hecpump/{version} ({os}; Python/{python_version})
    """
    pump_version = get_version() or "unknown"
    return f"hecpump/{pump_version} ({platform.system()}; Python/{platform.python_version()})"


def get_meta_http_headers() -> Dict[str, str]:
    return {"User-Agent": get_user_agent()}
