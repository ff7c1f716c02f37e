import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sabmon.errors import ConfigError

PACKAGE_DIR = Path(__file__).parent

# --- Server Configuration ---
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = 5959  # fixed, not configurable

# --- Logging Configuration ---
# INFO request and startup lines are always emitted, debug only adds to them
LOG_LEVEL = "INFO"

# --- Directory Configuration ---
TEMPLATE_DIR = str(PACKAGE_DIR / "templates")
STATIC_DIR = str(PACKAGE_DIR / "static")
CONFIG_FILENAME = "config.json"

# --- SABnzbd Configuration ---
DEFAULT_REFRESH_INTERVAL = 5  # in seconds
UPSTREAM_TIMEOUT = 5  # in seconds
REDACTED = "[REDACTED]"

ENV_SABNZBD_URL = "SABMON_SABNZBD_URL"
ENV_SABNZBD_API_KEY = "SABMON_SABNZBD_API_KEY"
ENV_REFRESH_INTERVAL = "SABMON_REFRESH_INTERVAL"
ENV_DEBUG = "SABMON_DEBUG"
ENV_LOG_CLIENT_INFO = "SABMON_LOG_CLIENT_INFO"

# config.json key -> expected JSON type
_FILE_FIELDS = {
    "sabnzbd_url": str,
    "sabnzbd_api_key": str,
    "refresh_interval": int,
    "debug": bool,
    "log_client_info": bool,
}


@dataclass(frozen=True)
class Configuration:
    sabnzbd_url: str = ""
    sabnzbd_api_key: str = ""
    refresh_interval: int = 0
    debug: bool = False
    log_client_info: bool = False

    def redacted(self) -> str:
        """Printable form of the configuration with the API key hidden."""
        api_key = REDACTED if self.sabnzbd_api_key else ""
        return (
            f"sabnzbd_url={self.sabnzbd_url} sabnzbd_api_key={api_key} "
            f"refresh_interval={self.refresh_interval} debug={self.debug} "
            f"log_client_info={self.log_client_info}"
        )


def _read_config_file(path: Path) -> Tuple[Dict[str, Any], List[str]]:
    """
    Reads config.json, keeping every correctly typed field. Mistyped fields
    are skipped and reported back instead of discarding the whole file.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("top-level value must be an object")
    values: Dict[str, Any] = {}
    problems: List[str] = []
    for key, expected in _FILE_FIELDS.items():
        if key not in data or data[key] is None:
            continue
        value = data[key]
        # bool is an int subclass, so refresh_interval must reject it explicitly
        if not isinstance(value, expected) or (
            expected is int and isinstance(value, bool)
        ):
            problems.append(f"{key} must be of type {expected.__name__}")
            continue
        values[key] = value
    return values, problems


def _parse_flag(value: str) -> bool:
    return value == "1" or value.lower() == "true"


def validate_config(config: Configuration) -> Configuration:
    """
    Checks required fields and returns the configuration with defaults applied.
    """
    if not config.sabnzbd_url:
        raise ConfigError(
            f"sabnzbd URL is required (set via config or {ENV_SABNZBD_URL})"
        )
    if not config.sabnzbd_api_key:
        raise ConfigError(
            f"sabnzbd API key is required (set via config or {ENV_SABNZBD_API_KEY})"
        )
    if config.refresh_interval <= 0:
        logging.info(
            f"Invalid refresh interval, defaulting to {DEFAULT_REFRESH_INTERVAL} seconds"
        )
        config = replace(config, refresh_interval=DEFAULT_REFRESH_INTERVAL)
    return config


def load_config(
    config_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """
    Loads config.json from the working directory, then overlays any SABMON_*
    environment variables that are set. Environment values always win.

    A missing or broken config file is only logged; missing URL or API key
    after the overlay raises ConfigError.
    """
    if environ is None:
        environ = os.environ
    if config_dir is None:
        config_dir = Path.cwd()

    values: Dict[str, Any] = {}
    config_path = Path(config_dir) / CONFIG_FILENAME
    config_err: Optional[str] = None
    try:
        values, problems = _read_config_file(config_path)
        if problems:
            config_err = "could not parse config file: " + ", ".join(problems)
        else:
            logging.info(f"Config loaded from {config_path}")
    except OSError as e:
        config_err = f"could not open config file: {e}"
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        config_err = f"could not parse config file: {e}"

    if environ.get(ENV_SABNZBD_URL):
        values["sabnzbd_url"] = environ[ENV_SABNZBD_URL]
    if environ.get(ENV_SABNZBD_API_KEY):
        values["sabnzbd_api_key"] = environ[ENV_SABNZBD_API_KEY]
    env_refresh = environ.get(ENV_REFRESH_INTERVAL)
    if env_refresh:
        try:
            values["refresh_interval"] = int(env_refresh)
        except ValueError:
            logging.warning(
                f"Invalid {ENV_REFRESH_INTERVAL} value '{env_refresh}', must be a number"
            )
    if environ.get(ENV_DEBUG):
        values["debug"] = _parse_flag(environ[ENV_DEBUG])
    if environ.get(ENV_LOG_CLIENT_INFO):
        values["log_client_info"] = _parse_flag(environ[ENV_LOG_CLIENT_INFO])

    config = validate_config(Configuration(**values))

    if config_err is not None:
        logging.warning(
            f"Config file couldn't be fully loaded: {config_err}"
        )
    return config
