"""
Configuration for the join page, read from a YAML file
"""

import os
from pathlib import Path

import yaml

from join_system.logger import ConfigurationError

DEFAULT_CONFIG_PATH = "/data/join/config/join.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULTS = {
    'session_dir': "/data/join/sessions",
    'session_lifetime_hours': 12,
    'cookie_name': "join_session",
    'cookie_secure': True,
    'database_path': "/data/join/members.db",
    'database_timeout': 5.0,
    'confirm_location': "check.py",
    'max_body_bytes': 65536,
    'log_dir': None,
    'log_level': "INFO",
}

# Accepted types for each key; ints are fine where floats are expected
TYPES = {
    'session_dir': (str,),
    'session_lifetime_hours': (int, float),
    'cookie_name': (str,),
    'cookie_secure': (bool,),
    'database_path': (str,),
    'database_timeout': (int, float),
    'confirm_location': (str,),
    'max_body_bytes': (int,),
    'log_dir': (str, type(None)),
    'log_level': (str,),
}


class JoinConfig:
    def __init__(self, values=None):
        merged = dict(DEFAULTS)
        if values:
            unknown = sorted(set(values) - set(DEFAULTS))
            if unknown:
                raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
            merged.update(values)

        for key, value in merged.items():
            expected = TYPES[key]
            # bool is an int subclass; keep numeric settings numeric
            if isinstance(value, bool) and bool not in expected:
                raise ConfigurationError(f"Invalid value for {key}: {value!r}")
            if not isinstance(value, expected):
                raise ConfigurationError(f"Invalid value for {key}: {value!r}")

        if merged['database_timeout'] <= 0:
            raise ConfigurationError("database_timeout must be positive")
        if merged['session_lifetime_hours'] <= 0:
            raise ConfigurationError("session_lifetime_hours must be positive")
        if merged['max_body_bytes'] <= 0:
            raise ConfigurationError("max_body_bytes must be positive")
        if merged['log_level'].upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {merged['log_level']}")

        self._values = merged

    def __getattr__(self, name):
        try:
            return self.__dict__['_values'][name]
        except KeyError:
            raise AttributeError(name) from None

    def as_dict(self):
        return dict(self._values)


def load_config(path=None):
    """Load configuration from path, $JOIN_CONFIG, or the default location.

    A missing file is not an error: the defaults apply. A file that exists but
    cannot be parsed raises ConfigurationError.
    """
    config_path = Path(path or os.environ.get('JOIN_CONFIG', DEFAULT_CONFIG_PATH))

    if not config_path.exists():
        return JoinConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration {config_path} must be a mapping")

    return JoinConfig(data)
