import os
import re
from configparser import ConfigParser, NoOptionError, NoSectionError
from typing import Dict, Any, Optional

DEFAULT_CONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.ini')


class ConfigManager:
    """
    Reads the layered quote-transform configuration once:
    bundled config.ini, then [DEFAULT] user_config if present, then an
    explicit -c/--conf file.
    """

    def __init__(self, config_file: Optional[str] = None):
        self.base_config = self._load_configs(config_file)

    def _load_configs(self, config_file: Optional[str] = None) -> ConfigParser:
        if not os.path.exists(DEFAULT_CONFIG):
            raise FileNotFoundError(f'Could not find the default config file at {DEFAULT_CONFIG}')

        config = ConfigParser()
        config.read(DEFAULT_CONFIG)

        # A missing user config is fine; a missing explicit one is not
        user_config = self.resolve_file_path(config['DEFAULT'].get('user_config'))
        if user_config is not None:
            config.read(user_config)

        if config_file is not None:
            custom = self.resolve_file_path(config_file)
            if custom is None:
                raise FileNotFoundError(f'Could not find the custom config file at {config_file}')
            config.read(custom)

        return config

    def create_app_config(self, overrides: Optional[Dict[str, Any]] = None) -> 'AppConfig':
        return AppConfig(self.base_config, dict(overrides or {}))

    @staticmethod
    def fix_values(value: Any) -> Any:
        """Coerce a raw ini string into int, float, bool or an unquoted string"""
        if not isinstance(value, str):
            return value

        value = value.strip()
        if value.startswith('~'):
            value = os.path.expanduser(value)
        if value.isdigit():
            return int(value)
        if re.fullmatch(r'\d+\.\d+', value):
            return float(value)
        booleans = {'true': True, 'yes': True, 'false': False, 'no': False}
        if value.lower() in booleans:
            return booleans[value.lower()]
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            return value[1:-1]
        return value

    @staticmethod
    def resolve_file_path(file_name: Optional[str], base_dir: Optional[str] = None) -> Optional[str]:
        """
        Return the absolute path of an existing file, or None
        :param file_name: absolute, ~-prefixed, or relative to base_dir
        :param base_dir: defaults to the working directory
        """
        if not file_name:
            return None

        path = os.path.expanduser(file_name)
        if not os.path.isabs(path):
            path = os.path.join(os.path.expanduser(base_dir or os.getcwd()), path)
        return path if os.path.isfile(path) else None


class AppConfig:
    """
    Settings for one run. CLI overrides are keyed by option name and win
    over the ini files; blank ini values count as unset.
    """

    def __init__(self, base_config: ConfigParser, overrides: Optional[Dict[str, Any]] = None):
        self.base_config = base_config
        self.overrides = overrides or {}

    def set_option(self, key: str, value: Any) -> None:
        self.overrides[key] = value

    def get_option(self, section: str, option: str, fallback: Any = None) -> Any:
        if option in self.overrides:
            return self.overrides[option]
        try:
            value = self.base_config.get(section, option)
        except (NoSectionError, NoOptionError):
            return fallback
        if value is None or not value.strip():
            return fallback
        return ConfigManager.fix_values(value)
