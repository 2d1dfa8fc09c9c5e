import os
import re
from configparser import ConfigParser, NoOptionError, NoSectionError
from typing import Dict, Any, Optional


class ConfigManager:
    """
    Immutable configuration manager - reads config files once and hands out
    runtime configuration objects
    """

    def __init__(self, config_file: Optional[str] = None):
        self.base_config = self._load_configs(config_file)

    def _load_configs(self, config_file: Optional[str] = None) -> ConfigParser:
        """
        Load and merge configuration files
        :param config_file: optional path to a custom config file
        :return: ConfigParser object
        """
        # The default config file ships next to this module
        default_config_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.ini')
        if not os.path.exists(default_config_file):
            raise FileNotFoundError(f'Could not find the default config file at {default_config_file}')

        config = ConfigParser()
        config.read(default_config_file, encoding='utf-8')

        # Get the user config location from the default config file and check and read it
        if 'user_config' in config['DEFAULT']:
            user_config = self.resolve_file_path(config['DEFAULT']['user_config'])
            if user_config is not None:
                config.read(user_config, encoding='utf-8')

        # If a custom config file was specified, check and read it
        if config_file is not None:
            file = self.resolve_file_path(config_file)
            if file is None:
                raise FileNotFoundError(f'Could not find the custom config file at {config_file}')
            config.read(file, encoding='utf-8')

        return config

    def create_runtime_config(self, overrides: Optional[Dict[str, Any]] = None) -> 'RuntimeConfig':
        """Create a mutable config carrying runtime overrides"""
        return RuntimeConfig(self.base_config, dict(overrides or {}))

    def get_section(self, section: str) -> Dict[str, Any]:
        """All options of a section (DEFAULT values included), with values fixed up"""
        if section != 'DEFAULT' and not self.base_config.has_section(section):
            return {}
        return {k: self.fix_values(v) for k, v in self.base_config[section].items()}

    @staticmethod
    def fix_values(value: Any) -> Any:
        """Fix some values due to how they are stored and retrieved with ConfigParser"""
        if isinstance(value, str):
            value = value.strip()

            # Handle path expansion only for strings that clearly look like paths
            if value.startswith(('~', './', '/', '\\')):
                expanded = os.path.expanduser(value)
                if expanded != value:
                    value = expanded

            # Handle list-like strings
            if value.startswith('[') and value.endswith(']'):
                return [ConfigManager.fix_values(item.strip()) for item in re.findall(r'[^,\s]+', value[1:-1])]

            # Check for integer values
            if value.isdigit():
                return int(value)

            # Handle boolean values
            lower_value = value.lower()
            if lower_value in ('true', 'yes'):
                return True
            if lower_value in ('false', 'no'):
                return False

            # Remove quotes if present
            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                return value[1:-1]

        return value

    @staticmethod
    def resolve_file_path(file_name: str, base_dir: Optional[str] = None) -> Optional[str]:
        """
        Works out the path to a file based on the filename and optional base directory
        :param file_name: name of the file to resolve the path to
        :param base_dir: optional base directory to resolve relative names from
        :return: absolute path to the file or None
        """
        if file_name is None:
            return None

        # If base_dir is not specified, use the current working directory
        if base_dir is None:
            base_dir = os.getcwd()
        # If base_dir is a relative path, resolve it against this module's directory
        elif not os.path.isabs(base_dir):
            base_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), base_dir)
        base_dir = os.path.expanduser(base_dir)
        if not os.path.isdir(base_dir):
            return None

        file_name = os.path.expanduser(file_name)
        full_path = file_name if os.path.isabs(file_name) else os.path.join(base_dir, file_name)
        if os.path.isfile(full_path):
            return os.path.abspath(full_path)
        return None


class RuntimeConfig:
    """
    Mutable configuration for a single run.
    Runtime overrides win over anything read from the config files.
    """

    def __init__(self, base_config: ConfigParser, overrides: Optional[Dict[str, Any]] = None):
        self.base_config = base_config
        self.overrides = overrides or {}

    def set_option(self, key: str, value: Any) -> None:
        """Set a runtime override"""
        self.overrides[key] = value

    def get_option(self, section: str, option: str, fallback: Any = None) -> Any:
        """
        Get a setting from the configuration

        :param section: the section to get the setting from
        :param option: the option to get
        :param fallback: the value to return if the option is not found
        :return: the setting value
        """
        # Overrides are keyed by option name, regardless of section
        if option in self.overrides:
            return self.overrides[option]
        try:
            return ConfigManager.fix_values(self.base_config.get(section, option))
        except (NoSectionError, NoOptionError):
            return fallback

    def get_effective(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of every section with overrides applied, for the settings log"""
        effective: Dict[str, Dict[str, Any]] = {}
        for section in ['DEFAULT'] + self.base_config.sections():
            values = {k: ConfigManager.fix_values(v) for k, v in self.base_config[section].items()}
            for key in values:
                if key in self.overrides:
                    values[key] = self.overrides[key]
            effective[section] = values
        return effective
