"""
treefs Configuration Loader

Configuration management:
- JSON configuration file loading
- Default value handling
- Validation of permission modes and log levels
- Runtime configuration updates by dot-notation key

Version: 1.0.0
"""

import json
import threading
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from treefs.exceptions import ConfigLoadError, ConfigValidationError


_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class FilesystemConfig:
    """Tree engine settings."""
    default_file_mode: str = "644"
    default_dir_mode: str = "755"


@dataclass
class PersistenceConfig:
    """Save/load settings."""
    state_file: str = "filesystem.txt"
    encoding: str = "utf-8"
    strict_load: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    use_colors: bool = True


@dataclass
class ShellConfig:
    """Shell configuration settings."""
    prompt_suffix: str = "$ "
    welcome_message: str = "treefs virtual file system. Type 'help' for commands."


@dataclass
class Config:
    """
    Main configuration container.

    Holds every configuration section with its defaults.
    """
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)


def _validate_mode(key: str, value: Any) -> str:
    """Check that a mode is octal text between 000 and 777."""
    text = str(value)
    try:
        mode = int(text, 8)
    except ValueError:
        raise ConfigValidationError(f"Mode is not octal: {text}", key=key) from None
    if not 0 <= mode <= 0o777:
        raise ConfigValidationError(f"Mode out of range: {text}", key=key)
    return text


def _validate_level(key: str, value: Any) -> str:
    text = str(value).upper()
    if text not in _LOG_LEVELS:
        raise ConfigValidationError(f"Unknown log level: {value}", key=key)
    return text


_VALIDATORS = {
    'filesystem.default_file_mode': _validate_mode,
    'filesystem.default_dir_mode': _validate_mode,
    'logging.level': _validate_level,
}


class ConfigLoader:
    """
    Configuration loader and manager.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('config.json')
        >>> print(config.persistence.state_file)
        filesystem.txt
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigLoadError: If the file cannot be read or parsed
            ConfigValidationError: If a value is invalid
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigLoadError(
                f"Configuration file not found: {config_path}",
                path=config_path
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigLoadError(
                f"Invalid JSON in configuration file: {e}",
                path=config_path
            ) from e
        except OSError as e:
            raise ConfigLoadError(
                f"Cannot read configuration file: {e}",
                path=config_path
            ) from e

        if not isinstance(data, dict):
            raise ConfigLoadError(
                "Configuration root must be a JSON object",
                path=config_path
            )

        self._config = self._parse_config(data)
        self._loaded = True
        return self._config

    def _parse_config(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into a Config object."""
        config = Config()

        for section_field in fields(Config):
            section_name = section_field.name
            section_data = data.get(section_name)
            if section_data is None:
                continue
            if not isinstance(section_data, dict):
                raise ConfigValidationError(
                    f"Section must be an object: {section_name}",
                    key=section_name
                )

            section = getattr(config, section_name)
            known = {f.name for f in fields(section)}
            for key, value in section_data.items():
                if key not in known:
                    raise ConfigValidationError(
                        f"Invalid configuration key: {section_name}.{key}",
                        key=f"{section_name}.{key}"
                    )
                setattr(section, key, self._validate(f"{section_name}.{key}", value))

        return config

    @staticmethod
    def _validate(key: str, value: Any) -> Any:
        validator = _VALIDATORS.get(key)
        if validator is None:
            return value
        return validator(key, value)

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'persistence.state_file')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        obj: Any = self._config

        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        Args:
            key: Dot-notation key (e.g., 'persistence.strict_load')
            value: Value to set

        Note:
            This modifies configuration at runtime but does not
            persist changes to disk.
        """
        parts = key.split('.')
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

        final_key = parts[-1]
        if not hasattr(obj, final_key):
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)
        setattr(obj, final_key, self._validate(key, value))

    def reset(self) -> None:
        """Restore the built-in defaults."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, list):
                return [dataclass_to_dict(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: dataclass_to_dict(v) for k, v in obj.items()}
            else:
                return obj

        return dataclass_to_dict(self._config)


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    return ConfigLoader().config
