"""Process-wide configuration for Sensor Shell.

Values are layered, later layers winning key by key:

1. built-in defaults (``defaults.py``)
2. ``config.yaml``, given explicitly or found in ``.`` or ``~/.sensor-shell``
3. ``SENSOR_SHELL_<SECTION>_<KEY>`` environment variables

The merged result is validated against ``ConfigSchema`` before it becomes
visible, so a failed load or reload never leaves a half-applied state.
"""

from dataclasses import fields
from pathlib import Path
from typing import Optional, Dict, Any, List, Tuple
import os
import sys

import yaml

from sensor_shell.config.config_models import (
    Config,
    DeviceConfig,
    QueryConfig,
    LoggingConfig,
    LogLevel
)
from sensor_shell.config.defaults import get_default_config
from sensor_shell.config.config_schema import ConfigSchema


SEARCH_PATHS = (
    Path("config.yaml"),
    Path.home() / ".sensor-shell" / "config.yaml",
)

_SECTIONS = {
    'device': DeviceConfig,
    'query': QueryConfig,
    'logging': LoggingConfig,
}

_TRUE_WORDS = {'true', 'yes', 'on'}
_FALSE_WORDS = {'false', 'no', 'off'}


class ConfigManager:
    """Singleton holder of the active ``Config``.

    Example:
        >>> ConfigManager.initialize(Path("config.yaml"))
        >>> ConfigManager.instance().get_config().query.timeout
        2.0
    """

    ENV_PREFIX = "SENSOR_SHELL_"

    _instance: Optional['ConfigManager'] = None

    def __init__(self):
        if ConfigManager._instance is not None:
            raise RuntimeError("Use ConfigManager.instance() instead of constructor")
        self._config: Optional[Config] = None
        self._config_source: Dict[str, str] = {}
        self._config_path: Optional[Path] = None

    @classmethod
    def instance(cls) -> 'ConfigManager':
        """The initialized manager.

        Raises:
            RuntimeError: initialize() has not run yet
        """
        if cls._instance is None:
            raise RuntimeError("ConfigManager not initialized. Call initialize() first.")
        return cls._instance

    @classmethod
    def initialize(cls,
                   config_path: Optional[Path] = None,
                   skip_validation: bool = False) -> 'ConfigManager':
        """Load all layers and install the result.

        Args:
            config_path: YAML file to use; searched for when None. A path
                that does not exist means "defaults and environment only".
            skip_validation: Install the merged values without schema checks

        Raises:
            ValueError: The merged configuration is invalid. The previously
                installed configuration, if any, stays active.
        """
        config, sources, used_path = cls._load_layers(config_path, skip_validation)

        if cls._instance is None:
            cls._instance = cls()
        manager = cls._instance
        manager._config = config
        manager._config_source = sources
        manager._config_path = used_path
        return manager

    @classmethod
    def _load_layers(cls, config_path: Optional[Path],
                     skip_validation: bool) -> Tuple[Config, Dict[str, str], Optional[Path]]:
        layers: List[Tuple[str, Dict[str, Any]]] = [("default", get_default_config().to_dict())]

        path = config_path if config_path is not None else cls._search_config_paths()
        used_path = None
        if path is not None and path.exists():
            try:
                layers.append(("file", cls._load_from_file(path)))
                used_path = path
            except (OSError, yaml.YAMLError) as e:
                print(f"Warning: Failed to load config from {path}: {e}", file=sys.stderr)
                print("Using defaults only", file=sys.stderr)

        env = cls._apply_env_overrides()
        if env:
            layers.append(("env", env))

        merged: Dict[str, Any] = {}
        sources: Dict[str, str] = {}
        for source, layer in layers:
            merged = cls._merge_configs(merged, layer)
            for section, values in layer.items():
                if isinstance(values, dict):
                    sources.update((f"{section}.{key}", source) for key in values)

        if not skip_validation:
            is_valid, errors = ConfigSchema.validate_config(merged, strict=False)
            if not is_valid:
                raise ValueError("Configuration validation failed:\n"
                                 + "\n".join(f"  - {error}" for error in errors))

        return cls._dict_to_config(merged), sources, used_path

    @staticmethod
    def _search_config_paths() -> Optional[Path]:
        return next((path for path in SEARCH_PATHS if path.is_file()), None)

    @staticmethod
    def _load_from_file(path: Path) -> Dict[str, Any]:
        """Parse a YAML config file. An empty file yields an empty dict.

        Raises:
            yaml.YAMLError: Unparseable, or the top level is not a mapping
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise yaml.YAMLError(f"Top level of {path} must be a mapping")
        return data

    @classmethod
    def _apply_env_overrides(cls) -> Dict[str, Any]:
        """Nested overrides from the environment.

        ``SENSOR_SHELL_QUERY_POLL_INTERVAL=0.01`` becomes
        ``{"query": {"poll_interval": 0.01}}``; the section is the first
        word after the prefix.
        """
        overrides: Dict[str, Dict[str, Any]] = {}
        for name, raw in os.environ.items():
            if not name.startswith(cls.ENV_PREFIX):
                continue
            section, _, key = name[len(cls.ENV_PREFIX):].lower().partition('_')
            if section and key:
                overrides.setdefault(section, {})[key] = cls._parse_env_value(raw)
        return overrides

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Best-effort typing of an environment string.

        yes/no style words become booleans, ``0x`` prefixes hex integers,
        then int, float and comma lists are tried before falling back to the
        string itself. ``1`` and ``0`` are integers, not booleans.
        """
        word = value.strip().lower()
        if word in _TRUE_WORDS or word in _FALSE_WORDS:
            return word in _TRUE_WORDS

        for convert in (lambda s: int(s, 0) if s.startswith('0x') else int(s), float):
            try:
                return convert(word)
            except ValueError:
                continue

        if ',' in value:
            return [item.strip() for item in value.split(',')]
        return value

    @staticmethod
    def _merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Section-wise merge; neither argument is modified."""
        merged = {key: dict(value) if isinstance(value, dict) else value
                  for key, value in base.items()}
        for section, values in override.items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(values)
            elif isinstance(values, dict):
                merged[section] = dict(values)
            else:
                merged[section] = values
        return merged

    @staticmethod
    def _dict_to_config(config_dict: Dict[str, Any]) -> Config:
        """Build the frozen dataclasses, ignoring keys they do not declare."""
        sections = {}
        for name, section_cls in _SECTIONS.items():
            raw = config_dict.get(name)
            raw = raw if isinstance(raw, dict) else {}
            known = {f.name for f in fields(section_cls)}
            sections[name] = section_cls(**{k: v for k, v in raw.items() if k in known})

        query = sections['query']
        sections['query'] = QueryConfig(
            timeout=float(query.timeout),
            poll_interval=float(query.poll_interval),
            history_size=query.history_size
        )

        level = sections['logging'].level
        if not isinstance(level, LogLevel):
            try:
                level = LogLevel(str(level).upper())
            except ValueError:
                level = LoggingConfig.level
            sections['logging'] = LoggingConfig(**{
                **{f.name: getattr(sections['logging'], f.name) for f in fields(LoggingConfig)},
                'level': level,
            })

        return Config(**sections)

    def get_config(self) -> Config:
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config

    @property
    def config_path(self) -> Optional[Path]:
        """The YAML file in use, or None on defaults and environment alone."""
        return self._config_path

    def reload(self, config_path: Optional[Path] = None) -> bool:
        """Re-read file and environment.

        Returns:
            False if the new values were invalid and the current ones kept
        """
        try:
            ConfigManager.initialize(config_path or self._config_path)
        except ValueError as e:
            print(f"Error reloading configuration: {e}", file=sys.stderr)
            print("Rolling back to previous configuration", file=sys.stderr)
            return False
        return True

    def validate(self) -> List[str]:
        if self._config is None:
            return ["Configuration not loaded"]
        return ConfigSchema.validate_config(self._config.to_dict(), strict=False)[1]

    def show_config(self) -> Dict[str, Any]:
        """Every value with the layer it came from.

        Example:
            {"device": {"vendor_id": {"value": 9025, "source": "default"}}, ...}
        """
        return {
            section: {
                key: {"value": value,
                      "source": self._config_source.get(f"{section}.{key}", "unknown")}
                for key, value in values.items()
            }
            for section, values in self.get_config().to_dict().items()
        }

    @classmethod
    def reset(cls):
        """Forget the singleton; tests start from scratch with it."""
        cls._instance = None
