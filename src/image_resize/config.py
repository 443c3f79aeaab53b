"""Configuration loading and management for image-resize."""

import os
import sys
import tomllib
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import TypeVar

from .logging import LogConfig, LogLevel
from .models import HtmlStyle, ResizeMode

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

CONFIG_DIR = ".image-resize"
CONFIG_FILE = "config.toml"


def _find_similar(key: str, valid_keys: set[str], threshold: float = 0.6) -> str | None:
    """Find a similar key from valid_keys using Levenshtein ratio.

    Args:
        key: The unknown key to match
        valid_keys: Set of valid key names
        threshold: Minimum similarity ratio (0-1) to suggest

    Returns:
        Most similar key if above threshold, None otherwise
    """

    def levenshtein_ratio(s1: str, s2: str) -> float:
        """Calculate similarity ratio between two strings."""
        m, n = len(s1), len(s2)
        if m == 0 or n == 0:
            return 0.0

        d = [[0] * (n + 1) for _ in range(m + 1)]
        for i in range(m + 1):
            d[i][0] = i
        for j in range(n + 1):
            d[0][j] = j

        for i in range(1, m + 1):
            for j in range(1, n + 1):
                cost = 0 if s1[i - 1] == s2[j - 1] else 1
                d[i][j] = min(d[i - 1][j] + 1, d[i][j - 1] + 1, d[i - 1][j - 1] + cost)

        return 1.0 - (d[m][n] / max(m, n))

    best_match = None
    best_ratio = 0.0

    for valid in valid_keys:
        ratio = levenshtein_ratio(key.lower(), valid.lower())
        if ratio > best_ratio:
            best_ratio = ratio
            best_match = valid

    return best_match if best_ratio >= threshold else None


def _warn(msg: str) -> None:
    print(f"Warning: {msg}", file=sys.stderr)


def _warn_unknown_keys(
    data: dict, valid_keys: set[str], section: str, config_path: Path | None = None
) -> None:
    """Warn about unknown keys in a config section."""
    unknown_keys = set(data.keys()) - valid_keys
    for key in sorted(unknown_keys):
        location = f" in {config_path}" if config_path else ""
        msg = f"Unknown config key '{key}' in [{section}]{location}"

        similar = _find_similar(key, valid_keys)
        if similar:
            msg += f". Did you mean '{similar}'?"

        _warn(msg)


def _load_dataclass(
    cls: type[T],
    data: dict,
    defaults: T,
    section: str = "",
    config_path: Path | None = None,
) -> T:
    """Load a dataclass from a dict, falling back to defaults per field."""
    valid_keys = {f.name for f in fields(cls)}
    _warn_unknown_keys(data, valid_keys, section, config_path)

    kwargs = {f.name: data.get(f.name, getattr(defaults, f.name)) for f in fields(cls)}
    return cls(**kwargs)


def _enum_option(enum_cls: type[E], value: str, default: E, key: str) -> E:
    """Parse an enum-valued option, warning and using default when invalid."""
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(f"'{member.value}'" for member in enum_cls)
        _warn(f"Invalid value {value!r} for '{key}' (expected {valid}); using '{default.value}'")
        return default


@dataclass
class ResizeConfig:
    """Resize dialog and syntax output preferences."""

    default_mode: str = ResizeMode.PERCENTAGE.value
    html_style: str = HtmlStyle.WIDTH_AND_HEIGHT.value
    quick_percentages: list[int] = field(default_factory=lambda: [100, 75, 50, 25])

    @property
    def mode(self) -> ResizeMode:
        return _enum_option(
            ResizeMode, self.default_mode, ResizeMode.PERCENTAGE, "resize.default_mode"
        )

    @property
    def style(self) -> HtmlStyle:
        return _enum_option(
            HtmlStyle, self.html_style, HtmlStyle.WIDTH_AND_HEIGHT, "resize.html_style"
        )


TIMEOUT_KEYS = ("resource_timeout", "external_timeout")
FALLBACK_SIZE_KEYS = ("fallback_width", "fallback_height")


def _is_positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def invalid_dimension_keys(values: dict) -> list[str]:
    """Find [dimensions] keys whose value cannot be used.

    Timeouts must be positive numbers and the fallback size positive integers.
    Keys missing from values are not reported.
    """
    invalid = [
        key for key in TIMEOUT_KEYS if key in values and not _is_positive_number(values[key])
    ]
    invalid.extend(
        key
        for key in FALLBACK_SIZE_KEYS
        if key in values
        and not (_is_positive_number(values[key]) and isinstance(values[key], int))
    )
    return invalid


@dataclass
class DimensionsConfig:
    """Image measurement settings."""

    resource_timeout: float = 5.0
    external_timeout: float = 10.0
    fallback_width: int = 400
    fallback_height: int = 300
    external_fallback: bool = False

    def __post_init__(self):
        defaults = {f.name: f.default for f in fields(self)}
        for key in invalid_dimension_keys(vars(self)):
            _warn(
                f"Invalid value {getattr(self, key)!r} for 'dimensions.{key}' "
                f"(expected a positive number); using {defaults[key]!r}"
            )
            setattr(self, key, defaults[key])


@dataclass
class StorageConfig:
    """Where resource files live."""

    resources_dir: str = "resources"


@dataclass
class NotificationsConfig:
    """User notice settings."""

    enabled: bool = True


@dataclass
class LoggingConfig:
    """Logger settings."""

    level: str = "info"


@dataclass
class Config:
    """Main configuration container."""

    resize: ResizeConfig = field(default_factory=ResizeConfig)
    dimensions: DimensionsConfig = field(default_factory=DimensionsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Computed paths (set after loading)
    project_path: Path | None = None
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path) -> "Config":
        """Load configuration from a TOML file.

        Args:
            config_path: Path to the config.toml file

        Returns:
            Loaded Config object with defaults merged
        """
        config = cls()
        config.config_path = config_path
        config.project_path = config_path.parent.parent  # .image-resize/config.toml -> project

        if not config_path.exists():
            return config

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        sections = {
            "resize": ResizeConfig,
            "dimensions": DimensionsConfig,
            "storage": StorageConfig,
            "notifications": NotificationsConfig,
            "logging": LoggingConfig,
        }
        _warn_unknown_keys(data, set(sections), "top-level", config_path)

        for name, section_cls in sections.items():
            if name in data:
                setattr(
                    config,
                    name,
                    _load_dataclass(
                        section_cls,
                        data[name],
                        getattr(config, name),
                        section=name,
                        config_path=config_path,
                    ),
                )

        return config

    @classmethod
    def find_and_load(cls, start_path: Path | None = None) -> "Config":
        """Find and load config from .image-resize/config.toml.

        Searches from start_path up to the filesystem root.

        Raises:
            FileNotFoundError: If no .image-resize/config.toml is found
        """
        if start_path is None:
            start_path = Path.cwd()

        config_path = cls.find_config(start_path)
        if config_path is None:
            raise FileNotFoundError(
                f"No {CONFIG_DIR}/{CONFIG_FILE} found. Run 'image-resize init' first."
            )

        return cls.load(config_path)

    @classmethod
    def find_or_default(cls, start_path: Path | None = None) -> "Config":
        """Like find_and_load(), but fall back to defaults rooted at start_path."""
        start_path = start_path or Path.cwd()
        config_path = cls.find_config(start_path)
        if config_path is None:
            return cls.load(start_path / CONFIG_DIR / CONFIG_FILE)
        return cls.load(config_path)

    @staticmethod
    def find_config(start_path: Path) -> Path | None:
        """Find .image-resize/config.toml starting from start_path."""
        current = start_path.resolve()

        while True:
            config_path = current / CONFIG_DIR / CONFIG_FILE
            if config_path.exists():
                return config_path

            parent = current.parent
            if parent == current:
                # Reached filesystem root
                return None
            current = parent

    def get_resources_dir(self) -> Path:
        """Get the resources directory, relative to the project root."""
        resources_dir = Path(os.path.expanduser(self.storage.resources_dir))
        if resources_dir.is_absolute():
            return resources_dir
        return (self.project_path or Path.cwd()) / resources_dir

    def to_log_config(self) -> LogConfig:
        """Build the logger configuration."""
        try:
            return LogConfig(level=LogLevel.parse(self.logging.level))
        except ValueError as e:
            _warn(f"{e}; using 'info'")
            return LogConfig()
