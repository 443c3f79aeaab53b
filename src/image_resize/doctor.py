"""Diagnostics for image-resize configuration and resources."""

from __future__ import annotations

from pathlib import Path

import tomllib

from .config import (
    CONFIG_DIR,
    CONFIG_FILE,
    FALLBACK_SIZE_KEYS,
    TIMEOUT_KEYS,
    Config,
    invalid_dimension_keys,
)
from .logging import LogLevel
from .models import HtmlStyle, ResizeMode


def _display_path(path: Path, base: Path) -> str:
    """Return a friendly path display, relative when possible."""
    try:
        return str(path.relative_to(base))
    except ValueError:
        return str(path)


def _is_option(value, enum_cls) -> bool:
    return str(value).strip().lower() in {member.value for member in enum_cls}


def _check_dimensions(config_path: Path, errors: list[str]) -> None:
    # Loading replaces bad values with defaults, so look at the file itself
    with open(config_path, "rb") as f:
        dims = tomllib.load(f).get("dimensions", {})
    invalid = invalid_dimension_keys(dims)
    if any(key in TIMEOUT_KEYS for key in invalid):
        errors.append("Timeouts in [dimensions] must be positive.")
    if any(key in FALLBACK_SIZE_KEYS for key in invalid):
        errors.append("Fallback dimensions in [dimensions] must be positive integers.")


def run_doctor(start_path: Path | None = None) -> tuple[list[str], list[str], list[str]]:
    """Run diagnostics and return (errors, warnings, ok)."""
    errors: list[str] = []
    warnings: list[str] = []
    ok: list[str] = []

    start_path = start_path or Path.cwd()

    config_path = Config.find_config(start_path)
    if config_path is None:
        errors.append(f"No {CONFIG_DIR}/{CONFIG_FILE} found. Run 'image-resize init' first.")
        return errors, warnings, ok

    display_config = _display_path(config_path, start_path)

    try:
        config = Config.load(config_path)
    except tomllib.TOMLDecodeError as e:
        errors.append(f"Invalid TOML in {display_config}: {e}")
        return errors, warnings, ok
    except OSError as e:
        errors.append(f"Unable to read {display_config}: {e}")
        return errors, warnings, ok

    ok.append(f"Config loaded: {display_config}")

    if not _is_option(config.resize.default_mode, ResizeMode):
        errors.append(f"Unknown resize.default_mode: {config.resize.default_mode!r}")
    if not _is_option(config.resize.html_style, HtmlStyle):
        errors.append(f"Unknown resize.html_style: {config.resize.html_style!r}")
    try:
        LogLevel.parse(config.logging.level)
    except ValueError as e:
        errors.append(str(e))

    bad_percentages = [p for p in config.resize.quick_percentages if not p or p <= 0]
    if bad_percentages:
        errors.append(f"Quick percentages must be positive: {bad_percentages}")

    _check_dimensions(config_path, errors)

    resources_dir = config.get_resources_dir()
    if resources_dir.is_dir():
        count = sum(1 for p in resources_dir.iterdir() if p.is_file())
        ok.append(
            f"Resources directory: {_display_path(resources_dir, start_path)} ({count} files)"
        )
    else:
        warnings.append(
            f"Resources directory not found: {_display_path(resources_dir, start_path)}"
        )

    if config.dimensions.external_fallback:
        ok.append("External images that cannot be measured use the fallback size.")

    return errors, warnings, ok
