"""Configuration loading and validation for pdfpsfilter."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from pdfpsfilter.constants import (
    DEFAULT_GHOSTSCRIPT_DEVICE,
    DEFAULT_GHOSTSCRIPT_PATH,
    DEFAULT_IMPOSITION_FILTER,
    DEFAULT_PDFTOPS_PATH,
    DEFAULT_SERVERBIN,
    ENV_PPD,
    ENV_SERVERBIN,
)
from pdfpsfilter.exceptions import ConfigError


class ConverterName(str, Enum):
    """Available conversion engines."""

    PDFTOPS = "pdftops"  # Poppler
    GHOSTSCRIPT = "ghostscript"


def _parse_enum(enum_class: type[Enum], value: str, field: str | None = None) -> Enum:
    """Parse a string value into an enum with validation.

    Raises:
        ConfigError: If the value is not a valid enum member.
    """
    try:
        return enum_class(value)
    except ValueError:
        valid = ", ".join(e.value for e in enum_class)
        raise ConfigError(
            f"Invalid value '{value}'. Valid values are: {valid}",
            context={"field": field} if field else None,
        )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping", context={"field": name})
    return section


@dataclass
class ConverterSettings:
    """Conversion stage settings."""
    backend: ConverterName = ConverterName.PDFTOPS
    pdftops_path: Path = Path(DEFAULT_PDFTOPS_PATH)
    ghostscript_path: Path = Path(DEFAULT_GHOSTSCRIPT_PATH)
    ghostscript_device: str = DEFAULT_GHOSTSCRIPT_DEVICE
    native_page_sizes: bool = True  # pdftops understands -origpagesizes


@dataclass
class ImpositionSettings:
    """Imposition stage settings."""
    serverbin: Path = Path(DEFAULT_SERVERBIN)
    filter: str = DEFAULT_IMPOSITION_FILTER

    @property
    def path(self) -> Path:
        return self.serverbin / "filter" / self.filter


@dataclass
class QuirkSettings:
    enabled: bool = True


@dataclass
class FilterConfig:
    """Root configuration object."""
    converter: ConverterSettings = field(default_factory=ConverterSettings)
    imposition: ImpositionSettings = field(default_factory=ImpositionSettings)
    quirks: QuirkSettings = field(default_factory=QuirkSettings)
    profile: Path | None = None


def parse_config(data: dict[str, Any]) -> FilterConfig:
    """Build a FilterConfig from an already-parsed mapping."""
    c = _section(data, "converter")
    backend = _parse_enum(ConverterName, c.get("backend", "pdftops"), field="converter.backend")
    converter = ConverterSettings(
        backend=backend,
        pdftops_path=Path(c.get("pdftops_path", DEFAULT_PDFTOPS_PATH)),
        ghostscript_path=Path(c.get("ghostscript_path", DEFAULT_GHOSTSCRIPT_PATH)),
        ghostscript_device=c.get("ghostscript_device", DEFAULT_GHOSTSCRIPT_DEVICE),
        native_page_sizes=bool(c.get("native_page_sizes", True)),
    )

    i = _section(data, "imposition")
    imposition = ImpositionSettings(
        serverbin=Path(i.get("serverbin", DEFAULT_SERVERBIN)),
        filter=i.get("filter", DEFAULT_IMPOSITION_FILTER),
    )

    q = _section(data, "quirks")
    quirks = QuirkSettings(enabled=bool(q.get("enabled", True)))

    profile = data.get("profile")

    return FilterConfig(
        converter=converter,
        imposition=imposition,
        quirks=quirks,
        profile=Path(profile) if profile else None,
    )


def apply_environment(config: FilterConfig, environ: dict[str, str] | None = None) -> FilterConfig:
    """Override config values from the environment CUPS passes to filters."""
    env = os.environ if environ is None else environ

    if env.get(ENV_PPD):
        config.profile = Path(env[ENV_PPD])
    if env.get(ENV_SERVERBIN):
        config.imposition.serverbin = Path(env[ENV_SERVERBIN])
    return config


def load_config(config_path: Path | None = None, environ: dict[str, str] | None = None) -> FilterConfig:
    """Load a configuration file (optional) and apply environment overrides."""
    if config_path is None:
        return apply_environment(FilterConfig(), environ)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML dictionary")

    return apply_environment(parse_config(data), environ)
