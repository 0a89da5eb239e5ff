"""Device profile loading.

The profile is read from the queue's PPD file (plain or gzip-compressed) or
from a YAML document with the same information:

    manufacturer: Kyocera
    language_level: 3
    truetype_rasterizer: true
    default_page_size: A4
    page_sizes:
      A4: [595, 842]
      Letter: [612, 792]
"""

import gzip
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any

import yaml

from pdfpsfilter.exceptions import ProfileError
from pdfpsfilter.logging_config import get_logger

logger = get_logger(__name__)

# *Keyword Option/Translation: value
_PPD_LINE = re.compile(r"^\*(?P<keyword>[^\s:/]+)(?:\s+(?P<option>[^:/]+)(?:/[^:]*)?)?:\s*(?P<value>.*)$")


class LanguageLevel(IntEnum):
    """PostScript language level of the device."""
    LEVEL1 = 1
    LEVEL2 = 2
    LEVEL3 = 3


@dataclass(frozen=True)
class PageSize:
    """A media size in PostScript points."""
    name: str
    width: float
    length: float


@dataclass(frozen=True)
class DeviceProfile:
    """Capabilities and identity of the destination printer.

    Attributes:
        language_level: PostScript level the interpreter understands
        manufacturer: Vendor string, used to look up interpreter quirks
        page_size: Page size selected for this job (None if unknown)
        truetype_rasterizer: False if TrueType fonts must not be embedded
            as Type 42 and have to be converted the legacy way
    """
    language_level: LanguageLevel = LanguageLevel.LEVEL2
    manufacturer: str = ""
    page_size: PageSize | None = None
    truetype_rasterizer: bool = False


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _parse_level(value: Any, source: Path) -> LanguageLevel:
    try:
        return LanguageLevel(int(value))
    except (TypeError, ValueError):
        raise ProfileError(f"Invalid language level '{value}'", context={"file": source})


def select_page_size(
    sizes: Mapping[str, PageSize],
    default: str | None,
    options: Mapping[str, str] | None = None,
) -> PageSize | None:
    """Pick the page size requested by the job, falling back to the default.

    "PageSize" wins over "media"; "media" may list several comma-separated
    keywords (size, type, source) of which the first known size is used.
    """
    by_name = {name.lower(): size for name, size in sizes.items()}
    requested: list[str] = []
    if options:
        if options.get("pagesize"):
            requested.append(options["pagesize"])
        if options.get("media"):
            requested.extend(options["media"].split(","))

    for name in requested:
        size = by_name.get(name.strip().lower())
        if size is not None:
            return size

    if default:
        return by_name.get(default.lower())
    return None


def parse_ppd(lines: Iterable[str], source: Path, options: Mapping[str, str] | None = None) -> DeviceProfile:
    """Extract the device profile from the lines of a PPD file."""
    level = LanguageLevel.LEVEL2
    manufacturer = ""
    ttrasterizer = False
    default_size = None
    sizes: dict[str, PageSize] = {}

    for raw in lines:
        match = _PPD_LINE.match(raw.rstrip("\r\n"))
        if not match:
            continue
        keyword = match.group("keyword")
        option = (match.group("option") or "").strip()
        value = _unquote(match.group("value"))

        if keyword == "LanguageLevel":
            level = _parse_level(value, source)
        elif keyword == "Manufacturer":
            manufacturer = value
        elif keyword == "TTRasterizer":
            ttrasterizer = value.lower() != "none"
        elif keyword == "DefaultPageSize":
            default_size = value
        elif keyword == "PaperDimension" and option:
            try:
                width, length = (float(v) for v in value.split())
            except ValueError:
                logger.debug("Ignoring malformed PaperDimension for %s in %s", option, source)
                continue
            sizes[option] = PageSize(option, width, length)

    return DeviceProfile(
        language_level=level,
        manufacturer=manufacturer,
        page_size=select_page_size(sizes, default_size, options),
        truetype_rasterizer=ttrasterizer,
    )


def parse_yaml_profile(data: Any, source: Path, options: Mapping[str, str] | None = None) -> DeviceProfile:
    """Build a device profile from a parsed YAML mapping."""
    if not isinstance(data, dict):
        raise ProfileError("Device profile must be a YAML dictionary", context={"file": source})

    sizes = {}
    for name, dims in (data.get("page_sizes") or {}).items():
        try:
            width, length = dims
            sizes[str(name)] = PageSize(str(name), float(width), float(length))
        except (TypeError, ValueError):
            raise ProfileError(f"Invalid page size '{name}': {dims}", context={"file": source})

    return DeviceProfile(
        language_level=_parse_level(data.get("language_level", 2), source),
        manufacturer=str(data.get("manufacturer", "")),
        page_size=select_page_size(sizes, data.get("default_page_size"), options),
        truetype_rasterizer=bool(data.get("truetype_rasterizer", False)),
    )


def load_device_profile(path: Path, options: Mapping[str, str] | None = None) -> DeviceProfile:
    """Load the device profile for the destination queue.

    Args:
        path: PPD (optionally .gz) or YAML (.yaml/.yml) file
        options: Parsed job options, used to select the page size

    Raises:
        ProfileError: If the file cannot be read or is malformed
    """
    suffixes = [s.lower() for s in path.suffixes]
    try:
        if suffixes and suffixes[-1] in (".yaml", ".yml"):
            with open(path, "r", encoding="utf-8") as f:
                profile = parse_yaml_profile(yaml.safe_load(f), path, options)
        else:
            opener = gzip.open if suffixes and suffixes[-1] == ".gz" else open
            with opener(path, "rt", encoding="latin-1") as f:
                profile = parse_ppd(f, path, options)
    except OSError as e:
        raise ProfileError(f"Cannot read device profile: {e}", context={"file": path}) from e
    except yaml.YAMLError as e:
        raise ProfileError(f"Invalid YAML: {e}", context={"file": path}) from e

    logger.debug(
        "Device profile: manufacturer=%r, level=%d, page size=%s",
        profile.manufacturer,
        profile.language_level,
        profile.page_size.name if profile.page_size else None,
    )
    return profile
