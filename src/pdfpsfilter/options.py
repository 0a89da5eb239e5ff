"""Translation of CUPS job options for the pipeline stages.

The job arrives with a flat option string such as

    "fit-to-page landscape Collate gamma=1.2 media=A4"

From it the conversion stage gets page geometry decisions (fit, orientation,
target size), and the imposition stage gets the same string minus everything
that was already applied further up the pipeline.
"""

import re
import shlex
from collections.abc import Iterable, Mapping

from pdfpsfilter.constants import EXCLUDE_GENERAL, EXCLUDE_PAGE_MANAGEMENT, FALSE_VALUES
from pdfpsfilter.job import JobRequest
from pdfpsfilter.profile import DeviceProfile
from pdfpsfilter.sniffer import UpstreamMetadata

# One "name[=value]" option; quoted runs may contain whitespace, a stray
# quote is an ordinary character
_OPTION = re.compile(r"""(?:"[^"]*"|'[^']*'|[^\s"']|["'])+""")


def parse_options(raw: str) -> dict[str, str]:
    """Parse a CUPS option string into a mapping with lower-case names.

    "name=value" keeps the (unquoted) value, a bare "name" means "true" and
    "noname" means name="false". Later options override earlier ones.
    """
    try:
        tokens = shlex.split(raw)
    except ValueError:
        # Unbalanced quotes
        tokens = raw.split()

    options: dict[str, str] = {}
    for token in tokens:
        name, sep, value = token.partition("=")
        if not name:
            continue
        if sep:
            options[name.lower()] = value
        elif name.lower().startswith("no") and len(name) > 2:
            options[name[2:].lower()] = "false"
        else:
            options[name.lower()] = "true"
    return options


def is_true(value: str | None) -> bool | None:
    """Tri-state boolean option value: None if the option is absent."""
    if value is None:
        return None
    return value.lower() not in FALSE_VALUES


def remove_options(raw: str, names: Iterable[str]) -> str:
    """Remove options from a CUPS option string.

    The string is split into whole options first, so text inside a quoted
    value is never matched. An option is dropped when its name, or its name
    without a "no" prefix, equals one of `names` (case-insensitive). The
    remaining options are joined by single spaces.
    """
    excluded = {name.lower() for name in names}
    kept = []
    for token in _OPTION.findall(raw):
        name = token.partition("=")[0].lower()
        if name in excluded or (name.startswith("no") and name[2:] in excluded):
            continue
        kept.append(token)
    return " ".join(kept)


def imposition_options(raw: str, metadata: UpstreamMetadata | None) -> str:
    """Option string for the imposition stage.

    Geometry options are always removed; page management options only when
    pdftopdf already applied them. If pdftopdf found that the device
    collates in hardware, collation is requested again.
    """
    applied = metadata is not None and metadata.applied
    result = remove_options(raw, EXCLUDE_GENERAL)
    if applied:
        result = remove_options(result, EXCLUDE_PAGE_MANAGEMENT)
        if metadata.collate:
            result = f"{result} Collate" if result else "Collate"
    return result


def imposition_copies(job: JobRequest, metadata: UpstreamMetadata | None) -> str:
    """Copy count for the imposition stage."""
    if metadata is not None and metadata.applied:
        return metadata.copies or "1"
    return str(job.copies)


def fit_to_page(options: Mapping[str, str]) -> bool:
    value = options.get("fitplot")
    if value is None:
        value = options.get("fit-to-page")
    return bool(is_true(value))


def orientation(options: Mapping[str, str]) -> int:
    """Requested rotation in quarter turns (0 to 3).

    IPP orientation-requested values map as:
        3 = 0 degrees   -> 0
        4 = 90 degrees  -> 1
        5 = -90 degrees -> 3
        6 = 180 degrees -> 2
    """
    landscape = options.get("landscape")
    if landscape is not None:
        return 1 if is_true(landscape) else 0

    value = options.get("orientation-requested")
    if value is None:
        return 0
    try:
        rotation = (int(value.strip()) - 3) % 4
    except ValueError:
        return 0
    if rotation >= 2:
        rotation ^= 1
    return rotation


def target_geometry(profile: DeviceProfile | None, options: Mapping[str, str]) -> tuple[str, str] | None:
    """Output width and height in points when the job asks to fit the page.

    Returns None when no fitting is requested or no page size is known.
    """
    if profile is None or profile.page_size is None or not fit_to_page(options):
        return None

    size = profile.page_size
    if orientation(options) & 1:
        return f"{size.length:.0f}", f"{size.width:.0f}"
    return f"{size.width:.0f}", f"{size.length:.0f}"
