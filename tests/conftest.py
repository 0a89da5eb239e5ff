"""Shared fixtures for pdfpsfilter tests."""

import shutil
import sys
import tempfile
from pathlib import Path

import pytest
import yaml

from pdfpsfilter.config import ConverterSettings, FilterConfig, ImpositionSettings
from pdfpsfilter.job import JobRequest


# === Path/Directory Fixtures ===

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# === PDF Fixtures ===

def write_pdf(path: Path, num_pages: int = 1, header_comments: list[str] | None = None) -> Path:
    """Write a blank PDF, optionally with comment lines after the %PDF header."""
    from pypdf import PdfWriter

    writer = PdfWriter()
    for _ in range(num_pages):
        writer.add_blank_page(width=612, height=792)
    with open(path, "wb") as f:
        writer.write(f)

    if header_comments:
        data = path.read_bytes()
        first_line, rest = data.split(b"\n", 1)
        comments = b"".join(c.encode("latin-1") + b"\n" for c in header_comments)
        path.write_bytes(first_line + b"\n" + comments + rest)
    return path


@pytest.fixture
def temp_pdf(temp_dir):
    """Create a temporary single-page PDF for testing."""
    return write_pdf(temp_dir / "test.pdf")


@pytest.fixture
def pdftopdf_pdf(temp_dir):
    """A PDF carrying the header comments left by pdftopdf."""
    return write_pdf(
        temp_dir / "pdftopdf.pdf",
        num_pages=2,
        header_comments=["%%PDFTOPDFNumCopies : 3", "%%PDFTOPDFCollate : true"],
    )


# === Device Profile Fixtures ===

PPD_TEMPLATE = """*PPD-Adobe: "4.3"
*% Test PPD
*FormatVersion: "4.3"
*Manufacturer: "{manufacturer}"
*ModelName: "{manufacturer} Test Printer"
*LanguageLevel: "{level}"
*TTRasterizer: {ttrasterizer}
*OpenUI *PageSize/Media Size: PickOne
*DefaultPageSize: {default_size}
*PageSize Letter/US Letter: "<</PageSize[612 792]>>setpagedevice"
*PageSize A4/A4: "<</PageSize[595 842]>>setpagedevice"
*CloseUI: *PageSize
*DefaultPaperDimension: {default_size}
*PaperDimension Letter/US Letter: "612 792"
*PaperDimension A4/A4: "595 842"
"""


def write_ppd(
    path: Path,
    manufacturer: str = "Generic",
    level: int = 3,
    ttrasterizer: str = "Type42",
    default_size: str = "Letter",
) -> Path:
    path.write_text(
        PPD_TEMPLATE.format(
            manufacturer=manufacturer,
            level=level,
            ttrasterizer=ttrasterizer,
            default_size=default_size,
        ),
        encoding="latin-1",
    )
    return path


@pytest.fixture
def generic_ppd(temp_dir):
    return write_ppd(temp_dir / "generic.ppd")


@pytest.fixture
def kyocera_ppd(temp_dir):
    return write_ppd(temp_dir / "kyocera.ppd", manufacturer="Kyocera")


@pytest.fixture
def yaml_profile(temp_dir):
    path = temp_dir / "profile.yaml"
    with open(path, "w") as f:
        yaml.dump(
            {
                "manufacturer": "Brother",
                "language_level": 2,
                "truetype_rasterizer": False,
                "default_page_size": "A4",
                "page_sizes": {"A4": [595, 842], "Letter": [612, 792]},
            },
            f,
        )
    return path


# === Config / Job Fixtures ===

@pytest.fixture
def full_config_dict():
    """Full configuration dictionary with all options."""
    return {
        "converter": {
            "backend": "ghostscript",
            "pdftops_path": "/opt/poppler/bin/pdftops",
            "ghostscript_path": "/opt/gs/bin/gs",
            "ghostscript_device": "pswrite",
            "native_page_sizes": False,
        },
        "imposition": {
            "serverbin": "/opt/cups/lib",
            "filter": "pstops",
        },
        "profile": "/etc/cups/ppd/lp.ppd",
        "quirks": {"enabled": False},
    }


@pytest.fixture
def full_config_file(temp_dir, full_config_dict):
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(full_config_dict, f)
    return config_path


@pytest.fixture
def job(temp_pdf):
    return JobRequest(
        printer="lp",
        job_id="42",
        user="alice",
        title="report",
        copies=2,
        options="fit-to-page landscape Collate gamma=1.2",
        input_path=temp_pdf,
    )


# === Stand-in stage programs for integration tests ===

def make_script(path: Path, body: str) -> Path:
    """Write an executable Python script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n{body}")
    path.chmod(0o755)
    return path


FAKE_CONVERTER = """
import os, sys
with open(os.environ["FAKE_STAGE_LOG"], "a") as log:
    log.write("converter " + " ".join(sys.argv[1:]) + "\\n")
sys.stdout.write(
    "%!PS-Adobe-3.0\\n"
    "%%Creator: fake converter\\n"
    "%%EndComments\\n"
    "%%BeginSetup\\n"
    "%%EndSetup\\n"
    "%%Page: 1 1\\n"
    "showpage\\n"
    "%%EOF\\n"
)
"""

FAKE_IMPOSITION = """
import os, shutil, sys
with open(os.environ["FAKE_STAGE_LOG"], "a") as log:
    log.write("imposition " + "|".join(sys.argv) + "\\n")
shutil.copyfileobj(sys.stdin.buffer, sys.stdout.buffer)
"""

SLEEPING_STAGE = """
import sys, time
time.sleep(60)
sys.exit(0)
"""

FAILING_STAGE = """
import sys
sys.exit(3)
"""


@pytest.fixture
def stage_log(temp_dir, monkeypatch):
    log = temp_dir / "stages.log"
    log.touch()
    monkeypatch.setenv("FAKE_STAGE_LOG", str(log))
    return log


@pytest.fixture
def fake_stages_config(temp_dir, stage_log):
    """FilterConfig whose stages are the stand-in scripts above."""
    converter = make_script(temp_dir / "bin" / "pdftops", FAKE_CONVERTER)
    serverbin = temp_dir / "serverbin"
    make_script(serverbin / "filter" / "pstops", FAKE_IMPOSITION)
    return FilterConfig(
        converter=ConverterSettings(pdftops_path=converter),
        imposition=ImpositionSettings(serverbin=serverbin),
    )


# === Factories ===

@pytest.fixture
def pdf_factory():
    return write_pdf


@pytest.fixture
def ppd_factory():
    return write_ppd


@pytest.fixture
def script_factory():
    return make_script


@pytest.fixture
def stage_programs():
    """Bodies of the stand-in stage scripts."""
    return {
        "converter": FAKE_CONVERTER,
        "imposition": FAKE_IMPOSITION,
        "sleeping": SLEEPING_STAGE,
        "failing": FAILING_STAGE,
    }


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging() during a test."""
    import logging

    from pdfpsfilter.logging_config import LOGGER_NAME

    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def child_pythonpath(monkeypatch):
    """Make the package importable by child interpreters started by the filter."""
    import os

    import pdfpsfilter

    src = str(Path(pdfpsfilter.__file__).resolve().parent.parent)
    existing = os.environ.get("PYTHONPATH")
    monkeypatch.setenv("PYTHONPATH", f"{src}{os.pathsep}{existing}" if existing else src)
    return src
