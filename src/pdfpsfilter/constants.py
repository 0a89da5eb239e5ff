"""Centralized constants for pdfpsfilter.

Markers of the PDF header comments left by pdftopdf, the DSC structure
comments of the PostScript output, and the option exclusion lists used when
calling the imposition filter.
"""

# Number of lines after the "%PDF" header searched for pdftopdf comments
MAX_CHECK_COMMENT_LINES = 20

# PDF header and pdftopdf directives
PDF_START_MARKER = b"%PDF"
PDFTOPDF_COPIES = b"%%PDFTOPDFNumCopies"
PDFTOPDF_COLLATE = b"%%PDFTOPDFCollate"
PDFTOPDF_GENERATED = b"% This file was generated by pdftopdf"

# DSC structure comments (prefix match, case-sensitive)
BEGIN_PROLOG = b"%%BeginProlog"
END_PROLOG = b"%%EndProlog"
BEGIN_SETUP = b"%%BeginSetup"
PAGE = b"%%Page:"

# Option values treated as "false" in tri-state boolean options
FALSE_VALUES = ("no", "off", "false")

# Options the imposition filter must not apply again: they were already
# applied by the conversion stage.
EXCLUDE_GENERAL = (
    "fitplot",
    "fit-to-page",
    "landscape",
    "orientation-requested",
)

# Options already applied by an upstream pdftopdf stage
EXCLUDE_PAGE_MANAGEMENT = (
    "brightness",
    "Collate",
    "cupsEvenDuplex",
    "gamma",
    "hue",
    "ipp-attribute-fidelity",
    "MirrorPrint",
    "mirror",
    "multiple-document-handling",
    "natural-scaling",
    "number-up",
    "number-up-layout",
    "OutputOrder",
    "page-border",
    "page-bottom",
    "page-label",
    "page-left",
    "page-ranges",
    "page-right",
    "page-set",
    "page-top",
    "position",
    "saturation",
    "scaling",
)

# Environment variables
ENV_PPD = "PPD"
ENV_SERVERBIN = "CUPS_SERVERBIN"
ENV_CONFIG = "PDFPSFILTER_CONFIG"

# Compiled-in defaults
DEFAULT_SERVERBIN = "/usr/lib/cups"
DEFAULT_IMPOSITION_FILTER = "pstops"
DEFAULT_PDFTOPS_PATH = "/usr/bin/pdftops"
DEFAULT_GHOSTSCRIPT_PATH = "/usr/bin/gs"
DEFAULT_GHOSTSCRIPT_DEVICE = "ps2write"
