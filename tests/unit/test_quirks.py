"""Tests for pdfpsfilter.quirks module."""

import pytest

from pdfpsfilter.quirks import (
    BROTHER_HALFTONE,
    KYOCERA_BIND,
    QUIRK_FIXES,
    get_quirks,
    manufacturer_matches,
    resolve_quirks,
)


class TestManufacturerMatches:

    @pytest.mark.parametrize("manufacturer", ["Kyocera", "KYOCERA", "kyocera mita", "Kyocera Document Solutions"])
    def test_prefix_case_insensitive(self, manufacturer):
        assert manufacturer_matches(manufacturer, "Kyocera")

    @pytest.mark.parametrize("manufacturer", ["", None, "HP", "Kyo"])
    def test_no_match(self, manufacturer):
        assert not manufacturer_matches(manufacturer, "Kyocera")


class TestResolveQuirks:

    def test_kyocera(self):
        assert resolve_quirks("KYOCERA") == (KYOCERA_BIND,)

    def test_brother(self):
        assert resolve_quirks("Brother") == (BROTHER_HALFTONE,)

    def test_other_vendor(self):
        assert resolve_quirks("Hewlett-Packard") == ()

    def test_unknown_manufacturer(self):
        assert resolve_quirks("") == ()


class TestQuirkFix:

    def test_snippet_lines_end_with_newline(self):
        for fix in QUIRK_FIXES:
            assert fix.snippet.endswith(b"\n")
            assert fix.snippet.count(b"\n") == len(fix.lines)

    def test_kyocera_snippet_redefines_bind(self):
        assert b"/bind {} bind def\n" in KYOCERA_BIND.snippet

    def test_brother_snippet_redefines_halftone(self):
        assert b"/currenthalftone {//null} bind def\n" in BROTHER_HALFTONE.snippet
        assert b"/sethalftone" in BROTHER_HALFTONE.snippet

    def test_unique_ids(self):
        assert len({fix.id for fix in QUIRK_FIXES}) == len(QUIRK_FIXES)


class TestGetQuirks:

    def test_in_given_order(self):
        assert get_quirks(["brother-halftone", "kyocera-bind"]) == (BROTHER_HALFTONE, KYOCERA_BIND)

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            get_quirks(["no-such-fix"])
