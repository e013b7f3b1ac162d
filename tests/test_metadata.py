"""Tests for workbook document properties."""

import pytest

from spreadsheet_document_engine import Metadata
from spreadsheet_document_engine.metadata import APPLICATION_VERSION
from spreadsheet_document_engine.utils.exceptions import FormatError, RangeError


class TestMetadata:
    """Tests for the Metadata model."""

    def test_defaults(self) -> None:
        """Application fields are prefilled, the rest is empty."""
        metadata = Metadata()
        assert metadata.application_version == APPLICATION_VERSION
        assert metadata.title is None

    @pytest.mark.parametrize("version", ["1.0", "12345.99999", "0.1"])
    def test_valid_versions(self, version: str) -> None:
        """Two parts of one to five digits are accepted."""
        metadata = Metadata()
        metadata.application_version = version
        assert metadata.application_version == version

    @pytest.mark.parametrize("version", ["1", "1.2.3", "a.b", "1.x"])
    def test_malformed_version(self, version: str) -> None:
        """Other layouts raise FormatError on assignment."""
        metadata = Metadata()
        with pytest.raises(FormatError):
            metadata.application_version = version

    def test_version_out_of_range(self) -> None:
        """Parts with more than five digits raise RangeError."""
        with pytest.raises(RangeError):
            Metadata(application_version="123456.1")

    def test_empty_version(self) -> None:
        """The version may be cleared."""
        metadata = Metadata()
        metadata.application_version = None
        assert metadata.application_version is None


class TestParseVersion:
    """Tests for folding four-part versions."""

    def test_fold(self) -> None:
        """Minor, build and revision are concatenated without trailing zeros."""
        assert Metadata.parse_version(1, 2, 3, 0) == "1.23"
        assert Metadata.parse_version(2, 0, 0, 0) == "2.0"
        assert Metadata.parse_version(1, 123, 456, 789) == "1.12345"

    def test_negative(self) -> None:
        """Negative parts are rejected."""
        with pytest.raises(FormatError):
            Metadata.parse_version(1, -1, 0, 0)

    def test_major_too_large(self) -> None:
        """The major part is at most 99999."""
        with pytest.raises(RangeError):
            Metadata.parse_version(100000, 0, 0, 0)
