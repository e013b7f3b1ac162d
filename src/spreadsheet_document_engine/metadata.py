"""Document properties of a workbook."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    FormatError,
    RangeError,
)

APPLICATION_NAME = "spreadsheet-document-engine"
APPLICATION_VERSION = "0.1"

_MAX_VERSION_PART = 99999
_MAX_VERSION_DIGITS = 5


class Metadata(BaseModel):
    """Core and extended document properties.

    ``application_version`` is validated on every assignment and must look
    like ``"1.23"``: two dot-separated parts of 1 to 5 digits each.
    """

    model_config = ConfigDict(validate_assignment=True)

    application: str | None = APPLICATION_NAME
    application_version: str | None = APPLICATION_VERSION
    category: str | None = None
    company: str | None = None
    content_status: str | None = None
    creator: str | None = None
    description: str | None = None
    hyperlink_base: str | None = None
    keywords: str | None = None
    manager: str | None = None
    subject: str | None = None
    title: str | None = None

    @field_validator("application_version")
    @classmethod
    def validate_application_version(cls, v: str | None) -> str | None:
        """Check the ``major.minor`` layout of the version string."""
        if not v:
            return v
        parts = v.split(".")
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise FormatError(
                f"The format of the version in the meta data is wrong ({v})",
                value=v,
            )
        if any(not 1 <= len(part) <= _MAX_VERSION_DIGITS for part in parts):
            raise RangeError(
                f"The version in the meta data ({v}) is out of the range "
                f"from '0.0' to '99999.99999'",
                value=v,
            )
        return v

    @staticmethod
    def parse_version(major: int, minor: int, build: int, revision: int) -> str:
        """Fold a four-part version number into the ``major.minor`` layout.

        Minor, build and revision are concatenated, trailing zeros are
        stripped and the result is cut to five digits.

        Raises:
            FormatError: If any part is negative.
            RangeError: If the major part exceeds 99999.
        """
        if min(major, minor, build, revision) < 0:
            raise FormatError(
                "The format of the passed version is wrong. No negative number allowed.",
                ErrorCode.INVALID_VALUE,
            )
        if major > _MAX_VERSION_PART:
            raise RangeError(
                f"The major number may not be bigger than {_MAX_VERSION_PART}. "
                f"The passed value is {major}",
                value=major,
                maximum=_MAX_VERSION_PART,
            )
        right = f"{minor}{build}{revision}".rstrip("0")
        right = right[:_MAX_VERSION_DIGITS] if right else "0"
        return f"{major}.{right}"
