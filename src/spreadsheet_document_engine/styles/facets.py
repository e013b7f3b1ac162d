"""Style facets: border, cell format, fill, font and number format.

Facets are frozen pydantic models, so structurally equal facets compare
equal and hash equally. A Style is the bundle of one of each.
"""

from __future__ import annotations

import string
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from spreadsheet_document_engine.utils.exceptions import (
    ErrorCode,
    FormatError,
    StyleError,
)

DEFAULT_COLOR = "FF000000"
DEFAULT_INDEXED_COLOR = 64
DEFAULT_FONT_NAME = "Calibri"
DEFAULT_FONT_SIZE = 11.0
DEFAULT_FONT_FAMILY = "2"
MIN_FONT_SIZE = 1.0
MAX_FONT_SIZE = 409.0
CUSTOM_FORMAT_START_NUMBER = 164
MIN_TEXT_ROTATION = -90
MAX_TEXT_ROTATION = 90
VERTICAL_TEXT_ROTATION = 255

_HEX_DIGITS = set(string.hexdigits)


def validate_color(hex_code: str | None, use_alpha: bool, allow_empty: bool = False) -> None:
    """Validate an RGB or ARGB hex color.

    Args:
        hex_code: Color such as ``"FF00AC"`` or ``"FFFF00AC"``.
        use_alpha: Whether an alpha channel (8 digits) is expected.
        allow_empty: Whether an empty value is acceptable.

    Raises:
        StyleError: If the value is missing, has the wrong length, or
            contains non-hex characters.
    """
    if not hex_code:
        if allow_empty:
            return
        raise StyleError("The color expression was null or empty", ErrorCode.INVALID_COLOR)
    length = 8 if use_alpha else 6
    if len(hex_code) != length:
        raise StyleError(
            f"The value '{hex_code}' is invalid. A valid value must contain {length} hex characters",
            ErrorCode.INVALID_COLOR,
        )
    if not set(hex_code) <= _HEX_DIGITS:
        raise StyleError(
            f"The expression '{hex_code}' is not a valid hex value", ErrorCode.INVALID_COLOR
        )


class _Facet(BaseModel):
    model_config = ConfigDict(frozen=True)

    def overlay_fields(self) -> dict[str, Any]:
        """Fields whose value differs from a default instance of this facet."""
        default = type(self)()
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if getattr(self, name) != getattr(default, name)
        }

    def append(self, overlay: _Facet) -> _Facet:
        """Return a copy taking every non-default field of ``overlay``."""
        if not isinstance(overlay, type(self)):
            raise StyleError(
                f"Cannot append {type(overlay).__name__} to {type(self).__name__}",
                facet=type(self).__name__,
            )
        updates = overlay.overlay_fields()
        return self.model_copy(update=updates) if updates else self


# =============================================================================
# Border
# =============================================================================


class BorderStyle(str, Enum):
    NONE = "none"
    HAIR = "hair"
    DOTTED = "dotted"
    DASH_DOT_DOT = "dashDotDot"
    DASH_DOT = "dashDot"
    DASHED = "dashed"
    THIN = "thin"
    MEDIUM_DASH_DOT_DOT = "mediumDashDotDot"
    SLANT_DASH_DOT = "slantDashDot"
    MEDIUM_DASH_DOT = "mediumDashDot"
    MEDIUM_DASHED = "mediumDashed"
    MEDIUM = "medium"
    THICK = "thick"
    DOUBLE = "double"


class Border(_Facet):
    """Cell border definition."""

    left_style: BorderStyle = BorderStyle.NONE
    right_style: BorderStyle = BorderStyle.NONE
    top_style: BorderStyle = BorderStyle.NONE
    bottom_style: BorderStyle = BorderStyle.NONE
    diagonal_style: BorderStyle = BorderStyle.NONE
    left_color: str = ""
    right_color: str = ""
    top_color: str = ""
    bottom_color: str = ""
    diagonal_color: str = ""
    diagonal_up: bool = False
    diagonal_down: bool = False

    @property
    def is_empty(self) -> bool:
        return self == Border()


# =============================================================================
# Cell format (alignment and protection)
# =============================================================================


class HorizontalAlignValue(str, Enum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    FILL = "fill"
    JUSTIFY = "justify"
    GENERAL = "general"
    CENTER_CONTINUOUS = "centerContinuous"
    DISTRIBUTED = "distributed"


class VerticalAlignValue(str, Enum):
    NONE = "none"
    BOTTOM = "bottom"
    TOP = "top"
    CENTER = "center"
    JUSTIFY = "justify"
    DISTRIBUTED = "distributed"


class TextBreakValue(str, Enum):
    NONE = "none"
    WRAP_TEXT = "wrapText"
    SHRINK_TO_FIT = "shrinkToFit"


class TextDirectionValue(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class CellXf(_Facet):
    """Cell-level alignment and protection flags."""

    horizontal_align: HorizontalAlignValue = HorizontalAlignValue.NONE
    vertical_align: VerticalAlignValue = VerticalAlignValue.NONE
    alignment: TextBreakValue = TextBreakValue.NONE
    text_direction: TextDirectionValue = TextDirectionValue.HORIZONTAL
    text_rotation: int = 0
    locked: bool = False
    hidden: bool = False
    force_apply_alignment: bool = False
    indent: int = 0

    @field_validator("text_rotation")
    @classmethod
    def validate_text_rotation(cls, v: int) -> int:
        if not MIN_TEXT_ROTATION <= v <= MAX_TEXT_ROTATION:
            raise FormatError(
                f"The rotation value ({v}) is out of range. Range is from "
                f"{MIN_TEXT_ROTATION} to {MAX_TEXT_ROTATION}",
                value=v,
            )
        return v

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if v < 0:
            raise StyleError(f"The indentation value '{v}' is not valid. It must be >= 0", facet="CellXf")
        return v

    @property
    def internal_rotation(self) -> int:
        """Rotation as stored in the file (0..180, or 255 for vertical text)."""
        if self.text_direction == TextDirectionValue.VERTICAL:
            return VERTICAL_TEXT_ROTATION
        if self.text_rotation < 0:
            return 90 - self.text_rotation
        return self.text_rotation


# =============================================================================
# Fill
# =============================================================================


class PatternValue(str, Enum):
    NONE = "none"
    SOLID = "solid"
    DARK_GRAY = "darkGray"
    MEDIUM_GRAY = "mediumGray"
    LIGHT_GRAY = "lightGray"
    GRAY_0625 = "gray0625"
    GRAY_125 = "gray125"


class FillType(str, Enum):
    PATTERN_COLOR = "patternColor"
    FILL_COLOR = "fillColor"


class Fill(_Facet):
    """Cell background fill."""

    background_color: str = DEFAULT_COLOR
    foreground_color: str = DEFAULT_COLOR
    indexed_color: int = DEFAULT_INDEXED_COLOR
    pattern_fill: PatternValue = PatternValue.NONE

    @field_validator("background_color", "foreground_color")
    @classmethod
    def validate_fill_color(cls, v: str) -> str:
        validate_color(v, use_alpha=True)
        return v

    @classmethod
    def from_color(cls, value: str, fill_type: FillType = FillType.FILL_COLOR) -> Fill:
        """Create a solid fill from one ARGB color.

        A fill color sets the foreground, a pattern color the background.
        """
        if fill_type == FillType.FILL_COLOR:
            return cls(foreground_color=value, pattern_fill=PatternValue.SOLID)
        return cls(background_color=value, pattern_fill=PatternValue.SOLID)

    @classmethod
    def from_colors(cls, foreground: str, background: str) -> Fill:
        return cls(
            foreground_color=foreground,
            background_color=background,
            pattern_fill=PatternValue.SOLID,
        )


# =============================================================================
# Font
# =============================================================================


class UnderlineValue(str, Enum):
    NONE = "none"
    SINGLE = "single"
    DOUBLE = "double"
    SINGLE_ACCOUNTING = "singleAccounting"
    DOUBLE_ACCOUNTING = "doubleAccounting"


class SchemeValue(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    NONE = "none"


class FontVerticalAlignValue(str, Enum):
    NONE = "none"
    SUBSCRIPT = "subscript"
    SUPERSCRIPT = "superscript"


class Font(_Facet):
    """Font definition. Sizes outside 1..409 are clamped."""

    bold: bool = False
    italic: bool = False
    strike: bool = False
    underline: UnderlineValue = UnderlineValue.NONE
    size: float = DEFAULT_FONT_SIZE
    name: str = DEFAULT_FONT_NAME
    family: str = DEFAULT_FONT_FAMILY
    color_theme: int = 1
    color_value: str = ""
    scheme: SchemeValue = SchemeValue.MINOR
    vertical_align: FontVerticalAlignValue = FontVerticalAlignValue.NONE
    charset: str = ""

    @field_validator("size")
    @classmethod
    def clamp_size(cls, v: float) -> float:
        return min(max(float(v), MIN_FONT_SIZE), MAX_FONT_SIZE)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise StyleError("The font name was null or empty", facet="Font")
        return v

    @field_validator("color_theme")
    @classmethod
    def validate_color_theme(cls, v: int) -> int:
        if v < 0:
            raise StyleError(
                f"The color theme number {v} is invalid. Should be >=0", facet="Font"
            )
        return v

    @field_validator("color_value")
    @classmethod
    def validate_color_value(cls, v: str) -> str:
        validate_color(v, use_alpha=True, allow_empty=True)
        return v

    @property
    def is_default_font(self) -> bool:
        return self == Font()


# =============================================================================
# Number format
# =============================================================================


class FormatNumber(IntEnum):
    """Built-in number formats of the file format."""

    NONE = 0
    FORMAT_1 = 1
    FORMAT_2 = 2
    FORMAT_3 = 3
    FORMAT_4 = 4
    FORMAT_5 = 5
    FORMAT_6 = 6
    FORMAT_7 = 7
    FORMAT_8 = 8
    FORMAT_9 = 9
    FORMAT_10 = 10
    FORMAT_11 = 11
    FORMAT_12 = 12
    FORMAT_13 = 13
    FORMAT_14 = 14
    FORMAT_15 = 15
    FORMAT_16 = 16
    FORMAT_17 = 17
    FORMAT_18 = 18
    FORMAT_19 = 19
    FORMAT_20 = 20
    FORMAT_21 = 21
    FORMAT_22 = 22
    FORMAT_37 = 37
    FORMAT_38 = 38
    FORMAT_39 = 39
    FORMAT_40 = 40
    FORMAT_45 = 45
    FORMAT_46 = 46
    FORMAT_47 = 47
    FORMAT_48 = 48
    FORMAT_49 = 49
    CUSTOM = 164


class FormatRange(str, Enum):
    """Classification of a raw number format ID."""

    DEFINED_FORMAT = "defined_format"
    CUSTOM_FORMAT = "custom_format"
    UNDEFINED = "undefined"
    INVALID = "invalid"


_DATE_FORMATS = frozenset(
    {
        FormatNumber.FORMAT_14,
        FormatNumber.FORMAT_15,
        FormatNumber.FORMAT_16,
        FormatNumber.FORMAT_17,
        FormatNumber.FORMAT_22,
    }
)
_TIME_FORMATS = frozenset(
    {
        FormatNumber.FORMAT_18,
        FormatNumber.FORMAT_19,
        FormatNumber.FORMAT_20,
        FormatNumber.FORMAT_21,
        FormatNumber.FORMAT_45,
        FormatNumber.FORMAT_46,
        FormatNumber.FORMAT_47,
    }
)


class NumberFormat(_Facet):
    """Number format: a built-in ID or a custom format code."""

    number: FormatNumber = FormatNumber.NONE
    custom_format_id: int = Field(default=CUSTOM_FORMAT_START_NUMBER)
    custom_format_code: str = ""

    @field_validator("custom_format_id")
    @classmethod
    def validate_custom_format_id(cls, v: int) -> int:
        if v < CUSTOM_FORMAT_START_NUMBER:
            raise StyleError(
                f"The number '{v}' is not a valid custom format ID. "
                f"Must be at least {CUSTOM_FORMAT_START_NUMBER}",
                facet="NumberFormat",
            )
        return v

    @property
    def is_custom_format(self) -> bool:
        return self.number == FormatNumber.CUSTOM

    @property
    def is_date_format(self) -> bool:
        return self.number in _DATE_FORMATS

    @property
    def is_time_format(self) -> bool:
        return self.number in _TIME_FORMATS

    @staticmethod
    def try_parse_format_number(number: int) -> tuple[FormatNumber, FormatRange]:
        """Map a raw format ID to a built-in format and its classification."""
        if number >= CUSTOM_FORMAT_START_NUMBER:
            return FormatNumber.CUSTOM, FormatRange.CUSTOM_FORMAT
        try:
            return FormatNumber(number), FormatRange.DEFINED_FORMAT
        except ValueError:
            pass
        if number < 0:
            return FormatNumber.NONE, FormatRange.INVALID
        if 0 < number < CUSTOM_FORMAT_START_NUMBER:
            return FormatNumber.NONE, FormatRange.UNDEFINED
        return FormatNumber.CUSTOM, FormatRange.CUSTOM_FORMAT
