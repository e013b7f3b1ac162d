"""Style: the bundle of all formatting facets of a cell."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from spreadsheet_document_engine.styles.facets import (
    Border,
    CellXf,
    Fill,
    Font,
    NumberFormat,
    _Facet,
)
from spreadsheet_document_engine.utils.exceptions import StyleError

_FACET_FIELDS = {
    Border: "border",
    CellXf: "cell_xf",
    Fill: "fill",
    Font: "font",
    NumberFormat: "number_format",
}


class Style(BaseModel):
    """Immutable style value.

    Two styles are equal when every facet is equal. Styles are hashable,
    which lets a StyleRepository intern them by value.
    """

    model_config = ConfigDict(frozen=True)

    border: Border = Field(default_factory=Border)
    cell_xf: CellXf = Field(default_factory=CellXf)
    fill: Fill = Field(default_factory=Fill)
    font: Font = Field(default_factory=Font)
    number_format: NumberFormat = Field(default_factory=NumberFormat)

    @property
    def is_default(self) -> bool:
        return self == Style()

    def append(self, overlay: Style | _Facet | None) -> Style:
        """Merge another style or a single facet into a copy of this style.

        Every field of the overlay that differs from its default replaces
        the corresponding field of this style. Untouched fields are kept.

        Args:
            overlay: Style or facet to merge; None returns this style.

        Returns:
            The merged style (not interned).
        """
        if overlay is None:
            return self
        if isinstance(overlay, Style):
            return self.model_copy(
                update={
                    name: getattr(self, name).append(getattr(overlay, name))
                    for name in _FACET_FIELDS.values()
                }
            )
        field_name = _FACET_FIELDS.get(type(overlay))
        if field_name is None:
            raise StyleError(
                f"The type {type(overlay).__name__} cannot be appended to a style"
            )
        return self.model_copy(
            update={field_name: getattr(self, field_name).append(overlay)}
        )

    def with_facet(self, facet: _Facet) -> Style:
        """Return a copy with one facet replaced entirely."""
        field_name = _FACET_FIELDS.get(type(facet))
        if field_name is None:
            raise StyleError(f"The type {type(facet).__name__} is not a style facet")
        return self.model_copy(update={field_name: facet})
