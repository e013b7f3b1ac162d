"""Workbook-scoped style interning."""

from __future__ import annotations

from spreadsheet_document_engine.styles.facets import _Facet
from spreadsheet_document_engine.styles.style import Style
from spreadsheet_document_engine.utils.exceptions import ErrorCode, StyleError
from spreadsheet_document_engine.utils.logging import get_logger

logger = get_logger(__name__)


class StyleRepository:
    """Registry holding one canonical instance per distinct style value.

    Every workbook owns its own repository. The default style is always
    registered first, so it has index 0. Indices are stable for the
    lifetime of the repository (until ``flush``).
    """

    def __init__(self) -> None:
        self._canonical: dict[Style, Style] = {}
        self._order: list[Style] = []
        self._indices: dict[Style, int] = {}
        self.intern(Style())

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, style: object) -> bool:
        return style in self._canonical

    @property
    def styles(self) -> list[Style]:
        """Canonical styles in registration order."""
        return list(self._order)

    def intern(self, style: Style) -> Style:
        """Return the canonical instance equal to ``style``, registering it if new.

        Raises:
            StyleError: If style is None.
        """
        if style is None:
            raise StyleError("The style to register cannot be null")
        canonical = self._canonical.get(style)
        if canonical is not None:
            return canonical
        self._canonical[style] = style
        self._indices[style] = len(self._order)
        self._order.append(style)
        logger.debug("Registered style", index=self._indices[style])
        return style

    def add_style(self, style: Style) -> Style:
        """Alias of ``intern``."""
        return self.intern(style)

    def append_style(self, base: Style | None, overlay: Style | _Facet | None) -> Style:
        """Merge ``overlay`` into ``base`` facet by facet and intern the result."""
        merged = (base or Style()).append(overlay)
        return self.intern(merged)

    def index_of(self, style: Style) -> int:
        """Stable index of a registered style.

        Raises:
            StyleError: If no equal style is registered.
        """
        try:
            return self._indices[style]
        except KeyError:
            raise StyleError(
                "The style is not registered in this repository",
                ErrorCode.INVALID_STYLE,
            ) from None

    def style_at(self, index: int) -> Style:
        """Canonical style registered at ``index``.

        Raises:
            StyleError: If the index is not assigned.
        """
        if not 0 <= index < len(self._order):
            raise StyleError(
                f"No style is registered at index {index}", ErrorCode.INVALID_STYLE
            )
        return self._order[index]

    def flush(self) -> None:
        """Drop all styles except the default one."""
        self._canonical.clear()
        self._order.clear()
        self._indices.clear()
        self.intern(Style())
