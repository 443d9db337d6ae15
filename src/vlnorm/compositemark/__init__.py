"""Composite marks: registry and dispatch of the expanders."""

from collections.abc import Callable
from typing import Any

from vlnorm.core.config import BOXPLOT, ERRORBAND, ERRORBAR
from vlnorm.core.errors import UnregisteredMarkError
from vlnorm.core.mark import mark_type
from vlnorm.infra.diagnostics import Diagnostics
from vlnorm.infra.logging import get_logger

from .boxplot import BOXPLOT_PARTS, normalize_boxplot
from .errorband import ERRORBAND_PARTS, normalize_errorband
from .errorbar import ERRORBAR_PARTS, normalize_errorbar

logger = get_logger(__name__)

CompositeMarkNormalizer = Callable[[dict[str, Any], dict[str, Any], Diagnostics], dict[str, Any]]


class CompositeMarkEntry:
    """Registered expander of one composite mark."""

    def __init__(self, mark: str, normalizer: CompositeMarkNormalizer, parts: tuple[str, ...]) -> None:
        """Initialize registry entry.

        Args:
            mark: Composite mark type
            normalizer: Function expanding a unit spec into a layer spec
            parts: Part names the expander may emit
        """
        self.mark = mark
        self.normalizer = normalizer
        self.parts = parts


class CompositeMarkRegistry:
    """Maps composite mark types to their expanders."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._entries: dict[str, CompositeMarkEntry] = {}

    def register(self, mark: str, normalizer: CompositeMarkNormalizer, parts: tuple[str, ...] | list[str]) -> None:
        """Register a composite mark, replacing any previous registration.

        Args:
            mark: Composite mark type
            normalizer: Function expanding a unit spec into a layer spec
            parts: Part names the expander may emit
        """
        self._entries[mark] = CompositeMarkEntry(mark, normalizer, tuple(parts))
        logger.debug("Registered composite mark", mark=mark, parts=list(parts))

    def unregister(self, mark: str) -> None:
        """Remove a composite mark; unknown marks are ignored."""
        if self._entries.pop(mark, None) is not None:
            logger.debug("Unregistered composite mark", mark=mark)

    def is_registered(self, mark: Any) -> bool:  # noqa: ANN401
        """Whether a mark type or mark definition names a registered composite mark."""
        return mark_type(mark) in self._entries

    def registered_marks(self) -> list[str]:
        """Registered composite mark types in registration order."""
        return list(self._entries)

    def parts_of(self, mark: str) -> list[str]:
        """Return the part names of a composite mark.

        Args:
            mark: Composite mark type

        Returns:
            Part names in emission order

        Raises:
            UnregisteredMarkError: If the mark is not registered
        """
        entry = self._entries.get(mark)
        if entry is None:
            msg = f"Unregistered composite mark {mark}"
            raise UnregisteredMarkError(msg, mark, self.registered_marks())
        return list(entry.parts)

    def dispatch(self, spec: dict[str, Any], config: dict[str, Any], diagnostics: Diagnostics) -> dict[str, Any]:
        """Expand a unit spec with a composite mark.

        Args:
            spec: Unit spec; its mark may be a bare type or a mark definition
            config: Effective config
            diagnostics: Warning sink

        Returns:
            Layer spec produced by the mark's expander

        Raises:
            UnregisteredMarkError: If the mark is not registered
        """
        mark = mark_type(spec.get("mark"))
        entry = self._entries.get(mark)
        if entry is None:
            msg = f"Invalid mark type {mark}"
            raise UnregisteredMarkError(msg, mark, self.registered_marks())
        logger.debug("Dispatching composite mark", mark=mark)
        return entry.normalizer(spec, config, diagnostics)


def _create_default_registry() -> CompositeMarkRegistry:
    registry = CompositeMarkRegistry()
    registry.register(BOXPLOT, normalize_boxplot, BOXPLOT_PARTS)
    registry.register(ERRORBAR, normalize_errorbar, ERRORBAR_PARTS)
    registry.register(ERRORBAND, normalize_errorband, ERRORBAND_PARTS)
    return registry


default_registry = _create_default_registry()


def register(mark: str, normalizer: CompositeMarkNormalizer, parts: tuple[str, ...] | list[str]) -> None:
    """Register a composite mark on the default registry."""
    default_registry.register(mark, normalizer, parts)


def unregister(mark: str) -> None:
    """Remove a composite mark from the default registry."""
    default_registry.unregister(mark)


def is_composite_mark(mark: Any) -> bool:  # noqa: ANN401
    """Whether the default registry knows the mark."""
    return default_registry.is_registered(mark)


def parts_of(mark: str) -> list[str]:
    """Part names of a composite mark of the default registry."""
    return default_registry.parts_of(mark)


def normalize(spec: dict[str, Any], config: dict[str, Any], diagnostics: Diagnostics) -> dict[str, Any]:
    """Expand a composite mark spec through the default registry."""
    return default_registry.dispatch(spec, config, diagnostics)


__all__ = [
    "BOXPLOT",
    "ERRORBAND",
    "ERRORBAR",
    "CompositeMarkNormalizer",
    "CompositeMarkRegistry",
    "default_registry",
    "is_composite_mark",
    "normalize",
    "parts_of",
    "register",
    "unregister",
]
