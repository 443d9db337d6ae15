"""Built-in configuration defaults and deep-merge helpers.

The defaults below are a module-level constant that is never handed out
directly: :func:`default_config` and :func:`init_config` always return a deep
copy, so callers may freely mutate the config they receive.
"""

import copy
from types import MappingProxyType
from typing import Any

from .enums import StackOffset

BOXPLOT = "box-plot"
ERRORBAR = "errorbar"
ERRORBAND = "errorband"

_DEFAULTS: MappingProxyType[str, Any] = MappingProxyType(
    {
        "stack": StackOffset.ZERO.value,
        "overlay": {"line": False, "area": None},
        "mark": {"color": "#4c78a8"},
        "area": {},
        "bar": {},
        "circle": {},
        "line": {"strokeWidth": 2},
        "point": {"size": 30, "filled": False},
        "rect": {},
        "rule": {},
        "square": {},
        "text": {"fontSize": 10},
        "tick": {"thickness": 1},
        BOXPLOT: {
            "size": 14,
            "extent": "min-max",
            "boxWhisker": True,
            "box": True,
            "boxMid": {"color": "white"},
        },
        ERRORBAR: {
            "center": "mean",
            "rule": True,
            "ticks": False,
            "bar": False,
            "line": False,
            "point": False,
        },
        ERRORBAND: {
            "center": "mean",
            "band": True,
            "borders": False,
        },
    }
)


def default_config() -> dict[str, Any]:
    """Return a fresh, mutable copy of the built-in configuration."""
    return copy.deepcopy(dict(_DEFAULTS))


def merge_deep(dest: dict[str, Any], *srcs: dict[str, Any] | None) -> dict[str, Any]:
    """Recursively merge sources into ``dest``.

    Nested dicts merge key by key; every other value, arrays included,
    replaces the destination value. Sources are deep-copied and never mutated.

    Args:
        dest: Mapping that receives the merged values (mutated and returned)
        *srcs: Mappings merged left to right; ``None`` entries are skipped

    Returns:
        The ``dest`` mapping
    """
    for src in srcs:
        if not src:
            continue
        for key, value in src.items():
            current = dest.get(key)
            if isinstance(value, dict) and isinstance(current, dict):
                merge_deep(current, value)
            else:
                dest[key] = copy.deepcopy(value)
    return dest


def init_config(*overrides: dict[str, Any] | None) -> dict[str, Any]:
    """Build an effective config by merging overrides over the built-in defaults.

    Args:
        *overrides: User configs, lowest precedence first

    Returns:
        A newly allocated config dict
    """
    return merge_deep(default_config(), *overrides)


def mark_config(config: dict[str, Any], mark: str) -> dict[str, Any]:
    """Return the config section of a mark, or an empty dict when absent or malformed."""
    section = config.get(mark)
    return section if isinstance(section, dict) else {}
