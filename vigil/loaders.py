"""
Vigil - Symbol loaders.

Loaders map name prefixes to the directories holding the source of
symbols under that prefix. Vigil only reads these mappings while it
diagnoses a missing symbol; it never loads through them.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional


class PrefixLoader:
    """
    Prefix to directory mapping.

    Usage:
        ```python
        loader = PrefixLoader({"App\\\\": ["src"]})
        loader.add_prefix("Vendor\\\\", ["vendor/lib", "vendor/compat"])
        ```
    """

    def __init__(self, prefixes: Optional[Mapping[str, Iterable[str]]] = None):
        self._prefixes: dict[str, list[str]] = {}
        for prefix, paths in (prefixes or {}).items():
            self.add_prefix(prefix, paths)

    def add_prefix(self, prefix: str, paths: Iterable[str] | str) -> None:
        """Append ``paths`` to the directories registered for ``prefix``."""
        if isinstance(paths, str):
            paths = [paths]
        self._prefixes.setdefault(prefix, []).extend(str(p) for p in paths)

    def prefix_mappings(self) -> dict[str, list[str]]:
        return {prefix: list(paths) for prefix, paths in self._prefixes.items()}

    def __repr__(self) -> str:
        return f"PrefixLoader({self._prefixes!r})"


class DebugLoader:
    """Decorator around another loader; exposes it through ``unwrap()``."""

    def __init__(self, loader: Any):
        self._loader = loader

    def unwrap(self) -> Any:
        return self._loader

    def __repr__(self) -> str:
        return f"DebugLoader({self._loader!r})"
