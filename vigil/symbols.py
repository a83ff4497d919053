"""
Vigil - Symbol index.

Read-only view over the search roots declared by a runtime's symbol
loaders. Used only while diagnosing a missing symbol, and derived
again on every call since loaders can be registered at any time.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterator, List

from .records import SymbolSearchRoot

logger = logging.getLogger("vigil.symbols")


def unwrap_loader(loader: Any) -> Any:
    """Strip wrapping decorators until the underlying loader is reached."""
    seen = set()
    while hasattr(loader, "unwrap") and id(loader) not in seen:
        seen.add(id(loader))
        loader = loader.unwrap()
    return loader


class SymbolIndex:
    """
    Search-root resolution and source file discovery.

    Args:
        runtime: Object exposing ``symbol_loaders()`` and ``conventions``
    """

    def __init__(self, runtime: Any):
        self.runtime = runtime

    def resolve_search_roots(self) -> List[SymbolSearchRoot]:
        """
        Read prefix mappings from every registered loader.

        Loaders without ``prefix_mappings()`` are skipped.
        """
        roots: List[SymbolSearchRoot] = []
        for loader in self.runtime.symbol_loaders() or ():
            loader = unwrap_loader(loader)
            mappings = getattr(loader, "prefix_mappings", None)
            if not callable(mappings):
                continue
            for prefix, directories in mappings().items():
                roots.append(SymbolSearchRoot(prefix, tuple(directories)))
        return roots

    def find_files(self, name: str) -> Iterator[tuple[SymbolSearchRoot, str, str]]:
        """
        Yield ``(root, base_directory, file_path)`` for every source file
        named exactly ``name`` + source suffix.

        Directories that do not resolve to a real path are skipped.
        Traversal is sorted so results are stable.
        """
        filename = name + self.runtime.conventions.source_suffix
        for root in self.resolve_search_roots():
            for directory in root.directories:
                base = os.path.realpath(directory)
                if not os.path.isdir(base):
                    logger.debug(f"Skipping unresolvable search path {directory!r}")
                    continue
                for path in self._walk(base, filename):
                    yield root, base, path

    def _walk(self, base: str, filename: str) -> Iterator[str]:
        # os.walk swallows unreadable directories when onerror is None
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames.sort()
            for entry in sorted(filenames):
                if entry == filename:
                    yield os.path.join(dirpath, entry)
