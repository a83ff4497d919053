"""
Vigil - Diagnostic suggestions for missing symbols.

Two heuristics, tried in this order:

1. Undefined function: ``Call to undefined function <name>()``
   Proposes every defined function whose last segment equals <name>.
2. Symbol not found: ``Class|Interface|Trait "<name>" not found``
   Searches the loaders' search roots for ``<name><suffix>`` files,
   loads each once and reports the symbol name it defines.

A miss returns None. No heuristic ever raises; candidate files that
fail to load are skipped.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable, List, Optional

from .faults import ClassNotFoundFault, FatalErrorFault, SymbolFault, UndefinedFunctionFault
from .records import ErrorRecord, SuggestionResult, SymbolSearchRoot
from .symbols import SymbolIndex

logger = logging.getLogger("vigil.suggest")

UNDEFINED_FUNCTION_PREFIX = "Call to undefined function "
UNDEFINED_FUNCTION_SUFFIX = "()"
NOT_FOUND_SUFFIX = '" not found'
SYMBOL_KINDS = ("class", "interface", "trait")


class DiagnosticSuggester:
    """
    Produces enhanced messages and candidate names for fatal
    "not defined" / "not found" errors.

    The suggester owns the set of source files it has loaded while
    resolving candidates; each resolved path is loaded at most once.

    Args:
        runtime: Host runtime (SymbolTable capability)
        index: Symbol index (defaults to one over ``runtime``)
    """

    def __init__(self, runtime: Any, index: Optional[SymbolIndex] = None):
        self.runtime = runtime
        self.index = index or SymbolIndex(runtime)
        self._loaded: set[str] = set()

    @property
    def conventions(self):
        return self.runtime.conventions

    # ========================================================================
    # Entry points
    # ========================================================================

    def suggest(self, message: str, file: str = "unknown", line: int = 0) -> Optional[SuggestionResult]:
        """Run the heuristics in precedence order; first match wins."""
        return (
            self.suggest_undefined_function(message, file, line)
            or self.suggest_missing_symbol(message, file, line)
        )

    def enhance(self, record: ErrorRecord, fault: FatalErrorFault) -> Optional[SymbolFault]:
        """
        Wrap ``fault`` in an enhanced fault if a heuristic matches.

        Returns:
            UndefinedFunctionFault, ClassNotFoundFault, or None
        """
        result = self.suggest_undefined_function(record.message, record.file, record.line)
        if result is not None:
            return UndefinedFunctionFault(result.enhanced_message, fault, candidates=result.candidates)

        result = self.suggest_missing_symbol(record.message, record.file, record.line)
        if result is not None:
            return ClassNotFoundFault(
                result.enhanced_message,
                fault,
                kind=result.kind,
                candidates=result.candidates,
            )
        return None

    # ========================================================================
    # Undefined function
    # ========================================================================

    def suggest_undefined_function(
        self,
        message: str,
        file: str = "unknown",
        line: int = 0,
    ) -> Optional[SuggestionResult]:
        if len(message) < len(UNDEFINED_FUNCTION_SUFFIX):
            return None
        if not message.endswith(UNDEFINED_FUNCTION_SUFFIX):
            return None
        if not message.startswith(UNDEFINED_FUNCTION_PREFIX):
            return None

        qualified = message[len(UNDEFINED_FUNCTION_PREFIX):-len(UNDEFINED_FUNCTION_SUFFIX)]
        namespace, function = self.conventions.split(qualified)

        if namespace:
            text = (
                f'Attempted to call function "{function}" from namespace "{namespace}" '
                f"in {file} line {line}."
            )
        else:
            text = f'Attempted to call function "{function}" from the global namespace in {file} line {line}.'

        candidates = self._function_candidates(function)
        if candidates:
            text += " Did you mean to call: " + ", ".join(f'"{c}"' for c in candidates) + "?"

        return SuggestionResult(text, tuple(candidates), kind="function")

    def _function_candidates(self, function: str) -> List[str]:
        candidates: List[str] = []
        root = self.conventions.root_prefix
        for names in self.runtime.defined_functions().values():
            for defined in names:
                _, basename = self.conventions.split(defined)
                if basename == function:
                    candidates.append(root + defined)
        return candidates

    # ========================================================================
    # Class / interface / trait not found
    # ========================================================================

    def suggest_missing_symbol(
        self,
        message: str,
        file: str = "unknown",
        line: int = 0,
    ) -> Optional[SuggestionResult]:
        if len(message) < len(NOT_FOUND_SUFFIX):
            return None
        if not message.endswith(NOT_FOUND_SUFFIX):
            return None

        for kind in SYMBOL_KINDS:
            prefix = kind.capitalize() + ' "'
            if not message.startswith(prefix):
                continue

            qualified = message[len(prefix):-len(NOT_FOUND_SUFFIX)]
            namespace, name = self.conventions.split(qualified)

            if namespace:
                text = (
                    f'Attempted to load {kind} "{name}" from namespace "{namespace}" '
                    f'in {file} line {line}. Do you need to "use" it from another namespace?'
                )
            else:
                text = (
                    f'Attempted to load {kind} "{name}" from the global namespace '
                    f"in {file} line {line}. Did you forget a use statement for this {kind}?"
                )

            candidates = self.symbol_candidates(name)
            if candidates:
                text += (
                    " Perhaps you need to add a use statement for one of the following class: "
                    + ", ".join(candidates) + "."
                )

            return SuggestionResult(text, tuple(candidates), kind=kind)

        return None

    def symbol_candidates(self, name: str) -> List[str]:
        """
        Guess fully-qualified names for a bare symbol ``name``.

        Returns:
            Defined names found in the loaders' search roots
        """
        candidates: List[str] = []
        for root, base, path in self.index.find_files(name):
            symbol = self._file_to_symbol(root, base, path)
            if symbol and symbol not in candidates:
                candidates.append(symbol)
        return candidates

    def _file_to_symbol(self, root: SymbolSearchRoot, base: str, path: str) -> Optional[str]:
        # The runtime's own loaders may load this file again later, so it
        # must go through require_once rather than a plain load.
        resolved = os.path.realpath(path)
        if resolved not in self._loaded:
            self._loaded.add(resolved)
            try:
                self.runtime.require_once(resolved)
            except Exception as e:
                logger.debug(f"Failed to load candidate {resolved}: {e}")

        for candidate in self._naming_candidates(root.prefix, base, resolved):
            if self.runtime.symbol_exists(candidate):
                return candidate
        return None

    def _naming_candidates(self, prefix: str, base: str, path: str) -> Iterable[str]:
        conventions = self.conventions
        relative = os.path.relpath(path, base)
        if relative.endswith(conventions.source_suffix):
            relative = relative[:-len(conventions.source_suffix)]
        segments = [s for s in relative.split(os.sep) if s]

        prefix_segments = [
            s.strip(conventions.legacy_separator)
            for s in prefix.split(conventions.namespace_separator)
        ]
        prefix_segments = [s for s in prefix_segments if s]

        names: List[str] = []
        for separator in (conventions.namespace_separator, conventions.legacy_separator):
            for parts in (prefix_segments + segments, segments):
                name = separator.join(parts)
                if name not in names:
                    names.append(name)
        return names
