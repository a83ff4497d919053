"""
Tests for the diagnostic suggester: undefined functions and missing
classes, interfaces and traits.
"""

import pytest

from vigil.faults import ClassNotFoundFault, FatalErrorFault, UndefinedFunctionFault
from vigil.levels import ErrorLevel
from vigil.loaders import DebugLoader, PrefixLoader
from vigil.records import ErrorRecord
from vigil.runtime import InMemoryRuntime
from vigil.suggest import DiagnosticSuggester

from conftest import write_source


# ============================================================================
# Undefined function
# ============================================================================

class TestUndefinedFunction:

    def test_namespaced_with_candidate(self, runtime):
        runtime.define_function("App\\Other\\foo")
        result = DiagnosticSuggester(runtime).suggest_undefined_function(
            "Call to undefined function App\\Util\\foo()", "x.php", 5
        )
        assert result.kind == "function"
        assert result.candidates == ("\\App\\Other\\foo",)
        assert result.enhanced_message == (
            'Attempted to call function "foo" from namespace "App\\Util" in x.php line 5.'
            ' Did you mean to call: "\\App\\Other\\foo"?'
        )

    def test_global_without_candidates(self, runtime):
        result = DiagnosticSuggester(runtime).suggest_undefined_function(
            "Call to undefined function foo()", "x.php", 5
        )
        assert result.candidates == ()
        assert result.enhanced_message == (
            'Attempted to call function "foo" from the global namespace in x.php line 5.'
        )

    def test_internal_and_user_candidates(self, runtime):
        runtime.define_function("foo", group="internal")
        runtime.define_function("Lib\\foo")
        runtime.define_function("Lib\\foobar")
        result = DiagnosticSuggester(runtime).suggest_undefined_function(
            "Call to undefined function App\\foo()"
        )
        assert result.candidates == ("\\foo", "\\Lib\\foo")
        assert result.enhanced_message.endswith(' Did you mean to call: "\\foo", "\\Lib\\foo"?')

    @pytest.mark.parametrize("message", [
        "Call to undefined function foo",
        "Call to undefined method Foo::bar()",
        "()",
        "",
        "Function \"foo\" not found",
    ])
    def test_declines(self, runtime, message):
        assert DiagnosticSuggester(runtime).suggest_undefined_function(message) is None


# ============================================================================
# Missing symbol
# ============================================================================

class TestMissingSymbol:

    def test_legacy_naming_candidate(self, runtime, src_tree):
        result = DiagnosticSuggester(runtime).suggest_missing_symbol(
            'Class "App\\Models\\User" not found', "index.php", 3
        )
        assert result.kind == "class"
        assert result.candidates == ("App_Models_User",)
        assert result.enhanced_message == (
            'Attempted to load class "User" from namespace "App\\Models" in index.php line 3.'
            ' Do you need to "use" it from another namespace?'
            " Perhaps you need to add a use statement for one of the following class: App_Models_User."
        )

    def test_namespaced_candidate(self, runtime, src_tree):
        result = DiagnosticSuggester(runtime).suggest_missing_symbol('Class "Request" not found', "a.php", 1)
        assert result.candidates == ("App\\Http\\Request",)
        assert result.enhanced_message.startswith(
            'Attempted to load class "Request" from the global namespace in a.php line 1.'
            " Did you forget a use statement for this class?"
        )

    @pytest.mark.parametrize("kind", ["interface", "trait"])
    def test_kinds(self, runtime, kind):
        result = DiagnosticSuggester(runtime).suggest_missing_symbol(f'{kind.capitalize()} "Countable" not found')
        assert result.kind == kind
        assert result.candidates == ()
        assert f"Did you forget a use statement for this {kind}?" in result.enhanced_message

    def test_no_candidates_without_loaders(self, runtime):
        result = DiagnosticSuggester(runtime).suggest_missing_symbol('Class "App\\Models\\User" not found')
        assert result.candidates == ()
        assert "Perhaps" not in result.enhanced_message

    @pytest.mark.parametrize("message", [
        'Function "x" not found',
        'Class "x" was not found',
        '" not found',
        "",
    ])
    def test_declines(self, runtime, message):
        assert DiagnosticSuggester(runtime).suggest_missing_symbol(message) is None

    def test_idempotent(self, runtime, src_tree):
        suggester = DiagnosticSuggester(runtime)
        first = suggester.suggest_missing_symbol('Class "App\\Models\\User" not found')
        second = suggester.suggest_missing_symbol('Class "App\\Models\\User" not found')
        assert first == second

    def test_each_file_loaded_once(self, tmp_path):
        calls = []

        def loader(path):
            calls.append(path)
            return [("class", "App_Models_User")]

        runtime = InMemoryRuntime(source_loader=loader)
        write_source(tmp_path, "Models/User.php", "")
        runtime.register_loader(PrefixLoader({"App\\": [str(tmp_path)]}))

        suggester = DiagnosticSuggester(runtime)
        suggester.symbol_candidates("User")
        suggester.symbol_candidates("User")
        assert len(calls) == 1

    def test_failing_file_is_skipped(self, tmp_path):
        def loader(path):
            raise SyntaxError("unexpected '}'")

        runtime = InMemoryRuntime(source_loader=loader)
        write_source(tmp_path, "User.php", "")
        runtime.register_loader(PrefixLoader({"App\\": [str(tmp_path)]}))

        result = DiagnosticSuggester(runtime).suggest_missing_symbol('Class "User" not found')
        assert result.candidates == ()

    def test_file_without_symbol_yields_nothing(self, runtime, tmp_path):
        write_source(tmp_path, "User.php", "<?php\nfunction helper() {}\n")
        runtime.register_loader(PrefixLoader({"App\\": [str(tmp_path)]}))
        assert DiagnosticSuggester(runtime).symbol_candidates("User") == []

    def test_candidates_deduplicated(self, runtime, src_tree):
        runtime.register_loader(PrefixLoader({"App\\": [str(src_tree)]}))
        assert DiagnosticSuggester(runtime).symbol_candidates("User") == ["App_Models_User"]


# ============================================================================
# Loader resolution
# ============================================================================

class TestLoaders:

    def test_debug_loader_is_unwrapped(self, runtime, tmp_path):
        write_source(tmp_path, "Models/User.php", "<?php\nclass App_Models_User {}\n")
        runtime.register_loader(DebugLoader(PrefixLoader({"App\\": [str(tmp_path)]})))
        assert DiagnosticSuggester(runtime).symbol_candidates("User") == ["App_Models_User"]

    def test_missing_directory_is_skipped(self, runtime, tmp_path):
        write_source(tmp_path, "Models/User.php", "<?php\nclass App_Models_User {}\n")
        runtime.register_loader(PrefixLoader({"App\\": [str(tmp_path / "missing"), str(tmp_path)]}))
        assert DiagnosticSuggester(runtime).symbol_candidates("User") == ["App_Models_User"]

    def test_loader_without_mappings_is_skipped(self, runtime, src_tree):
        runtime.register_loader(object())
        assert DiagnosticSuggester(runtime).symbol_candidates("User") == ["App_Models_User"]


# ============================================================================
# Enhancement
# ============================================================================

class TestEnhance:

    def make_fault(self, record):
        return FatalErrorFault.from_record(record)

    def test_function_heuristic_first(self, runtime):
        runtime.define_function("Lib\\foo")
        record = ErrorRecord(ErrorLevel.ERROR, "Call to undefined function foo()", "a.php", 2)
        fault = self.make_fault(record)

        enhanced = DiagnosticSuggester(runtime).enhance(record, fault)
        assert isinstance(enhanced, UndefinedFunctionFault)
        assert enhanced.previous is fault
        assert enhanced.candidates == ("\\Lib\\foo",)

    def test_class_not_found(self, runtime, src_tree):
        record = ErrorRecord(ErrorLevel.ERROR, 'Class "App\\Models\\User" not found', "a.php", 2)
        enhanced = DiagnosticSuggester(runtime).enhance(record, self.make_fault(record))
        assert isinstance(enhanced, ClassNotFoundFault)
        assert enhanced.kind == "class"
        assert enhanced.candidates == ("App_Models_User",)

    def test_unrecognized(self, runtime):
        record = ErrorRecord(ErrorLevel.ERROR, "Allowed memory size exhausted")
        assert DiagnosticSuggester(runtime).enhance(record, self.make_fault(record)) is None

    def test_suggest_precedence(self, runtime):
        result = DiagnosticSuggester(runtime).suggest("Call to undefined function foo()")
        assert result.kind == "function"
