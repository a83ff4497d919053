"""
Tests for shutdown-time fatal error recovery.
"""

from vigil.channels import EMERGENCY
from vigil.fatal import FatalRecovery, ReservedMargin
from vigil.faults import ClassNotFoundFault, FatalErrorFault, UndefinedFunctionFault
from vigil.levels import ErrorLevel
from vigil.records import DispatchConfig
from vigil.testing import RecordingHandler


def make_recovery(runtime, channels, level=ErrorLevel.ALL, display_errors=True, margin=None):
    config = DispatchConfig(level=level, display_errors=display_errors)
    return FatalRecovery(config, runtime, channels=channels, margin=margin)


# ============================================================================
# ReservedMargin
# ============================================================================

class TestReservedMargin:

    def test_held_until_released(self):
        margin = ReservedMargin(1024)
        assert margin.held
        assert margin.release() is True
        assert not margin.held
        assert margin.release() is False

    def test_zero_size_holds_nothing(self):
        assert not ReservedMargin(0).held


# ============================================================================
# No-op paths
# ============================================================================

class TestNoFatal:

    def test_clean_exit(self, runtime, channels, emergencies, final_handler):
        margin = ReservedMargin(64)
        make_recovery(runtime, channels, margin=margin).handle_fatal()
        assert emergencies.count() == 0
        assert final_handler.handled == []
        assert margin.held

    def test_non_fatal_last_error(self, runtime, channels, emergencies, final_handler):
        runtime.fail(ErrorLevel.WARNING, "Division by zero")
        make_recovery(runtime, channels).handle_fatal()
        assert emergencies.count() == 0
        assert final_handler.handled == []

    def test_handling_disabled(self, runtime, channels, emergencies, final_handler):
        runtime.fail(ErrorLevel.ERROR, "boom")
        make_recovery(runtime, channels, level=0).handle_fatal()
        assert emergencies.count() == 0
        assert final_handler.handled == []


# ============================================================================
# Fatal paths
# ============================================================================

class TestFatal:

    def test_margin_released(self, runtime, channels):
        margin = ReservedMargin(64)
        runtime.fail(ErrorLevel.ERROR, "Allowed memory size exhausted")
        make_recovery(runtime, channels, margin=margin).handle_fatal()
        assert not margin.held

    def test_emergency_entry(self, runtime, channels, emergencies):
        runtime.fail(ErrorLevel.COMPILE_ERROR, "Cannot redeclare foo()", "a.php", 9)
        make_recovery(runtime, channels).handle_fatal()

        entry = emergencies.last
        assert entry.level == "emergency"
        assert entry.message == "Cannot redeclare foo()"
        assert entry.metadata == {"code": 64, "file": "a.php", "line": 9}

    def test_display_off_logs_only(self, runtime, channels, emergencies, final_handler):
        runtime.fail(ErrorLevel.ERROR, "Call to undefined function foo()")
        make_recovery(runtime, channels, display_errors=False).handle_fatal()
        assert emergencies.count("emergency") == 1
        assert final_handler.handled == []

    def test_plain_fault_forwarded(self, runtime, channels, final_handler):
        runtime.fail(ErrorLevel.PARSE, "syntax error, unexpected '}'", "a.php", 4)
        make_recovery(runtime, channels).handle_fatal()

        fault = final_handler.last
        assert type(fault) is FatalErrorFault
        assert str(fault) == "Parse: syntax error, unexpected '}' in a.php line 4"

    def test_undefined_function_enhanced(self, runtime, channels, final_handler):
        runtime.define_function("App\\Other\\foo")
        runtime.fail(ErrorLevel.ERROR, "Call to undefined function App\\Util\\foo()", "a.php", 4)
        make_recovery(runtime, channels).handle_fatal()

        fault = final_handler.last
        assert isinstance(fault, UndefinedFunctionFault)
        assert fault.candidates == ("\\App\\Other\\foo",)
        assert isinstance(fault.previous, FatalErrorFault)

    def test_class_not_found_enhanced(self, runtime, channels, final_handler, src_tree):
        runtime.fail(ErrorLevel.ERROR, 'Class "App\\Models\\User" not found', "a.php", 4)
        make_recovery(runtime, channels).handle_fatal()
        assert isinstance(final_handler.last, ClassNotFoundFault)
        assert final_handler.last.candidates == ("App_Models_User",)

    def test_foreign_handler_ignored(self, runtime, channels, emergencies):
        calls = []
        runtime.set_exception_handler(lambda exc: calls.append(exc))
        runtime.fail(ErrorLevel.ERROR, "boom")
        make_recovery(runtime, channels).handle_fatal()
        assert calls == []
        assert emergencies.count() == 1

    def test_latest_fatal_reported(self, runtime, channels, emergencies, final_handler):
        recovery = make_recovery(runtime, channels)
        runtime.fail(ErrorLevel.ERROR, "first", "a.php", 1)
        recovery.handle_fatal()
        emergencies.reset()
        final_handler.reset()

        runtime.fail(ErrorLevel.CORE_ERROR, "second", "b.php", 2)
        recovery.handle_fatal()
        assert [e.metadata for e in emergencies.entries] == [{"code": 16, "file": "b.php", "line": 2}]
        assert [str(f) for f in final_handler.handled] == ["Core Error: second in b.php line 2"]

    def test_no_emergency_channel(self, runtime, channels, final_handler):
        runtime.fail(ErrorLevel.ERROR, "boom")
        make_recovery(runtime, channels).handle_fatal()
        assert len(final_handler.handled) == 1
        assert EMERGENCY not in channels


# ============================================================================
# Containment
# ============================================================================

class TestContainment:

    def test_failing_handler_does_not_raise(self, runtime, channels):
        class Exploding(RecordingHandler):
            def handle(self, exception):
                raise RuntimeError("handler broke")

        runtime.set_exception_handler(Exploding())
        runtime.fail(ErrorLevel.ERROR, "boom")
        make_recovery(runtime, channels).handle_fatal()

    def test_failing_suggester_falls_back(self, runtime, channels, final_handler):
        class BrokenSuggester:
            def enhance(self, record, fault):
                raise RuntimeError("scan failed")

        runtime.fail(ErrorLevel.ERROR, "Call to undefined function foo()")
        recovery = FatalRecovery(
            DispatchConfig(level=ErrorLevel.ALL),
            runtime,
            channels=channels,
            suggester=BrokenSuggester(),
        )
        recovery()
        assert type(final_handler.last) is FatalErrorFault

    def test_failing_emergency_channel(self, runtime, channels, final_handler):
        class Broken:
            def warning(self, message, metadata):
                pass

            def emergency(self, message, metadata):
                raise OSError("log gone")

        channels.set_channel(EMERGENCY, Broken())
        runtime.fail(ErrorLevel.ERROR, "boom")
        make_recovery(runtime, channels).handle_fatal()
        assert len(final_handler.handled) == 1
