"""
Unit Tests: Check definitions and the short-circuiting reducer.
"""
import pytest

from ci_runner.core.errors import CheckFailure
from ci_runner.executor.backend import ExecutionResult
from ci_runner.runner.checks import CLIPPY, FMT, TEST, DEFAULT_CHECKS, run_checks


class ScriptedContainer:
    """Returns queued results in order and records the argv it was given."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def execute(self, argv):
        self.calls.append(tuple(argv))
        return self.results.pop(0)


# ---------------------------------------------------------------------------
# 1. Check definitions
# ---------------------------------------------------------------------------
class TestCheckDefinitions:

    def test_fmt_is_check_only(self):
        assert FMT.argv == ("cargo", "fmt", "--check")

    def test_clippy_denies_warnings_on_all_targets(self):
        assert "--all-targets" in CLIPPY.argv
        assert "--all-features" in CLIPPY.argv
        assert CLIPPY.argv[-3:] == ("--", "-D", "warnings")

    def test_test_command(self):
        assert TEST.argv == ("cargo", "test")

    def test_order(self):
        assert [c.name for c in DEFAULT_CHECKS] == ["fmt", "clippy", "test"]

    def test_check_is_frozen(self):
        with pytest.raises(AttributeError):
            FMT.argv = ("cargo", "fmt")


# ---------------------------------------------------------------------------
# 2. run_checks
# ---------------------------------------------------------------------------
class TestRunChecks:

    def test_all_pass_returns_every_result(self, out):
        container = ScriptedContainer(
            ExecutionResult(exit_code=0), ExecutionResult(exit_code=0), ExecutionResult(exit_code=0),
        )
        results = run_checks(container, DEFAULT_CHECKS, out=out)

        assert len(results) == 3
        assert container.calls == [FMT.argv, CLIPPY.argv, TEST.argv]

    def test_labels_printed_before_each_check(self, out):
        container = ScriptedContainer(ExecutionResult(exit_code=0), ExecutionResult(exit_code=0))
        run_checks(container, [FMT, TEST], out=out)
        assert out.getvalue() == "Running cargo fmt...\nRunning cargo test...\n"

    def test_stops_at_first_failure(self, out):
        failed = ExecutionResult(exit_code=1, stdout="Diff in src/main.rs")
        container = ScriptedContainer(failed)

        with pytest.raises(CheckFailure) as exc_info:
            run_checks(container, DEFAULT_CHECKS, out=out)

        assert exc_info.value.check is FMT
        assert exc_info.value.result is failed
        assert container.calls == [FMT.argv]

    def test_error_with_zero_exit_still_fails(self, out):
        container = ScriptedContainer(ExecutionResult(exit_code=0, error="lost connection"))

        with pytest.raises(CheckFailure) as exc_info:
            run_checks(container, [FMT], out=out)

        assert str(exc_info.value) == "Formatting check failed: lost connection"

    def test_failure_message_uses_exit_code(self, out):
        container = ScriptedContainer(ExecutionResult(exit_code=0), ExecutionResult(exit_code=101))

        with pytest.raises(CheckFailure) as exc_info:
            run_checks(container, [FMT, CLIPPY, TEST], out=out)

        assert exc_info.value.check is CLIPPY
        assert str(exc_info.value) == "Linting failed: exit code 101"

    def test_empty_check_list(self, out):
        assert run_checks(ScriptedContainer(), [], out=out) == []
        assert out.getvalue() == ""
