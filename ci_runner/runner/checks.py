"""
Checks
======
The ordered list of Rust verification commands and the reducer that runs them.

The checks form an AND-chain: they run in order, and the first one that
does not pass stops the chain with CheckFailure. Nothing after it runs.
"""
import logging
import sys
from dataclasses import dataclass
from typing import Iterable, Optional, TextIO

from ci_runner.core.errors import CheckFailure
from ci_runner.executor.backend import ContainerHandle, ExecutionResult, create_log_excerpt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Check:
    """
    One verification command.

    Fields
    ------
    name : str
        Short identifier ("fmt", "clippy", "test").
    label : str
        Progress line printed before the command runs.
    failure_message : str
        Prefix of the line printed when the command fails.
    argv : tuple[str, ...]
        Command executed inside the container.
    """
    name: str
    label: str
    failure_message: str
    argv: tuple


FMT = Check(
    name="fmt",
    label="Running cargo fmt...",
    failure_message="Formatting check failed",
    argv=("cargo", "fmt", "--check"),
)

CLIPPY = Check(
    name="clippy",
    label="Running cargo clippy...",
    failure_message="Linting failed",
    argv=("cargo", "clippy", "--all-targets", "--all-features", "--", "-D", "warnings"),
)

TEST = Check(
    name="test",
    label="Running cargo test...",
    failure_message="Tests failed",
    argv=("cargo", "test"),
)

DEFAULT_CHECKS = (FMT, CLIPPY, TEST)


def run_checks(container: ContainerHandle,
               checks: Iterable[Check],
               out: Optional[TextIO] = None) -> list[ExecutionResult]:
    """
    Execute ``checks`` in order against ``container``.

    Returns the results of every check when all pass. Raises CheckFailure
    at the first failing check.
    """
    out = out or sys.stdout
    results: list[ExecutionResult] = []
    for check in checks:
        print(check.label, file=out, flush=True)
        result = container.execute(check.argv)

        if not result.ok:
            logger.error(
                "Check '%s' failed | exit=%d | time=%.2fs\n%s",
                check.name, result.exit_code, result.execution_time_seconds,
                create_log_excerpt(result.stdout),
            )
            raise CheckFailure(check, result)

        logger.info("Check '%s' passed in %.2fs", check.name, result.execution_time_seconds)
        results.append(result)

    return results
