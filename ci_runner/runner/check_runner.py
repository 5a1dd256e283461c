"""
Check Runner
============
Drives one full run: connect → prepare container → fmt → clippy → test → report.

Lifecycle:
    1. Connect to the backend (diagnostic output goes to ``out``)
    2. Build the container description from the ContainerSpec
    3. Run the checks as an AND-chain, stopping at the first failure
    4. Print exactly one failure line, or the success line
    5. Release the connection (always, exactly once, after a successful connect)

The only externally visible result is the ExitStatus: 0 on full success,
1 on any failure at any stage.
"""
import sys
import time
import logging
from enum import IntEnum
from typing import Optional, Sequence, TextIO

from ci_runner.core.errors import BackendConnectionError, CheckFailure
from ci_runner.executor.backend import Backend, ContainerSpec
from ci_runner.runner.checks import DEFAULT_CHECKS, Check, run_checks

logger = logging.getLogger(__name__)

FAILURE_MARK = "❌"
SUCCESS_MARK = "✅"


class ExitStatus(IntEnum):
    SUCCESS = 0
    FAILURE = 1


class CheckRunner:
    """
    Runs the Rust checks against an injected backend.

    Parameters
    ----------
    backend : Backend
        Container-execution backend (docker in production, a fake in tests).
    spec : ContainerSpec
        Image, mount and working directory for every check.
    checks : sequence of Check
        Ordered checks; defaults to fmt, clippy, test.
    out : TextIO
        Stream for progress, failure and success lines and backend output.
    """

    def __init__(self,
                 backend: Backend,
                 spec: ContainerSpec,
                 checks: Sequence[Check] = DEFAULT_CHECKS,
                 out: Optional[TextIO] = None):
        self.backend = backend
        self.spec = spec
        self.checks = tuple(checks)
        self.out = out or sys.stdout

    def _print(self, message: str) -> None:
        print(message, file=self.out, flush=True)

    def run(self) -> ExitStatus:
        start_time = time.monotonic()

        try:
            connection = self.backend.connect(log_sink=self.out)
        except BackendConnectionError as e:
            logger.error("Backend connection failed: %s", e)
            self._print(f"{FAILURE_MARK} Failed to connect to container backend: {e}")
            return ExitStatus.FAILURE

        try:
            container = connection.build_container(self.spec)
            logger.info(
                "Container prepared | image=%s | source=%s | mount=%s",
                self.spec.image, self.spec.source_dir, self.spec.mount_path,
            )
            run_checks(container, self.checks, out=self.out)
        except CheckFailure as e:
            self._print(f"{FAILURE_MARK} {e}")
            status = ExitStatus.FAILURE
        else:
            self._print(f"{SUCCESS_MARK} All checks passed!")
            status = ExitStatus.SUCCESS
        finally:
            connection.release()

        logger.info(
            "Run complete | status=%s | time=%.2fs",
            status.name, time.monotonic() - start_time,
        )
        return status
