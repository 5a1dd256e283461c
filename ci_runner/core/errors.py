"""
Errors
======
Failure taxonomy for a check run.

    BackendConnectionError: the container backend is unreachable or misconfigured.
    CheckFailure          : a check exited non-zero or could not be executed.

Both are fatal: the runner prints a single diagnostic and exits with status 1.
"""


class BackendConnectionError(ConnectionError):
    """Raised by ``Backend.connect`` when no usable connection can be made."""


class CheckFailure(Exception):
    """
    Raised by the check reducer at the first check that does not pass.

    Attributes
    ----------
    check : Check
        The check that failed.
    result : ExecutionResult
        What the backend reported for it.
    """

    def __init__(self, check, result):
        self.check = check
        self.result = result
        super().__init__(f"{check.failure_message}: {self.detail}")

    @property
    def detail(self) -> str:
        if self.result.error:
            return self.result.error
        return f"exit code {self.result.exit_code}"
