"""
Container Backend Interface
===========================
The minimal capability surface the check runner needs from a
container-execution service:

    Backend.connect(log_sink)            → BackendConnection
    BackendConnection.build_container()  → ContainerHandle
    ContainerHandle.execute(argv)        → ExecutionResult
    BackendConnection.release()

The docker implementation lives in ``docker_backend``; tests substitute an
in-memory fake.

BOUNDARY RULES:
    - execute() ONLY observes execution and reports it.
    - execute() never raises for backend failures; they are returned in
      ExecutionResult.error with exit_code -1.
    - build_container() does no I/O. Failures surface when a command runs.
"""
import os
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, TextIO

from ci_runner.core import config


# ---------------------------------------------------------------------------
# Container description
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ContainerSpec:
    """
    Immutable description every command execution is derived from.

    Fields
    ------
    image : str
        Base toolchain image tag.
    source_dir : str
        Absolute host path mounted read-write into the container.
    mount_path : str
        Where ``source_dir`` appears inside the container.
    workdir : str
        Working directory for every command. Defaults to ``mount_path``.
    cache_volumes : tuple of (str, str)
        Named volume → container path pairs, mounted read-write. A dict is
        accepted and stored as sorted pairs.
    """
    image: str
    source_dir: str
    mount_path: str
    workdir: str = ""
    cache_volumes: tuple = ()

    def __post_init__(self):
        pairs = self.cache_volumes
        if isinstance(pairs, dict):
            pairs = pairs.items()
        object.__setattr__(self, "cache_volumes", tuple(sorted((str(k), str(v)) for k, v in pairs)))
        if not self.workdir:
            object.__setattr__(self, "workdir", self.mount_path)

    @classmethod
    def from_config(cls, source_dir: Optional[str] = None) -> "ContainerSpec":
        """Build the spec from environment configuration."""
        return cls(
            image=config.RUST_IMAGE,
            source_dir=os.path.abspath(source_dir or config.SOURCE_DIR),
            mount_path=config.MOUNT_PATH,
            cache_volumes=config.cache_volumes(),
        )


# ---------------------------------------------------------------------------
# Execution Result
# ---------------------------------------------------------------------------
@dataclass
class ExecutionResult:
    """
    Outcome of running one command inside the container.

    Fields
    ------
    argv : tuple
        The command that was executed.
    exit_code : int
        Process exit code (0 = success). -1 when the backend failed.
    stdout : str
        Combined stdout + stderr of the command.
    error : str | None
        Backend/infrastructure error message (not command failures).
    execution_time_seconds : float
        Wall clock duration of the execution.
    """
    argv: tuple = ()
    exit_code: int = -1
    stdout: str = ""
    error: Optional[str] = None
    execution_time_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and self.error is None


# ---------------------------------------------------------------------------
# Capability interface
# ---------------------------------------------------------------------------
class ContainerHandle(Protocol):
    def execute(self, argv: Sequence[str]) -> ExecutionResult: ...


class BackendConnection(Protocol):
    def build_container(self, spec: ContainerSpec) -> ContainerHandle: ...

    def release(self) -> None: ...


class Backend(Protocol):
    def connect(self, log_sink: TextIO) -> BackendConnection:
        """Open a connection. Raises BackendConnectionError on failure."""
        ...


# ---------------------------------------------------------------------------
# Log Excerpt Helper
# ---------------------------------------------------------------------------
_EXCERPT_HEAD_LINES = 20
_EXCERPT_TAIL_LINES = 40


def create_log_excerpt(full_log: str,
                       head: int = _EXCERPT_HEAD_LINES,
                       tail: int = _EXCERPT_TAIL_LINES) -> str:
    """
    Create an abbreviated log showing the first and last N lines.

    Cargo puts the compiler/test summary at the end, so the tail is longer
    than the head by default. Short logs are returned unchanged.
    """
    lines = full_log.splitlines()
    total = len(lines)

    if total <= head + tail:
        return full_log

    omitted = total - head - tail
    return "\n".join(
        lines[:head]
        + [f"\n... ({omitted} lines omitted) ...\n"]
        + lines[-tail:]
    )
