"""
Shared fakes for the container backend.

FakeBackend records every call so tests can assert on ordering, which
commands ran and how many times the connection was released.
"""
import io

import pytest

from ci_runner.core.errors import BackendConnectionError
from ci_runner.executor.backend import ContainerSpec, ExecutionResult


class FakeContainer:

    def __init__(self, backend, spec):
        self.backend = backend
        self.spec = spec

    def execute(self, argv):
        argv = tuple(argv)
        self.backend.executed.append(argv)
        outcome = self.backend.outcomes.get(argv[1] if len(argv) > 1 else argv[0], 0)
        if isinstance(outcome, str):
            return ExecutionResult(argv=argv, exit_code=-1, error=outcome)
        return ExecutionResult(argv=argv, exit_code=outcome, stdout=f"{' '.join(argv)} output\n")


class FakeConnection:

    def __init__(self, backend):
        self.backend = backend

    def build_container(self, spec):
        self.backend.built.append(spec)
        return FakeContainer(self.backend, spec)

    def release(self):
        self.backend.releases += 1


class FakeBackend:
    """
    outcomes maps a cargo subcommand ("fmt", "clippy", "test") to an exit
    code, or to a string meaning an infrastructure error.
    """

    def __init__(self, outcomes=None, connect_error=None):
        self.outcomes = outcomes or {}
        self.connect_error = connect_error
        self.executed = []
        self.built = []
        self.connects = 0
        self.releases = 0
        self.log_sink = None

    def connect(self, log_sink):
        self.connects += 1
        if self.connect_error:
            raise BackendConnectionError(self.connect_error)
        self.log_sink = log_sink
        return FakeConnection(self)


@pytest.fixture
def spec():
    return ContainerSpec(image="rust:latest", source_dir="/work/project", mount_path="/src")


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def make_backend():
    return FakeBackend
