"""
Docker Backend
==============
Runs check commands inside ephemeral Docker containers using the docker SDK.

DOCKER STRATEGY:
    - One container per command (ephemeral), all from the same ContainerSpec.
    - Source directory mounted read-write at spec.mount_path.
    - Optional named volumes (cargo registry cache) mounted read-write.
    - Command output streamed to the log sink while it runs.
    - Container destroyed after execution, whatever happened.
    - No timeout: a command runs until it exits or the process is interrupted.
"""
import codecs
import time
import logging
from typing import Sequence, TextIO

import docker
from docker.errors import (
    APIError,
    DockerException,
    ImageNotFound,
)

from ci_runner.core.errors import BackendConnectionError
from ci_runner.executor.backend import ContainerSpec, ExecutionResult

logger = logging.getLogger(__name__)

_LABELS = {"project": "ci-runner", "role": "check"}


class DockerBackend:
    """Connects to the Docker daemon configured by the environment (DOCKER_HOST etc.)."""

    def connect(self, log_sink: TextIO) -> "DockerConnection":
        try:
            client = docker.from_env()
        except (DockerException, OSError) as e:
            raise BackendConnectionError(f"Docker daemon unavailable: {e}") from e

        try:
            client.ping()
        except (DockerException, OSError) as e:
            client.close()
            raise BackendConnectionError(f"Docker daemon unavailable: {e}") from e

        logger.info("Connected to Docker daemon")
        return DockerConnection(client, log_sink)


class DockerConnection:

    def __init__(self, client, log_sink: TextIO):
        self._client = client
        self._log_sink = log_sink

    def build_container(self, spec: ContainerSpec) -> "DockerContainer":
        return DockerContainer(self._client, spec, self._log_sink)

    def release(self) -> None:
        self._client.close()
        logger.info("Docker connection closed")


class DockerContainer:
    """A ContainerSpec bound to a live client. Each execute() is a fresh container."""

    def __init__(self, client, spec: ContainerSpec, log_sink: TextIO):
        self._client = client
        self.spec = spec
        self._log_sink = log_sink

    def _volumes(self) -> dict:
        volumes = {
            self.spec.source_dir: {"bind": self.spec.mount_path, "mode": "rw"},
        }
        for name, path in self.spec.cache_volumes:
            volumes[name] = {"bind": path, "mode": "rw"}
        return volumes

    def _stream_output(self, container) -> str:
        # frames can split a multi-byte character
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        chunks = []
        for chunk in container.logs(stdout=True, stderr=True, stream=True, follow=True):
            text = decoder.decode(chunk)
            chunks.append(text)
            self._log_sink.write(text)
        tail = decoder.decode(b"", final=True)
        if tail:
            chunks.append(tail)
            self._log_sink.write(tail)
        self._log_sink.flush()
        return "".join(chunks)

    def execute(self, argv: Sequence[str]) -> ExecutionResult:
        """
        Run ``argv`` in a new container and wait for it.

        Returns
        -------
        ExecutionResult
            Always returned. On backend failure exit_code is -1 and error is set.
        """
        result = ExecutionResult(argv=tuple(argv))
        start_time = time.monotonic()
        container = None

        try:
            logger.info(
                "Starting container | image=%s | workdir=%s | cmd=%s",
                self.spec.image, self.spec.workdir, " ".join(argv),
            )
            container = self._client.containers.run(
                image=self.spec.image,
                command=list(argv),
                volumes=self._volumes(),
                working_dir=self.spec.workdir,
                environment={"CI": "true"},
                labels=_LABELS,
                detach=True,
                stdout=True,
                stderr=True,
            )
            result.stdout = self._stream_output(container)
            wait_result = container.wait()
            result.exit_code = wait_result.get("StatusCode", -1)

        except ImageNotFound:
            result.error = f"Docker image '{self.spec.image}' not found"
            result.exit_code = -1
            logger.error(result.error)

        except APIError as e:
            result.error = f"Docker API error: {e}"
            result.exit_code = -1
            logger.error(result.error)

        except DockerException as e:
            result.error = f"Docker error: {type(e).__name__}: {e}"
            result.exit_code = -1
            logger.error(result.error)

        except OSError as e:
            # transport failures from the http layer (daemon gone mid-run)
            result.error = f"Docker connection error: {type(e).__name__}: {e}"
            result.exit_code = -1
            logger.error(result.error)

        finally:
            if container is not None:
                try:
                    container.remove(force=True)
                    logger.debug("Container %s destroyed", container.short_id)
                except (DockerException, OSError):
                    logger.warning("Failed to remove container", exc_info=True)

        result.execution_time_seconds = round(time.monotonic() - start_time, 3)
        logger.info(
            "Execution complete | exit=%d | time=%.2fs",
            result.exit_code, result.execution_time_seconds,
        )
        return result
