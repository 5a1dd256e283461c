#!/usr/bin/env python3
"""
Run cargo fmt, clippy and test inside a rust container.

Exit status is 0 when every check passes and 1 on the first failure
(including failure to reach the Docker daemon).
"""
import sys
import logging

from ci_runner.core.config import LOG_DIR, LOG_LEVEL
from ci_runner.executor.backend import ContainerSpec
from ci_runner.executor.docker_backend import DockerBackend
from ci_runner.runner.check_runner import CheckRunner
from ci_runner.utils.logging_config import setup_logging

logger = logging.getLogger("main")


def main() -> int:
    setup_logging(level=LOG_LEVEL, log_dir=LOG_DIR)
    spec = ContainerSpec.from_config()
    logger.debug("Using %s", spec)
    runner = CheckRunner(DockerBackend(), spec)
    return int(runner.run())


if __name__ == "__main__":
    sys.exit(main())
