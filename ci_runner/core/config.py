"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    CI_RUST_IMAGE         : Base toolchain image (default: rust:latest)
    CI_SOURCE_DIR         : Host directory mounted into the container (default: .)
    CI_MOUNT_PATH         : In-container mount path, also the working directory (default: /src)
    CI_CARGO_CACHE_VOLUME : Named docker volume holding the cargo registry (default: unset, no cache)
    CI_LOG_LEVEL          : Logging level name (default: INFO)
    CI_LOG_DIR            : Directory for a daily log file (default: unset, console only)

Every default reproduces the behaviour of a plain run with no environment:
rust:latest, current directory mounted read-write at /src, no caching.
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

RUST_IMAGE = os.getenv("CI_RUST_IMAGE", "rust:latest")
SOURCE_DIR = os.getenv("CI_SOURCE_DIR", ".")
MOUNT_PATH = os.getenv("CI_MOUNT_PATH", "/src")

# Cargo registry location inside the official rust images
CARGO_REGISTRY_PATH = "/usr/local/cargo/registry"
CARGO_CACHE_VOLUME: Optional[str] = os.getenv("CI_CARGO_CACHE_VOLUME") or None

LOG_LEVEL = os.getenv("CI_LOG_LEVEL", "INFO").upper()
LOG_DIR: Optional[str] = os.getenv("CI_LOG_DIR") or None


def cache_volumes() -> dict[str, str]:
    """Named volume → container path mapping for the configured caches."""
    if not CARGO_CACHE_VOLUME:
        return {}
    return {CARGO_CACHE_VOLUME: CARGO_REGISTRY_PATH}
