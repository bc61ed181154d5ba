"""Content fingerprinting.

Primary identity is the SHA-256 of the full file contents. Files that are
too large, hidden, unreadable or too slow to read get a fallback identity
instead; fallbacks are prefixed so they can never equal a real digest.
"""
from __future__ import annotations

import hashlib
import logging
import re
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from pathlib import Path
from typing import Optional

from ..core.config import EngineConfig


logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp"
})

VIDEO_EXTENSIONS = frozenset({
    ".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v", ".mpg", ".mpeg",
    ".wmv", ".flv", ".3gp", ".mts", ".m2ts"
})

MEDIA_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS

_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


def is_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def is_video(path: Path) -> bool:
    return path.suffix.lower() in VIDEO_EXTENSIONS


def is_media(path: Path) -> bool:
    return path.suffix.lower() in MEDIA_EXTENSIONS


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def is_digest(fingerprint: str) -> bool:
    """True for a real content digest, False for any fallback identity."""
    return bool(_DIGEST_RE.match(fingerprint))


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """Compute SHA256 of file contents."""
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _mtime_ms(mtime: float) -> int:
    return int(mtime * 1000)


def _unique_suffix(path: Path) -> str:
    return f"{time.time_ns()}_{uuid.uuid4().hex[:12]}_{path.name}"


class ContentFingerprinter:
    """Computes a stable identity for a file's bytes.

    ``fingerprint`` never raises: every failure degrades to a fallback
    identity so a single bad file cannot abort a batch.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """Initialize the fingerprinter.

        Args:
            config: Engine tunables (size ceiling, timeout, chunk size).
        """
        self._config = config or EngineConfig()

    @property
    def name(self) -> str:
        return "SHA-256"

    def fingerprint(self, path: Path) -> str:
        """Compute the identity of ``path`` within the configured timeout."""
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fingerprint")
        try:
            future = executor.submit(self._compute, path)
            return future.result(timeout=self._config.hash_timeout_seconds)
        except FuturesTimeoutError:
            logger.warning("Timeout hashing file: %s", path)
            return f"timeout_file_{_unique_suffix(path)}"
        except Exception as e:
            logger.error("Error hashing file %s: %s", path, e)
            return f"error_file_{_unique_suffix(path)}"
        finally:
            # A stuck read keeps its worker; the batch moves on without it
            executor.shutdown(wait=False)

    def _compute(self, path: Path) -> str:
        try:
            stats = path.stat()
        except OSError as e:
            logger.error("Error hashing file %s: %s", path, e)
            return f"error_file_{_unique_suffix(path)}"

        try:
            if stats.st_size > self._config.max_hash_bytes:
                logger.info("Skipping large file: %s (%d bytes)", path, stats.st_size)
                return f"large_file_{stats.st_size}_{_mtime_ms(stats.st_mtime)}"

            if is_hidden(path):
                return f"hidden_file_{stats.st_size}_{_mtime_ms(stats.st_mtime)}"

            return sha256_file(path, self._config.hash_chunk_size)
        except Exception as e:
            logger.error("Error hashing file %s: %s", path, e)
            return (
                f"error_file_{stats.st_size}_{_mtime_ms(stats.st_mtime)}_"
                f"{_unique_suffix(path)}"
            )
