"""Naming strategies: how a unique file gets its new base name."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from ..core.config import SortBy
from ..core.models import MediaRecord, SecretArtifact
from ..core.protocols import IdentifierGenerator
from ..engines.identifier import FallbackIdentifierGenerator, Secp256k1IdentifierGenerator


logger = logging.getLogger(__name__)


def format_timestamp(dt: datetime) -> str:
    """Fixed-width sortable name, e.g. 2024-03-05_14-07-09."""
    return dt.strftime("%Y-%m-%d_%H-%M-%S")


def date_folder_name(dt: datetime) -> str:
    """Subfolder name for date filing, e.g. 2024-03-05."""
    return dt.strftime("%Y-%m-%d")


class NamingStrategy(Protocol):
    """Maps a record to a base name plus an optional secret artifact."""

    def derive_base_name(self, record: MediaRecord) -> tuple[str, Optional[SecretArtifact]]:
        ...


class DateNamingStrategy:
    """Names files after their capture date.

    Used for both date and color sorting; color only affects order.
    """

    def derive_base_name(self, record: MediaRecord) -> tuple[str, Optional[SecretArtifact]]:
        return format_timestamp(record.effective_date), None


class IdentifierNamingStrategy:
    """Names files after a freshly minted identifier.

    If the generator fails, a locally generated identifier is used and the
    secret is marked unavailable.
    """

    def __init__(
        self,
        generator: Optional[IdentifierGenerator] = None,
        fallback: Optional[IdentifierGenerator] = None,
    ):
        self._generator = generator or Secp256k1IdentifierGenerator()
        self._fallback = fallback or FallbackIdentifierGenerator()

    def derive_base_name(self, record: MediaRecord) -> tuple[str, Optional[SecretArtifact]]:
        try:
            identifier, secret = self._generator.generate_identifier_and_secret()
        except Exception as e:
            logger.error("Identifier generation failed for %s: %s", record.name, e)
            identifier, secret = self._fallback.generate_identifier_and_secret()
        return identifier, SecretArtifact(identifier=identifier, secret=secret)


def create_naming_strategy(
    sort_by: SortBy,
    generator: Optional[IdentifierGenerator] = None,
) -> NamingStrategy:
    """Factory function to pick the naming strategy for a sort mode."""
    if sort_by == SortBy.IDENTIFIER:
        return IdentifierNamingStrategy(generator)
    return DateNamingStrategy()


def write_secret_artifact(artifact: SecretArtifact, target_path: Path) -> Path:
    """Write the secret file next to ``target_path``.

    Never overwrites an existing file.

    Returns:
        Path of the written secret file.
    """
    secret_path = target_path.parent / artifact.file_name()
    with secret_path.open("x", encoding="utf-8") as f:
        f.write(artifact.render(target_path.name))
    return secret_path
