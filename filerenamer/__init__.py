"""Batch media renaming with content deduplication.

Dependency-injected engines and services behind a single-flight
coordinator.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import (
    BatchRequest,
    EngineConfig,
    FlattenRequest,
    ProgressKind,
    SortBy,
    TransferMode,
)
from .core.models import BatchResponse, FlattenResponse, MediaRecord, TransferResult
from .core.protocols import IdentifierGenerator, MetadataOracle, ProgressReporter

# Engine exports
from .engines.fingerprint import ContentFingerprinter
from .engines.metadata import PillowMetadataOracle
from .engines.identifier import FallbackIdentifierGenerator, Secp256k1IdentifierGenerator

# Service exports
from .services.coordinator import BatchCoordinator
from .services.flattener import FolderFlattener

# Logging exports
from .logging.rich_logger import CallbackProgressReporter, RichProgressReporter

__all__ = [
    # Core
    "BatchRequest",
    "EngineConfig",
    "FlattenRequest",
    "ProgressKind",
    "SortBy",
    "TransferMode",
    "BatchResponse",
    "FlattenResponse",
    "MediaRecord",
    "TransferResult",
    "IdentifierGenerator",
    "MetadataOracle",
    "ProgressReporter",
    # Engines
    "ContentFingerprinter",
    "PillowMetadataOracle",
    "FallbackIdentifierGenerator",
    "Secp256k1IdentifierGenerator",
    # Services
    "BatchCoordinator",
    "FolderFlattener",
    # Logging
    "CallbackProgressReporter",
    "RichProgressReporter",
]
