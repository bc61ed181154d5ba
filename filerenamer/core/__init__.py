"""Core domain models and protocols."""
from .protocols import (
    MetadataOracle,
    IdentifierGenerator,
    ProgressReporter,
)
from .models import (
    MediaRecord,
    ExistingFile,
    ColorDescriptor,
    SecretArtifact,
    QuarantineRecord,
    PlacementOutcome,
    PlacementAction,
    QuarantineReason,
    TransferResult,
    FlattenResult,
    FlattenTotals,
    BatchResponse,
    FlattenResponse,
)
from .config import (
    EngineConfig,
    TransferMode,
    SortBy,
    ProgressKind,
    BatchRequest,
    FlattenRequest,
)

__all__ = [
    # Protocols
    "MetadataOracle",
    "IdentifierGenerator",
    "ProgressReporter",
    # Models
    "MediaRecord",
    "ExistingFile",
    "ColorDescriptor",
    "SecretArtifact",
    "QuarantineRecord",
    "PlacementOutcome",
    "PlacementAction",
    "QuarantineReason",
    "TransferResult",
    "FlattenResult",
    "FlattenTotals",
    "BatchResponse",
    "FlattenResponse",
    # Config
    "EngineConfig",
    "TransferMode",
    "SortBy",
    "ProgressKind",
    "BatchRequest",
    "FlattenRequest",
]
