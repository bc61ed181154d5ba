"""Service layer - ordering, placement, quarantine and flattening."""
from .naming import (
    DateNamingStrategy,
    IdentifierNamingStrategy,
    create_naming_strategy,
    write_secret_artifact,
)
from .destination_index import DestinationIndex
from .ordering import BatchOrderingPipeline
from .quarantine import QuarantineManager
from .transfer import (
    SafeTransferEngine,
    SeenSet,
    TargetResolution,
    resolve_unique_path,
    safe_move,
)
from .flattener import FolderFlattener
from .coordinator import BatchCoordinator

__all__ = [
    # Naming
    "DateNamingStrategy",
    "IdentifierNamingStrategy",
    "create_naming_strategy",
    "write_secret_artifact",
    # Placement
    "DestinationIndex",
    "BatchOrderingPipeline",
    "QuarantineManager",
    "SafeTransferEngine",
    "SeenSet",
    "TargetResolution",
    "resolve_unique_path",
    "safe_move",
    # Flattening
    "FolderFlattener",
    # Orchestration
    "BatchCoordinator",
]
