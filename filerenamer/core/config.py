"""Configuration: enums, engine tunables and validated request models."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TransferMode(str, Enum):
    """Where renamed files end up."""
    INPLACE = "inplace"  # Rename next to the source file
    MOVE = "move"        # Place into a separate destination folder


class SortBy(str, Enum):
    """Processing order and naming strategy."""
    DATE = "date"              # Capture date ordering, date names
    COLOR = "color"            # Dominant hue ordering, date names
    IDENTIFIER = "identifier"  # Date ordering, generated identifier names


class ProgressKind(str, Enum):
    """Severity of a log-channel line."""
    LOG = "log"
    INFO = "info"
    ERROR = "error"
    SUCCESS = "success"


MIB = 1024 * 1024


@dataclass(slots=True)
class EngineConfig:
    """Tunables for the ingestion engine.

    All fields are validated on construction. Defaults match the
    behaviour users expect from the desktop tool.
    """
    # Fingerprinting
    max_hash_bytes: int = 100 * MIB
    hash_timeout_seconds: float = 15.0
    hash_chunk_size: int = 1 * MIB

    # Destination index
    index_progress_interval: int = 5

    # Quarantine
    quarantine_dir_name: str = "_FileRenamer_Quarantine"
    recovery_log_name: str = "recovery_log.txt"

    # Naming
    max_name_attempts: int = 10000

    # Ordering
    color_sentinel: float = 999.0

    def __post_init__(self) -> None:
        if self.max_hash_bytes < 0:
            raise ValueError("max_hash_bytes must not be negative")

        if self.hash_timeout_seconds <= 0:
            raise ValueError("hash_timeout_seconds must be positive")

        if self.hash_chunk_size < 1:
            raise ValueError("hash_chunk_size must be at least 1")

        if self.index_progress_interval < 1:
            raise ValueError("index_progress_interval must be at least 1")

        if self.max_name_attempts < 1:
            raise ValueError("max_name_attempts must be at least 1")

        if not self.quarantine_dir_name or "/" in self.quarantine_dir_name:
            raise ValueError("quarantine_dir_name must be a plain folder name")

        if self.color_sentinel < 360:
            raise ValueError("color_sentinel must sort after every valid hue")


class WireModel(BaseModel):
    """Base for models exchanged with the shell (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BatchRequest(WireModel):
    """A rename batch submitted by the shell."""
    file_paths: List[Path] = Field(
        default_factory=list,
        description="Candidate files; non-media entries are filtered out",
    )
    destination_folder: Optional[Path] = Field(
        default=None,
        description="Target folder, required in move mode and ignored otherwise",
    )
    mode: TransferMode = Field(default=TransferMode.INPLACE)
    sort_by: SortBy = Field(default=SortBy.DATE)
    sort_into_folders: bool = Field(
        default=False,
        description="File each result into a YYYY-MM-DD subfolder",
    )

    @field_validator("file_paths")
    @classmethod
    def expand_paths(cls, value: List[Path]) -> List[Path]:
        return [p.expanduser() for p in value]

    @field_validator("destination_folder")
    @classmethod
    def expand_destination(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return value.expanduser()


class FlattenRequest(WireModel):
    """Folders whose contents should be lifted into their parents."""
    folder_paths: List[Path] = Field(default_factory=list)

    @field_validator("folder_paths")
    @classmethod
    def expand_paths(cls, value: List[Path]) -> List[Path]:
        return [p.expanduser() for p in value]
