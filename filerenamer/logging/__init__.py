"""Terminal and callback progress reporting."""
from .rich_logger import (
    CallbackProgressReporter,
    QuietProgressReporter,
    RichProgressReporter,
    configure_logging,
)

__all__ = [
    "CallbackProgressReporter",
    "QuietProgressReporter",
    "RichProgressReporter",
    "configure_logging",
]
