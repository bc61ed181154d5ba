"""Fingerprint, metadata and identifier engines."""
from .fingerprint import ContentFingerprinter, is_image, is_video, is_media
from .metadata import PillowMetadataOracle
from .identifier import Secp256k1IdentifierGenerator, FallbackIdentifierGenerator

__all__ = [
    "ContentFingerprinter",
    "is_image",
    "is_video",
    "is_media",
    "PillowMetadataOracle",
    "Secp256k1IdentifierGenerator",
    "FallbackIdentifierGenerator",
]
