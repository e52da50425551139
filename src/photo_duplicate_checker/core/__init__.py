"""Core functionality for photo duplicate checker."""

from .cancellation import CancelToken
from .matcher import is_duplicate
from .models import (
    ApplicationConfig,
    Asset,
    DuplicateGroup,
    MediaVariant,
    ScanState,
)
from .scanner import DuplicateAssetIdError, DuplicateScanner
from .source import AssetSource, DirectoryAssetSource, InMemoryAssetSource
from .worker import ScanInProgressError, ScanWorker

__all__ = [
    "ApplicationConfig",
    "Asset",
    "AssetSource",
    "CancelToken",
    "DirectoryAssetSource",
    "DuplicateAssetIdError",
    "DuplicateGroup",
    "DuplicateScanner",
    "InMemoryAssetSource",
    "MediaVariant",
    "ScanInProgressError",
    "ScanState",
    "ScanWorker",
    "is_duplicate",
]
