"""Pydantic models for photo duplicate checker."""

from datetime import datetime
from enum import IntFlag
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaVariant(IntFlag):
    """Encoding variants of a capture that must never be grouped with each other."""

    NONE = 0
    HDR = 1
    PANORAMA = 2
    SCREENSHOT = 4
    LIVE_PHOTO = 8
    DEPTH_EFFECT = 16
    BURST = 32


class Asset(BaseModel):
    """A single media item as seen by the duplicate scanner."""

    model_config = ConfigDict(frozen=True)

    asset_id: str = Field(..., min_length=1, description="Stable identity of the asset")
    creation_timestamp: datetime | None = Field(
        None, description="Capture time, None when unknown"
    )
    media_variant_flags: int = Field(
        default=0, ge=0, description="MediaVariant bitset"
    )
    pixel_width: int = Field(..., ge=0, description="Width in pixels")
    pixel_height: int = Field(..., ge=0, description="Height in pixels")
    file_path: Path | None = Field(None, description="Backing file, if any")

    @field_validator("media_variant_flags")
    @classmethod
    def validate_media_variant_flags(cls, v: int) -> int:
        """Store flags as a plain int so MediaVariant values serialise cleanly."""
        return int(v)

    @property
    def variants(self) -> MediaVariant:
        """Variant flags as a MediaVariant."""
        return MediaVariant(self.media_variant_flags)

    @property
    def dimensions(self) -> str:
        """Pixel dimensions formatted as WIDTHxHEIGHT."""
        return f"{self.pixel_width}x{self.pixel_height}"

    @property
    def display_name(self) -> str:
        """File name when the asset has one, otherwise its id."""
        if self.file_path is not None:
            return self.file_path.name
        return self.asset_id

    def __str__(self) -> str:
        return f"{self.display_name} ({self.dimensions})"


class DuplicateGroup(BaseModel):
    """A representative asset and the assets found to duplicate it."""

    representative: Asset = Field(..., description="First-discovered asset of the cluster")
    members: list[Asset] = Field(
        default_factory=list, description="Duplicates in discovery order"
    )

    @property
    def member_count(self) -> int:
        """Number of duplicates recorded against the representative."""
        return len(self.members)

    @property
    def assets(self) -> list[Asset]:
        """Representative followed by its members."""
        return [self.representative, *self.members]

    def add_member(self, asset: Asset) -> None:
        """Append a duplicate to this group."""
        if asset.asset_id == self.representative.asset_id:
            raise ValueError(f"Asset {asset.asset_id} is the representative of this group")
        self.members.append(asset)

    def __str__(self) -> str:
        return (
            f"Duplicate group '{self.representative.display_name}' "
            f"({self.member_count} duplicates)"
        )


class ScanState(BaseModel):
    """Progress and results of one duplicate scan; final once the scan returns."""

    total_count: int = Field(..., ge=0, description="Number of assets in the scan")
    processed_count: int = Field(default=0, ge=0, description="Assets fully examined")
    groups: list[DuplicateGroup] = Field(
        default_factory=list, description="Groups in representative discovery order"
    )
    cancelled: bool = Field(default=False, description="Whether the scan was stopped early")
    started_at: datetime = Field(default_factory=datetime.now, description="Scan start time")
    duration_seconds: float = Field(default=0.0, ge=0, description="Time spent scanning")

    @property
    def group_count(self) -> int:
        """Number of duplicate groups found."""
        return len(self.groups)

    @property
    def duplicate_count(self) -> int:
        """Number of assets recorded as duplicates of a representative."""
        return sum(group.member_count for group in self.groups)

    @property
    def progress_fraction(self) -> float:
        """Share of the input examined, between 0.0 and 1.0."""
        if self.total_count == 0:
            return 0.0
        return self.processed_count / self.total_count

    @property
    def is_complete(self) -> bool:
        """True when every asset was examined without cancellation."""
        return not self.cancelled and self.processed_count == self.total_count

    def __str__(self) -> str:
        status = "cancelled" if self.cancelled else "complete"
        return (
            f"Scan {status}: {self.processed_count} of {self.total_count} assets, "
            f"{self.group_count} duplicate groups, {self.duplicate_count} duplicates"
        )


class ApplicationConfig(BaseModel):
    """Configuration settings for the application."""

    supported_extensions: list[str] = Field(
        default=[
            ".jpg",
            ".jpeg",
            ".png",
            ".gif",
            ".bmp",
            ".tiff",
            ".tif",
            ".webp",
            ".heic",  # Apple formats
            ".heif",
        ],
        description="File extensions read as photo assets",
    )
    detect_live_photos: bool = Field(
        default=True, description="Flag photos that have a paired .mov as Live Photos"
    )
    thumbnail_size: int = Field(default=150, gt=0, description="Thumbnail box size in pixels")
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="strftime format for capture dates"
    )
    unknown_date_text: str = Field(
        default="Unknown date", description="Shown for assets without a capture date"
    )
    progress_poll_interval_ms: int = Field(
        default=100, gt=0, description="How often the GUI drains progress events"
    )
    enable_logging: bool = Field(default=True, description="Enable application logging")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("supported_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Ensure all extensions start with a dot and are lowercase."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in v]

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept the standard level names in any case."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level
