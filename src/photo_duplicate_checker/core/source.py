"""Asset sources that supply the ordered input of a duplicate scan."""

import logging
import time
from collections.abc import Generator, Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from PIL import ExifTags, Image, UnidentifiedImageError

try:
    import pillow_heif

    pillow_heif.register_heif_opener()
    HEIF_SUPPORTED = True
except ImportError:
    HEIF_SUPPORTED = False

from .cancellation import CancelToken
from .models import ApplicationConfig, Asset, MediaVariant

logger = logging.getLogger(__name__)

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

# Apple iOS values of the EXIF CustomRendered tag
CUSTOM_RENDERED_VARIANTS = {
    2: MediaVariant.HDR,
    3: MediaVariant.HDR,
    6: MediaVariant.PANORAMA,
    7: MediaVariant.HDR | MediaVariant.DEPTH_EFFECT,
    8: MediaVariant.DEPTH_EFFECT,
}

LIVE_PHOTO_VIDEO_EXTENSIONS = (".mov", ".MOV")
HEIF_EXTENSIONS = {".heic", ".heif"}


class ProgressCallback(Protocol):
    """Protocol for progress callback functions while loading assets."""

    def __call__(self, current: int, total: int | None = None, message: str = "") -> None:
        """Called to report progress while loading assets."""
        ...


class AssetSource(Protocol):
    """Anything that can hand over the full, ordered scan input."""

    def fetch_all(self, cancel_token: CancelToken | None = None) -> list[Asset]:
        """Return every asset in scan order, stopping early once cancel_token fires."""
        ...


class InMemoryAssetSource:
    """Serves assets the caller already holds, in the order given."""

    def __init__(self, assets: Iterable[Asset]):
        self._assets = list(assets)

    def fetch_all(self, cancel_token: CancelToken | None = None) -> list[Asset]:
        return list(self._assets)

    def __len__(self) -> int:
        return len(self._assets)


def parse_exif_datetime(value: Any, subseconds: Any = None) -> datetime | None:
    """
    Parse an EXIF date string such as ``2021:01:02 10:30:00``.

    Args:
        value: Raw EXIF date value
        subseconds: Optional SubSecTime value holding fractional seconds

    Returns:
        Naive datetime, or None if the value is missing or malformed
    """
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if not isinstance(value, str):
        return None

    value = value.strip().rstrip("\x00")
    try:
        parsed = datetime.strptime(value, EXIF_DATETIME_FORMAT)
    except ValueError:
        logger.debug(f"Unparsable EXIF date: {value!r}")
        return None

    if subseconds is not None:
        digits = str(subseconds).strip().rstrip("\x00")
        if digits.isdigit():
            parsed = parsed.replace(microsecond=int(digits[:6].ljust(6, "0")))

    return parsed


def variant_flags_from_exif(exif_ifd: Mapping[int, Any]) -> MediaVariant:
    """
    Derive variant flags from the EXIF sub-IFD of an image.

    Args:
        exif_ifd: Tag id to value mapping of the Exif IFD

    Returns:
        Flags for HDR, panorama, portrait and screenshot captures
    """
    flags = MediaVariant.NONE

    custom_rendered = exif_ifd.get(ExifTags.Base.CustomRendered)
    if isinstance(custom_rendered, int):
        flags |= CUSTOM_RENDERED_VARIANTS.get(custom_rendered, MediaVariant.NONE)

    user_comment = exif_ifd.get(ExifTags.Base.UserComment)
    if isinstance(user_comment, bytes):
        user_comment = user_comment.decode("ascii", errors="ignore")
    if isinstance(user_comment, str) and user_comment.strip("\x00 ").endswith("Screenshot"):
        flags |= MediaVariant.SCREENSHOT

    return flags


class DirectoryAssetSource:
    """Discovers photos in a directory and extracts the metadata the scanner compares."""

    def __init__(
        self,
        directory: Path,
        recursive: bool = True,
        config: ApplicationConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        """
        Initialize the source.

        Args:
            directory: Directory to read photos from
            recursive: Whether to include subdirectories
            config: Application configuration, defaults to ApplicationConfig()
            progress_callback: Optional callback for progress while reading files
        """
        self.directory = directory
        self.recursive = recursive
        self.config = config or ApplicationConfig()
        self.progress_callback = progress_callback

    def is_photo_file(self, file_path: Path) -> bool:
        """Check if a file has a supported photo extension."""
        extension = file_path.suffix.lower()
        if extension in HEIF_EXTENSIONS and not HEIF_SUPPORTED:
            logger.debug(f"Skipping {file_path.name}: pillow-heif is not installed")
            return False
        return extension in self.config.supported_extensions

    def discover_files(self) -> Generator[Path, None, None]:
        """
        Discover all files in the directory, optionally recursively.

        Yields:
            Path objects for discovered files

        Raises:
            OSError: If directory cannot be accessed
        """
        if not self.directory.exists():
            raise OSError(f"Directory does not exist: {self.directory}")

        if not self.directory.is_dir():
            raise OSError(f"Path is not a directory: {self.directory}")

        logger.info(f"Starting file discovery in: {self.directory}")
        files_found = 0

        file_iterator = self.directory.rglob("*") if self.recursive else self.directory.glob("*")
        for file_path in file_iterator:
            if file_path.is_file():
                files_found += 1
                yield file_path

        logger.info(f"File discovery complete. Found {files_found} total files.")

    def read_asset(self, file_path: Path) -> Asset | None:
        """
        Build an Asset from a single photo file.

        Args:
            file_path: Path to the photo

        Returns:
            Asset if the file could be decoded, None otherwise
        """
        try:
            with Image.open(file_path) as img:
                width, height = img.size
                exif = img.getexif()
                exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
        except (OSError, UnidentifiedImageError, ValueError) as e:
            logger.warning(f"Could not read photo {file_path}: {e}")
            return None

        creation_timestamp = parse_exif_datetime(
            exif_ifd.get(ExifTags.Base.DateTimeOriginal),
            exif_ifd.get(ExifTags.Base.SubsecTimeOriginal),
        ) or parse_exif_datetime(exif.get(ExifTags.Base.DateTime))

        flags = variant_flags_from_exif(exif_ifd)
        if self.config.detect_live_photos and self._has_live_photo_video(file_path):
            flags |= MediaVariant.LIVE_PHOTO

        resolved = file_path.resolve()
        return Asset(
            asset_id=str(resolved),
            creation_timestamp=creation_timestamp,
            media_variant_flags=flags,
            pixel_width=width,
            pixel_height=height,
            file_path=resolved,
        )

    def fetch_all(self, cancel_token: CancelToken | None = None) -> list[Asset]:
        """
        Read every supported photo and return them by ascending capture time.

        Args:
            cancel_token: Optional token checked before each file; once it is
                cancelled reading stops and the photos read so far are returned

        Returns:
            Assets ordered by creation time, undated assets last, ties by path

        Raises:
            OSError: If the directory cannot be accessed
        """
        start_time = time.time()

        photo_files = [path for path in self.discover_files() if self.is_photo_file(path)]
        total_files = len(photo_files)
        logger.info(f"Reading metadata from {total_files} photo files")

        assets = []
        for i, file_path in enumerate(photo_files):
            if cancel_token is not None and cancel_token.is_cancelled():
                logger.info(f"Reading stopped after {i} of {total_files} photo files")
                break

            if self.progress_callback:
                self.progress_callback(i + 1, total_files, f"Reading {file_path.name}...")

            asset = self.read_asset(file_path)
            if asset:
                assets.append(asset)

        assets.sort(key=self._sort_key)

        logger.info(
            f"Loaded {len(assets)} assets out of {total_files} photo files "
            f"in {time.time() - start_time:.2f} seconds"
        )
        return assets

    @staticmethod
    def _sort_key(asset: Asset) -> tuple[bool, datetime, str]:
        return (
            asset.creation_timestamp is None,
            asset.creation_timestamp or datetime.min,
            asset.asset_id,
        )

    @staticmethod
    def _has_live_photo_video(file_path: Path) -> bool:
        """Whether an iCloud Live Photos .mov sits next to the photo."""
        return any(
            file_path.with_suffix(extension).is_file()
            for extension in LIVE_PHOTO_VIDEO_EXTENSIONS
        )
