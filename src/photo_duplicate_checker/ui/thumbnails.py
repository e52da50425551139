"""Thumbnail rendering for assets shown in the review window."""

import logging

from PIL import Image, ImageDraw, ImageFont

from ..core import ApplicationConfig, Asset
from ..core.source import HEIF_SUPPORTED

logger = logging.getLogger(__name__)

PLACEHOLDER_BACKGROUND = (240, 240, 240)
PLACEHOLDER_FOREGROUND = (100, 100, 100)


class ThumbnailProvider:
    """Renders and caches thumbnails for assets, keyed by asset id."""

    def __init__(self, config: ApplicationConfig | None = None):
        self.config = config or ApplicationConfig()
        self._cache: dict[str, Image.Image] = {}

    def get_thumbnail(self, asset: Asset) -> Image.Image:
        """
        Get a thumbnail that fits the configured box.

        Args:
            asset: Asset to render

        Returns:
            RGB or L image no larger than thumbnail_size in either dimension;
            a placeholder when the asset has no readable file
        """
        cached = self._cache.get(asset.asset_id)
        if cached is not None:
            return cached

        thumbnail = self._render(asset)
        self._cache[asset.asset_id] = thumbnail
        return thumbnail

    def clear(self) -> None:
        """Drop all cached thumbnails."""
        self._cache.clear()

    def _render(self, asset: Asset) -> Image.Image:
        if asset.file_path is None or not asset.file_path.is_file():
            return self.create_placeholder(asset, "NO FILE")

        extension = asset.file_path.suffix.lower()
        if extension in {".heic", ".heif"} and not HEIF_SUPPORTED:
            return self.create_placeholder(asset, "HEIC Image")

        try:
            with Image.open(asset.file_path) as img:
                img.load()
                thumbnail = self._flatten(img)
        except OSError as e:
            logger.warning(f"Could not create thumbnail for {asset.display_name}: {e}")
            return self.create_placeholder(asset)

        size = self.config.thumbnail_size
        thumbnail.thumbnail((size, size), Image.Resampling.LANCZOS)
        return thumbnail

    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        """Paste transparent images onto white so they render the same everywhere."""
        if img.mode == "P":
            img = img.convert("RGBA")

        if img.mode in ("RGBA", "LA"):
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background

        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img.copy()

    def create_placeholder(self, asset: Asset, file_type: str | None = None) -> Image.Image:
        """Grey card naming the file type, used when no preview can be rendered."""
        if not file_type:
            if asset.file_path is not None and asset.file_path.suffix:
                file_type = asset.file_path.suffix.upper().lstrip(".")
            else:
                file_type = "FILE"

        size = self.config.thumbnail_size
        placeholder = Image.new("RGB", (size, size), PLACEHOLDER_BACKGROUND)
        draw = ImageDraw.Draw(placeholder)

        # Generic file icon
        left, top = size * 2 // 5, size // 4
        right, bottom = size * 3 // 5, size * 3 // 5
        draw.rectangle([left, top, right, bottom], outline=PLACEHOLDER_FOREGROUND, width=2)

        font = ImageFont.load_default()
        text_bbox = draw.textbbox((0, 0), file_type, font=font)
        text_x = max((size - (text_bbox[2] - text_bbox[0])) // 2, 0)
        draw.text((text_x, bottom + 8), file_type, fill=PLACEHOLDER_FOREGROUND, font=font)

        return placeholder
