"""Text formatting shared by the GUI and the command line."""

from ..core import ApplicationConfig, Asset, MediaVariant


class DateFormatter:
    """Renders asset capture dates for display."""

    def __init__(self, config: ApplicationConfig | None = None):
        self.config = config or ApplicationConfig()

    def format(self, asset: Asset) -> str:
        """Capture date of the asset, or the configured placeholder when unknown."""
        if asset.creation_timestamp is None:
            return self.config.unknown_date_text
        return asset.creation_timestamp.strftime(self.config.date_format)


def format_variants(asset: Asset) -> str:
    """Comma separated variant names, empty for a standard capture."""
    flags = asset.variants
    return ", ".join(
        variant.name.replace("_", " ")
        for variant in MediaVariant
        if variant.value and variant in flags
    )


def format_progress(processed: int, total: int, group_count: int) -> str:
    """
    Describe scan progress in one line.

    Args:
        processed: Assets examined so far
        total: Assets in the scan
        group_count: Duplicate groups found so far

    Returns:
        Text such as ``3 of 10 (30%) - found 1 duplicate group``
    """
    percent = (processed / total) * 100 if total else 0.0
    noun = "group" if group_count == 1 else "groups"
    return f"{processed} of {total} ({percent:.0f}%) - found {group_count} duplicate {noun}"
