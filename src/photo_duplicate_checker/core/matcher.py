"""Metadata predicate deciding whether two assets are the same capture."""

from .models import Asset


def is_duplicate(first: Asset, second: Asset) -> bool:
    """
    Check whether two assets are likely duplicates of one another.

    Args:
        first: First asset to compare
        second: Second asset to compare

    Returns:
        True if both assets share a known capture time, variant flags and
        pixel dimensions, False otherwise

    Assets without a capture time never match, not even each other, so a
    library full of undated images does not collapse into one group.
    """
    if first.creation_timestamp is None or second.creation_timestamp is None:
        return False

    return (
        first.creation_timestamp == second.creation_timestamp
        and first.media_variant_flags == second.media_variant_flags
        and first.pixel_width == second.pixel_width
        and first.pixel_height == second.pixel_height
    )
