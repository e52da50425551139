"""Duplicate scanning module for grouping assets that share capture metadata."""

import logging
import time
from collections import Counter
from collections.abc import Sequence
from typing import Protocol

from .cancellation import CancelToken
from .matcher import is_duplicate
from .models import Asset, DuplicateGroup, ScanState
from .source import AssetSource

logger = logging.getLogger(__name__)


class ProgressCallback(Protocol):
    """Protocol for progress callback functions during a duplicate scan."""

    def __call__(self, processed: int, total: int, group_count: int) -> None:
        """Called once per asset examined."""
        ...


class DuplicateAssetIdError(ValueError):
    """Raised when a scan input repeats an asset id."""

    def __init__(self, asset_ids: list[str]):
        self.asset_ids = asset_ids
        preview = ", ".join(asset_ids[:5])
        if len(asset_ids) > 5:
            preview += ", ..."
        super().__init__(f"Asset ids must be unique, found repeats: {preview}")


class DuplicateScanner:
    """Groups assets whose capture metadata marks them as duplicates.

    Every asset is compared against every other one, so a scan costs O(N²)
    predicate calls when the library holds few duplicates.
    """

    def scan_source(
        self,
        source: AssetSource,
        cancel_token: CancelToken | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ScanState:
        """
        Fetch every asset from a source and scan them for duplicates.

        Args:
            source: Where to load the ordered assets from
            cancel_token: Optional token checked while loading and scanning
            progress_callback: Optional callback for progress updates

        Returns:
            Final ScanState of the scan; cancelled with nothing processed when
            the token fired while the source was still loading
        """
        token = cancel_token or CancelToken()
        assets = source.fetch_all(cancel_token=token)
        return self.scan(assets, cancel_token=token, progress_callback=progress_callback)

    def scan(
        self,
        assets: Sequence[Asset],
        cancel_token: CancelToken | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> ScanState:
        """
        Scan an ordered sequence of assets for duplicates.

        Args:
            assets: Assets in the order groups should be discovered
            cancel_token: Optional token; when cancelled the scan stops at the
                next check point and keeps the groups found so far
            progress_callback: Optional callback invoked after each asset with
                (processed, total, group_count)

        Returns:
            Final ScanState, with ``cancelled`` set if the scan stopped early

        Raises:
            DuplicateAssetIdError: If two assets share an id
        """
        self._check_unique_ids(assets)

        token = cancel_token or CancelToken()
        state = ScanState(total_count=len(assets))
        start_time = time.time()

        # representative id -> group, in discovery order
        groups: dict[str, DuplicateGroup] = {}
        # member id -> representative id
        assigned: dict[str, str] = {}

        logger.info(f"Starting duplicate scan of {state.total_count} assets")

        try:
            for i, to_match in enumerate(assets):
                if token.is_cancelled():
                    state.cancelled = True
                    break

                if not self._absorb(to_match, groups, assigned):
                    if not self._match_against_all(i, assets, groups, assigned, token):
                        state.cancelled = True
                        break

                state.processed_count += 1
                if progress_callback:
                    progress_callback(state.processed_count, state.total_count, len(groups))
        finally:
            state.groups = list(groups.values())
            state.duration_seconds = time.time() - start_time

        logger.info(
            f"Duplicate scan {'cancelled' if state.cancelled else 'complete'}: "
            f"{state.processed_count}/{state.total_count} assets examined, "
            f"{state.group_count} groups, {state.duplicate_count} duplicates "
            f"in {state.duration_seconds:.2f} seconds"
        )
        return state

    def _absorb(
        self, to_match: Asset, groups: dict[str, DuplicateGroup], assigned: dict[str, str]
    ) -> bool:
        """
        Attach an asset to an existing group instead of scanning for new matches.

        Args:
            to_match: Asset about to be examined
            groups: Groups found so far, keyed by representative id
            assigned: Member id to representative id

        Returns:
            True if the asset already belongs to, or now joined, a group
        """
        if to_match.asset_id in assigned:
            return True

        for representative_id, group in groups.items():
            if is_duplicate(to_match, group.representative):
                group.add_member(to_match)
                assigned[to_match.asset_id] = representative_id
                logger.debug(
                    f"Absorbed {to_match.asset_id} into group of {representative_id}"
                )
                return True

        return False

    def _match_against_all(
        self,
        i: int,
        assets: Sequence[Asset],
        groups: dict[str, DuplicateGroup],
        assigned: dict[str, str],
        token: CancelToken,
    ) -> bool:
        """
        Compare one asset against every other asset and record its duplicates.

        Args:
            i: Index of the asset being matched
            assets: Full scan input
            groups: Groups found so far, keyed by representative id
            assigned: Member id to representative id
            token: Cancellation token checked before each comparison

        Returns:
            False if cancellation stopped the comparison, True otherwise
        """
        to_match = assets[i]

        for j, to_compare in enumerate(assets):
            if j == i:
                continue

            if token.is_cancelled():
                return False

            # to_match is unassigned here (_absorb handled the rest), so skipping
            # assigned candidates rules out both B -> A after A -> B and double membership
            if to_compare.asset_id in assigned:
                continue

            if is_duplicate(to_match, to_compare):
                group = groups.get(to_match.asset_id)
                if group is None:
                    group = DuplicateGroup(representative=to_match)
                    groups[to_match.asset_id] = group
                    logger.debug(f"Created duplicate group for {to_match.asset_id}")

                group.add_member(to_compare)
                assigned[to_compare.asset_id] = to_match.asset_id

        return True

    @staticmethod
    def _check_unique_ids(assets: Sequence[Asset]) -> None:
        """Reject scan inputs that repeat an asset id."""
        counts = Counter(asset.asset_id for asset in assets)
        repeated = [asset_id for asset_id, count in counts.items() if count > 1]
        if repeated:
            raise DuplicateAssetIdError(repeated)
