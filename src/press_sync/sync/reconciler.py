"""Reconcile local items against the published snapshot.

Each local item is joined to its snapshot record by ``local_file``:

* no record -- the item is **new**;
* record found -- the remote identifiers are copied onto the item, then
  a post whose ``modified_at`` is strictly newer than the record's is
  **updated**; everything else (including every matched media item) is
  **skipped**.

Equal timestamps count as unchanged, so re-running with no local edits
classifies nothing as updated. Records without a local counterpart are
ignored; the reconciler only looks from local to remote.

The function is pure: inputs are never mutated, outputs are new copies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

from press_sync.sync.models import (
    Classification,
    ContentItem,
    ContentKind,
)

logger = logging.getLogger(__name__)


def _comparable(value: datetime | None) -> datetime | None:
    """Normalise aware datetimes to naive UTC so both sides compare."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_newer(local: datetime | None, remote: datetime | None) -> bool:
    """Return ``True`` if *local* is strictly newer than *remote*.

    A missing local timestamp is never newer; a missing remote timestamp
    is older than any local one.
    """
    local_cmp = _comparable(local)
    remote_cmp = _comparable(remote)
    if local_cmp is None:
        return False
    if remote_cmp is None:
        return True
    return local_cmp > remote_cmp


def classify(
    local: Sequence[ContentItem],
    remote: Sequence[ContentItem],
    kind: ContentKind,
    log: logging.Logger | None = None,
) -> Classification:
    """Partition *local* into new, updated and skipped items.

    Args:
        local: Items scanned from disk, in processing order.
        remote: Items loaded from the snapshot.
        kind: Content kind; only posts have an update path.
        log: Logger used for reporting; defaults to the module logger.

    Returns:
        ``Classification`` whose lists are ordered subsequences of
        *local*, each item carrying the joined remote identifiers.
    """
    log = log or logger
    by_file = {r.local_file: r for r in remote}

    new_items: list[ContentItem] = []
    updated_items: list[ContentItem] = []
    skipped_items: list[ContentItem] = []

    for item in local:
        match = by_file.get(item.local_file)
        if match is None:
            new_items.append(item)
            continue

        joined = item.model_copy(
            update={
                "remote_id": match.remote_id,
                "remote_url": match.remote_url,
            }
        )

        if kind == ContentKind.POST and is_newer(
            item.modified_at, match.modified_at
        ):
            updated_items.append(joined)
        else:
            log.debug("Skipping %s", item.local_file)
            skipped_items.append(joined)

    return Classification(
        new_items=new_items,
        updated_items=updated_items,
        skipped_items=skipped_items,
    )
