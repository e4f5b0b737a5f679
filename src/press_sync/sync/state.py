"""Snapshot persistence layer.

Manages the JSON snapshot files that record what has already been
published, one per content kind (``posts.json`` and ``media.json``). Each
file holds a JSON array of item records keyed by ``local_file``.

Key design choices:

* **First run is not an error** -- a missing file loads as an empty list.
* **Corrupt state is not fatal** -- unreadable files load as empty and
  invalid records are skipped one by one, so the run still publishes.
* **Read-merge-write** -- ``save()`` re-loads the snapshot and merges the
  new records into it; existing entries are never dropped.
* **Atomic writes** -- the file is replaced via a temp file and
  ``os.replace()``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Sequence

from pydantic import ValidationError

from press_sync.file_handler import write_file_atomic
from press_sync.sync.models import (
    ITEM_MODELS,
    ContentItem,
    ContentKind,
    SaveStatus,
)

logger = logging.getLogger(__name__)

SNAPSHOT_FILES: dict[ContentKind, str] = {
    ContentKind.POST: "posts.json",
    ContentKind.MEDIA: "media.json",
}


class SnapshotStore:
    """Load and save the published-item snapshot for each content kind.

    Args:
        state_dir: Directory holding the snapshot files (typically the
            working directory).
        log: Logger used for reporting; defaults to the module logger.
    """

    def __init__(
        self, state_dir: Path, log: logging.Logger | None = None
    ) -> None:
        self._state_dir = Path(state_dir)
        self._log = log or logger

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, kind: ContentKind) -> list[ContentItem]:
        """Load the snapshot for *kind*.

        Returns:
            The recorded items, or an empty list when the file is missing
            (first run) or cannot be read or parsed.
        """
        path = self.path_for(kind)
        if not path.exists():
            self._log.info("%s does not exist, first run?", path.name)
            return []

        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as exc:
            self._log.warning(
                "Error reading %s, permissions? %s", path.name, exc
            )
            return []
        except ValueError as exc:
            self._log.warning(
                "Error parsing JSON from %s: %s", path.name, exc
            )
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            self._log.warning(
                "Error parsing %s: expected a list of records, got %s",
                path.name,
                type(data).__name__,
            )
            return []

        model = ITEM_MODELS[kind]
        items: list[ContentItem] = []
        for index, record in enumerate(data):
            try:
                items.append(model.model_validate(record))
            except ValidationError as exc:
                self._log.warning(
                    "Skipping record %d in %s: %s", index, path.name, exc
                )

        self._log.debug("Loaded %d records from %s", len(items), path.name)
        return items

    def save(
        self, kind: ContentKind, items: Sequence[ContentItem]
    ) -> SaveStatus:
        """Merge *items* into the snapshot for *kind* and persist it.

        Records whose ``local_file`` already exists in the snapshot are
        replaced in place; all others are appended in order. Failures are
        reported and returned, never raised.

        Returns:
            ``SKIPPED`` when *items* is empty, ``WRITTEN`` on success,
            ``FAILED`` when serialisation or the write failed.
        """
        path = self.path_for(kind)
        if not items:
            self._log.info("No new %s records to write.", kind.value)
            return SaveStatus.SKIPPED

        merged = merge_records(self.load(kind), items)

        try:
            payload = json.dumps(
                [item.to_record() for item in merged], indent=2
            )
        except (TypeError, ValueError) as exc:
            self._log.warning("JSON encoding error for %s: %s", path.name, exc)
            return SaveStatus.FAILED

        try:
            write_file_atomic(path, payload + "\n")
        except OSError as exc:
            self._log.warning("Error writing %s: %s", path.name, exc)
            return SaveStatus.FAILED

        self._log.debug(
            "%s written (%d records)", path.name, len(merged)
        )
        return SaveStatus.WRITTEN

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def path_for(self, kind: ContentKind) -> Path:
        """Return the snapshot file path for *kind*."""
        return self._state_dir / SNAPSHOT_FILES[kind]


def merge_records(
    existing: Iterable[ContentItem], incoming: Iterable[ContentItem]
) -> list[ContentItem]:
    """Merge *incoming* into *existing* keyed by ``local_file``.

    Order is preserved: existing entries keep their position (replaced by
    the incoming record when the key matches), new keys are appended.
    """
    merged: dict[str, ContentItem] = {}
    for item in existing:
        merged[item.local_file] = item
    for item in incoming:
        merged[item.local_file] = item
    return list(merged.values())
