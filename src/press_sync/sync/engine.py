"""Core sync engine that orchestrates a full publishing run.

The ``SyncEngine`` ties together scanner, snapshot store, reconciler and
publisher driver. For each content kind (posts, then media) it:

1. Scans the local content directory.
2. Loads the persisted snapshot.
3. Classifies local items as new, updated or unchanged.
4. Publishes new items and pushes updates (skipped on dry run).
5. Merges everything that reached the remote site into the snapshot.
6. Builds and returns a ``SyncReport``.

Error handling: an unreadable content directory raises ``ScanError`` and
ends the run. Everything else is per-item or reported: a failed publish
only affects its own item, and a failed snapshot write is logged and
attached to the affected results (those items were published but will be
seen as new on the next run).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from press_sync.config_schema import SyncSettings
from press_sync.converters.markdown import MarkdownRenderer, render_markdown
from press_sync.sync.models import (
    ContentItem,
    ContentKind,
    SaveStatus,
    SyncAction,
    SyncReport,
    SyncResult,
)
from press_sync.sync.publisher import PublisherDriver, PublishingClient
from press_sync.sync.reconciler import classify
from press_sync.sync.scanner import scan_media, scan_posts
from press_sync.sync.state import SnapshotStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """Orchestrate a publishing run for both content kinds.

    Args:
        client: Publishing client for remote operations; may be ``None``
            when the engine is only used for dry runs.
        settings: Directory and extension settings.
        root: Base directory relative settings paths resolve against
            (defaults to the working directory).
        render: Markdown renderer for post bodies.
        log: Logger used by every component; defaults to module loggers.
    """

    def __init__(
        self,
        client: PublishingClient | None,
        settings: SyncSettings | None = None,
        root: Path | None = None,
        render: MarkdownRenderer = render_markdown,
        log: logging.Logger | None = None,
    ) -> None:
        self.settings = settings or SyncSettings()
        self.root = Path(root) if root is not None else Path.cwd()
        self.render = render
        self._log = log or logger

        self.posts_dir = self.root / self.settings.posts_dir
        self.media_dir = self.root / self.settings.media_dir
        self.store = SnapshotStore(
            self.root / self.settings.state_dir, log=log
        )
        self.driver = PublisherDriver(client, self.media_dir, log=log)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, dry_run: bool = False) -> SyncReport:
        """Execute a full sync run.

        Args:
            dry_run: If ``True``, classify but do not publish or save.

        Returns:
            A ``SyncReport`` summarising what was (or would be) done.

        Raises:
            ScanError: If a content directory cannot be read.
            ValueError: If no client was given and *dry_run* is false.
        """
        if not dry_run and self.driver.client is None:
            raise ValueError(
                "A publishing client is required unless dry_run is set"
            )

        started_at = datetime.now(timezone.utc).isoformat()
        results: list[SyncResult] = []

        for kind in (ContentKind.POST, ContentKind.MEDIA):
            results.extend(self.sync_kind(kind, dry_run=dry_run))

        return SyncReport(
            dry_run=dry_run,
            results=results,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )

    # ------------------------------------------------------------------
    # Per-kind sync
    # ------------------------------------------------------------------

    def scan(self, kind: ContentKind) -> list[ContentItem]:
        """Scan the local directory for *kind*."""
        if kind == ContentKind.POST:
            return list(
                scan_posts(
                    self.posts_dir,
                    extension=self.settings.post_extension,
                    render=self.render,
                    log=self._log,
                )
            )
        return list(
            scan_media(
                self.media_dir, extension=self.settings.media_extension
            )
        )

    def sync_kind(
        self, kind: ContentKind, dry_run: bool = False
    ) -> list[SyncResult]:
        """Run scan, load, classify, publish and save for one kind."""
        local = self.scan(kind)
        remote = self.store.load(kind)
        plan = classify(local, remote, kind, log=self._log)

        self._log.info(
            "%s: %d new, %d updated, %d unchanged",
            kind.value,
            len(plan.new_items),
            len(plan.updated_items),
            len(plan.skipped_items),
        )

        skipped = [
            SyncResult(
                kind=kind,
                local_file=item.local_file,
                action=SyncAction.SKIP,
                remote_id=item.remote_id,
                remote_url=item.remote_url,
            )
            for item in plan.skipped_items
        ]

        if dry_run:
            planned = [
                SyncResult(
                    kind=kind,
                    local_file=item.local_file,
                    action=action,
                    remote_id=item.remote_id,
                    remote_url=item.remote_url,
                )
                for action, items in (
                    (SyncAction.CREATE, plan.new_items),
                    (SyncAction.UPDATE, plan.updated_items),
                )
                for item in items
            ]
            return planned + skipped

        created = self.driver.publish_new(plan.new_items)
        updated = self.driver.publish_updates(plan.updated_items)
        results = created.results + updated.results

        status = self.store.save(kind, created.published + updated.published)
        if status == SaveStatus.FAILED:
            path = self.store.path_for(kind)
            self._log.warning(
                "Published %s items were not recorded in %s; "
                "they will be treated as new on the next run",
                kind.value,
                path.name,
            )
            results = [
                r.model_copy(
                    update={"error": f"published but not recorded in {path.name}"}
                )
                if r.success
                else r
                for r in results
            ]

        return results + skipped
