"""Publisher driver: push classified items to the remote site.

``PublisherDriver`` maps over the reconciler's output, calls the
publishing client once per item and returns copies of the items with the
remote identifiers (and, for posts, the canonical remote date) merged in.

Error handling is per-item: a failing call is logged and recorded as a
failed ``SyncResult``; the item is left out of ``published`` and the
remaining items still run. Nothing is retried.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol, Sequence

from pydantic import BaseModel

from press_sync.sync.models import (
    ContentItem,
    MediaItem,
    PostItem,
    RemoteMedia,
    RemotePost,
    SyncAction,
    SyncResult,
)

logger = logging.getLogger(__name__)


class PublishingClient(Protocol):
    """Remote operations the driver depends on."""

    def publish_post(self, post: PostItem) -> RemotePost: ...

    def update_post(self, post: PostItem) -> datetime | None: ...

    def upload_media(self, item: MediaItem, path: Path) -> RemoteMedia: ...


class PublishOutcome(BaseModel):
    """Items that reached the remote site plus one result per input item."""

    published: list[ContentItem] = []
    results: list[SyncResult] = []

    model_config = {"frozen": True}


class PublisherDriver:
    """Drive create/update calls for one run.

    Args:
        client: Publishing client (``WordPressClient`` in production).
        media_dir: Directory media ``local_file`` names are relative to.
        log: Logger used for reporting; defaults to the module logger.
    """

    def __init__(
        self,
        client: PublishingClient | None,
        media_dir: Path,
        log: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.media_dir = Path(media_dir)
        self._log = log or logger

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def publish_new(self, items: Sequence[ContentItem]) -> PublishOutcome:
        """Create every item on the remote site, in order."""
        return self._run(items, SyncAction.CREATE, self._create)

    def publish_updates(
        self, items: Sequence[ContentItem]
    ) -> PublishOutcome:
        """Push local changes for items already on the remote site."""
        return self._run(items, SyncAction.UPDATE, self._update)

    # ------------------------------------------------------------------
    # Per-item operations
    # ------------------------------------------------------------------

    def _create(self, item: ContentItem) -> ContentItem:
        if isinstance(item, PostItem):
            self._log.info("Publishing post %s", item.local_file)
            post = self.client.publish_post(item)
            update: dict = {
                "remote_id": post.remote_id,
                "remote_url": post.remote_url,
            }
            if post.remote_date is not None:
                update["modified_at"] = post.remote_date
            return item.model_copy(update=update)

        self._log.info("Uploading media %s", item.local_file)
        media = self.client.upload_media(
            item, self.media_dir / item.local_file
        )
        return item.model_copy(
            update={
                "remote_id": media.remote_id,
                "remote_url": media.remote_url,
            }
        )

    def _update(self, item: ContentItem) -> ContentItem:
        if not isinstance(item, PostItem):
            raise ValueError(
                f"Media has no update path: {item.local_file}"
            )
        self._log.info(
            "Updating post %s (id=%s)", item.local_file, item.remote_id
        )
        remote_date = self.client.update_post(item)
        if remote_date is None:
            return item
        return item.model_copy(update={"modified_at": remote_date})

    def _run(
        self,
        items: Sequence[ContentItem],
        action: SyncAction,
        operation: Callable[[ContentItem], ContentItem],
    ) -> PublishOutcome:
        published: list[ContentItem] = []
        results: list[SyncResult] = []
        for item in items:
            kind = item.kind
            try:
                done = operation(item)
            except Exception as exc:
                self._log.error(
                    "Failed to %s %s %s: %s",
                    action.value,
                    kind.value,
                    item.local_file,
                    exc,
                )
                results.append(
                    SyncResult(
                        kind=kind,
                        local_file=item.local_file,
                        action=action,
                        success=False,
                        error=str(exc),
                        remote_id=item.remote_id,
                        remote_url=item.remote_url,
                    )
                )
                continue

            published.append(done)
            results.append(
                SyncResult(
                    kind=kind,
                    local_file=done.local_file,
                    action=action,
                    success=True,
                    remote_id=done.remote_id,
                    remote_url=done.remote_url,
                )
            )
        return PublishOutcome(published=published, results=results)
