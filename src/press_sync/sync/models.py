"""Pydantic models for the publishing sync engine.

Defines the core data contracts used across all sync modules:

- ``ContentKind``: The two parallel content tracks (posts, media).
- ``PostItem`` / ``MediaItem``: A local or published content item.
- ``ParsedPost``: Normalized front matter plus rendered body.
- ``Classification``: Reconciler output for one content kind.
- ``SyncAction``: Enum of possible sync operations.
- ``SyncResult``: Outcome of syncing one item.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable); stages produce updated copies with
``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar, Union

from pydantic import BaseModel


class ContentKind(str, Enum):
    """Content tracks with independent snapshots and rules."""

    POST = "post"
    MEDIA = "media"


class SyncAction(str, Enum):
    """Possible sync operations for a local item."""

    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


class SaveStatus(str, Enum):
    """Outcome of persisting a snapshot."""

    SKIPPED = "skipped"
    WRITTEN = "written"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Content items
# ---------------------------------------------------------------------------


class MediaItem(BaseModel):
    """A media file, either scanned locally or loaded from the snapshot.

    Attributes:
        local_file: File name relative to the media directory (join key).
        remote_id: Attachment id assigned by the remote site.
        remote_url: Public URL assigned by the remote site.
        modified_at: File modification time (not used for diffing).
    """

    local_file: str
    remote_id: str | None = None
    remote_url: str | None = None
    modified_at: datetime | None = None

    kind: ClassVar[ContentKind] = ContentKind.MEDIA

    model_config = {"frozen": True, "coerce_numbers_to_str": True}

    def to_record(self) -> dict:
        """Return the JSON-ready snapshot record for this item."""
        return {
            "local_file": self.local_file,
            "remote_id": self.remote_id,
            "remote_url": self.remote_url,
        }


class PostItem(BaseModel):
    """A markdown post, either scanned locally or loaded from the snapshot.

    Attributes:
        local_file: File name relative to the posts directory (join key).
        remote_id: Post id assigned by the remote site.
        remote_url: Permalink assigned by the remote site.
        modified_at: Front matter date, or the file mtime when undated.
            After publishing this holds the remote post date.
        title: Post title.
        body_html: Rendered body; never persisted.
        category: Single category name.
        tags: Comma separated tag string, as written in front matter.
        status: Remote post status (``publish``, ``draft``, ...).
    """

    local_file: str
    remote_id: str | None = None
    remote_url: str | None = None
    modified_at: datetime | None = None
    title: str = ""
    body_html: str = ""
    category: str = ""
    tags: str = ""
    status: str = "publish"

    kind: ClassVar[ContentKind] = ContentKind.POST

    model_config = {"frozen": True, "coerce_numbers_to_str": True}

    @property
    def tag_list(self) -> list[str]:
        """Tags split on commas, blanks dropped."""
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    def to_record(self) -> dict:
        """Return the JSON-ready snapshot record for this item."""
        return {
            "local_file": self.local_file,
            "remote_id": self.remote_id,
            "remote_url": self.remote_url,
            "modified_at": (
                self.modified_at.isoformat() if self.modified_at else None
            ),
            "title": self.title,
            "tags": self.tags,
            "category": self.category,
            "status": self.status,
        }


ContentItem = Union[PostItem, MediaItem]

ITEM_MODELS: dict[ContentKind, type[PostItem] | type[MediaItem]] = {
    ContentKind.POST: PostItem,
    ContentKind.MEDIA: MediaItem,
}


class ParsedPost(BaseModel):
    """Normalized front matter and rendered body of one post file.

    ``has_date`` records whether ``date`` came from the file or is the
    parse-time default.
    """

    title: str = ""
    date: datetime
    has_date: bool = False
    category: str = ""
    tags: str = ""
    status: str = "publish"
    body_html: str = ""

    model_config = {"frozen": True}


class Classification(BaseModel):
    """Reconciler output for one content kind.

    All three lists are ordered subsequences of the local items (as
    joined copies) and are pairwise disjoint.
    """

    new_items: list[ContentItem] = []
    updated_items: list[ContentItem] = []
    skipped_items: list[ContentItem] = []

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Remote responses
# ---------------------------------------------------------------------------


class RemotePost(BaseModel):
    """Identifiers returned by the remote site after creating a post."""

    remote_id: str
    remote_url: str | None = None
    remote_date: datetime | None = None

    model_config = {"frozen": True}


class RemoteMedia(BaseModel):
    """Identifiers returned by the remote site after uploading media."""

    remote_id: str
    remote_url: str | None = None

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Results and report
# ---------------------------------------------------------------------------


class SyncResult(BaseModel):
    """Result of syncing one local item.

    Attributes:
        kind: Content kind of the item.
        local_file: Item join key.
        action: Sync action that was performed (or planned on dry run).
        success: Whether the remote operation succeeded.
        error: Error or warning message, if any.
        remote_id: Remote identifier after the operation.
        remote_url: Remote URL after the operation.
    """

    kind: ContentKind
    local_file: str
    action: SyncAction
    success: bool = True
    error: str | None = None
    remote_id: str | None = None
    remote_url: str | None = None

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a full sync run.

    Attributes:
        dry_run: Whether this was a dry-run (no changes applied).
        results: List of individual sync results.
        started_at: ISO 8601 timestamp when sync started.
        completed_at: ISO 8601 timestamp when sync completed.
    """

    dry_run: bool = False
    results: list[SyncResult] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @property
    def created(self) -> list[SyncResult]:
        """Successful results where action is CREATE."""
        return [
            r
            for r in self.results
            if r.action == SyncAction.CREATE and r.success
        ]

    @property
    def updated(self) -> list[SyncResult]:
        """Successful results where action is UPDATE."""
        return [
            r
            for r in self.results
            if r.action == SyncAction.UPDATE and r.success
        ]

    @property
    def skipped(self) -> list[SyncResult]:
        """Results where action is SKIP."""
        return [r for r in self.results if r.action == SyncAction.SKIP]

    @property
    def errors(self) -> list[SyncResult]:
        """Results where success is False."""
        return [r for r in self.results if not r.success]

    def summary(self) -> str:
        """Format a human-readable summary of the sync run.

        Returns:
            Multi-line summary string with counts by action.
        """
        lines = [
            "Sync report" + (" (dry run)" if self.dry_run else ""),
            f"  Created: {len(self.created)}",
            f"  Updated: {len(self.updated)}",
            f"  Skipped: {len(self.skipped)}",
            f"  Errors:  {len(self.errors)}",
            f"  Total:   {len(self.results)}",
        ]
        return "\n".join(lines)
