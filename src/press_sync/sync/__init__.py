"""One-directional publishing sync engine.

Public API for publishing a local directory of markdown posts and media
files to a remote site, recording what has been published so re-runs
are idempotent.

Architecture
------------
Local files are the source of truth. Each run joins local items to the
persisted snapshot by file name, publishes what is new, pushes posts
whose date moved forward, and merges the results back into the snapshot.
Remote deletions and edits are never detected.

Modules:

- ``engine``       -- ``SyncEngine``: orchestrates a full run.
- ``scanner``      -- local directory discovery (``ScanError`` if unreadable).
- ``frontmatter``  -- post front matter parsing.
- ``state``        -- ``SnapshotStore``: load/merge/save JSON snapshots.
- ``reconciler``   -- ``classify``: new / updated / unchanged partition.
- ``publisher``    -- ``PublisherDriver``: per-item create/update calls.
- ``models``       -- data contracts.
- ``reporter``     -- human-readable and JSON report formatting.

Usage example
-------------
::

    from press_sync.config import load_config
    from press_sync.core.client import WordPressClient
    from press_sync.sync import (
        SyncEngine,
        format_dry_run_preview,
        format_sync_report,
    )

    engine = SyncEngine(client=WordPressClient(load_config()))

    preview = engine.run(dry_run=True)
    print(format_dry_run_preview(preview))

    report = engine.run()
    print(format_sync_report(report))
"""

from .engine import SyncEngine
from .frontmatter import parse_front_matter, read_post
from .models import (
    Classification,
    ContentKind,
    MediaItem,
    ParsedPost,
    PostItem,
    SaveStatus,
    SyncAction,
    SyncReport,
    SyncResult,
)
from .publisher import PublisherDriver, PublishOutcome
from .reconciler import classify
from .reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from .scanner import ScanError, scan_media, scan_posts
from .state import SnapshotStore

__all__ = [
    "Classification",
    "ContentKind",
    "MediaItem",
    "ParsedPost",
    "PostItem",
    "PublishOutcome",
    "PublisherDriver",
    "SaveStatus",
    "ScanError",
    "SnapshotStore",
    "SyncAction",
    "SyncEngine",
    "SyncReport",
    "SyncResult",
    "classify",
    "format_dry_run_preview",
    "format_sync_report",
    "parse_front_matter",
    "read_post",
    "report_to_json",
    "scan_media",
    "scan_posts",
]
