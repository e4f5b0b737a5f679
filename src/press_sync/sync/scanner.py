"""Local content discovery.

Enumerates a content directory and builds one item per file whose suffix
matches the content kind (``.md`` for posts, ``.jpg`` for media). Output is
sorted by file name so runs are deterministic regardless of the order the
filesystem lists entries in.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from press_sync.converters.markdown import MarkdownRenderer, render_markdown
from press_sync.sync.frontmatter import read_post
from press_sync.sync.models import MediaItem, PostItem

logger = logging.getLogger(__name__)

POST_EXTENSION = ".md"
MEDIA_EXTENSION = ".jpg"


class ScanError(Exception):
    """Raised when a content directory cannot be read."""


def list_content_files(directory: Path, extension: str) -> list[Path]:
    """Return regular files in *directory* with the given suffix.

    Suffix matching is case-insensitive. Subdirectories are not descended.

    Raises:
        ScanError: If the directory is missing or unreadable.
    """
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise ScanError(
            f"Error reading directory {directory}: {exc}"
        ) from exc

    wanted = extension.lower()
    files = [
        p
        for p in entries
        if p.suffix.lower() == wanted and p.is_file()
    ]
    return sorted(files, key=lambda p: p.name)


def _mtime(path: Path) -> datetime:
    # Whole seconds: the remote site stores post dates without fractions.
    return datetime.fromtimestamp(int(path.stat().st_mtime))


def scan_media(
    directory: Path, extension: str = MEDIA_EXTENSION
) -> list[MediaItem]:
    """Build media items for every matching file in *directory*."""
    items = [
        MediaItem(local_file=p.name, modified_at=_mtime(p))
        for p in list_content_files(directory, extension)
    ]
    logger.debug("Found %d local media files in %s", len(items), directory)
    return items


def scan_posts(
    directory: Path,
    extension: str = POST_EXTENSION,
    render: MarkdownRenderer = render_markdown,
    log: logging.Logger | None = None,
) -> list[PostItem]:
    """Build post items for every matching file in *directory*.

    ``modified_at`` is seeded from the file mtime and replaced by the
    front matter date when the file declares one.
    """
    items: list[PostItem] = []
    for path in list_content_files(directory, extension):
        parsed = read_post(path, render=render, log=log)
        items.append(
            PostItem(
                local_file=path.name,
                modified_at=parsed.date if parsed.has_date else _mtime(path),
                title=parsed.title,
                body_html=parsed.body_html,
                category=parsed.category,
                tags=parsed.tags,
                status=parsed.status,
            )
        )
    logger.debug("Found %d local posts in %s", len(items), directory)
    return items
