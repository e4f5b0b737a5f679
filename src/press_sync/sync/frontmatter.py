"""Front matter parsing for markdown posts.

A post file is an optional metadata block followed by a markdown body::

    ---
    title: "Hello"
    date: 2021-03-01
    category: notes
    tags: python, sync
    status: draft
    ---
    Body text

The block is bounded by two lines that are exactly ``---`` (surrounding
whitespace ignored). Inside it, ``key: value`` lines are read; unknown
keys are ignored. With fewer than two delimiter lines the whole file is
body and every field keeps its default.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from press_sync.converters.markdown import MarkdownRenderer, render_markdown
from press_sync.file_handler import read_file_with_encoding
from press_sync.sync.models import ParsedPost

logger = logging.getLogger(__name__)

DELIMITER = "---"
DATE_FORMAT = "%Y-%m-%d"

_STRING_KEYS = ("title", "category", "tags", "status")


def _split_front_matter(
    lines: list[str],
) -> tuple[list[str], list[str]] | None:
    """Split *lines* into (metadata lines, body lines).

    Returns ``None`` when the file has fewer than two delimiter lines.
    """
    delimiters = [
        i for i, line in enumerate(lines) if line.strip() == DELIMITER
    ][:2]
    if len(delimiters) < 2:
        return None
    first, second = delimiters
    return lines[first + 1 : second], lines[second + 1 :]


def _parse_line(line: str) -> tuple[str, str] | None:
    """Parse one ``key: value`` line; ``None`` if it has no key."""
    line = line.strip()
    colon = line.find(":")
    if colon <= 0:
        return None
    key = line[:colon].strip()
    value = line[colon + 1 :].strip().strip('"')
    return key, value


def parse_front_matter(
    raw: str,
    render: MarkdownRenderer = render_markdown,
    now: Callable[[], datetime] = datetime.now,
) -> ParsedPost:
    """Parse raw post content into a normalized ``ParsedPost``.

    Args:
        raw: Full file content.
        render: Markdown-to-HTML renderer applied to the body.
        now: Clock used for the default ``date``.

    Returns:
        ``ParsedPost`` with defaults (``status="publish"``, ``date=now()``,
        empty strings) for anything the file does not set.
    """
    fields: dict[str, str] = {}
    date = now()
    has_date = False

    lines = raw.split("\n")
    split = _split_front_matter(lines)
    if split is None:
        body_lines = lines
    else:
        meta_lines, body_lines = split
        for line in meta_lines:
            parsed = _parse_line(line)
            if parsed is None:
                continue
            key, value = parsed
            if key in _STRING_KEYS:
                fields[key] = value
            elif key == "date":
                try:
                    date = datetime.strptime(value, DATE_FORMAT)
                    has_date = True
                except ValueError:
                    logger.debug("Ignoring unparsable date %r", value)

    body = "\n".join(body_lines)
    return ParsedPost(
        title=fields.get("title", ""),
        date=date,
        has_date=has_date,
        category=fields.get("category", ""),
        tags=fields.get("tags", ""),
        status=fields.get("status", "publish"),
        body_html=render(body),
    )


def read_post(
    path: Path,
    render: MarkdownRenderer = render_markdown,
    log: logging.Logger | None = None,
) -> ParsedPost:
    """Read and parse a post file.

    An unreadable file is reported as a warning and parsed as empty
    content, so one bad file never aborts the run.
    """
    log = log or logger
    try:
        raw, _ = read_file_with_encoding(path)
    except OSError as exc:
        log.warning("Error: can't read file %s: %s", path.name, exc)
        raw = ""
    return parse_front_matter(raw, render=render)
