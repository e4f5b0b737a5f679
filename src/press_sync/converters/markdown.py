"""Markdown to HTML rendering using mistune.

Post bodies are rendered once, locally, before they are sent to the
remote site. The renderer is a plain callable so callers (and tests) can
substitute their own.
"""

from typing import Callable

import mistune

MarkdownRenderer = Callable[[str], str]

# Plugins enabled for post bodies. Fenced code, headings and lists are core.
_PLUGINS = ["table", "strikethrough", "footnotes", "url"]


def create_renderer(escape: bool = False) -> MarkdownRenderer:
    """Build a markdown-to-HTML renderer.

    Args:
        escape: Escape raw HTML in the source instead of passing it through.

    Returns:
        A callable ``render(markdown_text) -> html_text``.
    """
    markdown = mistune.create_markdown(
        escape=escape, renderer="html", plugins=_PLUGINS
    )

    def render(markdown_text: str) -> str:
        result: str = markdown(markdown_text)  # type: ignore[assignment]
        return result

    return render


_default_renderer = create_renderer()


def render_markdown(markdown_text: str) -> str:
    """
    Render Markdown text to HTML.

    Args:
        markdown_text: Markdown formatted text

    Returns:
        HTML text. Empty input yields an empty string.
    """
    if not markdown_text.strip():
        return ""
    return _default_renderer(markdown_text)
