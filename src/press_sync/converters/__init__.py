"""Markdown rendering for post bodies."""

from .markdown import MarkdownRenderer, create_renderer, render_markdown

__all__ = [
    "MarkdownRenderer",
    "create_renderer",
    "render_markdown",
]
