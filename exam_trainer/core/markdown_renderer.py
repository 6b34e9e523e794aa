"""Markdown rendering helpers for e-mails and the admin preview.

Both consumers get plain HTML: mail clients render it directly and the admin
console shows it in a ``QTextBrowser``. Raw HTML inside the source is
disabled so user-entered text cannot inject markup.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field

from markdown_it import MarkdownIt


@dataclass(slots=True)
class MarkdownRenderer:
    """Converts markdown into HTML fragments or standalone documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a markdown string into an HTML fragment."""

        sanitized = (markdown_text or "").strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_document(self, markdown_text: str, title: str = "ExamTrainer") -> str:
        """Wrap the rendered fragment in a minimal, mail-safe HTML document."""

        body_html = self.render_fragment(markdown_text)
        return f"""<!doctype html>
<html lang="de">
  <head>
    <meta charset="utf-8" />
    <title>{html.escape(title)}</title>
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.5; color: #1f2937;">
    {body_html}
  </body>
</html>"""


renderer = MarkdownRenderer()
# MarkdownIt only reads its configuration while rendering, so the shared
# instance is safe to use from the API threads and the Qt thread.
