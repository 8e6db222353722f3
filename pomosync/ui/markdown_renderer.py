# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from markdown import markdown


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    codebg: str = "#F3F4F6"
    link: str = "#2563EB"
    quote: str = "#3B82F6"


LIGHT_THEME = MarkdownTheme()
DARK_THEME = MarkdownTheme(
    text="#F3F4F6",
    muted="#9CA3AF",
    border="#374151",
    panel="#1F2937",
    codebg="#111827",
    link="#60A5FA",
    quote="#60A5FA",
)


def theme_for(mode: str) -> MarkdownTheme:
    return DARK_THEME if mode == "dark" else LIGHT_THEME


class MarkdownRenderer:
    """
    Task descriptions -> HTML for the tkinterweb preview.

    tkinterweb (tkhtml) is limited HTML: checkbox <input> tags do not render,
    so task lists are turned into unicode boxes before conversion.
    """

    _unchecked = re.compile(r"^(\s*[-*+]\s+)\[ \]\s+")
    _checked = re.compile(r"^(\s*[-*+]\s+)\[(x|X)\]\s+")

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or MarkdownTheme()

    def preprocess(self, md_text: str) -> str:
        if not md_text:
            return ""
        out: List[str] = []
        for line in md_text.splitlines():
            line = self._checked.sub("\\1\u2611 ", line)
            line = self._unchecked.sub("\\1\u2610 ", line)
            out.append(line)
        return "\n".join(out)

    def extensions(self) -> Tuple[List[str], Dict]:
        exts: List[str] = [
            "extra",
            "sane_lists",
            "nl2br",
            "admonition",
        ]
        return exts, {}

    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 10px;
          color: {t.text};
          background: {t.panel};
          font-size: 13px;
          line-height: 1.5;
        }}
        p {{ margin: 0.5em 0; }}
        a {{ color: {t.link}; text-decoration: none; }}
        ul, ol {{ padding-left: 1.2em; margin: 0.5em 0; }}
        blockquote {{
          margin: 0.6em 0;
          padding: 0.2em 0 0.2em 0.8em;
          border-left: 4px solid {t.quote};
          color: {t.muted};
        }}
        code {{
          font-family: ui-monospace, Menlo, Consolas, monospace;
          background: {t.codebg};
          padding: 2px 4px;
        }}
        pre {{
          background: {t.codebg};
          padding: 8px 10px;
          border: 1px solid {t.border};
        }}
        .empty {{ color: {t.muted}; font-style: italic; }}
        """

    def to_html(self, md_text: str) -> str:
        if not (md_text or "").strip():
            body = '<p class="empty">No description.</p>'
        else:
            exts, cfg = self.extensions()
            body = markdown(
                self.preprocess(md_text),
                extensions=exts,
                extension_configs=cfg,
                output_format="html5",
            )
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """
