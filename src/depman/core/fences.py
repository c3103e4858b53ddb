"""
Split Markdown-like content into plain text and fenced code segments.

A fenced block is recognized only when an opening and a closing triple
backtick are both present (matched non-greedily). The opening fence may carry
a language name and must be followed by a newline; anything else that looks
like a fence stays plain text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rich.console import Console
from rich.syntax import Syntax

FENCE_SPLIT = re.compile(r"(```[\s\S]*?```)")
FENCE_BODY = re.compile(r"```(\w+)?\n([\s\S]*?)```")

TEXT = "text"
CODE = "code"


@dataclass(frozen=True)
class Segment:
    """One piece of split content."""

    kind: str
    text: str
    language: str | None = None

    @property
    def is_code(self) -> bool:
        return self.kind == CODE


def split_fenced(content: str) -> list[Segment]:
    """Split *content* into alternating text and code segments.

    Code segment text is stripped of surrounding whitespace, which is what
    gets copied to the clipboard. Empty text between adjacent fences is
    dropped.
    """
    segments: list[Segment] = []
    for part in FENCE_SPLIT.split(content):
        if not part:
            continue
        if part.startswith("```"):
            match = FENCE_BODY.search(part)
            if match:
                language, code = match.groups()
                segments.append(Segment(CODE, code.strip(), language))
                continue
        segments.append(Segment(TEXT, part))
    return segments


def code_blocks(content: str) -> list[Segment]:
    """Return only the code segments of *content*."""
    return [segment for segment in split_fenced(content) if segment.is_code]


def print_fenced(console: Console, content: str) -> None:
    """Print *content* with fenced code highlighted."""
    for segment in split_fenced(content):
        if segment.is_code:
            console.print(Syntax(segment.text, segment.language or "text", line_numbers=False))
        elif segment.text.strip():
            console.print(segment.text.strip("\n"), markup=False, highlight=False)
