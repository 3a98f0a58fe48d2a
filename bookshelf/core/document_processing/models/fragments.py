"""
Positioned text stream items produced while reading a PDF.

Dependencies: dataclasses (stdlib)
System role: Contract between the PDF reader and page reconstruction
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextFragment:
    """A run of text and the row it sits on (grows downward from the page top)."""

    text: str
    y: float


@dataclass(frozen=True)
class PageBreak:
    """Signals that the following fragments belong to page ``page``."""

    page: int
