"""
PDF text extraction task using pypdf.

Streams positioned text fragments page by page and rebuilds reading-order
text: fragments on the same row are joined with spaces, rows are joined
top-to-bottom with newlines, and every page is emitted as a
``[Page N]`` block. Pages are separated by a blank line.

pypdf reads from a file path here, so the uploaded bytes are written to a
private temp directory that is always removed before returning.

Dependencies: pypdf
System role: First stage of book ingestion pipeline
"""

import logging
import os
import shutil
import tempfile
import uuid
from collections.abc import Iterable, Iterator

from pypdf import PdfReader

from bookshelf.core.exceptions import ParsingError

from ..models import PageBreak, TextFragment

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "Failed to parse PDF. The file may be corrupted or password-protected."


class PageAccumulator:
    """
    Row buffer for the page currently being read.

    Owned by a single extraction run and reset on every page change.
    """

    def __init__(self, page: int = 1) -> None:
        self.page = page
        self._rows: dict[float, list[str]] = {}

    def add(self, fragment: TextFragment) -> None:
        self._rows.setdefault(fragment.y, []).append(fragment.text)

    def is_empty(self) -> bool:
        return not self._rows

    def render(self) -> str:
        """Join rows top-to-bottom, fragments within a row left-to-right."""
        return "\n".join(" ".join(self._rows[y]) for y in sorted(self._rows))

    def flush(self, next_page: int) -> str | None:
        """
        Finalize the buffered page and move on to ``next_page``.

        Returns:
            str | None: ``[Page N]`` block, or None when the page had no text
        """
        block = None
        if not self.is_empty():
            block = f"[Page {self.page}]\n{self.render()}"
        self._rows = {}
        self.page = next_page
        return block


def reconstruct_text(items: Iterable[TextFragment | PageBreak], first_page: int = 1) -> str:
    """
    Rebuild page-marked reading-order text from a fragment stream.

    Args:
        items: Fragments interleaved with page-change signals
        first_page: Page number assumed before the first signal

    Returns:
        str: Page blocks joined by a blank line ("" when no text was found)
    """
    accumulator = PageAccumulator(first_page)
    pages: list[str] = []

    for item in items:
        if isinstance(item, PageBreak):
            block = accumulator.flush(item.page)
            if block is not None:
                pages.append(block)
        elif item.text:
            accumulator.add(item)

    # End of stream
    block = accumulator.flush(accumulator.page)
    if block is not None:
        pages.append(block)

    return "\n\n".join(pages)


def _row_position(cm: list[float], tm: list[float], page_top: float) -> float:
    """Distance of the text baseline below the page top, in points."""
    # Text space origin mapped through the current transformation matrix
    y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
    return round(page_top - y, 1)


class PdfExtractionTask:
    """Extract page-marked reading-order text from PDF bytes."""

    def __init__(self, temp_root: str | None = None) -> None:
        """
        Initialize extraction task.

        Args:
            temp_root: Parent directory for per-run temp dirs (system default if None)
        """
        self._temp_root = temp_root

    def extract(self, data: bytes) -> str:
        """
        Extract text from PDF bytes.

        Args:
            data: Raw PDF file content

        Returns:
            str: ``[Page N]``-marked text, empty when the PDF has no text layer

        Raises:
            ParsingError: When the PDF is malformed or encrypted
        """
        temp_dir = tempfile.mkdtemp(prefix="book_pdf_", dir=self._temp_root)
        file_path = os.path.join(temp_dir, f"{uuid.uuid4()}.pdf")

        try:
            with open(file_path, "wb") as f:
                f.write(data)

            text = reconstruct_text(self.iter_fragments(file_path))

            logger.info(
                f"{__name__}:extract - PDF text extracted",
                extra={"byte_count": len(data), "char_count": len(text)},
            )
            return text

        except ParsingError:
            raise
        except Exception as e:
            logger.warning(f"{__name__}:extract - {type(e).__name__}: {e}")
            raise ParsingError(
                PARSE_FAILURE_MESSAGE,
                details={"error": f"{type(e).__name__}: {e}"},
            ) from e
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

    def iter_fragments(self, file_path: str) -> Iterator[TextFragment | PageBreak]:
        """
        Stream page signals and positioned fragments from a PDF file.

        Args:
            file_path: Path to a PDF file

        Yields:
            PageBreak before each page, then that page's TextFragments

        Raises:
            ParsingError: When the PDF is encrypted with a non-empty password
        """
        reader = PdfReader(file_path)

        if reader.is_encrypted and not reader.decrypt(""):
            raise ParsingError(
                PARSE_FAILURE_MESSAGE,
                details={"error": "PDF is password-protected"},
            )

        for page_number, page in enumerate(reader.pages, start=1):
            yield PageBreak(page=page_number)

            page_top = float(page.mediabox.top)
            fragments: list[TextFragment] = []

            def visitor(text, cm, tm, font_dict, font_size) -> None:
                if not text or not text.strip():
                    return
                fragments.append(
                    TextFragment(text=text.strip(), y=_row_position(cm, tm, page_top))
                )

            page.extract_text(visitor_text=visitor)
            yield from fragments
