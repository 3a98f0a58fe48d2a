"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory async database, fake embeddings, fake blob storage,
minimal PDF builder, seeded books
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import asyncio
import io
import uuid
from collections.abc import Sequence
from unittest.mock import MagicMock

import pytest
from pypdf import PdfReader, PdfWriter
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bookshelf.boundary.db.CRUD.book_crud import book_crud
from bookshelf.boundary.db.base import Base
from bookshelf.boundary.db.models import BookChunkModel, BookModel
from bookshelf.core.document_processing.models import BookStatus
from bookshelf.core.exceptions import StorageObjectNotFoundError


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages: Sequence[Sequence[tuple[float, str]]]) -> bytes:
    """
    Build a minimal PDF with one Helvetica text line per (baseline y, text).

    Args:
        pages: Per page, a list of (y, text) lines; an empty list is a blank page

    Returns:
        bytes: PDF file content with a valid xref table
    """
    objects: dict[int, bytes] = {}
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{page_id} 0 R" for page_id in page_ids)

    objects[1] = b"<< /Type /Catalog /Pages 2 0 R >>"
    objects[2] = f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode()
    objects[3] = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>"

    for page_id, lines in zip(page_ids, pages):
        stream = "".join(
            f"BT /F1 12 Tf 72 {y} Td ({_escape_pdf_text(text)}) Tj ET\n" for y, text in lines
        ).encode("latin-1")
        objects[page_id] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
        ).encode()
        objects[page_id + 1] = (
            f"<< /Length {len(stream)} >>\nstream\n".encode() + stream + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for number in sorted(objects):
        offsets[number] = len(out)
        out += f"{number} 0 obj\n".encode() + objects[number] + b"\nendobj\n"

    xref_position = len(out)
    size = max(objects) + 1
    out += f"xref\n0 {size}\n".encode()
    out += b"0000000000 65535 f \n"
    for number in range(1, size):
        out += f"{offsets[number]:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {size} /Root 1 0 R >>\nstartxref\n{xref_position}\n%%EOF\n"
    ).encode()
    return bytes(out)


class FakeEmbeddings:
    """
    Embeddings stand-in exposing aembed_query.

    Texts listed in ``fail_on`` raise; every call is recorded.
    """

    def __init__(self, dimension: int = 4, fail_on: Sequence[str] = ()) -> None:
        self.dimension = dimension
        self.fail_on = list(fail_on)
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def aembed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if text in self.fail_on:
                raise RuntimeError("quota exceeded")
            return [float(len(text))] + [0.5] * (self.dimension - 1)
        finally:
            self.in_flight -= 1


class FakeBookStorage:
    """In-memory blob storage with the S3BookStorage interface."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.removed: list[str] = []

    def download(self, key: str) -> bytes:
        if key not in self.objects:
            raise StorageObjectNotFoundError(f"File not found in storage: {key}", key)
        return self.objects[key]

    def upload(self, key: str, data: bytes, content_type: str = "application/pdf") -> None:
        self.objects[key] = data

    def remove(self, key: str) -> None:
        self.removed.append(key)
        self.objects.pop(key, None)


@pytest.fixture
def build_pdf():
    """Provide the minimal PDF builder."""
    return make_pdf


@pytest.fixture
async def async_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session of one test
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    """Provide a session factory bound to the test engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(session_factory):
    """
    Provide a single test database session.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def user_id() -> uuid.UUID:
    """Generate a test user ID."""
    return uuid.uuid4()


@pytest.fixture
def fake_embeddings() -> FakeEmbeddings:
    """Provide embeddings that always succeed."""
    return FakeEmbeddings()


@pytest.fixture
def fake_storage() -> FakeBookStorage:
    """Provide empty in-memory blob storage."""
    return FakeBookStorage()


@pytest.fixture
def create_book(session_factory, user_id):
    """
    Provide a coroutine that inserts a book row and returns it.

    Keyword arguments override the column defaults.
    """

    async def _create(**overrides) -> BookModel:
        values = {
            "user_id": user_id,
            "title": "Test Book",
            "file_path": f"{user_id}/books/{uuid.uuid4()}.pdf",
            "status": BookStatus.PROCESSING,
        }
        values.update(overrides)
        async with session_factory() as session:
            book = BookModel(**values)
            session.add(book)
            await session.commit()
            return book

    return _create


@pytest.fixture
def create_chunks(session_factory):
    """
    Provide a coroutine that inserts ``count`` chunk rows for a book.

    Chunk ``i`` has text ``"chunk text {i}"``; rows listed in ``embedded`` get a vector.
    The book's total_chunks is set to ``count`` as a finished processing run would.
    """

    async def _create(book: BookModel, count: int, embedded: Sequence[int] = ()) -> list[BookChunkModel]:
        async with session_factory() as session:
            chunks = [
                BookChunkModel(
                    book_id=book.id,
                    user_id=book.user_id,
                    chunk_index=i,
                    source=f"chunk {i + 1}",
                    chunk_text=f"chunk text {i}",
                    embedding_vector=[0.1, 0.2, 0.3, 0.4] if i in embedded else None,
                )
                for i in range(count)
            ]
            session.add_all(chunks)
            await book_crud.set_total_chunks(session, book.id, count)
            await session.commit()
            return chunks

    return _create


@pytest.fixture
def mock_storage_client() -> MagicMock:
    """Provide a mock boto3 S3 client."""
    return MagicMock()


@pytest.fixture
def embeddings_factory():
    """Provide the FakeEmbeddings class for tests that need failing texts."""
    return FakeEmbeddings


@pytest.fixture
def encrypt_pdf():
    """Provide a helper that password-protects PDF bytes with pypdf."""

    def _encrypt(data: bytes, password: str) -> bytes:
        writer = PdfWriter(clone_from=PdfReader(io.BytesIO(data)))
        writer.encrypt(user_password=password, owner_password=password)
        out = io.BytesIO()
        writer.write(out)
        return out.getvalue()

    return _encrypt
