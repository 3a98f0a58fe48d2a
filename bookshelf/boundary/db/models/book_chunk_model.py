"""
Book chunk ORM model.

One windowed span of a book's text plus its embedding vector once the
embedding pass has produced it.

Dependencies: sqlalchemy, bookshelf.boundary.db.base
System role: Chunk persistence for retrieval
"""

import uuid

from sqlalchemy import JSON, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookshelf.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class BookChunkModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Book chunk ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        book_id: Parent book (ON DELETE CASCADE)
        user_id: Owner identifier, copied from the book
        chunk_index: Dense zero-based position within the book
        source: Location label such as "chunk 3"
        chunk_text: Chunk content
        embedding_vector: Float vector; NULL until embedded, never overwritten

    Constraints:
        (book_id, chunk_index) is unique
    """

    __tablename__ = "book_chunks"
    __table_args__ = (
        UniqueConstraint("book_id", "chunk_index", name="uq_book_chunks_book_index"),
    )

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )

    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)

    source: Mapped[str | None] = mapped_column(String(255), nullable=True)

    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)

    # none_as_null so an unset vector is SQL NULL rather than JSON 'null'
    embedding_vector: Mapped[list[float] | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
    )

    # Relationships
    book = relationship("BookModel", back_populates="chunks")
