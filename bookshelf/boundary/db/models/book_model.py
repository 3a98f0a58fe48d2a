"""
Book ORM model.

Represents an uploaded PDF with its processing status and chunk count.
Tracks the ingestion lifecycle from upload to embedded chunks.

Dependencies: sqlalchemy, bookshelf.boundary.db.base
System role: Book persistence for ingestion tracking
"""

import uuid

from sqlalchemy import Enum, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookshelf.boundary.db.base import Base, TimestampMixin, UUIDMixin
from bookshelf.core.document_processing.models.status import BookStatus, FailureReason


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class BookModel(Base, UUIDMixin, TimestampMixin):
    """
    Book ORM model tracking ingestion pipeline state.

    Lifecycle: Upload (PROCESSING) → chunking sets total_chunks →
    embedding moves the book to READY or FAILED. A FAILED book can be
    re-processed, which resets it to PROCESSING.

    Attributes:
        id: UUID primary key (auto-generated)
        user_id: Owner identifier
        title: Display title (255 char limit)
        file_path: Blob storage key of the PDF (1024 char limit)
        status: PROCESSING / READY / FAILED
        total_chunks: Chunks created by the last successful chunking run
        failure_reason: Failure category when FAILED
        error_message: Human-readable failure description (2048 char limit)

    Relationships:
        chunks: BookChunkModel rows, deleted with the book
    """

    __tablename__ = "books"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    file_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        doc="Blob storage key for the raw PDF",
    )

    status: Mapped[BookStatus] = mapped_column(
        Enum(BookStatus, native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=BookStatus.PROCESSING,
    )

    total_chunks: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    failure_reason: Mapped[FailureReason | None] = mapped_column(
        Enum(FailureReason, native_enum=False, values_callable=_enum_values),
        nullable=True,
    )

    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if processing failed",
    )

    # Relationships
    chunks = relationship(
        "BookChunkModel",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
