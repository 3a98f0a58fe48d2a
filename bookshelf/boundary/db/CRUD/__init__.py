"""CRUD repositories for the relational datastore."""

from bookshelf.boundary.db.CRUD.base_crud import BaseCRUD
from bookshelf.boundary.db.CRUD.book_crud import BookCRUD, book_crud
from bookshelf.boundary.db.CRUD.book_chunk_crud import BookChunkCRUD, book_chunk_crud

__all__ = ["BaseCRUD", "BookCRUD", "book_crud", "BookChunkCRUD", "book_chunk_crud"]
