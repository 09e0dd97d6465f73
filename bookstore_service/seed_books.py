"""
Load the sample bookstore records into the books collection.

The query runner never creates records; run this first against an empty
database:

    python seed_books.py
"""

import sys
from typing import Any, Dict, Iterable, List, Optional

from pymongo.collection import Collection

from config import COLLECTION_NAME, DATABASE_NAME, MONGO_URI
from cluster_manager import open_collection
from models import Book
from logger import logger

SAMPLE_BOOKS: List[Dict[str, Any]] = [
    {"title": "To Kill a Mockingbird", "author": "Harper Lee", "genre": "Fiction",
     "published_year": 1960, "price": 12.99, "in_stock": True, "pages": 336,
     "publisher": "J. B. Lippincott & Co."},
    {"title": "1984", "author": "George Orwell", "genre": "Dystopian",
     "published_year": 1949, "price": 10.99, "in_stock": True, "pages": 328,
     "publisher": "Secker & Warburg"},
    {"title": "The Great Gatsby", "author": "F. Scott Fitzgerald", "genre": "Fiction",
     "published_year": 1925, "price": 9.99, "in_stock": True, "pages": 180,
     "publisher": "Charles Scribner's Sons"},
    {"title": "Brave New World", "author": "Aldous Huxley", "genre": "Dystopian",
     "published_year": 1932, "price": 11.50, "in_stock": False, "pages": 311,
     "publisher": "Chatto & Windus"},
    {"title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "Fantasy",
     "published_year": 1937, "price": 14.99, "in_stock": True, "pages": 310,
     "publisher": "George Allen & Unwin"},
    {"title": "The Catcher in the Rye", "author": "J.D. Salinger", "genre": "Fiction",
     "published_year": 1951, "price": 8.99, "in_stock": True, "pages": 224,
     "publisher": "Little, Brown and Company"},
    {"title": "Pride and Prejudice", "author": "Jane Austen", "genre": "Romance",
     "published_year": 1813, "price": 7.99, "in_stock": True, "pages": 432,
     "publisher": "T. Egerton, Whitehall"},
    {"title": "The Lord of the Rings", "author": "J.R.R. Tolkien", "genre": "Fantasy",
     "published_year": 1954, "price": 19.99, "in_stock": True, "pages": 1178,
     "publisher": "Allen & Unwin"},
    {"title": "Animal Farm", "author": "George Orwell", "genre": "Political Satire",
     "published_year": 1945, "price": 8.50, "in_stock": False, "pages": 112,
     "publisher": "Secker & Warburg"},
    {"title": "The Alchemist", "author": "Paulo Coelho", "genre": "Fiction",
     "published_year": 1988, "price": 10.99, "in_stock": True, "pages": 197,
     "publisher": "HarperOne"},
    {"title": "Moby Dick", "author": "Herman Melville", "genre": "Adventure",
     "published_year": 1851, "price": 12.50, "in_stock": False, "pages": 635,
     "publisher": "Harper & Brothers"},
    {"title": "Wuthering Heights", "author": "Emily Brontë", "genre": "Gothic Fiction",
     "published_year": 1847, "price": 9.99, "in_stock": True, "pages": 342,
     "publisher": "Thomas Cautley Newby"},
]


def build_books(records: Iterable[Dict[str, Any]]) -> List[Book]:
    """Validate raw records; raises ``pydantic.ValidationError`` on the first bad one."""
    return [Book.model_validate(record) for record in records]


def seed_collection(
    collection: Collection,
    records: Optional[Iterable[Dict[str, Any]]] = None,
    drop: bool = True,
) -> int:
    """Insert ``records`` (default ``SAMPLE_BOOKS``); returns the number inserted.

    With ``drop=True`` existing documents are removed first so the
    collection holds exactly the seeded set.
    """
    books = build_books(SAMPLE_BOOKS if records is None else records)
    if drop:
        removed = collection.delete_many({}).deleted_count
        logger.info("[SEED] Removed %d existing documents", removed)
    if not books:
        return 0
    result = collection.insert_many([book.to_document() for book in books])
    logger.info("[SEED] Inserted %d books", len(result.inserted_ids))
    return len(result.inserted_ids)


def main() -> int:
    try:
        with open_collection(MONGO_URI, DATABASE_NAME, COLLECTION_NAME) as collection:
            inserted = seed_collection(collection)
    except Exception as e:
        logger.error("[SEED] Seeding failed: %s", e)
        print(f"Error: {e}")
        return 1
    print(f"{inserted} books inserted into {DATABASE_NAME}.{COLLECTION_NAME}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
