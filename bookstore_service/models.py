"""
Record and result types for the bookstore collection.

The database enforces no schema, so documents are validated here, at the
boundary where they are built (seeding) or read back (whole-record steps
and aggregation rows).
"""

from typing import Annotated, Any, Dict, Iterable, List, Optional

from bson.decimal128 import Decimal128
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

BOOK_FIELDS = (
    "title",
    "author",
    "genre",
    "published_year",
    "price",
    "in_stock",
    "pages",
    "publisher",
)


def _decimal128_to_float(value: Any) -> Any:
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    return value


# Prices may be stored as doubles or as BSON Decimal128; both read back as float.
Price = Annotated[float, BeforeValidator(_decimal128_to_float)]


class Book(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    author: str
    genre: str
    published_year: int
    price: Price = Field(ge=0)
    in_stock: bool
    pages: Optional[int] = None
    publisher: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        """Dict ready for ``insert_many`` (unset optional fields dropped)."""
        return self.model_dump(exclude_none=True)


class BookSummary(BaseModel):
    """Projection row: title, author and price only."""

    model_config = ConfigDict(extra="forbid")

    title: str
    author: str
    price: Price


# ---------------------- AGGREGATION ROWS ----------------------


class GenreAveragePrice(BaseModel):
    genre: Optional[str] = Field(alias="_id")
    avg_price: Optional[Price] = Field(alias="avgPrice")


class AuthorBookCount(BaseModel):
    author: Optional[str] = Field(alias="_id")
    count: int


class DecadeCount(BaseModel):
    decade: Optional[int] = Field(alias="_id")
    count: int


ROW_MODELS = {
    "book": Book,
    "book_summary": BookSummary,
    "genre_avg_price": GenreAveragePrice,
    "author_count": AuthorBookCount,
    "decade_count": DecadeCount,
}


def parse_rows(rows: Iterable[Dict[str, Any]], model_name: str) -> List[BaseModel]:
    """Validate raw documents against one of ``ROW_MODELS``.

    Raises ``pydantic.ValidationError`` on the first malformed row.
    """
    model = ROW_MODELS[model_name]
    return [model.model_validate(row) for row in rows]
