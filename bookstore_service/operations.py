"""
The bookstore query plan: an ordered list of operation descriptors.

Each descriptor is a plain dict the executor understands:

  - ``name``     — stable identifier used in logs and error reports
  - ``section``  — console header the step is printed under
  - ``label``    — console caption for the step's result
  - ``kind``     — ``find`` | ``update_one`` | ``delete_one`` | ``aggregate``
                   | ``create_index`` | ``explain``
  - arguments    — ``filter``, ``update``, ``projection``, ``sort``, ``skip``,
                   ``limit``, ``pipeline``, ``keys``, ``verbosity`` (per kind)
  - ``report``   — shape of the printed result (see ``REPORT_SHAPES``)
  - ``model``    — optional row model from ``models.ROW_MODELS`` used to
                   validate returned documents

Descriptors are data: the runner loops over them, the validator checks
them, and tests can inspect any single step without a database.
"""

import copy
from typing import Any, Dict, List

from pymongo import ASCENDING, DESCENDING

# ---------------------- KINDS & REPORT SHAPES ----------------------

KIND_FIND = "find"
KIND_UPDATE_ONE = "update_one"
KIND_DELETE_ONE = "delete_one"
KIND_AGGREGATE = "aggregate"
KIND_CREATE_INDEX = "create_index"
KIND_EXPLAIN = "explain"

# report shape -> kinds it can describe
REPORT_SHAPES = {
    "titles": {KIND_FIND},
    "sample": {KIND_FIND},
    "first_title": {KIND_FIND},
    "documents": {KIND_FIND, KIND_AGGREGATE},
    "first_document": {KIND_AGGREGATE},
    "update": {KIND_UPDATE_ONE},
    "delete": {KIND_DELETE_ONE},
    "index": {KIND_CREATE_INDEX},
    "stats": {KIND_EXPLAIN},
}

SECTION_BASIC = "Basic Queries"
SECTION_ADVANCED = "Advanced Queries"
SECTION_AGGREGATION = "Aggregation Pipelines"
SECTION_INDEXING = "Indexing"

# ---------------------- PIPELINES ----------------------

AVG_PRICE_BY_GENRE_PIPELINE = [
    {"$group": {"_id": "$genre", "avgPrice": {"$avg": "$price"}}},
]

TOP_AUTHOR_PIPELINE = [
    {"$group": {"_id": "$author", "count": {"$sum": 1}}},
    {"$sort": {"count": -1}},
    {"$limit": 1},
]

BOOKS_BY_DECADE_PIPELINE = [
    {
        "$group": {
            "_id": {
                "$multiply": [
                    {"$floor": {"$divide": ["$published_year", 10]}},
                    10,
                ]
            },
            "count": {"$sum": 1},
        }
    },
    {"$sort": {"_id": 1}},
]

# ---------------------- THE PLAN ----------------------

_QUERY_PLAN: List[Dict[str, Any]] = [
    # Basic queries
    {
        "name": "fiction_books",
        "section": SECTION_BASIC,
        "label": "Fiction Books",
        "kind": KIND_FIND,
        "filter": {"genre": "Fiction"},
        "report": "titles",
    },
    {
        "name": "published_after_1950",
        "section": SECTION_BASIC,
        "label": "Books published after 1950",
        "kind": KIND_FIND,
        "filter": {"published_year": {"$gt": 1950}},
        "report": "titles",
    },
    {
        "name": "orwell_books",
        "section": SECTION_BASIC,
        "label": "Books by George Orwell",
        "kind": KIND_FIND,
        "filter": {"author": "George Orwell"},
        "report": "titles",
    },
    {
        "name": "update_1984_price",
        "section": SECTION_BASIC,
        "label": 'Updated price of "1984"',
        "kind": KIND_UPDATE_ONE,
        "filter": {"title": "1984"},
        "update": {"$set": {"price": 12.99}},
        "report": "update",
    },
    {
        "name": "delete_moby_dick",
        "section": SECTION_BASIC,
        "label": 'Deleted "Moby Dick"',
        "kind": KIND_DELETE_ONE,
        "filter": {"title": "Moby Dick"},
        "report": "delete",
    },
    # Advanced queries
    {
        "name": "in_stock_after_2010",
        "section": SECTION_ADVANCED,
        "label": "In stock & published after 2010",
        "kind": KIND_FIND,
        "filter": {"in_stock": True, "published_year": {"$gt": 2010}},
        "report": "titles",
    },
    {
        "name": "projection",
        "section": SECTION_ADVANCED,
        "label": "Projection sample",
        "kind": KIND_FIND,
        "filter": {},
        "projection": {"title": 1, "author": 1, "price": 1, "_id": 0},
        "report": "sample",
        "model": "book_summary",
    },
    {
        "name": "cheapest_book",
        "section": SECTION_ADVANCED,
        "label": "Cheapest book",
        "kind": KIND_FIND,
        "filter": {},
        "sort": [("price", ASCENDING)],
        "report": "first_title",
        "model": "book",
    },
    {
        "name": "most_expensive_book",
        "section": SECTION_ADVANCED,
        "label": "Most expensive book",
        "kind": KIND_FIND,
        "filter": {},
        "sort": [("price", DESCENDING)],
        "report": "first_title",
        "model": "book",
    },
    {
        "name": "page_1",
        "section": SECTION_ADVANCED,
        "label": "Page 1 books",
        "kind": KIND_FIND,
        "filter": {},
        "skip": 0,
        "limit": 5,
        "report": "titles",
        "model": "book",
    },
    # Aggregation pipelines
    {
        "name": "avg_price_by_genre",
        "section": SECTION_AGGREGATION,
        "label": "Average price by genre",
        "kind": KIND_AGGREGATE,
        "pipeline": AVG_PRICE_BY_GENRE_PIPELINE,
        "report": "documents",
        "model": "genre_avg_price",
    },
    {
        "name": "top_author",
        "section": SECTION_AGGREGATION,
        "label": "Author with most books",
        "kind": KIND_AGGREGATE,
        "pipeline": TOP_AUTHOR_PIPELINE,
        "report": "first_document",
        "model": "author_count",
    },
    {
        "name": "books_by_decade",
        "section": SECTION_AGGREGATION,
        "label": "Books by decade",
        "kind": KIND_AGGREGATE,
        "pipeline": BOOKS_BY_DECADE_PIPELINE,
        "report": "documents",
        "model": "decade_count",
    },
    # Indexing
    {
        "name": "title_index",
        "section": SECTION_INDEXING,
        "label": "Index created on title",
        "kind": KIND_CREATE_INDEX,
        "keys": [("title", ASCENDING)],
        "report": "index",
    },
    {
        "name": "author_year_index",
        "section": SECTION_INDEXING,
        "label": "Compound index created on author and published_year",
        "kind": KIND_CREATE_INDEX,
        "keys": [("author", ASCENDING), ("published_year", DESCENDING)],
        "report": "index",
    },
    {
        "name": "explain_1984",
        "section": SECTION_INDEXING,
        "label": 'Explain query for title "1984"',
        "kind": KIND_EXPLAIN,
        "filter": {"title": "1984"},
        "verbosity": "executionStats",
        "report": "stats",
    },
]


def build_query_plan() -> List[Dict[str, Any]]:
    """Return a fresh copy of the 16-step bookstore plan, in execution order."""
    return copy.deepcopy(_QUERY_PLAN)


def get_operation(name: str) -> Dict[str, Any]:
    """Look up one descriptor by name (``KeyError`` if unknown)."""
    for op in _QUERY_PLAN:
        if op["name"] == name:
            return copy.deepcopy(op)
    raise KeyError(name)
