"""Shared fixtures for the bookstore query runner tests."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest


def make_book(title, author="Someone", genre="Fiction", published_year=2000,
              price=10.0, in_stock=True, **extra):
    doc = {
        "title": title,
        "author": author,
        "genre": genre,
        "published_year": published_year,
        "price": price,
        "in_stock": in_stock,
    }
    doc.update(extra)
    return doc


def make_cursor(docs):
    """MagicMock cursor that chains sort/skip/limit and iterates ``docs``."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.__iter__.return_value = iter(docs)
    return cursor


class FakeConnection:
    """Stands in for ``cluster_manager.open_collection`` and counts open/close."""

    def __init__(self, fail_on_open=None):
        self.collection = MagicMock()
        self.collection.name = "books"
        self.fail_on_open = fail_on_open
        self.opened = 0
        self.closed = 0

    @contextmanager
    def open(self, mongo_uri, database_name, collection_name):
        if self.fail_on_open is not None:
            raise self.fail_on_open
        self.opened += 1
        try:
            yield self.collection
        finally:
            self.closed += 1


@pytest.fixture
def collection():
    coll = MagicMock()
    coll.name = "books"
    return coll


@pytest.fixture
def fake_connection():
    return FakeConnection()
