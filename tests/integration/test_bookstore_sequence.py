"""
End-to-end runs of the bookstore sequence against a live MongoDB.

Uses a throwaway database on ``MONGO_URI``; skipped when no server answers.
"""

import math

import pytest
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from config import MONGO_URI
from runner import run_queries
from seed_books import SAMPLE_BOOKS, seed_collection

pytestmark = pytest.mark.integration

TEST_DATABASE = "plp_bookstore_test"
TEST_COLLECTION = "books"


@pytest.fixture(scope="module")
def mongo_client():
    client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=1000)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        pytest.skip(f"No MongoDB reachable at {MONGO_URI}")
    yield client
    client.drop_database(TEST_DATABASE)
    client.close()


@pytest.fixture
def books(mongo_client):
    collection = mongo_client[TEST_DATABASE][TEST_COLLECTION]
    collection.drop()
    seed_collection(collection)
    return collection


def _run():
    lines = []
    report = run_queries(MONGO_URI, TEST_DATABASE, TEST_COLLECTION, emit=lines.append)
    assert report["status"] == "ok", report["error"]
    steps = {step["name"]: step for step in report["steps"]}
    return steps, lines


def _titles(step):
    return [doc["title"] for doc in step["result"]["data"]]


def test_fiction_filter_is_exact(books):
    steps, _ = _run()
    expected = [b["title"] for b in SAMPLE_BOOKS if b["genre"] == "Fiction"]
    assert sorted(_titles(steps["fiction_books"])) == sorted(expected)


def test_point_update_changes_price_only(books):
    before = books.find_one({"title": "1984"}, {"_id": 0})

    _run()

    after = books.find_one({"title": "1984"}, {"_id": 0})
    assert after["price"] == 12.99
    assert {k: v for k, v in after.items() if k != "price"} == {
        k: v for k, v in before.items() if k != "price"
    }


def test_point_delete_removes_exactly_one(books):
    count_before = books.count_documents({})

    _run()

    assert books.find_one({"title": "Moby Dick"}) is None
    assert books.count_documents({}) == count_before - 1


def test_price_sort_extremes(books):
    steps, _ = _run()
    prices = [doc["price"] for doc in books.find({}, {"price": 1})]

    cheapest = steps["cheapest_book"]["result"]["data"][0]
    dearest = steps["most_expensive_book"]["result"]["data"][0]
    assert cheapest["price"] == min(prices)
    assert dearest["price"] == max(prices)


def test_pagination_returns_five(books):
    steps, _ = _run()
    assert len(_titles(steps["page_1"])) == 5


def test_decade_groups(books):
    steps, _ = _run()
    rows = steps["books_by_decade"]["result"]["data"]
    remaining = list(books.find({}, {"published_year": 1}))

    decades = [row["_id"] for row in rows]
    assert decades == sorted(decades)
    assert all(decade % 10 == 0 for decade in decades)
    assert set(decades) == {math.floor(b["published_year"] / 10) * 10 for b in remaining}
    assert sum(row["count"] for row in rows) == len(remaining)


def test_index_creation_is_idempotent(books):
    first, _ = _run()
    seed_collection(books)
    second, lines = _run()

    assert first["title_index"]["result"]["created"] is True
    assert second["title_index"]["result"]["created"] is False
    assert second["author_year_index"]["result"]["created"] is False

    names = [idx["name"] for idx in books.list_indexes()]
    assert len(names) == len(set(names)) == 3
    assert "Index created on title (title_1, already present)" in lines


def test_explain_reports_execution_stats(books):
    steps, _ = _run()
    result = steps["explain_1984"]["result"]
    assert result["execution_stats"]["nReturned"] == 1
    assert result["summary"]["index_used"] is True


def test_two_record_scenario(mongo_client):
    collection = mongo_client[TEST_DATABASE][TEST_COLLECTION]
    collection.drop()
    seed_collection(collection, [
        {"title": "1984", "genre": "Fiction", "author": "George Orwell",
         "published_year": 1949, "price": 10.00, "in_stock": True},
        {"title": "Moby Dick", "genre": "Fiction", "author": "Herman Melville",
         "published_year": 1851, "price": 15.00, "in_stock": False},
    ])

    steps, _ = _run()

    assert collection.find_one({"title": "1984"})["price"] == 12.99
    assert collection.find_one({"title": "Moby Dick"}) is None
    assert [d["title"] for d in collection.find({"genre": "Fiction"})] == ["1984"]
    assert steps["top_author"]["result"]["data"] == [{"_id": "George Orwell", "count": 1}]
