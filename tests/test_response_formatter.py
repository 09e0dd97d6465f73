"""Tests for console lines and JSON-safe step reports."""

from datetime import datetime

from bson import ObjectId

from operations import get_operation
from response_formatter import (
    clean_documents,
    format_step_line,
    format_step_report,
    paraphrase_operation,
    section_header,
)


def test_section_header():
    assert section_header("Indexing") == "\n--- Indexing ---"


class TestFormatStepLine:
    def test_titles(self):
        line = format_step_line(
            get_operation("orwell_books"),
            {"data": [{"title": "1984"}, {"title": "Animal Farm"}]},
        )
        assert line == "Books by George Orwell: ['1984', 'Animal Farm']"

    def test_sample_shows_first_three_rows(self):
        data = [{"title": str(i), "author": "A", "price": 1.0} for i in range(5)]
        line = format_step_line(get_operation("projection"), {"data": data})
        assert "'title': '2'" in line
        assert "'title': '3'" not in line

    def test_first_title(self):
        line = format_step_line(
            get_operation("most_expensive_book"),
            {"data": [{"title": "The Lord of the Rings"}, {"title": "1984"}]},
        )
        assert line == "Most expensive book: The Lord of the Rings"

    def test_first_title_on_empty_collection(self):
        line = format_step_line(get_operation("cheapest_book"), {"data": []})
        assert line == "Cheapest book: (no records)"

    def test_first_document(self):
        line = format_step_line(
            get_operation("top_author"), {"data": [{"_id": "George Orwell", "count": 2}]}
        )
        assert line == "Author with most books: {'_id': 'George Orwell', 'count': 2}"

    def test_update_and_delete(self):
        assert format_step_line(get_operation("update_1984_price"), {"matched_count": 1}) == (
            'Updated price of "1984"'
        )
        assert format_step_line(get_operation("delete_moby_dick"), {"deleted_count": 0}) == (
            'Deleted "Moby Dick": no matching record'
        )

    def test_index_state(self):
        op = get_operation("title_index")
        assert format_step_line(op, {"index_name": "title_1", "created": False}) == (
            "Index created on title (title_1, already present)"
        )


class TestReports:
    def test_report_is_json_safe(self):
        oid = ObjectId()
        report = format_step_report(
            get_operation("fiction_books"), {"data": [{"_id": oid, "title": "1984"}]}
        )
        assert report["name"] == "fiction_books"
        assert report["section"] == "Basic Queries"
        assert report["result"]["data"][0]["_id"] == str(oid)
        assert report["message"] == "Fiction Books: ['1984']"

    def test_clean_documents_stringifies_unknown_types(self):
        when = datetime(2024, 1, 1)
        assert clean_documents([{"at": when, "tags": ("a", "b")}]) == [
            {"at": str(when), "tags": ["a", "b"]}
        ]


class TestParaphrase:
    def test_sorted_scan(self):
        assert paraphrase_operation(get_operation("cheapest_book")) == (
            "Finding books (all records) sorted by price (ascending)."
        )

    def test_pagination(self):
        assert paraphrase_operation(get_operation("page_1")) == (
            "Finding books (all records) limited to 5 results."
        )

    def test_aggregation_lists_stages(self):
        assert paraphrase_operation(get_operation("top_author")) == (
            "Aggregating ($group -> $sort -> $limit)."
        )

    def test_compound_index(self):
        assert paraphrase_operation(get_operation("author_year_index")) == (
            "Creating index on author asc, published_year desc."
        )
