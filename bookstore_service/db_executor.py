"""
Database executor: runs one operation descriptor against a collection.

Handles find (filter, projection, sort, skip/limit), point update and
delete, aggregation pipelines, index creation and explain, with
server-side timeout protection and row validation.
"""

from typing import Any, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.errors import ExecutionTimeout

from config import QUERY_TIMEOUT_MS
from models import parse_rows
from schema_utils import find_index_by_keys, get_collection_indexes, summarize_execution_stats
from logger import logger


# ---------------------- HELPERS ----------------------

def _stringify_ids(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert ObjectId fields to strings so they are JSON-serialisable."""
    for doc in docs:
        if "_id" in doc:
            doc["_id"] = str(doc["_id"])
    return docs


def _validate_rows(docs: List[Dict[str, Any]], model_name: Optional[str]) -> List[Dict[str, Any]]:
    """Validate rows against the descriptor's model, if it names one."""
    if not model_name:
        return _stringify_ids(docs)
    return [
        row.model_dump(by_alias=True, exclude_none=True)
        for row in parse_rows(docs, model_name)
    ]


# ---------------------- PER-KIND EXECUTORS ----------------------

def _run_find(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    cursor = collection.find(
        op.get("filter", {}),
        op.get("projection"),
        max_time_ms=QUERY_TIMEOUT_MS,
    )
    if op.get("sort"):
        cursor = cursor.sort(op["sort"])
    if op.get("skip"):
        cursor = cursor.skip(op["skip"])
    if op.get("limit"):
        cursor = cursor.limit(op["limit"])

    data = _validate_rows(list(cursor), op.get("model"))
    return {"data": data, "total_count": len(data)}


def _run_update_one(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    result = collection.update_one(op["filter"], op["update"])
    if result.matched_count == 0:
        logger.warning("[EXECUTOR] %s — no document matched %s", op["name"], op["filter"])
    return {
        "matched_count": result.matched_count,
        "modified_count": result.modified_count,
    }


def _run_delete_one(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    result = collection.delete_one(op["filter"])
    if result.deleted_count == 0:
        logger.warning("[EXECUTOR] %s — no document matched %s", op["name"], op["filter"])
    return {"deleted_count": result.deleted_count}


def _run_aggregate(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    cursor = collection.aggregate(list(op["pipeline"]), maxTimeMS=QUERY_TIMEOUT_MS)
    data = _validate_rows(list(cursor), op.get("model"))
    return {"data": data, "total_count": len(data)}


def _run_create_index(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    # create_index is a server-side no-op when the same key spec exists;
    # checking first only tells the report whether anything changed.
    existing = find_index_by_keys(get_collection_indexes(collection), op["keys"])
    index_name = collection.create_index(op["keys"])
    return {"index_name": index_name, "created": existing is None}


def _run_explain(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    explain_result = collection.database.command(
        {
            "explain": {"find": collection.name, "filter": op["filter"]},
            "verbosity": op.get("verbosity", "executionStats"),
        }
    )
    return {
        "execution_stats": explain_result.get("executionStats", {}),
        "summary": summarize_execution_stats(explain_result),
    }


_EXECUTORS = {
    "find": _run_find,
    "update_one": _run_update_one,
    "delete_one": _run_delete_one,
    "aggregate": _run_aggregate,
    "create_index": _run_create_index,
    "explain": _run_explain,
}


# ---------------------- MAIN EXECUTOR ----------------------

def execute_operation(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    """Execute one descriptor and return its raw step result.

    Raises ``TimeoutError`` when the server aborts the operation for
    exceeding ``QUERY_TIMEOUT_MS``; every other driver or validation error
    propagates unchanged.
    """
    executor = _EXECUTORS.get(op["kind"])
    if executor is None:
        raise ValueError(f"Unsupported operation kind '{op['kind']}'")

    try:
        result = executor(collection, op)
    except ExecutionTimeout:
        raise TimeoutError(f"Step '{op['name']}' timed out after {QUERY_TIMEOUT_MS} ms.")

    logger.debug("[EXECUTOR] %s (%s) -> %s", op["name"], op["kind"], sorted(result))
    return result
