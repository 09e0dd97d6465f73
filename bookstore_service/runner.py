"""
Query runner: executes the bookstore plan over one connection.

connection → step 1 → … → step N → close.  Steps run strictly in order;
the first failure stops the sequence, is reported once, and the
connection is still closed.
"""

import time
from typing import Any, Callable, Dict, List, Optional

from pymongo.collection import Collection

from config import COLLECTION_NAME, DATABASE_NAME, MONGO_URI
from cluster_manager import open_collection
from db_executor import execute_operation
from op_validator import validate_plan
from operations import build_query_plan
from response_formatter import format_step_report, section_header
from logger import logger

CONNECT_STEP = "connect"


class QueryStepError(Exception):
    """A step (or the initial connection) failed; ``cause`` is the underlying error."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"Step '{step}' failed: {cause}")
        self.step = step
        self.cause = cause


def _run_step(collection: Collection, op: Dict[str, Any]) -> Dict[str, Any]:
    started = time.perf_counter()
    try:
        result = execute_operation(collection, op)
        report = format_step_report(op, result)
    except Exception as e:
        raise QueryStepError(op["name"], e) from e
    logger.info(
        "[RUNNER] %s done in %.1f ms",
        op["name"], (time.perf_counter() - started) * 1000,
    )
    return report


def run_queries(
    mongo_uri: str = MONGO_URI,
    database_name: str = DATABASE_NAME,
    collection_name: str = COLLECTION_NAME,
    plan: Optional[List[Dict[str, Any]]] = None,
    emit: Callable[[str], None] = print,
) -> Dict[str, Any]:
    """Run every step of ``plan`` (default: the bookstore plan) in order.

    Returns::

        {
          "status": "ok" | "error",
          "steps": [<step report>, ...],   # completed steps only
          "error": None | {"step": ..., "message": ...},
        }

    The plan is validated before connecting; an invalid plan raises
    ``ValueError`` and nothing is executed.
    """
    plan = validate_plan(build_query_plan() if plan is None else plan)
    steps: List[Dict[str, Any]] = []
    error: Optional[QueryStepError] = None

    logger.info(
        "[RUNNER] Running %d steps against %s.%s", len(plan), database_name, collection_name,
    )

    try:
        with open_collection(mongo_uri, database_name, collection_name) as collection:
            emit("Connected to MongoDB")
            section = None
            for op in plan:
                if op.get("section") != section:
                    section = op.get("section")
                    emit(section_header(section))
                report = _run_step(collection, op)
                emit(report["message"])
                steps.append(report)
    except Exception as e:
        error = e if isinstance(e, QueryStepError) else QueryStepError(CONNECT_STEP, e)
        logger.debug("[RUNNER] %s", error, exc_info=error.cause)
        emit(f"Error: {error}")
    finally:
        emit("Connection closed")

    if error is not None:
        return {
            "status": "error",
            "steps": steps,
            "error": {"step": error.step, "message": str(error.cause)},
        }
    return {"status": "ok", "steps": steps, "error": None}
