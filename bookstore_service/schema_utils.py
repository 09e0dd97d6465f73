"""
Index and execution-plan utilities.

- ``get_collection_indexes`` / ``get_indexed_fields`` describe the indexes
  on the books collection (used to report whether index creation changed
  anything and by the ``/get-indexes`` endpoint).
- ``summarize_execution_stats`` condenses an ``executionStats`` explain
  result into the handful of numbers worth printing.
"""

from typing import Any, Dict, List, Optional, Set

from pymongo.collection import Collection


# ---------------------- INDEX INSPECTION ----------------------

def get_collection_indexes(collection: Collection) -> List[Dict[str, Any]]:
    """Return a list of index descriptions for the collection.

    Each entry contains:
    - ``name``: index name
    - ``keys``: list of ``(field, direction)`` pairs
    - ``unique``: whether the index enforces uniqueness
    """
    raw_indexes = collection.index_information()

    indexes: List[Dict[str, Any]] = []
    for name, info in raw_indexes.items():
        indexes.append({
            "name": name,
            "keys": [tuple(pair) for pair in info.get("key", [])],
            "unique": info.get("unique", False),
        })

    return indexes


def get_indexed_fields(indexes: List[Dict[str, Any]]) -> Set[str]:
    """Extract the set of indexed field names from index descriptions."""
    fields: Set[str] = set()
    for idx in indexes:
        for key_pair in idx.get("keys", []):
            if isinstance(key_pair, (list, tuple)) and len(key_pair) >= 1:
                fields.add(str(key_pair[0]))
            elif isinstance(key_pair, str):
                fields.add(key_pair)
    return fields


def find_index_by_keys(
    indexes: List[Dict[str, Any]],
    keys: List[Any],
) -> Optional[Dict[str, Any]]:
    """Return the index whose key spec equals ``keys`` (order-sensitive)."""
    wanted = [tuple(pair) for pair in keys]
    for idx in indexes:
        if [tuple(pair) for pair in idx.get("keys", [])] == wanted:
            return idx
    return None


# ---------------------- EXPLAIN SUMMARY ----------------------

def _stage_chain(stage: Optional[Dict[str, Any]]) -> List[str]:
    """Walk an execution-stage tree top-down, following the first child."""
    chain: List[str] = []
    while stage:
        chain.append(stage.get("stage", "?"))
        if "inputStage" in stage:
            stage = stage["inputStage"]
        elif stage.get("inputStages"):
            stage = stage["inputStages"][0]
        else:
            stage = None
    return chain


def summarize_execution_stats(explain_result: Dict[str, Any]) -> Dict[str, Any]:
    """Pull the headline numbers out of an ``executionStats`` explain.

    Returns ``{"nReturned", "executionTimeMillis", "totalKeysExamined",
    "totalDocsExamined", "stages", "index_used"}``.  ``index_used`` is
    ``True`` when the executed stages or the planner's winning plan
    contain an ``IXSCAN``.
    """
    stats = explain_result.get("executionStats") or {}
    stages = _stage_chain(stats.get("executionStages"))

    winning_plan = (explain_result.get("queryPlanner") or {}).get("winningPlan") or {}
    # 7.0+ servers nest the classic plan under "queryPlan"
    planned = _stage_chain(winning_plan.get("queryPlan", winning_plan))

    return {
        "nReturned": stats.get("nReturned"),
        "executionTimeMillis": stats.get("executionTimeMillis"),
        "totalKeysExamined": stats.get("totalKeysExamined"),
        "totalDocsExamined": stats.get("totalDocsExamined"),
        "stages": stages,
        "index_used": "IXSCAN" in stages or "IXSCAN" in planned,
    }
