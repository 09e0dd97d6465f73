"""
Operation validator: checks descriptors before any connection is opened.

Supports:
- Kind allow-list and kind/report compatibility
- Field allow-list (Book Record fields) for filters, updates, projections,
  sort and index keys
- Query-operator, update-operator and pipeline-stage allow-lists
- Helpful "did you mean?" suggestions for typos
"""

from difflib import get_close_matches
from typing import Any, Dict, Iterable, List, Sequence

from models import BOOK_FIELDS, ROW_MODELS
from operations import REPORT_SHAPES
from logger import logger

ALLOWED_QUERY_OPERATORS = frozenset({
    "$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$exists",
})
ALLOWED_UPDATE_OPERATORS = frozenset({"$set", "$unset", "$inc"})
ALLOWED_PIPELINE_STAGES = frozenset({
    "$match", "$group", "$sort", "$limit", "$skip", "$project",
})
ALLOWED_VERBOSITY = frozenset({"queryPlanner", "executionStats", "allPlansExecution"})
SORT_DIRECTIONS = (1, -1)

REQUIRED_ARGS = {
    "find": ("filter",),
    "update_one": ("filter", "update"),
    "delete_one": ("filter",),
    "aggregate": ("pipeline",),
    "create_index": ("keys",),
    "explain": ("filter",),
}


# ---------------------- HELPERS ----------------------


def _suggest_field(field: str, allowed_fields: Sequence[str]) -> str:
    """Return a 'did you mean?' hint for an invalid field."""
    if not isinstance(field, str):
        return ""
    matches = get_close_matches(field.lower(), list(allowed_fields), n=3, cutoff=0.5)
    if matches:
        return f" Did you mean: {', '.join(matches)}?"
    return ""


def _check_field(field: str, name: str, context: str, extra: Iterable[str] = ()) -> None:
    if not isinstance(field, str):
        raise ValueError(f"Step '{name}': {context} field {field!r} must be a string")
    allowed = list(BOOK_FIELDS) + list(extra)
    if field not in allowed:
        hint = _suggest_field(field, allowed)
        raise ValueError(
            f"Step '{name}': {context} field '{field}' is not a book field.{hint}"
        )


def _check_filter(flt: Any, name: str) -> None:
    if not isinstance(flt, dict):
        raise ValueError(f"Step '{name}': filter must be a dict")
    for field, condition in flt.items():
        _check_field(field, name, "filter")
        if isinstance(condition, dict):
            for op in condition:
                if op not in ALLOWED_QUERY_OPERATORS:
                    raise ValueError(f"Step '{name}': operator '{op}' not allowed")


def _check_key_spec(keys: Any, name: str, context: str) -> None:
    if not isinstance(keys, list) or not keys:
        raise ValueError(f"Step '{name}': {context} must be a non-empty list of (field, direction)")
    for pair in keys:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ValueError(f"Step '{name}': {context} entries must be (field, direction) pairs")
        field, direction = pair
        _check_field(field, name, context)
        if direction not in SORT_DIRECTIONS:
            raise ValueError(
                f"Step '{name}': {context} direction for '{field}' must be 1 or -1"
            )


def _check_pipeline(pipeline: Any, name: str) -> None:
    if not isinstance(pipeline, list) or not pipeline:
        raise ValueError(f"Step '{name}': pipeline must be a non-empty list of stages")
    for stage in pipeline:
        if not isinstance(stage, dict) or len(stage) != 1:
            raise ValueError(f"Step '{name}': every pipeline stage must have exactly one operator")
        stage_op = next(iter(stage))
        if stage_op not in ALLOWED_PIPELINE_STAGES:
            raise ValueError(f"Step '{name}': pipeline stage '{stage_op}' not allowed")


# ---------------------- MAIN VALIDATOR ----------------------


def validate_operation(op: Dict[str, Any]) -> Dict[str, Any]:
    """Validate one descriptor; returns it unchanged.

    Raises ``ValueError`` on unknown kinds, mismatched report shapes,
    unknown fields or disallowed operators.
    """
    name = op.get("name") or "<unnamed>"
    kind = op.get("kind")

    if kind not in REQUIRED_ARGS:
        raise ValueError(f"Step '{name}': unknown kind '{kind}'")

    report = op.get("report")
    if report not in REPORT_SHAPES:
        raise ValueError(f"Step '{name}': unknown report shape '{report}'")
    if kind not in REPORT_SHAPES[report]:
        raise ValueError(f"Step '{name}': report '{report}' cannot describe a '{kind}' step")

    for arg in REQUIRED_ARGS[kind]:
        if arg not in op:
            raise ValueError(f"Step '{name}': '{kind}' requires '{arg}'")

    if "filter" in op:
        _check_filter(op["filter"], name)

    if "update" in op:
        update = op["update"]
        if not isinstance(update, dict) or not update:
            raise ValueError(f"Step '{name}': update must be a non-empty dict")
        for update_op, fields in update.items():
            if update_op not in ALLOWED_UPDATE_OPERATORS:
                raise ValueError(f"Step '{name}': update operator '{update_op}' not allowed")
            if not isinstance(fields, dict) or not fields:
                raise ValueError(
                    f"Step '{name}': '{update_op}' needs a non-empty dict of fields"
                )
            for field in fields:
                _check_field(field, name, "update")

    projection = op.get("projection")
    if projection is not None:
        if not isinstance(projection, dict):
            raise ValueError(f"Step '{name}': projection must be a dict")
        for field, flag in projection.items():
            _check_field(field, name, "projection", extra=("_id",))
            if flag not in (0, 1, True, False):
                raise ValueError(f"Step '{name}': projection flag for '{field}' must be 0 or 1")

    if "sort" in op:
        _check_key_spec(op["sort"], name, "sort")

    if "keys" in op:
        _check_key_spec(op["keys"], name, "index key")

    skip = op.get("skip")
    if skip is not None and (not isinstance(skip, int) or skip < 0):
        raise ValueError(f"Step '{name}': skip must be a non-negative integer")

    limit = op.get("limit")
    if limit is not None and (not isinstance(limit, int) or limit < 1):
        raise ValueError(f"Step '{name}': limit must be a positive integer")

    if "pipeline" in op:
        _check_pipeline(op["pipeline"], name)

    verbosity = op.get("verbosity")
    if kind == "explain" and verbosity not in ALLOWED_VERBOSITY:
        raise ValueError(f"Step '{name}': explain verbosity '{verbosity}' not allowed")

    model_name = op.get("model")
    if model_name is not None and model_name not in ROW_MODELS:
        raise ValueError(f"Step '{name}': unknown row model '{model_name}'")

    return op


def validate_plan(plan: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Validate every descriptor and reject duplicate step names."""
    seen = set()
    for op in plan:
        validate_operation(op)
        if op["name"] in seen:
            raise ValueError(f"Duplicate step name '{op['name']}'")
        seen.add(op["name"])
    logger.debug("Validated query plan of %d steps", len(plan))
    return plan
