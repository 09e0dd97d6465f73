"""
Response formatter: turns step results into console lines and JSON-safe
step reports.
"""

from typing import Any, Dict, List, Optional

SAMPLE_SIZE = 3


def section_header(section: str) -> str:
    return f"\n--- {section} ---"


def paraphrase_operation(op: Dict[str, Any]) -> str:
    """Generate a human-readable description of a descriptor."""
    kind = op["kind"]
    parts: List[str] = []

    if kind == "find":
        parts.append("Finding books")
    elif kind == "update_one":
        parts.append(f"Updating one book with {op['update']}")
    elif kind == "delete_one":
        parts.append("Deleting one book")
    elif kind == "aggregate":
        stages = [next(iter(stage)) for stage in op["pipeline"]]
        parts.append(f"Aggregating ({' -> '.join(stages)})")
    elif kind == "create_index":
        keys = ", ".join(f"{field} {'asc' if d == 1 else 'desc'}" for field, d in op["keys"])
        parts.append(f"Creating index on {keys}")
    elif kind == "explain":
        parts.append(f"Explaining ({op.get('verbosity')})")

    flt = op.get("filter")
    if flt:
        parts.append(f"where {flt}")
    elif kind == "find":
        parts.append("(all records)")

    if op.get("projection"):
        shown = [f for f, flag in op["projection"].items() if flag]
        parts.append(f"showing fields: {', '.join(shown)}")

    for field, direction in op.get("sort") or []:
        parts.append(f"sorted by {field} ({'ascending' if direction == 1 else 'descending'})")

    if op.get("skip"):
        parts.append(f"skipping {op['skip']}")
    if op.get("limit"):
        parts.append(f"limited to {op['limit']} results")

    return " ".join(parts) + "."


def clean_documents(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Sanitise non-JSON-serialisable values (datetime, ObjectId, etc.)."""
    return [_sanitise_value(doc) for doc in results]


def _sanitise_value(obj: Any) -> Any:
    """Recursively convert non-JSON-safe types to safe representations."""
    if isinstance(obj, dict):
        return {str(k): _sanitise_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitise_value(item) for item in obj]
    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except (UnicodeDecodeError, ValueError):
            return f"[binary {len(obj)} bytes]"
    if isinstance(obj, (int, float, str, bool, type(None))):
        return obj
    # datetime, ObjectId, Decimal128, Timestamp, etc.
    return str(obj)


def _first(data: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    return data[0] if data else None


def format_step_line(op: Dict[str, Any], result: Dict[str, Any]) -> str:
    """Build the console line for one step, following its ``report`` shape."""
    label = op["label"]
    report = op["report"]
    data = result.get("data", [])

    if report == "titles":
        return f"{label}: {[doc.get('title') for doc in data]}"

    if report == "sample":
        return f"{label}: {clean_documents(data[:SAMPLE_SIZE])}"

    if report == "first_title":
        first = _first(data)
        return f"{label}: {first.get('title') if first else '(no records)'}"

    if report == "documents":
        return f"{label}: {clean_documents(data)}"

    if report == "first_document":
        first = _first(data)
        return f"{label}: {_sanitise_value(first) if first else '(no records)'}"

    if report == "update":
        if result.get("matched_count", 0) == 0:
            return f"{label}: no matching record"
        return label

    if report == "delete":
        if result.get("deleted_count", 0) == 0:
            return f"{label}: no matching record"
        return label

    if report == "index":
        state = "created" if result.get("created") else "already present"
        return f"{label} ({result.get('index_name')}, {state})"

    if report == "stats":
        return f"{label}: {_sanitise_value(result.get('summary', {}))}"

    return f"{label}: {_sanitise_value(result)}"


def format_step_report(op: Dict[str, Any], result: Dict[str, Any]) -> Dict[str, Any]:
    """Build the JSON-safe report for one completed step."""
    return {
        "name": op["name"],
        "section": op.get("section"),
        "kind": op["kind"],
        "description": paraphrase_operation(op),
        "message": format_step_line(op, result),
        "result": _sanitise_value(result),
    }
