"""
FastAPI surface for the bookstore query runner.

- ``POST /run-queries`` runs the full plan and returns every step report
- ``POST /get-indexes`` lists the indexes on the books collection
- ``GET /health``

Serve with ``bookstore-api`` or ``python app.py``.
"""

from typing import Any, Dict

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from config import API_HOST, API_PORT, COLLECTION_NAME, DATABASE_NAME, MONGO_URI
from cluster_manager import open_collection
from runner import run_queries
from schema_utils import get_collection_indexes, get_indexed_fields
from logger import logger

VERSION = "1.0.0"

app = FastAPI(title="Bookstore Query Runner", version=VERSION)


# ---------------------- REQUEST MODELS ----------------------


class CollectionRequest(BaseModel):
    mongo_uri: str = MONGO_URI
    database_name: str = DATABASE_NAME
    collection_name: str = COLLECTION_NAME


# ---------------------- ENDPOINTS ----------------------


@app.post("/run-queries")
def run_queries_endpoint(request: CollectionRequest) -> Dict[str, Any]:
    """Run the whole query sequence; console lines are collected into ``output``."""
    output = []
    try:
        report = run_queries(
            request.mongo_uri,
            request.database_name,
            request.collection_name,
            emit=output.append,
        )
    except ValueError as e:
        logger.error("run-queries plan error: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    if report["status"] != "ok":
        raise HTTPException(
            status_code=500,
            detail={
                "error": report["error"],
                "completed_steps": [step["name"] for step in report["steps"]],
                "output": output,
            },
        )

    report["output"] = output
    return report


@app.post("/get-indexes")
def get_indexes(request: CollectionRequest):
    """Return index information for the collection."""
    try:
        with open_collection(
            request.mongo_uri, request.database_name, request.collection_name,
        ) as collection:
            indexes = get_collection_indexes(collection)
    except Exception as e:
        logger.error("get-indexes error: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "indexes": [
            {**idx, "keys": [list(pair) for pair in idx["keys"]]} for idx in indexes
        ],
        "indexed_fields": sorted(get_indexed_fields(indexes)),
    }


@app.get("/health")
def health_check():
    return {"status": "ok", "version": VERSION}


def main():
    logger.info("Serving the bookstore API on %s:%d", API_HOST, API_PORT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
