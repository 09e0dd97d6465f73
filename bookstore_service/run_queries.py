"""
Console entry point: run every bookstore query against the configured
collection and print each result.

    python run_queries.py

Connection settings come from the environment / ``.env`` (see config.py).
Exit status is 0 when every step succeeded, 1 otherwise.
"""

import sys

from runner import run_queries


def main() -> int:
    report = run_queries()
    return 0 if report["status"] == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
