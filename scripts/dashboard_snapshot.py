"""
Print one estimations dashboard snapshot as JSON.
"""

from __future__ import annotations

import argparse
import json
import sys

from app.logging_utils import configure_logging
from app.schemas.dashboard import AggregationErrorResponse, DashboardSnapshotResponse
from app.services.dashboard_service import AggregationError, build_dashboard_service


def main() -> int:
    parser = argparse.ArgumentParser(description="Aggregate the estimations dashboard once.")
    parser.add_argument(
        "--token",
        dest="token",
        default=None,
        help="Bearer token for the backend; defaults to WBES_API_TOKEN.",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Emit single-line JSON.",
    )
    args = parser.parse_args()

    configure_logging()
    service = build_dashboard_service(token=args.token)
    indent = None if args.compact else 2

    try:
        snapshot = service.aggregate()
    except AggregationError as exc:
        error = AggregationErrorResponse(message=str(exc), collection=exc.collection)
        print(json.dumps(error.model_dump(), indent=indent), file=sys.stderr)
        return 1

    payload = DashboardSnapshotResponse.from_domain(snapshot).model_dump(mode="json")
    print(json.dumps(payload, indent=indent))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
