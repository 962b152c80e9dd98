"""
Container health check for the analytics API.

Exits 0 when ``/health`` answers; with ``--backend`` the WBES backend must
also be reachable.
"""

from __future__ import annotations

import argparse
import os

import requests

from app.config import get_wbes_api_settings


def _reachable(url: str, timeout: float) -> bool:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException:
        return False
    return response.status_code < 500


def main() -> int:
    parser = argparse.ArgumentParser(description="Probe the analytics API.")
    parser.add_argument("--backend", action="store_true", help="Also probe WBES_API_BASE_URL.")
    args = parser.parse_args()

    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    if not _reachable(f"http://127.0.0.1:{port}{path}", timeout=2):
        return 1

    if args.backend and not _reachable(get_wbes_api_settings().base_url, timeout=2):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
