from __future__ import annotations

import os

from fastapi import FastAPI

from app.logging_utils import configure_logging


def _validate_env() -> None:
    """
    Validate environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle. Unset variables fall back to
    defaults; only explicitly set, unusable values are rejected.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Backend URL ----------------------------------------------------
    base_url = os.getenv("WBES_API_BASE_URL")
    if base_url is not None:
        stripped = base_url.strip()
        if not stripped.startswith(("http://", "https://")):
            errors.append(
                f"WBES_API_BASE_URL='{stripped}' is not valid. "
                "It must start with http:// or https://."
            )

    # --- Numeric tuning -------------------------------------------------
    for name in ("WBES_HTTP_MAX_RETRIES", "DASHBOARD_FANOUT_MAX_WORKERS"):
        raw = os.getenv(name)
        if raw is not None and not raw.strip().isdigit():
            errors.append(f"{name}='{raw.strip()}' must be a non-negative integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed — invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    configure_logging()

    application = FastAPI(
        title="WBES Estimations Analytics API",
        version="1.0.0",
    )

    from app.api.routers import dashboard_router, revision_changes_router

    application.include_router(dashboard_router)
    application.include_router(revision_changes_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
