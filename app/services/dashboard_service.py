"""
app/services/dashboard_service.py

Estimations dashboard orchestrator.

Wires WBESConnector → aggregation_service into a single request-scoped run:

    1. the five primary collections are fetched concurrently
    2. site visits are fanned out per lead and per project, concurrently,
       once the lead and project id lists are known
    3. the results are reduced into a DashboardSnapshot

Failure contract
----------------
- Fan-out failure         → captured per entity, logged, counted as no visits
- Primary fetch failure   → raises AggregationError naming the collection;
                            no partial snapshot is returned
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Any, Callable, Sequence

from app.config import get_dashboard_settings
from app.connectors import (
    APIRequestError,
    APIUnauthorizedError,
    WBESConnector,
    build_wbes_connector,
)
from app.domain.dashboard import DashboardCollections, DashboardSnapshot, SiteVisitFetchResult
from app.logging_utils import log_event
from app.services.aggregation_service import aggregate_snapshot, entity_id

logger = logging.getLogger(__name__)

LEAD_OWNER = "lead"
PROJECT_OWNER = "project"


class AggregationError(RuntimeError):
    """
    Raised when a primary collection cannot be fetched.

    The caller must offer a retry rather than render a partial dashboard.
    """

    def __init__(self, collection: str, message: str) -> None:
        super().__init__(message)
        self.collection = collection

    @property
    def unauthorized(self) -> bool:
        return isinstance(self.__cause__, APIUnauthorizedError)


def _unique_ids(records: Sequence[Any]) -> list[str]:
    seen: dict[str, None] = {}
    for record in records:
        record_id = entity_id(record)
        if record_id is not None:
            seen.setdefault(record_id, None)
    return list(seen)


class DashboardService:
    """
    Fetches dashboard inputs from the backend and aggregates them.

    Parameters
    ----------
    connector:
        Backend client. Shared by the worker threads of one run.
    max_workers:
        Upper bound on concurrent backend requests.
    tz:
        Timezone used for the calendar-month site visit buckets.
    clock:
        Returns the reference instant; defaults to the current time in *tz*.
    """

    def __init__(
        self,
        *,
        connector: WBESConnector,
        max_workers: int = 8,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._connector = connector
        self._max_workers = max(1, max_workers)
        self._clock = clock or (lambda: datetime.now(tz=tz))

    def aggregate(self) -> DashboardSnapshot:
        """
        Run one full aggregation.

        Raises
        ------
        AggregationError
            When any of the five primary collections fails to load.
        """
        started = datetime.now(tz=timezone.utc)
        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="dashboard-fetch",
        ) as executor:
            primary = self._fetch_primary(executor)
            fan_out = self._fetch_site_visits(
                executor,
                lead_ids=_unique_ids(primary["leads"]),
                project_ids=_unique_ids(primary["projects"]),
            )

        lead_visits = {r.entity_id: r.visits for r in fan_out if r.owner == LEAD_OWNER}
        project_visits = {r.entity_id: r.visits for r in fan_out if r.owner == PROJECT_OWNER}
        failed = sum(1 for result in fan_out if not result.ok)

        snapshot = aggregate_snapshot(
            DashboardCollections(
                leads=primary["leads"],
                quotations=primary["quotations"],
                revisions=primary["revisions"],
                projects=primary["projects"],
                project_variations=primary["project_variations"],
                lead_site_visits=lead_visits,
                project_site_visits=project_visits,
            ),
            now=self._clock(),
            failed_site_visit_fetches=failed,
        )
        log_event(
            logger,
            logging.INFO,
            "dashboard_aggregation_completed",
            leads=snapshot.leads.total,
            projects=snapshot.projects.total,
            site_visit_fetches=len(fan_out),
            failed_site_visit_fetches=failed,
            elapsed_ms=round((datetime.now(tz=timezone.utc) - started).total_seconds() * 1000),
        )
        return snapshot

    # ------------------------------------------------------------------
    # Primary collections
    # ------------------------------------------------------------------

    def _fetch_primary(self, executor: ThreadPoolExecutor) -> dict[str, list[Any]]:
        fetchers: dict[str, Callable[[], list[Any]]] = {
            "leads": self._connector.list_leads,
            "quotations": self._connector.list_quotations,
            "revisions": self._connector.list_revisions,
            "projects": self._connector.list_projects,
            "project_variations": self._connector.list_project_variations,
        }
        futures: dict[str, Future[list[Any]]] = {
            name: executor.submit(fetch) for name, fetch in fetchers.items()
        }

        results: dict[str, list[Any]] = {}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except APIRequestError as exc:
                self._cancel(futures)
                log_event(
                    logger,
                    logging.ERROR,
                    "dashboard_primary_fetch_failed",
                    collection=name,
                    status_code=exc.status_code,
                    error=str(exc),
                )
                raise AggregationError(name, f"Failed to load {name}.") from exc
            except Exception as exc:
                self._cancel(futures)
                logger.exception("Unhandled failure loading collection=%s", name)
                raise AggregationError(name, f"Failed to load {name}.") from exc
        return results

    @staticmethod
    def _cancel(futures: dict[str, Future[list[Any]]]) -> None:
        for future in futures.values():
            future.cancel()

    # ------------------------------------------------------------------
    # Site visit fan-out
    # ------------------------------------------------------------------

    def _fetch_site_visits(
        self,
        executor: ThreadPoolExecutor,
        *,
        lead_ids: Sequence[str],
        project_ids: Sequence[str],
    ) -> list[SiteVisitFetchResult]:
        futures = [
            executor.submit(
                self._fetch_one, LEAD_OWNER, lead_id, self._connector.list_lead_site_visits
            )
            for lead_id in lead_ids
        ]
        futures.extend(
            executor.submit(
                self._fetch_one, PROJECT_OWNER, project_id, self._connector.list_project_site_visits
            )
            for project_id in project_ids
        )
        return [future.result() for future in futures]

    @staticmethod
    def _fetch_one(
        owner: str,
        owner_id: str,
        fetch: Callable[[str], list[Any]],
    ) -> SiteVisitFetchResult:
        try:
            visits = tuple(fetch(owner_id))
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "site_visit_fetch_failed",
                owner=owner,
                entity_id=owner_id,
                error=str(exc),
            )
            return SiteVisitFetchResult(
                owner=owner,
                entity_id=owner_id,
                error=str(exc) or type(exc).__name__,
            )
        return SiteVisitFetchResult(owner=owner, entity_id=owner_id, visits=visits)


def build_dashboard_service(*, token: str | None = None) -> DashboardService:
    """
    Build a dashboard service from environment settings.

    *token* overrides the configured backend token for this service.
    """

    settings = get_dashboard_settings()
    return DashboardService(
        connector=build_wbes_connector(token=token),
        max_workers=settings.fanout_max_workers,
        tz=settings.tz,
    )


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    """
    Build and cache the dashboard service using the configured token.
    """

    return build_dashboard_service()
