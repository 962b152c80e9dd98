"""
app/connectors/wbes_connector.py

Typed endpoint access for the WBES REST backend.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from app.config import get_wbes_api_settings
from app.connectors.base import BaseConnector


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class WBESConnector(BaseConnector):
    """
    Read-only access to the collections the dashboard and comparison views use.

    Every list method returns the raw JSON array; shaping happens in the
    aggregation layer.
    """

    def list_leads(self) -> list[Any]:
        return self._get_list("/api/leads")

    def list_quotations(self) -> list[Any]:
        return self._get_list("/api/quotations")

    def list_revisions(self) -> list[Any]:
        return self._get_list("/api/revisions")

    def list_projects(self) -> list[Any]:
        return self._get_list("/api/projects")

    def list_project_variations(self) -> list[Any]:
        return self._get_list("/api/project-variations")

    def list_lead_site_visits(self, lead_id: str) -> list[Any]:
        return self._get_list(f"/api/leads/{_segment(lead_id)}/site-visits")

    def list_project_site_visits(self, project_id: str) -> list[Any]:
        return self._get_list(f"/api/site-visits/project/{_segment(project_id)}")

    def get_revision(self, revision_id: str) -> dict[str, Any]:
        return self._get_object(f"/api/revisions/{_segment(revision_id)}")

    def get_project_variation(self, variation_id: str) -> dict[str, Any]:
        return self._get_object(f"/api/project-variations/{_segment(variation_id)}")


def build_wbes_connector(*, token: str | None = None) -> WBESConnector:
    """
    Build a connector from environment settings; *token* overrides WBES_API_TOKEN.
    """

    return WBESConnector(settings=get_wbes_api_settings(), token=token)
