"""
tests/test_wbes_connector.py

WBESConnector HTTP behaviour against a scripted session. No network.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from app.config import WBESAPISettings
from app.connectors import APIRequestError, APIUnauthorizedError, WBESConnector


def _response(status_code: int, payload: Any = None, *, raw: bytes | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = raw if raw is not None else json.dumps(payload).encode("utf-8")
    response.url = "http://backend.test"
    return response


class ScriptedSession:
    """Replays queued responses or exceptions and records each call."""

    def __init__(self, *outcomes: requests.Response | Exception) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> requests.Response:
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr("app.connectors.base.time.sleep", recorded.append)
    return recorded


def _connector(session: ScriptedSession, *, token: str | None = "secret", retries: int = 2) -> WBESConnector:
    settings = WBESAPISettings(
        base_url="http://backend.test/",
        api_token="configured",
        max_retries=retries,
        backoff_initial_seconds=0.5,
        backoff_multiplier=2.0,
    )
    return WBESConnector(settings=settings, token=token, session=session)  # type: ignore[arg-type]


class TestRequests:
    def test_lists_leads_with_bearer_token(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, [{"_id": "L1"}]))

        leads = _connector(session).list_leads()

        assert leads == [{"_id": "L1"}]
        call = session.calls[0]
        assert call["method"] == "GET"
        assert call["url"] == "http://backend.test/api/leads"
        assert call["headers"]["Authorization"] == "Bearer secret"
        assert sleeps == []

    def test_falls_back_to_configured_token(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, []))
        _connector(session, token=None).list_projects()
        assert session.calls[0]["headers"]["Authorization"] == "Bearer configured"

    def test_entity_ids_are_path_quoted(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, []), _response(200, []))
        connector = _connector(session)

        connector.list_lead_site_visits("a/b")
        connector.list_project_site_visits("P 1")

        assert session.calls[0]["url"] == "http://backend.test/api/leads/a%2Fb/site-visits"
        assert session.calls[1]["url"] == "http://backend.test/api/site-visits/project/P%201"

    def test_get_revision_returns_object(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, {"_id": "R1", "diffFromParent": []}))
        assert _connector(session).get_revision("R1")["_id"] == "R1"
        assert session.calls[0]["url"] == "http://backend.test/api/revisions/R1"


class TestRetries:
    def test_retries_transient_status_with_backoff(self, sleeps: list[float]) -> None:
        session = ScriptedSession(
            _response(503, {}),
            _response(502, {}),
            _response(200, [{"_id": "Q1"}]),
        )

        quotations = _connector(session).list_quotations()

        assert quotations == [{"_id": "Q1"}]
        assert len(session.calls) == 3
        assert sleeps == [0.5, 1.0]

    def test_retries_connection_errors(self, sleeps: list[float]) -> None:
        session = ScriptedSession(requests.ConnectionError("reset"), _response(200, []))
        assert _connector(session).list_revisions() == []
        assert len(sleeps) == 1

    def test_exhausted_retries_raise_with_last_status(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(500, {}), _response(500, {}), _response(500, {}))

        with pytest.raises(APIRequestError) as excinfo:
            _connector(session).list_project_variations()

        assert excinfo.value.status_code == 500
        assert len(session.calls) == 3

    def test_unauthorized_is_not_retried(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(401, {"message": "invalid token"}))

        with pytest.raises(APIUnauthorizedError) as excinfo:
            _connector(session).list_leads()

        assert excinfo.value.status_code == 401
        assert sleeps == []

    def test_not_found_is_not_retried(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(404, {"message": "missing"}))

        with pytest.raises(APIRequestError) as excinfo:
            _connector(session).get_project_variation("V9")

        assert excinfo.value.status_code == 404
        assert not isinstance(excinfo.value, APIUnauthorizedError)
        assert len(session.calls) == 1


class TestPayloadShape:
    def test_object_where_list_expected(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, {"data": []}))
        with pytest.raises(APIRequestError, match="expected a JSON array"):
            _connector(session).list_leads()

    def test_list_where_object_expected(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, []))
        with pytest.raises(APIRequestError, match="expected a JSON object"):
            _connector(session).get_revision("R1")

    def test_invalid_json(self, sleeps: list[float]) -> None:
        session = ScriptedSession(_response(200, raw=b"<html>oops</html>"))
        with pytest.raises(APIRequestError, match="not valid JSON"):
            _connector(session).list_leads()
