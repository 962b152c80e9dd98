"""
app/connectors/base.py

Base connector with shared HTTP mechanics for the WBES REST backend.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from app.config import WBESAPISettings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class APIRequestError(RuntimeError):
    """
    Raised when a backend request cannot be completed after retries.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class APIUnauthorizedError(APIRequestError):
    """
    Raised when the backend rejects the bearer token (HTTP 401).
    """


class BaseConnector:
    """
    HTTP client base: bearer auth, timeouts, and exponential backoff.
    """

    def __init__(
        self,
        *,
        settings: WBESAPISettings,
        token: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = settings.base_url.rstrip("/")
        self._token = token or settings.api_token
        self._session = session or requests.Session()
        self._timeout_seconds = settings.timeout_seconds
        self._max_retries = settings.max_retries
        self._backoff_initial_seconds = settings.backoff_initial_seconds
        self._backoff_multiplier = settings.backoff_multiplier

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        """
        Execute a GET against *path* and return parsed JSON with retry support.
        """

        url = f"{self._base_url}{path}"
        response = self._request(method="GET", url=url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise APIRequestError(f"{path}: response was not valid JSON.") from exc

    def _get_list(self, path: str, *, params: dict[str, Any] | None = None) -> list[Any]:
        """
        Execute a GET expected to return a JSON array.
        """

        payload = self._get_json(path, params=params)
        if not isinstance(payload, list):
            raise APIRequestError(
                f"{path}: expected a JSON array, got {type(payload).__name__}."
            )
        return payload

    def _get_object(self, path: str) -> dict[str, Any]:
        """
        Execute a GET expected to return a JSON object.
        """

        payload = self._get_json(path)
        if not isinstance(payload, dict):
            raise APIRequestError(
                f"{path}: expected a JSON object, got {type(payload).__name__}."
            )
        return payload

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> requests.Response:
        """
        Execute an HTTP request with exponential backoff on transient failures.
        """

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=self._headers(),
                    timeout=self._timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code == 401:
                    logger.error("Backend rejected credentials url=%s", url)
                    raise APIUnauthorizedError(
                        "Backend rejected the supplied credentials.",
                        status_code=401,
                    ) from exc
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Backend request failed status=%s url=%s error=%s",
                        status_code,
                        url,
                        exc,
                    )
                    raise APIRequestError(
                        f"Non-retryable request failure for {url}.",
                        status_code=status_code,
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Backend request retry attempt=%s/%s wait_seconds=%.2f url=%s",
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                url,
            )
            time.sleep(backoff_seconds)

        logger.error(
            "Backend request exhausted retries url=%s error=%s",
            url,
            last_error,
        )
        status_code = None
        if isinstance(last_error, requests.HTTPError) and last_error.response is not None:
            status_code = last_error.response.status_code
        raise APIRequestError(
            f"Request failed after retries for {url}.",
            status_code=status_code,
        ) from last_error
