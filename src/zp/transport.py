from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .errors import DecodeError, EmptyResponse, ServerError, TransportError

logger = logging.getLogger(__name__)


class Transport:
    """Performs exactly one HTTP call per ``send``; never retries."""

    def __init__(self, http: httpx.Client | None = None, timeout: float = 30.0) -> None:
        self._owns_client = http is None
        self.client = http if http is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(
        self,
        method: str,
        uri: str,
        token: str,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, Any] | None = None,
        allow_empty: bool = False,
    ) -> dict[str, Any] | None:
        headers = {"Authorization": f"Bearer {token}"}
        logger.debug("%s %s params=%s", method, uri, dict(params or {}))
        try:
            response = self.client.request(
                method,
                uri,
                params=dict(params) if params else None,
                data=dict(data) if data else None,
                headers=headers,
            )
        except httpx.RequestError as exc:
            raise TransportError(f"{method} {uri} failed: {exc}") from exc

        if not response.is_success:
            raise ServerError(response.status_code, response.text)

        if response.status_code == 204 or not response.content.strip():
            if allow_empty:
                return None
            raise EmptyResponse(uri)

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {uri} is not JSON") from exc
        if not isinstance(payload, dict):
            raise DecodeError(f"Response from {uri} is not a JSON object")
        return payload
