"""HTTP client for a remote dashboard store."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .models import Document, DocumentFormatError

logger = logging.getLogger("dashboard.client")


class StoreUnavailableError(ConnectionError):
    """Raised when the store cannot be reached or answers with an error."""


class HttpStore:
    """Read and replace the whole document through ``/data``.

    Offers the same ``read``/``replace`` contract as ``JsonFileStore`` so a
    ``DashboardSession`` can work against a running server.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 5.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, transport=transport, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def read(self) -> Document:
        try:
            response = self._client.get("/data")
            response.raise_for_status()
            return Document.from_dict(response.json())
        except httpx.HTTPError as e:
            logger.error(f"Failed to load dashboard data from {self.base_url}: {e}")
            raise StoreUnavailableError(str(e)) from e
        except (ValueError, DocumentFormatError) as e:
            logger.error(f"Server at {self.base_url} returned an unusable document: {e}")
            raise StoreUnavailableError(f"Invalid response: {e}") from e

    def replace(self, document: Document) -> bool:
        try:
            response = self._client.post("/data", json=document.to_dict())
        except httpx.HTTPError as e:
            logger.error(f"Auto-save error: {e}")
            return False
        if response.is_error:
            logger.error(f"Auto-save failed: server answered {response.status_code}")
            return False
        return True
