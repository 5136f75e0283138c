"""Client for the Slovak register of public sector partners (RPVS) OData API."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from app.config import get_http_timeout, get_rpvs_api_url

logger = logging.getLogger(__name__)


class SkClient:
    def __init__(
        self,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_url = (api_url or get_rpvs_api_url()).rstrip("/")
        self.http = httpx.Client(
            base_url=self.api_url,
            timeout=timeout if timeout is not None else get_http_timeout(),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self.http.close()

    def company_record(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Fetch a partner record with its full beneficial owner list expanded."""
        path = f"/Partneri({record_id})"
        params = {"$expand": "PartneriVerejnehoSektora,KonecniUzivateliaVyhod"}
        response = self.http.get(path, params=params)
        if not response.is_success:
            logger.info("Received %s from RPVS when calling %s", response.status_code, path)
            return None
        return response.json()
