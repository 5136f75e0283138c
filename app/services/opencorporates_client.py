"""OpenCorporates API client used to enrich legal entities with registry data.

Non-success responses are logged and reported as "no data" (None / []);
network errors propagate to the caller.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from app.config import get_http_timeout, get_opencorporates_config

logger = logging.getLogger(__name__)


class OpencorporatesClient:
    API_VERSION = "v0.4.6"

    def __init__(
        self,
        api_token: Optional[str] = None,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        env_token, env_url = get_opencorporates_config()
        self.api_token = api_token or env_token
        if not self.api_token:
            raise RuntimeError(
                "OPENCORPORATES_API_TOKEN is not set. Define it in your environment or in a .env file."
            )
        self.api_url = (api_url or env_url).rstrip("/")
        self.http = httpx.Client(
            base_url=self.api_url,
            timeout=timeout if timeout is not None else get_http_timeout(),
            transport=transport,
        )

    def close(self) -> None:
        self.http.close()

    def get_jurisdiction_code(self, name: str) -> Optional[str]:
        results = self._get(f"/{self.API_VERSION}/jurisdictions/match", {"q": name})
        if results is None:
            return None
        return (results.get("jurisdiction") or {}).get("code")

    def get_company(self, jurisdiction_code: str, company_number: str, sparse: bool = True) -> Optional[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if sparse:
            params["sparse"] = "true"
        path = f"/{self.API_VERSION}/companies/{quote(jurisdiction_code)}/{quote(company_number)}"
        results = self._get(path, params)
        if results is None:
            return None
        return results.get("company")

    def search_companies(self, jurisdiction_code: str, company_number: str) -> List[Dict[str, Any]]:
        params = {
            "q": company_number,
            "jurisdiction_code": jurisdiction_code,
            "fields": "company_number",
            "order": "score",
        }
        results = self._get(f"/{self.API_VERSION}/companies/search", params)
        if results is None:
            return []
        return results.get("companies") or []

    def _get(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = self.http.get(path, params={**params, "api_token": self.api_token})
        if not response.is_success:
            logger.info(
                "Received %s from api.opencorporates.com when calling %s (%s)",
                response.status_code,
                path,
                params,
            )
            return None
        return response.json()["results"]
