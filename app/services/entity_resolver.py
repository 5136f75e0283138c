import logging
from typing import Any, Dict, Optional

from app.services.graph.domain import LEGAL_ENTITY, Entity
from app.services.opencorporates_client import OpencorporatesClient

logger = logging.getLogger(__name__)


class EntityResolver:
    """Attach OpenCorporates identifiers to legal entities before they are stored.

    Matching identifiers is what lets the store merge the same company reported by
    several registries into one node.
    """

    def __init__(self, client: Optional[OpencorporatesClient] = None):
        self._client = client

    @property
    def client(self) -> OpencorporatesClient:
        if self._client is None:
            self._client = OpencorporatesClient()
        return self._client

    def resolve(self, entity: Entity) -> Entity:
        if entity.type != LEGAL_ENTITY or not entity.jurisdiction_code or not entity.company_number:
            return entity

        company = self._lookup(entity.jurisdiction_code, entity.company_number)
        if company is None:
            logger.info(
                "No OpenCorporates match for %s/%s (%s)",
                entity.jurisdiction_code,
                entity.company_number,
                entity.name,
            )
            return entity

        jurisdiction_code = company.get("jurisdiction_code") or entity.jurisdiction_code
        company_number = company.get("company_number") or entity.company_number
        if not any(
            i == {"jurisdiction_code": jurisdiction_code, "company_number": company_number}
            for i in entity.oc_identifiers
        ):
            entity.add_oc_identifier(jurisdiction_code, company_number)
        if not entity.name and company.get("name"):
            entity.name = company["name"]
        return entity

    def _lookup(self, jurisdiction_code: str, company_number: str) -> Optional[Dict[str, Any]]:
        company = self.client.get_company(jurisdiction_code, company_number)
        if company is not None:
            return company
        # Search fallback only counts when it is unambiguous
        results = self.client.search_companies(jurisdiction_code, company_number)
        if len(results) == 1:
            return results[0].get("company")
        return None
