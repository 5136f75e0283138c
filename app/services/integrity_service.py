import json
import logging
from collections import Counter
from typing import Any, Dict

from app.services.graph.domain import LEGAL_ENTITY, Entity
from app.services.graph.entities import identifier_key

logger = logging.getLogger(__name__)

GB_PSC_DOCUMENT_ID = "GB PSC Snapshot"


class EntityIntegrityChecker:
    """Record-level sanity checks over stored entities.

    ``check`` returns a dict keyed by issue name (empty when the entity is fine);
    ``check_all`` runs it over the whole store and tallies how many entities
    raised each issue.
    """

    def __init__(self, store):
        self.store = store

    def check_all(self) -> Dict[str, int]:
        stats: Dict[str, int] = {"entity_count": self.store.count_entities(), "processed": 0}
        issues: Counter = Counter()
        for entity in self.store.entities():
            issues.update(self.check(entity).keys())
            stats["processed"] += 1
        stats.update(issues)
        logger.info("[%s] check_all finished with stats: %s", type(self).__name__, json.dumps(stats))
        return stats

    def check(self, entity: Entity) -> Dict[str, Dict[str, Any]]:
        results: Dict[str, Dict[str, Any]] = {}

        oc_identifiers = entity.oc_identifiers
        if entity.type == LEGAL_ENTITY and not oc_identifiers:
            results["no_oc_identifier"] = {}
        if len(oc_identifiers) > 1:
            results["multiple_oc_identifiers"] = {
                "oc_identifiers_count": len(oc_identifiers),
                "unique_oc_identifiers_count": len({identifier_key(i) for i in oc_identifiers}),
                "oc_identifiers": oc_identifiers,
                "company_number_set_on_record": entity.company_number,
            }

        if entity.company_number:
            missing = [
                i for i in entity.identifiers
                if i.get("document_id") == GB_PSC_DOCUMENT_ID and i.get("link") and not i.get("company_number")
            ]
            if missing:
                results["self_link_missing_company_number"] = {"count": len(missing)}

        return results
