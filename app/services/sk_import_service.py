"""Import beneficial ownership records from the Slovak RPVS register.

Each record describes one public sector partner (the child entity, a Slovak
company) and its beneficial owners (natural persons). Owners become OWNS
relationships from the person to the company.

Record fields (Slovak):
- PartneriVerejnehoSektora: partner history; the current one has no PlatnostDo
- KonecniUzivateliaVyhod: beneficial owners
- Ico / ObchodneMeno / Adresa: company number / name / address
- Meno / Priezvisko / DatumNarodenia / StatnaPrislusnost: owner name / surname / dob / nationality
- PlatnostOd / PlatnostDo: valid from / valid to
"""
from __future__ import annotations

import logging
import re
import uuid
from collections import Counter
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import pycountry

from app.services.entity_resolver import EntityResolver
from app.services.graph.domain import LEGAL_ENTITY, NATURAL_PERSON, Entity, Relationship
from app.services.sk_client import SkClient

logger = logging.getLogger(__name__)

SLOVAK_POSTCODE = re.compile(r"^\d{3} ?\d{2}$")


class SkImporter:
    source_url: Optional[str] = None
    source_name: Optional[str] = None
    document_id: Optional[str] = None
    retrieved_at: Optional[str] = None

    def __init__(self, store, entity_resolver: Optional[EntityResolver] = None, client: Optional[SkClient] = None):
        self.store = store
        self.entity_resolver = entity_resolver or EntityResolver()
        self._client = client
        self.stats: Counter = Counter()

    @property
    def client(self) -> SkClient:
        if self._client is None:
            self._client = SkClient()
        return self._client

    def process_records(self, records: Iterable[Dict[str, Any]]) -> Dict[str, int]:
        """Import every record and return running totals for this importer."""
        for record in records:
            self.process(record)
        logger.info("[%s] processed records with stats: %s", type(self).__name__, dict(self.stats))
        return dict(self.stats)

    def process(self, record: Dict[str, Any]) -> None:
        self.stats["records"] += 1
        # We've never seen paginated partners, but if they appear we'd be missing data
        if record.get("PartneriVerejnehoSektora@odata.nextLink"):
            logger.error(
                "SK record Id: %s has paginated child entities (PartneriVerejnehoSektora)",
                record.get("Id"),
            )
        child_entity = self._child_entity(record)
        if child_entity is None:
            self.stats["skipped_records"] += 1
            return

        parent_entities = record.get("KonecniUzivateliaVyhod") or []
        # Owner pagination links are broken upstream; fetch the full record instead
        if record.get("KonecniUzivateliaVyhod@odata.nextLink"):
            logger.info(
                "[%s] record Id: %s has paginated parent entities (KonecniUzivateliaVyhod)",
                type(self).__name__,
                record.get("Id"),
            )
            parent_entities = self._all_parent_entities(record)

        for item in parent_entities:
            parent_entity = self._parent_entity(item)
            self._relationship(child_entity, parent_entity, item)
            self.stats["relationships"] += 1

    def _child_entity(self, record: Dict[str, Any]) -> Optional[Entity]:
        partners = record.get("PartneriVerejnehoSektora") or []
        item = next((p for p in partners if p.get("PlatnostDo") is None), None)

        name = type(self).__name__
        if item is None:
            logger.warning("[%s] record Id: %s has no current child entity (PartneriVerejnehoSektora)", name, record.get("Id"))
            return None
        if not _slovakian_address(item.get("Adresa")):
            logger.warning(
                "[%s] record Id: %s has a child entity (PartneriVerejnehoSektora) with a non-Slovakian address",
                name,
                record.get("Id"),
            )
            return None
        if item.get("ObchodneMeno") is None:
            logger.warning(
                "[%s] record Id: %s has a child entity (PartneriVerejnehoSektora) with no company name (ObchodneMeno)",
                name,
                record.get("Id"),
            )
            return None

        entity = Entity(
            id=str(uuid.uuid4()),
            identifiers=[{"document_id": self.document_id, "company_number": item.get("Ico")}],
            type=LEGAL_ENTITY,
            jurisdiction_code="sk",
            company_number=item.get("Ico"),
            name=item["ObchodneMeno"].strip(),
            address=_address_string(item["Adresa"]),
        )
        self.entity_resolver.resolve(entity)
        return self.store.add_entity(entity)

    def _parent_entity(self, item: Dict[str, Any]) -> Entity:
        entity = Entity(
            id=str(uuid.uuid4()),
            identifiers=[{"document_id": self.document_id, "beneficial_owner_id": item.get("Id")}],
            type=NATURAL_PERSON,
            name=_name_string(item),
            nationality=_country_code(item),
            address=_address_string(item["Adresa"]) if item.get("Adresa") else None,
            dob=_date(item.get("DatumNarodenia")),
        )
        return self.store.add_entity(entity)

    def _relationship(self, child_entity: Entity, parent_entity: Entity, item: Dict[str, Any]) -> Relationship:
        started = _date(item.get("PlatnostOd"))
        relationship = Relationship(
            id=f"{self.document_id}:{item.get('Id')}",
            source=parent_entity,
            target=child_entity,
            sample_date=started,
            started_date=started,
            ended_date=_date(item.get("PlatnostDo")),
            provenance={
                "source_url": self.source_url,
                "source_name": self.source_name,
                "retrieved_at": self.retrieved_at,
                "imported_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        return self.store.add_relationship(relationship)

    def _all_parent_entities(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        company_record = self.client.company_record(record.get("Id"))
        if company_record is None:
            return []
        return company_record.get("KonecniUzivateliaVyhod") or []


def _slovakian_address(address: Optional[Dict[str, Any]]) -> bool:
    psc = (address or {}).get("Psc")
    return bool(psc and psc.strip() and SLOVAK_POSTCODE.match(psc.strip()))


def _address_string(address: Dict[str, Any]) -> str:
    first_line = " ".join(
        str(v).strip() for v in (address.get("OrientacneCislo"), address.get("MenoUlice")) if v
    )
    parts = [first_line, address.get("Mesto"), address.get("Psc")]
    return ", ".join(str(p).strip() for p in parts if p and str(p).strip())


def _name_string(item: Dict[str, Any]) -> str:
    return " ".join(v for v in (item.get("Meno"), item.get("Priezvisko")) if v)


def _date(timestamp: Optional[str]) -> Optional[str]:
    if not timestamp:
        return None
    return date.fromisoformat(timestamp.split("T")[0]).isoformat()


def _country_code(item: Dict[str, Any]) -> Optional[str]:
    """ISO 3166 alpha-2 code for the owner's nationality, given as a numeric country code."""
    code = (item.get("StatnaPrislusnost") or {}).get("StatistickyKod")
    if code is None:
        return None
    try:
        country = pycountry.countries.get(numeric=f"{int(code):03d}")
    except (TypeError, ValueError):
        country = None
    if country is None:
        logger.info("Unknown nationality code %r for beneficial owner Id: %s", code, item.get("Id"))
        return None
    return country.alpha_2
