"""Register records and the edge types returned by graph traversal.

Entities compare by their persisted key only. Relationships compare by
object identity, so a single-hop result can be checked against the stored
record with ``is``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


LEGAL_ENTITY = "legal-entity"
NATURAL_PERSON = "natural-person"

OC_IDENTIFIER_KEYS = ("jurisdiction_code", "company_number")


@dataclass(eq=False)
class Entity:
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    identifiers: List[Dict[str, Any]] = field(default_factory=list)
    jurisdiction_code: Optional[str] = None
    company_number: Optional[str] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    dob: Optional[str] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def oc_identifiers(self) -> List[Dict[str, Any]]:
        """Identifiers that point at an OpenCorporates company record."""
        return [
            i for i in self.identifiers
            if set(i.keys()) == set(OC_IDENTIFIER_KEYS)
        ]

    def add_oc_identifier(self, jurisdiction_code: str, company_number: str) -> None:
        self.identifiers.append(
            {"jurisdiction_code": jurisdiction_code, "company_number": company_number}
        )


@dataclass(eq=False)
class Relationship:
    """A stored ownership/control edge: ``source`` owns ``target``."""

    source: Entity
    target: Entity
    id: Optional[str] = None
    sample_date: Optional[str] = None
    started_date: Optional[str] = None
    ended_date: Optional[str] = None
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def intermediate_entities(self) -> Tuple[Entity, ...]:
        return ()

    @property
    def intermediate_relationships(self) -> Tuple["Relationship", ...]:
        return ()


@dataclass(frozen=True, eq=False)
class ChainRelationship:
    """Aggregate edge summarizing a multi-hop ownership path.

    ``intermediate_entities`` and ``intermediate_relationships`` are ordered
    from ``target`` towards ``source``.
    """

    source: Entity
    target: Entity
    intermediate_entities: Tuple[Entity, ...]
    intermediate_relationships: Tuple[Relationship, ...]

    @property
    def started_date(self) -> Optional[str]:
        # A chain holds only while every link holds.
        dates = [r.started_date for r in self.intermediate_relationships if r.started_date]
        return max(dates, key=_earliest_day) if dates else None

    @property
    def ended_date(self) -> Optional[str]:
        dates = [r.ended_date for r in self.intermediate_relationships if r.ended_date]
        return min(dates, key=_latest_day) if dates else None


def _date_atoms(value: str) -> List[int]:
    return [int(a) for a in value.split("T", 1)[0].split("-")]


def _earliest_day(value: str) -> Tuple[int, int, int]:
    """First day covered by a partial date: ``2019`` starts on 2019-01-01."""
    atoms = _date_atoms(value) + [1, 1]
    return atoms[0], atoms[1], atoms[2]


def _latest_day(value: str) -> Tuple[int, int, int]:
    """Last day covered by a partial date: ``2019`` runs to the end of 2019."""
    atoms = _date_atoms(value)
    atoms += [12, 31][len(atoms) - 1:]
    return atoms[0], atoms[1], atoms[2]


ChainLink = Union[Relationship, ChainRelationship]
