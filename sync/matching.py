"""Record matching for inbound reconciliation.

An incoming record matches at most one domain record. Rules are tried in
strict priority order and the first rule that finds a record wins:

1. ``source_id`` (with ``source_system``) equal to the incoming record's
2. business code (``code_field`` of the entity) equal
3. ``name`` and ``email`` both equal (entities that carry both)
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from core.models.domain import DomainRecord, EntityType
from core.observability.logging import get_logger
from sync.repository import DomainRepository

logger = get_logger(__name__)


class MatchType(str, Enum):
    """How the domain record was matched."""
    SOURCE_ID = "source_id"      # Same external key
    CODE = "code"                # Same business code
    NAME_EMAIL = "name_email"    # Same name and email
    NO_MATCH = "no_match"


class MatchResult(BaseModel):
    match_type: MatchType = MatchType.NO_MATCH
    record: Optional[DomainRecord] = None

    @property
    def matched(self) -> bool:
        return self.record is not None


class RecordMatcher:
    """Resolves incoming records against a DomainRepository.

    Usage:
        matcher = RecordMatcher(repository)
        result = await matcher.match(EntityType.VENDORS, incoming_supplier)
        if result.matched:
            ...
    """

    def __init__(self, repository: DomainRepository):
        self.repository = repository

    def criteria_for(self, incoming: DomainRecord) -> List[Tuple[MatchType, Dict[str, Any]]]:
        """Lookup criteria in priority order; rules lacking values are skipped."""
        rules: List[Tuple[MatchType, Dict[str, Any]]] = []
        if incoming.source_id:
            rules.append((MatchType.SOURCE_ID, {
                "source_system": incoming.source_system,
                "source_id": incoming.source_id,
            }))
        if incoming.business_code:
            rules.append((MatchType.CODE, {incoming.code_field: incoming.business_code}))
        name = getattr(incoming, "name", None)
        email = getattr(incoming, "email", None)
        if name and email:
            rules.append((MatchType.NAME_EMAIL, {"name": name, "email": email}))
        return rules

    async def match(self, entity_type: EntityType, incoming: DomainRecord) -> MatchResult:
        for match_type, criteria in self.criteria_for(incoming):
            candidates = await self.repository.find(entity_type, criteria)
            if not candidates:
                continue
            if len(candidates) > 1:
                logger.warning(
                    f"{len(candidates)} {entity_type.value} records match by {match_type.value}, "
                    f"using {candidates[0].identifier()}"
                )
            return MatchResult(match_type=match_type, record=candidates[0])
        return MatchResult()

    def match_keys(self, incoming: DomainRecord) -> List[Tuple[str, ...]]:
        """Hashable keys of every rule the record can match by, sorted.

        Two records sharing any key could resolve to the same domain record.
        """
        keys = []
        for match_type, criteria in self.criteria_for(incoming):
            fields = sorted((name, str(value)) for name, value in criteria.items())
            keys.append((match_type.value,) + tuple(f"{name}={value}" for name, value in fields))
        return sorted(keys)
