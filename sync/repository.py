"""Domain repository contract used by the sync orchestrator.

The application's persistence layer implements ``DomainRepository``;
``InMemoryDomainRepository`` backs local workers and tests.

Queries and match criteria are flat ``{field: value}`` dicts compared for
equality against domain model attributes.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from core.models.domain import DomainRecord, EntityType, model_for


class DomainRepository(ABC):
    """Storage for domain records, partitioned by entity type."""

    @abstractmethod
    async def find(self, entity_type: EntityType, query: Optional[Mapping[str, Any]] = None) -> List[DomainRecord]:
        """Return records whose attributes equal every value in ``query``."""
        pass

    @abstractmethod
    async def create(self, entity_type: EntityType, record: DomainRecord) -> DomainRecord:
        """Persist a new record and return it with its ``id`` assigned."""
        pass

    @abstractmethod
    async def update_matching(
        self,
        entity_type: EntityType,
        criteria: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> int:
        """Merge ``patch`` into every record matching ``criteria``.

        Returns:
            Number of records updated
        """
        pass


def _matches(record: DomainRecord, criteria: Mapping[str, Any]) -> bool:
    return all(getattr(record, name, None) == value for name, value in criteria.items())


class InMemoryDomainRepository(DomainRepository):
    """In-memory repository for development/testing.

    Records are stored as validated domain models and copied on the way in
    and out, so callers never share instances with the store.
    """

    def __init__(self):
        self._records: Dict[EntityType, Dict[str, DomainRecord]] = {}
        self._lock = threading.Lock()

    def _table(self, entity_type: EntityType) -> Dict[str, DomainRecord]:
        return self._records.setdefault(EntityType.parse(entity_type), {})

    async def find(self, entity_type: EntityType, query: Optional[Mapping[str, Any]] = None) -> List[DomainRecord]:
        with self._lock:
            return [
                record.model_copy(deep=True)
                for record in self._table(entity_type).values()
                if _matches(record, query or {})
            ]

    async def create(self, entity_type: EntityType, record: DomainRecord) -> DomainRecord:
        model = model_for(entity_type)
        stored = model.model_validate(record.model_dump())
        if stored.id is None:
            stored.id = uuid.uuid4().hex
        with self._lock:
            table = self._table(entity_type)
            if stored.id in table:
                raise ValueError(f"{model.__name__} {stored.id} already exists")
            table[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update_matching(
        self,
        entity_type: EntityType,
        criteria: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> int:
        model = model_for(entity_type)
        updated = 0
        with self._lock:
            table = self._table(entity_type)
            for record_id, record in list(table.items()):
                if not _matches(record, criteria):
                    continue
                merged = {**record.model_dump(), **dict(patch), "id": record_id}
                table[record_id] = model.model_validate(merged)
                updated += 1
        return updated

    async def get(self, entity_type: EntityType, record_id: str) -> Optional[DomainRecord]:
        with self._lock:
            record = self._table(entity_type).get(record_id)
            return record.model_copy(deep=True) if record is not None else None

    def clear(self) -> None:
        """Clear all records (for testing)."""
        with self._lock:
            self._records.clear()
