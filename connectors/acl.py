"""Anti-Corruption Layer framework.

Adapters register one ``EntityMapper`` (a pair of pure functions) per entity
type. The ``AntiCorruptionLayer`` applies them, guarantees null-in/null-out
and turns every mapping failure into a ``TranslationError`` so callers can
isolate bad records.

Status, result and type codes are translated through ``CodeTable``: an
explicit, exhaustive lookup per adapter with a documented default for
unrecognised external values. No string heuristics.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from connectors.errors import TranslationError
from core.models.domain import DomainRecord, EntityType, model_for
from core.observability.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


# =============================================================================
# Code Tables
# =============================================================================

class CodeTable(Generic[E]):
    """Bidirectional lookup between a domain enum and an adapter vocabulary.

    Every enum member must be mapped. ``aliases`` lists additional external
    spellings accepted inbound; outbound always emits the canonical value.

    Args:
        name: Table name for logs
        enum_cls: Domain enum
        mapping: Domain member -> external code (must cover every member)
        default: Domain member used for unrecognised or missing external
            codes; None for optional domain fields
        aliases: Extra external code -> domain member entries
    """

    def __init__(
        self,
        name: str,
        enum_cls: Type[E],
        mapping: Mapping[E, Any],
        default: Optional[E],
        aliases: Optional[Mapping[Any, E]] = None,
    ):
        missing = [member for member in enum_cls if member not in mapping]
        if missing:
            raise ValueError(f"Code table '{name}' is missing entries for {missing}")

        reverse: Dict[Any, E] = {}
        for member, code in mapping.items():
            if code in reverse:
                raise ValueError(f"Code table '{name}' maps {code!r} more than once")
            reverse[code] = member

        self.name = name
        self.enum_cls = enum_cls
        self.default = default
        self._forward: Dict[E, Any] = dict(mapping)
        self._reverse = reverse
        self._aliases: Dict[Any, E] = dict(aliases or {})

    def to_external(self, value: Optional[Union[E, str]]) -> Any:
        """Domain code -> external code. None stays None."""
        if value is None:
            return None
        return self._forward[self.enum_cls(value)]

    def to_domain(self, code: Any) -> Optional[E]:
        """External code -> domain member, falling back to ``default``."""
        if code is None or code == "":
            return self.default
        if code in self._reverse:
            return self._reverse[code]
        if code in self._aliases:
            return self._aliases[code]
        logger.debug(f"Unrecognised {self.name} code {code!r}, using default {self.default}")
        return self.default

    def external_codes(self) -> List[Any]:
        return list(self._forward.values())


# =============================================================================
# Mapper Registry
# =============================================================================

ExternalRecord = Dict[str, Any]


@dataclass(frozen=True)
class EntityMapper:
    """Pure mapping functions for one entity type.

    ``to_domain`` receives a non-null external dict and returns a domain model.
    ``to_external`` receives a domain model and returns an external dict.
    ``external_key`` extracts the external primary key from an external dict
    (used for create-vs-update decisions and error reports).
    """
    to_domain: Callable[[ExternalRecord], DomainRecord]
    to_external: Callable[[DomainRecord], ExternalRecord]
    external_key: Callable[[ExternalRecord], Optional[str]]


class AntiCorruptionLayer:
    """Translates between domain models and one adapter's external shapes.

    Usage:
        acl = AntiCorruptionLayer("sap", {EntityType.VENDORS: VENDOR_MAPPER, ...})
        supplier = acl.to_domain(EntityType.VENDORS, raw_business_partner)
        payload = acl.to_external(EntityType.VENDORS, supplier)
    """

    def __init__(self, source_system: str, mappers: Mapping[EntityType, EntityMapper]):
        self.source_system = source_system
        self._mappers: Dict[EntityType, EntityMapper] = dict(mappers)

    def supports(self, entity_type: Any) -> bool:
        return EntityType.parse(entity_type) in self._mappers

    def _mapper(self, entity_type: EntityType) -> EntityMapper:
        try:
            return self._mappers[entity_type]
        except KeyError:
            raise TranslationError(
                f"{self.source_system} has no mapper for {entity_type.value}",
                entity_type=entity_type.value,
            )

    def to_domain(self, entity_type: Any, external: Optional[ExternalRecord]) -> Optional[DomainRecord]:
        """External dict -> domain model, stamped with ``source_system``.

        Raises:
            TranslationError: If the record cannot be mapped
        """
        if external is None:
            return None
        entity_type = EntityType.parse(entity_type)
        mapper = self._mapper(entity_type)
        try:
            record = mapper.to_domain(external)
        except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as e:
            raise TranslationError(
                f"Cannot translate {self.source_system} {entity_type.value} record "
                f"{self._safe_key(mapper, external)!r} to domain: {e}",
                entity_type=entity_type.value,
            ) from e
        if record.source_system is None:
            record.source_system = self.source_system
        return record

    def to_external(
        self,
        entity_type: Any,
        record: Optional[Union[DomainRecord, Dict[str, Any]]],
    ) -> Optional[ExternalRecord]:
        """Domain model (or repository dict) -> external dict.

        Raises:
            TranslationError: If the record cannot be mapped
        """
        if record is None:
            return None
        entity_type = EntityType.parse(entity_type)
        mapper = self._mapper(entity_type)
        try:
            if not isinstance(record, DomainRecord):
                record = model_for(entity_type).model_validate(record)
            return mapper.to_external(record)
        except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as e:
            raise TranslationError(
                f"Cannot translate {entity_type.value} record to {self.source_system}: {e}",
                entity_type=entity_type.value,
            ) from e

    def batch_to_domain(self, entity_type: Any, externals: Iterable[Optional[ExternalRecord]]) -> List[DomainRecord]:
        """Translate a batch; any failure raises (reads are all-or-nothing)."""
        return [r for r in (self.to_domain(entity_type, e) for e in externals) if r is not None]

    def external_key(self, entity_type: Any, external: ExternalRecord) -> Optional[str]:
        return self._safe_key(self._mapper(EntityType.parse(entity_type)), external)

    @staticmethod
    def _safe_key(mapper: EntityMapper, external: Any) -> Optional[str]:
        try:
            return mapper.external_key(external)
        except (KeyError, TypeError, AttributeError):
            return None


# =============================================================================
# Helpers for mapper modules
# =============================================================================

def present(**fields: Any) -> Dict[str, Any]:
    """Drop None values so model defaults apply to absent fields."""
    return {k: v for k, v in fields.items() if v is not None}


def key_str(value: Any) -> Optional[str]:
    return None if value is None or value == "" else str(value)
