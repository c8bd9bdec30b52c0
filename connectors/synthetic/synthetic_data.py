"""Seeded synthetic ERP dataset.

Each ``SyntheticDataset`` owns its records; two connectors built with the
same seed see identical data but never share mutations. Records are stored
in the synthetic wire shape (camelCase dicts with ISO dates) and indexed by
their business code.
"""

import copy
import random
import threading
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Tuple

from connectors.synthetic.synthetic_mappers import KEY_FIELDS
from core.models.domain import EntityType

DEFAULT_SEED = 12345
REFERENCE_DATE = date(2024, 6, 1)

DEFAULT_COUNTS: Dict[EntityType, int] = {
    EntityType.INVENTORY: 50,
    EntityType.PURCHASE_ORDERS: 30,
    EntityType.VENDORS: 25,
    EntityType.PRODUCTION_ORDERS: 20,
    EntityType.INSPECTIONS: 40,
}

# Business code format and the attribute that carries it
CODE_FORMATS: Dict[EntityType, str] = {
    EntityType.INVENTORY: "ITEM{:04d}",
    EntityType.PURCHASE_ORDERS: "PO{:05d}",
    EntityType.VENDORS: "SUP{:04d}",
    EntityType.PRODUCTION_ORDERS: "WO{:05d}",
    EntityType.INSPECTIONS: "QC{:05d}",
}

# Attributes searched by the free-text ``filter`` parameter
FILTER_FIELDS: Dict[EntityType, Tuple[str, ...]] = {
    EntityType.INVENTORY: ("itemCode", "name", "description"),
    EntityType.PURCHASE_ORDERS: ("poNumber", "vendorName", "status"),
    EntityType.VENDORS: ("code", "name", "email", "status"),
    EntityType.PRODUCTION_ORDERS: ("orderNumber", "itemDescription", "status"),
    EntityType.INSPECTIONS: ("inspectionNumber", "itemDescription", "supplierName", "status", "result"),
}


# =============================================================================
# Word Pools
# =============================================================================

ADJECTIVES = ["Rugged", "Precision", "Compact", "Heavy-Duty", "Sleek", "Modular", "Ergonomic", "Industrial"]
MATERIALS = ["Steel", "Aluminum", "Titanium", "Carbon", "Polymer", "Brass", "Composite", "Copper"]
PRODUCTS = ["Bracket", "Valve", "Bearing", "Housing", "Gasket", "Actuator", "Flange", "Sensor", "Fastener", "Manifold"]
DEPARTMENTS = ["Hardware", "Electronics", "Hydraulics", "Tooling", "Fasteners", "Castings"]
COMPANY_PREFIXES = ["Apex", "Summit", "Northwind", "Ironclad", "Bluewater", "Keystone", "Vector", "Pinnacle", "Harbor"]
COMPANY_SUFFIXES = ["Industries", "Manufacturing", "Supply Co.", "Components", "Metals", "Systems", "Logistics"]
FIRST_NAMES = ["Alex", "Jordan", "Morgan", "Taylor", "Casey", "Riley", "Jamie", "Avery", "Quinn", "Dana"]
LAST_NAMES = ["Garcia", "Chen", "Okafor", "Novak", "Singh", "Larsen", "Moreau", "Tanaka", "Silva", "Walsh"]
STREETS = ["Main St", "Industrial Pkwy", "Commerce Dr", "Harbor Rd", "Mill Ave", "Foundry Ln"]
CITIES = [("Dayton", "OH"), ("Wichita", "KS"), ("Tacoma", "WA"), ("Reno", "NV"), ("Akron", "OH"), ("Fresno", "CA")]
LOREM = ["quality", "batch", "review", "pending", "supplier", "schedule", "tolerance", "shipment", "revision", "lot"]

UOMS = ["EA", "KG", "M", "L", "BOX"]
WAREHOUSES = ["WAREHOUSE-A", "WAREHOUSE-B", "WAREHOUSE-C"]
PLANTS = ["PLANT-A", "PLANT-B", "PLANT-C"]
SUPPLIER_CODES = ["SUP0001", "SUP0002", "SUP0003", "SUP0004", "SUP0005"]
PAYMENT_TERMS = ["Net 30", "Net 45", "Net 60"]

VENDOR_TYPES = ["manufacturer", "distributor", "service"]
VENDOR_STATUSES = ["active", "inactive", "pending"]
PO_STATUSES = ["draft", "submitted", "approved", "received", "closed"]
WO_STATUSES = ["planned", "released", "in_progress", "completed", "closed"]
PRIORITIES = ["low", "medium", "high", "urgent"]
INSPECTION_TYPES = ["incoming", "in-process", "final", "supplier"]
INSPECTION_RESULTS = ["passed", "failed", "pending"]
INSPECTION_STATUSES = ["draft", "in_progress", "completed", "cancelled"]


class SyntheticDataset:
    """In-memory record store for one synthetic connector.

    Args:
        seed: Random seed; the same seed always yields the same records
        counts: Records generated per entity type (defaults to DEFAULT_COUNTS)
        reference_date: Anchor for generated dates
    """

    def __init__(
        self,
        seed: int = DEFAULT_SEED,
        counts: Optional[Mapping[EntityType, int]] = None,
        reference_date: date = REFERENCE_DATE,
    ):
        self._rng = random.Random(seed)
        self._today = reference_date
        self._lock = threading.Lock()
        self._records: Dict[EntityType, List[Dict[str, Any]]] = {}
        self._index: Dict[EntityType, Dict[str, int]] = {}

        counts = {**DEFAULT_COUNTS, **(counts or {})}
        generators = {
            EntityType.INVENTORY: self._inventory_item,
            EntityType.PURCHASE_ORDERS: self._purchase_order,
            EntityType.VENDORS: self._vendor,
            EntityType.PRODUCTION_ORDERS: self._production_order,
            EntityType.INSPECTIONS: self._inspection,
        }
        for entity_type, generate in generators.items():
            self._records[entity_type] = []
            self._index[entity_type] = {}
            for n in range(1, counts[entity_type] + 1):
                self._append(entity_type, {"id": n, **generate(n)})

    # =========================================================================
    # Queries
    # =========================================================================

    def count(self, entity_type: EntityType) -> int:
        return len(self._records[entity_type])

    def query(
        self,
        entity_type: EntityType,
        text: Optional[str] = None,
        match: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Return copies of matching records.

        Args:
            entity_type: Collection to read
            text: Case-insensitive substring searched in FILTER_FIELDS
            match: Exact attribute values every record must carry
            limit: Page size (None returns everything after ``offset``)
            offset: Records to skip before the page starts
        """
        with self._lock:
            rows = self._records[entity_type]
            if text:
                needle = str(text).lower()
                fields = FILTER_FIELDS[entity_type]
                rows = [r for r in rows if any(needle in str(r.get(f) or "").lower() for f in fields)]
            for attribute, value in (match or {}).items():
                rows = [r for r in rows if r.get(attribute) == value]
            rows = rows[offset:]
            if limit is not None:
                rows = rows[:limit]
            return copy.deepcopy(rows)

    def get(self, entity_type: EntityType, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            position = self._index[entity_type].get(key)
            if position is None:
                return None
            return copy.deepcopy(self._records[entity_type][position])

    def __contains__(self, item: Tuple[EntityType, str]) -> bool:
        entity_type, key = item
        return key in self._index[entity_type]

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, entity_type: EntityType, record: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new record, assigning ``id`` and a business code if absent.

        Raises:
            ValueError: If a record with the same business code exists
        """
        with self._lock:
            key_field = KEY_FIELDS[entity_type]
            rows = self._records[entity_type]
            stored = copy.deepcopy(record)
            stored["id"] = len(rows) + 1
            if not stored.get(key_field):
                stored[key_field] = CODE_FORMATS[entity_type].format(len(rows) + 1)
            if stored[key_field] in self._index[entity_type]:
                raise ValueError(f"{entity_type.value} {stored[key_field]} already exists")
            self._append(entity_type, stored)
            return copy.deepcopy(stored)

    def update(self, entity_type: EntityType, key: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``changes`` into an existing record. ``id`` and the code are kept.

        Raises:
            KeyError: If no record has this business code
        """
        with self._lock:
            position = self._index[entity_type][key]
            existing = self._records[entity_type][position]
            key_field = KEY_FIELDS[entity_type]
            updated = {**existing, **copy.deepcopy(changes), "id": existing["id"], key_field: existing[key_field]}
            self._records[entity_type][position] = updated
            return copy.deepcopy(updated)

    def upsert(self, entity_type: EntityType, record: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        """Create or update by business code. Returns (record, created)."""
        key = record.get(KEY_FIELDS[entity_type])
        if key and (entity_type, key) in self:
            return self.update(entity_type, key, record), False
        return self.create(entity_type, record), True

    def _append(self, entity_type: EntityType, record: Dict[str, Any]) -> None:
        self._index[entity_type][record[KEY_FIELDS[entity_type]]] = len(self._records[entity_type])
        self._records[entity_type].append(record)

    # =========================================================================
    # Generators
    # =========================================================================

    def _pick(self, options):
        return self._rng.choice(options)

    def _price(self, low: float, high: float) -> float:
        return round(self._rng.uniform(low, high), 2)

    def _recent(self, days: int) -> str:
        return (self._today - timedelta(days=self._rng.randint(0, days))).isoformat()

    def _future(self, days: int) -> str:
        return (self._today + timedelta(days=self._rng.randint(1, days))).isoformat()

    def _product_name(self) -> str:
        return f"{self._pick(ADJECTIVES)} {self._pick(MATERIALS)} {self._pick(PRODUCTS)}"

    def _company_name(self) -> str:
        return f"{self._pick(COMPANY_PREFIXES)} {self._pick(COMPANY_SUFFIXES)}"

    def _person(self) -> str:
        return f"{self._pick(FIRST_NAMES)} {self._pick(LAST_NAMES)}"

    def _sentence(self) -> str:
        words = self._rng.sample(LOREM, 5)
        return " ".join(words).capitalize() + "."

    def _item_code(self) -> str:
        return f"ITEM{self._rng.randint(0, 9999):04d}"

    def _inventory_item(self, n: int) -> Dict[str, Any]:
        name = self._product_name()
        return {
            "itemCode": CODE_FORMATS[EntityType.INVENTORY].format(n - 1),
            "name": name,
            "description": f"{name} for {self._pick(DEPARTMENTS).lower()} assemblies",
            "category": self._pick(DEPARTMENTS),
            "uom": self._pick(UOMS),
            "quantity": self._rng.randint(0, 1000),
            "onOrder": self._rng.randint(0, 200),
            "committed": self._rng.randint(0, 100),
            "reorderPoint": self._rng.randint(5, 50),
            "unitCost": self._price(1, 500),
            "supplier": self._pick(SUPPLIER_CODES),
            "location": self._pick(WAREHOUSES),
        }

    def _purchase_order(self, n: int) -> Dict[str, Any]:
        items = []
        for _ in range(self._rng.randint(1, 5)):
            quantity = self._rng.randint(1, 100)
            unit_price = self._price(1, 500)
            items.append({
                "itemCode": self._item_code(),
                "description": self._product_name(),
                "quantity": quantity,
                "unitPrice": unit_price,
                "totalPrice": round(quantity * unit_price, 2),
            })
        return {
            "poNumber": CODE_FORMATS[EntityType.PURCHASE_ORDERS].format(n),
            "vendor": self._pick(SUPPLIER_CODES),
            "vendorName": self._company_name(),
            "date": self._recent(60),
            "dueDate": self._future(30),
            "status": self._pick(PO_STATUSES),
            "total": round(sum(item["totalPrice"] for item in items), 2),
            "currency": "USD",
            "items": items,
            "notes": self._sentence(),
        }

    def _vendor(self, n: int) -> Dict[str, Any]:
        name = self._company_name()
        contact = self._person()
        city, state = self._pick(CITIES)
        domain = name.split()[0].lower()
        return {
            "code": CODE_FORMATS[EntityType.VENDORS].format(n),
            "name": name,
            "contactName": contact,
            "email": f"{contact.split()[0].lower()}.{n}@{domain}.example.com",
            "phone": f"555-{self._rng.randint(100, 999)}-{self._rng.randint(1000, 9999)}",
            "address": {
                "street": f"{self._rng.randint(1, 9999)} {self._pick(STREETS)}",
                "city": city,
                "state": state,
                "zipCode": f"{self._rng.randint(10000, 99999)}",
                "country": "United States",
            },
            "website": f"https://www.{domain}.example.com",
            "type": self._pick(VENDOR_TYPES),
            "status": self._pick(VENDOR_STATUSES),
            "taxId": str(self._rng.randint(100000000, 999999999)),
            "paymentTerms": self._pick(PAYMENT_TERMS),
            "notes": self._sentence(),
        }

    def _production_order(self, n: int) -> Dict[str, Any]:
        return {
            "orderNumber": CODE_FORMATS[EntityType.PRODUCTION_ORDERS].format(n),
            "itemCode": self._item_code(),
            "itemDescription": self._product_name(),
            "quantity": self._rng.randint(10, 1000),
            "status": self._pick(WO_STATUSES),
            "priority": self._pick(PRIORITIES),
            "startDate": self._recent(30),
            "endDate": self._future(30),
            "location": self._pick(PLANTS),
            "notes": self._sentence(),
        }

    def _inspection(self, n: int) -> Dict[str, Any]:
        return {
            "inspectionNumber": CODE_FORMATS[EntityType.INSPECTIONS].format(n),
            "type": self._pick(INSPECTION_TYPES),
            "itemCode": self._item_code(),
            "itemDescription": self._product_name(),
            "supplierCode": self._pick(SUPPLIER_CODES),
            "supplierName": self._company_name(),
            "quantity": self._rng.randint(1, 100),
            "sampleSize": self._rng.randint(1, 20),
            "inspector": self._person(),
            "date": self._recent(30),
            "result": self._pick(INSPECTION_RESULTS),
            "status": self._pick(INSPECTION_STATUSES),
            "notes": self._sentence(),
            "defects": self._rng.randint(0, 10),
        }
