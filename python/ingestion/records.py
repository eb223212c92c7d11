"""
Canonical record and result types for the sync pipeline
"""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from database.models import ListSource, EntityType
from ingestion.errors import RecordError

ADDRESS_FIELDS = (
    "address1",
    "address2",
    "address3",
    "city",
    "stateOrProvince",
    "postalCode",
    "country",
)


@dataclass
class NormalizedEntity:
    """A SanctionedEntity before the store assigns its id"""
    list_source: ListSource
    entity_type: EntityType
    name: str
    reference_number: str
    date_added: datetime
    aliases: Optional[List[str]] = None
    addresses: Optional[List[Dict[str, Optional[str]]]] = None
    date_of_birth: Optional[date] = None
    place_of_birth: Optional[str] = None
    nationality: Optional[str] = None
    reason: Optional[str] = None
    additional_info: Optional[str] = None

    def __post_init__(self):
        self.name = (self.name or "").strip()
        self.reference_number = str(self.reference_number or "").strip()
        if not self.name:
            raise RecordError("Entity name is empty")
        if not self.reference_number:
            raise RecordError(f"Entity '{self.name}' has no reference number")

    def to_row(self) -> Dict[str, Any]:
        """Column values keyed by SanctionedEntity attribute name"""
        return asdict(self)


@dataclass
class SyncResult:
    """Outcome of one list's sync run"""
    source: ListSource
    success: bool
    message: str
    records_affected: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


@dataclass
class AggregateSyncResult:
    """Outcome of the fan-out run over every list"""
    success: bool
    message: str
    details: List[str] = field(default_factory=list)
    records_affected: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message, "details": list(self.details)}
