"""
Interpol Red Notices (JSON)
"""

import json
import logging
from datetime import datetime
from typing import Any, List

from database.models import ListSource, EntityType
from ingestion.errors import ParseError, RecordError
from ingestion.normalize import clean, full_name, join_text, parse_date, parse_datetime
from ingestion.records import NormalizedEntity

logger = logging.getLogger(__name__)


def parse_interpol(content: bytes) -> List[dict]:
    """Decode a Red Notice payload

    Accepts a JSON array of notices or an object with a ``notices`` list.

    Raises:
        ParseError: If the payload has neither shape
        ValueError: If the payload is not valid JSON
    """
    data = json.loads(content)
    if isinstance(data, dict):
        data = data.get("notices")
    if not isinstance(data, list):
        raise ParseError("No notices list found in Interpol data")
    return data


def normalize_interpol(record: Any, synced_at: datetime, log: Any = None) -> NormalizedEntity:
    """Map a Red Notice to a NormalizedEntity

    Raises:
        RecordError: If the notice is not an object or has no entityId
    """
    if not isinstance(record, dict):
        raise RecordError("Red Notice entry is not an object")
    log = log or logger

    ref = clean(record.get("entityId"))
    if not ref:
        raise RecordError("Red Notice without entityId")

    name = full_name(record.get("forename"), record.get("name")) or f"Unknown Subject {ref}"

    nationality = record.get("nationality")
    if isinstance(nationality, list):
        nationality = join_text(nationality)
    else:
        nationality = clean(nationality)

    warrant_type = clean(record.get("warrantType"))
    charges = clean(record.get("charges"))
    reason = join_text([warrant_type, charges], sep=": ")

    issuing_country = clean(record.get("issuingCountry"))
    published_at = clean(record.get("publishedAt"))
    additional_info = None
    if issuing_country:
        additional_info = f"Red Notice issued by: {issuing_country}"
        if published_at:
            additional_info += f" (Published: {published_at})"

    return NormalizedEntity(
        list_source=ListSource.INTERPOL,
        entity_type=EntityType.INDIVIDUAL,
        name=name,
        reference_number=ref,
        date_of_birth=parse_date(record.get("dateOfBirth"), field="dateOfBirth", ref=ref, log=log),
        place_of_birth=join_text([record.get("placeOfBirth"), record.get("countryOfBirth")]),
        nationality=nationality,
        reason=reason,
        additional_info=additional_info,
        date_added=parse_datetime(published_at, synced_at, field="publishedAt", ref=ref, log=log),
    )
