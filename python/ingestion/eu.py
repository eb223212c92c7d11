"""
EU consolidated financial sanctions list (export/sanctionEntity)
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from database.models import ListSource, EntityType
from ingestion.errors import ParseError, RecordError
from ingestion.normalize import (
    address_list,
    clean,
    is_true,
    join_text,
    make_address,
    parse_date,
    unique_aliases,
)
from ingestion.records import NormalizedEntity
from xml_utils import Record, as_list, element_to_record, get_text, local_name, parse_xml_bytes

logger = logging.getLogger(__name__)


def parse_eu(content: bytes) -> List[Record]:
    """Split an EU export payload into one record per sanctionEntity

    Raises:
        ParseError: If the root element is not export
    """
    root = parse_xml_bytes(content)
    if local_name(root) != "export":
        raise ParseError("No export element found in EU XML data")
    return [
        element_to_record(e)
        for e in root
        if isinstance(e.tag, str) and local_name(e) == "sanctionEntity"
    ]


def _names(record: Record) -> Tuple[Optional[str], List[str]]:
    """Primary name and remaining aliases from the nameAlias entries

    The first strong alias is the primary name. Without one, the first
    alias listed takes its place.
    """
    primary = None
    fallback = None
    aliases: List[str] = []

    for alias in as_list(record.get("nameAlias")):
        if not isinstance(alias, dict):
            continue
        name = get_text(alias, "wholeName") or clean(alias.get("@wholeName"))
        if not name:
            continue
        if fallback is None:
            fallback = name
        if is_true(alias.get("@strong")) and primary is None:
            primary = name
        elif name != primary:
            aliases.append(name)

    return primary or fallback, aliases


def _date_of_birth(record: Record, ref: str, log: Any):
    birthdate = record.get("birthdate")
    if isinstance(birthdate, list):
        birthdate = birthdate[0] if birthdate else None
    if not isinstance(birthdate, dict):
        return None

    day = get_text(birthdate, "day") or clean(birthdate.get("@day"))
    month = get_text(birthdate, "month") or clean(birthdate.get("@month"))
    year = get_text(birthdate, "year") or clean(birthdate.get("@year"))
    if not (day and month and year):
        return None
    return parse_date(f"{year}-{month.zfill(2)}-{day.zfill(2)}", field="birthdate", ref=ref, log=log)


def normalize_eu(record: Record, synced_at: datetime, log: Any = None) -> NormalizedEntity:
    """Map a sanctionEntity record to a NormalizedEntity

    Raises:
        RecordError: If the reference number or every name is missing
    """
    if not isinstance(record, dict):
        raise RecordError("sanctionEntity has no content")
    log = log or logger

    ref = clean(record.get("@euReferenceNumber"))
    if not ref:
        raise RecordError("sanctionEntity without euReferenceNumber")

    name, aliases = _names(record)
    if not name:
        raise RecordError(f"sanctionEntity {ref} has no name")

    subject_type = record.get("subjectType")
    code = clean(subject_type.get("@code")) if isinstance(subject_type, dict) else None

    addresses = address_list(
        make_address(
            address1=get_text(addr, "street"),
            city=get_text(addr, "city"),
            postalCode=get_text(addr, "zipCode"),
            country=get_text(addr, "countryDescription"),
        )
        for addr in as_list(record.get("address"))
        if isinstance(addr, dict)
    )

    place = next((p for p in as_list(record.get("placeOfBirth")) if isinstance(p, dict)), None)
    place_of_birth = join_text([get_text(place, "city"), get_text(place, "countryDescription")]) if place else None

    nationality = join_text(
        get_text(c, "countryDescription")
        for c in as_list(record.get("citizenship"))
        if isinstance(c, dict)
    )

    return NormalizedEntity(
        list_source=ListSource.EU,
        entity_type=EntityType.INDIVIDUAL if code == "P" else EntityType.ENTITY,
        name=name,
        reference_number=ref,
        aliases=unique_aliases(aliases, name),
        addresses=addresses,
        date_of_birth=_date_of_birth(record, ref, log),
        place_of_birth=place_of_birth,
        nationality=nationality,
        reason=clean(get_text(record, "reasonForListing")),
        additional_info=clean(get_text(record, "remark")),
        date_added=synced_at,
    )
