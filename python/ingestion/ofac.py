"""
OFAC SDN list (sdnList/sdnEntry)
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from database.models import ListSource, EntityType
from ingestion.errors import ParseError, RecordError
from ingestion.normalize import (
    address_list,
    clean,
    full_name,
    is_true,
    join_text,
    make_address,
    parse_date,
    unique_aliases,
)
from ingestion.records import NormalizedEntity
from xml_utils import Record, element_to_record, get_text, local_name, nested_list, parse_xml_bytes, text_of

logger = logging.getLogger(__name__)


def parse_ofac(content: bytes) -> List[Record]:
    """Split an SDN XML payload into one record per sdnEntry

    Raises:
        ParseError: If the root element is not sdnList
    """
    root = parse_xml_bytes(content)
    if local_name(root) != "sdnList":
        raise ParseError("No sdnList found in OFAC XML data")
    return [element_to_record(e) for e in root if isinstance(e.tag, str) and local_name(e) == "sdnEntry"]


def _main_entry(items: List[Any]) -> Optional[Any]:
    """Item flagged mainEntry=true, else the first one"""
    for item in items:
        if isinstance(item, dict) and is_true(get_text(item, "mainEntry")):
            return item
    return items[0] if items else None


def _is_individual(sdn_type: Optional[str]) -> bool:
    value = (sdn_type or "").lower()
    return "individual" in value or "person" in value


def normalize_ofac(record: Record, synced_at: datetime, log: Any = None) -> NormalizedEntity:
    """Map an sdnEntry record to a NormalizedEntity

    Raises:
        RecordError: If the entry is not a record or has no uid
    """
    if not isinstance(record, dict):
        raise RecordError("sdnEntry has no content")
    log = log or logger

    uid = get_text(record, "uid")
    if not uid:
        raise RecordError("sdnEntry without uid")

    name = (
        full_name(get_text(record, "firstName"), get_text(record, "lastName"))
        or clean(get_text(record, "title"))
        or f"Unknown Entity {uid}"
    )

    aliases = unique_aliases(
        (
            full_name(get_text(aka, "firstName"), get_text(aka, "lastName"))
            for aka in nested_list(record, "akaList", "aka")
            if isinstance(aka, dict)
        ),
        name,
    )

    addresses = address_list(
        make_address(
            address1=get_text(addr, "address1"),
            address2=get_text(addr, "address2"),
            address3=get_text(addr, "address3"),
            city=get_text(addr, "city"),
            stateOrProvince=get_text(addr, "stateOrProvince"),
            postalCode=get_text(addr, "postalCode"),
            country=get_text(addr, "country"),
        )
        for addr in nested_list(record, "addressList", "address")
        if isinstance(addr, dict)
    )

    dob_item = _main_entry(nested_list(record, "dateOfBirthList", "dateOfBirthItem"))
    date_of_birth = parse_date(
        get_text(dob_item, "dateOfBirth"), field="dateOfBirth", ref=uid, log=log
    )

    pob_item = _main_entry(nested_list(record, "placeOfBirthList", "placeOfBirthItem"))
    nationality_item = _main_entry(nested_list(record, "nationalityList", "nationality"))

    programs = [text_of(p) for p in nested_list(record, "programList", "program")]

    return NormalizedEntity(
        list_source=ListSource.OFAC,
        entity_type=EntityType.INDIVIDUAL if _is_individual(get_text(record, "sdnType")) else EntityType.ENTITY,
        name=name,
        reference_number=uid,
        aliases=aliases,
        addresses=addresses,
        date_of_birth=date_of_birth,
        place_of_birth=clean(get_text(pob_item, "placeOfBirth")),
        nationality=clean(get_text(nationality_item, "country")),
        reason=join_text(programs),
        additional_info=clean(get_text(record, "remarks")),
        date_added=synced_at,
    )
