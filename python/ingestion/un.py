"""
UN Security Council consolidated list

Individuals and entities live in separate sections of CONSOLIDATED_LIST;
each parsed record carries the section it came from under ``_section``.
"""

import logging
from datetime import datetime
from typing import Any, List

from database.models import ListSource, EntityType
from ingestion.errors import ParseError, RecordError
from ingestion.normalize import (
    address_list,
    clean,
    join_text,
    make_address,
    parse_date,
    parse_datetime,
    unique_aliases,
)
from ingestion.records import NormalizedEntity
from xml_utils import Record, as_list, element_to_record, get_text, local_name, parse_xml_bytes, text_of

logger = logging.getLogger(__name__)

SECTIONS = (
    ("INDIVIDUALS", "INDIVIDUAL", EntityType.INDIVIDUAL),
    ("ENTITIES", "ENTITY", EntityType.ENTITY),
)

NAME_PARTS = ("FIRST_NAME", "SECOND_NAME", "THIRD_NAME", "FOURTH_NAME")


def parse_un(content: bytes) -> List[Record]:
    """Split a consolidated list payload into individual and entity records

    Raises:
        ParseError: If the root element is not CONSOLIDATED_LIST
    """
    root = parse_xml_bytes(content)
    if local_name(root) != "CONSOLIDATED_LIST":
        raise ParseError("No CONSOLIDATED_LIST found in UN XML data")

    records: List[Record] = []
    for section, item, entity_type in SECTIONS:
        for group in root:
            if not isinstance(group.tag, str) or local_name(group) != section:
                continue
            for elem in group:
                if not isinstance(elem.tag, str) or local_name(elem) != item:
                    continue
                record = element_to_record(elem)
                if not isinstance(record, dict):
                    record = {}
                record["_section"] = entity_type.value
                records.append(record)
    return records


def _place_of_birth(record: Record) -> Any:
    places = [p for p in as_list(record.get("INDIVIDUAL_PLACE_OF_BIRTH")) if isinstance(p, dict)]
    if not places:
        return None
    first = places[0]
    return clean(get_text(first, "VALUE")) or join_text(
        [get_text(first, "CITY"), get_text(first, "STATE_PROVINCE"), get_text(first, "COUNTRY")]
    )


def _date_of_birth(record: Record, ref: str, log: Any):
    births = [b for b in as_list(record.get("INDIVIDUAL_DATE_OF_BIRTH")) if isinstance(b, dict)]
    if not births:
        return None
    raw = get_text(births[0], "DATE") or get_text(births[0], "YEAR")
    return parse_date(raw, field="DATE_OF_BIRTH", ref=ref, log=log)


def normalize_un(record: Record, synced_at: datetime, log: Any = None) -> NormalizedEntity:
    """Map an INDIVIDUAL or ENTITY record to a NormalizedEntity

    Raises:
        RecordError: If neither REFERENCE_NUMBER nor DATAID is present
    """
    if not isinstance(record, dict):
        raise RecordError("UN record has no content")
    log = log or logger

    entity_type = EntityType(record.get("_section", EntityType.INDIVIDUAL.value))
    is_individual = entity_type == EntityType.INDIVIDUAL

    dataid = get_text(record, "DATAID") or clean(record.get("@dataid"))
    ref = get_text(record, "REFERENCE_NUMBER") or dataid
    if not ref:
        raise RecordError("UN record without REFERENCE_NUMBER or DATAID")

    placeholder = "Unknown Individual" if is_individual else "Unknown Entity"
    name = join_text((get_text(record, part) for part in NAME_PARTS), sep=" ") or f"{placeholder} {dataid or ref}"

    alias_key = "INDIVIDUAL_ALIAS" if is_individual else "ENTITY_ALIAS"
    aliases = unique_aliases(
        (get_text(alias, "ALIAS_NAME") for alias in as_list(record.get(alias_key)) if isinstance(alias, dict)),
        name,
    )

    address_key = "INDIVIDUAL_ADDRESS" if is_individual else "ENTITY_ADDRESS"
    addresses = address_list(
        make_address(
            address1=get_text(addr, "STREET"),
            city=get_text(addr, "CITY"),
            stateOrProvince=get_text(addr, "STATE_PROVINCE"),
            postalCode=get_text(addr, "ZIP_CODE"),
            country=get_text(addr, "COUNTRY"),
        )
        for addr in as_list(record.get(address_key))
        if isinstance(addr, dict)
    )

    list_type = clean(get_text(record, "UN_LIST_TYPE"))
    if is_individual:
        designations = [
            text_of(v)
            for designation in as_list(record.get("DESIGNATION"))
            if isinstance(designation, dict)
            for v in as_list(designation.get("VALUE"))
        ]
        reason = list_type or join_text(designations)
        nationality = join_text(
            text_of(v)
            for nat in as_list(record.get("NATIONALITY"))
            if isinstance(nat, dict)
            for v in as_list(nat.get("VALUE"))
        )
        date_of_birth = _date_of_birth(record, ref, log)
        place_of_birth = _place_of_birth(record)
    else:
        reason = list_type
        nationality = None
        date_of_birth = None
        place_of_birth = None

    return NormalizedEntity(
        list_source=ListSource.UN,
        entity_type=entity_type,
        name=name,
        reference_number=ref,
        aliases=aliases,
        addresses=addresses,
        date_of_birth=date_of_birth,
        place_of_birth=place_of_birth,
        nationality=nationality,
        reason=reason,
        additional_info=clean(get_text(record, "COMMENTS1")),
        date_added=parse_datetime(
            get_text(record, "LISTED_ON"), synced_at, field="LISTED_ON", ref=ref, log=log
        ),
    )
