"""
Shared XML utilities for the Watchlist Sync pipeline

This module contains the XML handling shared by every list adapter:
- hardened lxml parsing of downloaded payloads
- conversion of elements into plain record dicts (namespaces stripped)
- the absent | single | list coercion used when reading those records
- log sanitization for text that originates from upstream payloads

SECURITY: All XML parsing uses secure defaults to prevent XXE attacks.
"""

import logging
import re
from typing import Optional, Any, Dict, List, Union

from lxml import etree

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
RecordValue = Union[None, str, Record, List[Any]]


def get_secure_parser() -> etree.XMLParser:
    """Get a secure XML parser that prevents XXE attacks

    Returns:
        lxml parser with DTD loading, entity resolution and network access disabled
    """
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        dtd_validation=False,
        load_dtd=False,
        huge_tree=False,
        remove_comments=True,
        remove_pis=True
    )


def parse_xml_bytes(content: bytes) -> Any:
    """Securely parse an in-memory XML payload

    Args:
        content: Raw XML bytes as fetched from a source

    Returns:
        Root element

    Raises:
        ValueError: If the payload is empty
        lxml.etree.XMLSyntaxError: If the payload is not well-formed XML
    """
    if not content or not content.strip():
        raise ValueError("XML payload is empty")
    return etree.fromstring(content, get_secure_parser())


def local_name(elem: Any) -> str:
    """Element tag without its namespace"""
    return etree.QName(elem).localname


def element_to_record(elem: Any) -> RecordValue:
    """Convert an XML element into a plain Python value

    Leaf elements without attributes become their stripped text (or None
    when empty). Anything else becomes a dict where attributes are keyed
    ``@name``, own text is kept under ``#text`` and child elements are keyed
    by local name. A child name seen once maps to a single value, a name
    seen several times maps to a list, so readers must go through
    ``as_list`` for any group that can repeat.

    Args:
        elem: lxml element

    Returns:
        str, dict or None
    """
    children = [c for c in elem if isinstance(c.tag, str)]
    text = elem.text.strip() if elem.text and elem.text.strip() else None

    if not children and not elem.attrib:
        return text

    record: Record = {}
    for name, value in elem.attrib.items():
        record[f"@{etree.QName(name).localname}"] = value
    if text is not None:
        record["#text"] = text

    for child in children:
        key = local_name(child)
        value = element_to_record(child)
        if key in record:
            existing = record[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                record[key] = [existing, value]
        else:
            record[key] = value

    return record


def as_list(value: Any) -> List[Any]:
    """Coerce an absent, single or repeated value into a list

    Args:
        value: None, a single value, or a list

    Returns:
        List of 0..N elements (None entries dropped)
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return [value]


def nested_list(record: Record, group: str, item: str) -> List[Any]:
    """Read a wrapped repeating group such as ``akaList/aka``

    Tolerates the wrapper being absent, repeated, or omitted altogether
    (items placed directly under the group key).

    Args:
        record: Parent record dict
        group: Wrapper element name
        item: Repeated child element name

    Returns:
        Flat list of items
    """
    items: List[Any] = []
    for wrapper in as_list(record.get(group)):
        if isinstance(wrapper, dict) and item in wrapper:
            items.extend(as_list(wrapper[item]))
        else:
            items.append(wrapper)
    return items


def text_of(value: Any) -> Optional[str]:
    """Text content of a record value

    Args:
        value: str, number, dict with ``#text``, or None

    Returns:
        Stripped text, or None when there is none
    """
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("#text")
        if value is None:
            return None
    text = str(value).strip()
    return text or None


def get_text(record: Any, key: str) -> Optional[str]:
    """Text of the first ``key`` child of a record dict"""
    if not isinstance(record, dict):
        return None
    values = as_list(record.get(key))
    return text_of(values[0]) if values else None


def sanitize_for_logging(text: str) -> str:
    """Sanitize upstream or user text for safe logging, preventing log injection

    Removes newlines, carriage returns, and other control characters
    that could be used to inject fake log entries.

    Args:
        text: Untrusted text

    Returns:
        Sanitized text safe for logging
    """
    if not text:
        return ''
    # Remove newlines, carriage returns, and other control characters
    sanitized = re.sub(r'[\r\n\x00-\x1f\x7f-\x9f]', ' ', str(text))
    # Collapse multiple spaces
    sanitized = re.sub(r'\s+', ' ', sanitized).strip()
    # Truncate to reasonable length
    return sanitized[:500] if len(sanitized) > 500 else sanitized
