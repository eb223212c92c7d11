"""
Tests for the four list adapters: parsing of each native payload and
field normalization into the canonical entity shape.
"""

import json
import logging
import pytest
import sys
from datetime import date, datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from database.models import ListSource, EntityType
from ingestion.errors import ParseError, RecordError
from ingestion.eu import parse_eu, normalize_eu
from ingestion.fetchers import FixtureFetcher
from ingestion.interpol import parse_interpol, normalize_interpol
from ingestion.ofac import parse_ofac, normalize_ofac
from ingestion.un import parse_un, normalize_un


def by_ref(entities):
    return {entity.reference_number: entity for entity in entities}


# ============================================
# OFAC
# ============================================

class TestOfac:
    """Tests for the OFAC SDN adapter."""

    def test_parse_entries(self, ofac_xml):
        """One record per sdnEntry; publication header ignored."""
        records = parse_ofac(ofac_xml)
        assert len(records) == 3
        assert [r["uid"] for r in records] == ["36", "2674", "12345"]

    def test_missing_root_raises(self):
        """A document without sdnList is an envelope failure."""
        with pytest.raises(ParseError, match="No sdnList found"):
            parse_ofac(b"<somethingElse/>")

    def test_individual_fields(self, ofac_xml, synced_at):
        """Names, aliases, main-entry DOB, programs and remarks."""
        entity = by_ref(normalize_ofac(r, synced_at) for r in parse_ofac(ofac_xml))["2674"]

        assert entity.list_source == ListSource.OFAC
        assert entity.entity_type == EntityType.INDIVIDUAL
        assert entity.name == "Abu ABBAS"
        assert entity.aliases == ["Mohammed ABBAS", "ABU KHALED"]
        assert entity.date_of_birth == date(1948, 12, 10)
        assert entity.place_of_birth == "Safed, Palestine"
        assert entity.nationality == "Iraq"
        assert entity.reason == "SDGT, SDT"
        assert entity.additional_info == "Linked To: PALESTINE LIBERATION FRONT."
        assert entity.date_added == synced_at

    def test_entity_fields(self, ofac_xml, synced_at):
        """Single aka and address are read as lists."""
        entity = by_ref(normalize_ofac(r, synced_at) for r in parse_ofac(ofac_xml))["36"]

        assert entity.entity_type == EntityType.ENTITY
        assert entity.name == "AEROCARIBBEAN AIRLINES"
        assert entity.aliases == ["AERO-CARIBBEAN"]
        assert entity.addresses == [{
            "address1": None,
            "address2": None,
            "address3": None,
            "city": "Havana",
            "stateOrProvince": None,
            "postalCode": None,
            "country": "Cuba",
        }]
        assert entity.reason == "CUBA"
        assert entity.date_of_birth is None

    def test_placeholder_name_and_invalid_dob(self, ofac_xml, synced_at, caplog):
        """No name parts gives 'Unknown Entity {uid}'; a bad DOB is None with a warning."""
        with caplog.at_level(logging.WARNING):
            entity = by_ref(normalize_ofac(r, synced_at) for r in parse_ofac(ofac_xml))["12345"]

        assert entity.name == "Unknown Entity 12345"
        assert entity.date_of_birth is None
        assert entity.aliases is None
        assert entity.addresses is None
        assert "12345" in caplog.text

    def test_title_used_when_no_name(self, synced_at):
        """Title is the last name fallback before the placeholder."""
        record = {"uid": "77", "title": "Minister", "sdnType": "Individual"}
        assert normalize_ofac(record, synced_at).name == "Minister"

    def test_person_type_is_individual(self, synced_at):
        """sdnType containing 'person' is an individual."""
        record = {"uid": "78", "lastName": "X", "sdnType": "Natural Person"}
        assert normalize_ofac(record, synced_at).entity_type == EntityType.INDIVIDUAL

    def test_missing_uid_is_record_error(self, synced_at):
        """Entries without uid are skipped by the orchestrator."""
        with pytest.raises(RecordError):
            normalize_ofac({"lastName": "NOBODY"}, synced_at)
        with pytest.raises(RecordError):
            normalize_ofac(None, synced_at)


# ============================================
# UN
# ============================================

class TestUn:
    """Tests for the UN consolidated list adapter."""

    def test_parse_sections(self, un_xml):
        """Individuals and entities are tagged with their section."""
        records = parse_un(un_xml)
        assert [r["_section"] for r in records] == ["INDIVIDUAL", "INDIVIDUAL", "ENTITY"]

    def test_missing_root_raises(self):
        """A document without CONSOLIDATED_LIST is an envelope failure."""
        with pytest.raises(ParseError):
            parse_un(b"<INDIVIDUALS/>")

    def test_individual_fields(self, un_xml, synced_at):
        """Name parts joined with spaces; duplicate alias of the name dropped."""
        entity = by_ref(normalize_un(r, synced_at) for r in parse_un(un_xml))["KPi.033"]

        assert entity.entity_type == EntityType.INDIVIDUAL
        assert entity.name == "Jane Q Public"
        assert entity.aliases == ["Jane Public"]
        assert entity.date_of_birth == date(1966, 4, 19)
        assert entity.place_of_birth == "Pyongyang, Democratic People's Republic of Korea"
        assert entity.nationality == "Democratic People's Republic of Korea"
        assert entity.reason == "DPRK"
        assert entity.additional_info.startswith("Official of the Korea Mining")
        assert entity.addresses[0]["city"] == "Pyongyang"
        assert entity.date_added == datetime(2016, 11, 30, tzinfo=timezone.utc)

    def test_placeholder_year_only_dob_and_listing_fallback(self, un_xml, synced_at):
        """No name parts gives 'Unknown Individual {dataid}'; YEAR-only DOB is Jan 1."""
        entity = by_ref(normalize_un(r, synced_at) for r in parse_un(un_xml))["QDi.001"]

        assert entity.name == "Unknown Individual 110101"
        assert entity.date_of_birth == date(1960, 1, 1)
        assert entity.nationality == "Iraq, Jordan"
        assert entity.date_added == synced_at

    def test_entity_fields(self, un_xml, synced_at):
        """Entities have no personal fields."""
        entity = by_ref(normalize_un(r, synced_at) for r in parse_un(un_xml))["QDe.137"]

        assert entity.entity_type == EntityType.ENTITY
        assert entity.aliases == ["Jabhat al-Nusrah"]
        assert entity.addresses[0]["address1"] == "Unknown Street"
        assert entity.addresses[0]["country"] == "Syrian Arab Republic"
        assert entity.date_of_birth is None
        assert entity.nationality is None
        assert entity.reason == "Al-Qaida"

    def test_designation_used_without_list_type(self, synced_at):
        """DESIGNATION values are the reason when UN_LIST_TYPE is absent."""
        record = {
            "_section": "INDIVIDUAL",
            "DATAID": "1",
            "FIRST_NAME": "A",
            "DESIGNATION": {"VALUE": ["Minister", "General"]},
        }
        entity = normalize_un(record, synced_at)
        assert entity.reason == "Minister, General"
        assert entity.reference_number == "1"

    def test_unnamed_entity_placeholder(self, synced_at):
        """Entities without name parts are 'Unknown Entity {dataid}'."""
        record = {"_section": "ENTITY", "DATAID": "99", "REFERENCE_NUMBER": "QDe.999"}
        assert normalize_un(record, synced_at).name == "Unknown Entity 99"

    def test_missing_reference_is_record_error(self, synced_at):
        """Records with neither REFERENCE_NUMBER nor DATAID are skipped."""
        with pytest.raises(RecordError):
            normalize_un({"_section": "INDIVIDUAL", "FIRST_NAME": "A"}, synced_at)


# ============================================
# EU
# ============================================

EU_STRONG_SECOND = b"""<?xml version="1.0" encoding="UTF-8"?>
<export xmlns="http://eu.europa.ec/fpi/fsd/export">
  <sanctionEntity euReferenceNumber="EU.100.2024">
    <subjectType code="P"/>
    <nameAlias strong="false"><wholeName>Ivan Ivanoff</wholeName></nameAlias>
    <nameAlias strong="true"><wholeName>Ivan Ivanov</wholeName></nameAlias>
    <nameAlias strong="false"><wholeName>Ivan Ivanoff</wholeName></nameAlias>
    <birthdate><day>5</day><month>3</month><year>1975</year></birthdate>
    <citizenship><countryDescription>Russia</countryDescription></citizenship>
    <citizenship><countryDescription>Belarus</countryDescription></citizenship>
  </sanctionEntity>
  <sanctionEntity euReferenceNumber="EU.101.2024">
    <subjectType code="E"/>
    <nameAlias strong="false"><wholeName>First Listed Ltd</wholeName></nameAlias>
    <nameAlias strong="false"><wholeName>Second Listed Ltd</wholeName></nameAlias>
    <birthdate><month>3</month><year>1975</year></birthdate>
  </sanctionEntity>
  <sanctionEntity euReferenceNumber="EU.102.2024">
    <subjectType code="P"/>
  </sanctionEntity>
  <sanctionEntity>
    <nameAlias strong="true"><wholeName>No Reference</wholeName></nameAlias>
  </sanctionEntity>
</export>
"""


class TestEu:
    """Tests for the EU consolidated list adapter."""

    def test_fixture_payload(self, synced_at):
        """The bundled sample parses to its five entities."""
        content = FixtureFetcher("eu_consolidated_sample.xml").fetch_raw("EU")
        entities = by_ref(normalize_eu(r, synced_at) for r in parse_eu(content))

        assert sorted(entities) == [f"EU.00{i}.2024" for i in range(1, 6)]
        petrov = entities["EU.001.2024"]
        assert petrov.name == "Vladimir Petrov"
        assert petrov.aliases == ["Vladimir Petroff"]
        assert petrov.entity_type == EntityType.INDIVIDUAL
        assert petrov.date_of_birth == date(1975, 3, 15)
        assert petrov.place_of_birth == "St. Petersburg, Russia"
        assert petrov.nationality == "Russian"
        assert petrov.addresses[0]["address1"] == "Red Square 1"
        assert petrov.addresses[0]["postalCode"] == "101000"
        assert petrov.additional_info == "Designated under Council Regulation (EU) 269/2014"

        omega = entities["EU.002.2024"]
        assert omega.entity_type == EntityType.ENTITY
        assert omega.date_of_birth is None
        assert omega.nationality is None

    def test_strong_alias_selected(self, synced_at):
        """The first strong alias is the name; the weak ones stay aliases, deduplicated."""
        entity = normalize_eu(parse_eu(EU_STRONG_SECOND)[0], synced_at)

        assert entity.name == "Ivan Ivanov"
        assert entity.aliases == ["Ivan Ivanoff"]
        assert entity.date_of_birth == date(1975, 3, 5)
        assert entity.nationality == "Russia, Belarus"

    def test_first_alias_fallback(self, synced_at):
        """Without a strong alias the first one is promoted and removed from aliases."""
        entity = normalize_eu(parse_eu(EU_STRONG_SECOND)[1], synced_at)

        assert entity.name == "First Listed Ltd"
        assert entity.aliases == ["Second Listed Ltd"]
        assert entity.entity_type == EntityType.ENTITY
        # Day missing
        assert entity.date_of_birth is None

    def test_no_name_or_reference_is_record_error(self, synced_at):
        """Entities with no name material or no reference number are skipped."""
        records = parse_eu(EU_STRONG_SECOND)
        with pytest.raises(RecordError):
            normalize_eu(records[2], synced_at)
        with pytest.raises(RecordError):
            normalize_eu(records[3], synced_at)

    def test_missing_root_raises(self):
        """A document without export is an envelope failure."""
        with pytest.raises(ParseError):
            parse_eu(b"<sanctionEntity/>")

    def test_invalid_birthdate_is_none(self, synced_at):
        """Impossible day/month combinations do not abort the record."""
        record = {
            "@euReferenceNumber": "EU.9",
            "nameAlias": {"@strong": "true", "wholeName": "X"},
            "birthdate": {"day": "31", "month": "2", "year": "1980"},
        }
        assert normalize_eu(record, synced_at).date_of_birth is None


# ============================================
# INTERPOL
# ============================================

class TestInterpol:
    """Tests for the Interpol Red Notice adapter."""

    def test_fixture_payload(self, synced_at):
        """The bundled sample parses to its five notices."""
        content = FixtureFetcher("interpol_red_notices_sample.json").fetch_raw("INTERPOL")
        entities = by_ref(normalize_interpol(r, synced_at) for r in parse_interpol(content))

        assert len(entities) == 5
        hassan = entities["2023/12345"]
        assert hassan.name == "Ahmed Hassan"
        assert hassan.entity_type == EntityType.INDIVIDUAL
        assert hassan.date_of_birth == date(1985, 3, 15)
        assert hassan.place_of_birth == "Damascus, Syria"
        assert hassan.nationality == "Syrian"
        assert hassan.reason == "Arrest warrant: Terrorism, murder, criminal association"
        assert hassan.additional_info == "Red Notice issued by: France (Published: 2023-05-20)"
        assert hassan.date_added == datetime(2023, 5, 20, tzinfo=timezone.utc)
        assert hassan.aliases is None
        assert hassan.addresses is None

        assert entities["2023/67890"].nationality == "Colombian, Venezuelan"
        assert entities["2023/54321"].name == "Dmitri Volkov"

    def test_bare_array_accepted(self):
        """A JSON array of notices is accepted as well as an object."""
        content = json.dumps([{"entityId": "1"}]).encode()
        assert parse_interpol(content) == [{"entityId": "1"}]

    def test_wrong_shape_raises(self):
        """Objects without a notices list are an envelope failure."""
        with pytest.raises(ParseError):
            parse_interpol(b'{"results": []}')

    def test_invalid_json_raises_value_error(self):
        """Malformed JSON surfaces as ValueError for the adapter to wrap."""
        with pytest.raises(ValueError):
            parse_interpol(b"{not json")

    def test_sparse_notice(self, synced_at):
        """Missing names, dates and warrant data fall back cleanly."""
        entity = normalize_interpol(
            {
                "entityId": "2024/1",
                "forename": "Solo",
                "dateOfBirth": "sometime",
                "nationality": "Peruvian",
                "charges": "Fraud",
                "publishedAt": "yesterday",
            },
            synced_at,
        )
        assert entity.name == "Solo"
        assert entity.date_of_birth is None
        assert entity.nationality == "Peruvian"
        assert entity.reason == "Fraud"
        assert entity.additional_info is None
        assert entity.date_added == synced_at

    def test_unnamed_subject(self, synced_at):
        """No name material gives 'Unknown Subject {entityId}'."""
        entity = normalize_interpol({"entityId": "2024/2"}, synced_at)
        assert entity.name == "Unknown Subject 2024/2"
        assert entity.reason is None

    def test_missing_entity_id_is_record_error(self, synced_at):
        """Notices without entityId, or not objects at all, are skipped."""
        with pytest.raises(RecordError):
            normalize_interpol({"name": "X"}, synced_at)
        with pytest.raises(RecordError):
            normalize_interpol("notice", synced_at)
