"""
Shared fixtures for the Watchlist Sync test suite.

Database tests run against in-memory SQLite (StaticPool keeps a single
connection so every session sees the same database).
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).parent.parent))

from database.connection import create_test_provider
from database.store import SanctionsStore


SYNCED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


OFAC_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<sdnList xmlns="http://tempuri.org/sdnList.xsd">
  <publshInformation>
    <Publish_Date>06/01/2024</Publish_Date>
    <Record_Count>3</Record_Count>
  </publshInformation>
  <sdnEntry>
    <uid>36</uid>
    <lastName>AEROCARIBBEAN AIRLINES</lastName>
    <sdnType>Entity</sdnType>
    <programList>
      <program>CUBA</program>
    </programList>
    <akaList>
      <aka>
        <uid>12</uid>
        <type>a.k.a.</type>
        <category>strong</category>
        <lastName>AERO-CARIBBEAN</lastName>
      </aka>
    </akaList>
    <addressList>
      <address>
        <uid>25</uid>
        <city>Havana</city>
        <country>Cuba</country>
      </address>
    </addressList>
  </sdnEntry>
  <sdnEntry>
    <uid>2674</uid>
    <firstName>Abu</firstName>
    <lastName>ABBAS</lastName>
    <title>Secretary General</title>
    <sdnType>Individual</sdnType>
    <remarks>Linked To: PALESTINE LIBERATION FRONT.</remarks>
    <programList>
      <program>SDGT</program>
      <program>SDT</program>
    </programList>
    <akaList>
      <aka>
        <uid>1</uid>
        <firstName>Mohammed</firstName>
        <lastName>ABBAS</lastName>
      </aka>
      <aka>
        <uid>2</uid>
        <lastName>ABU KHALED</lastName>
      </aka>
      <aka>
        <uid>3</uid>
        <firstName>Abu</firstName>
        <lastName>ABBAS</lastName>
      </aka>
    </akaList>
    <dateOfBirthList>
      <dateOfBirthItem>
        <uid>10</uid>
        <dateOfBirth>1947</dateOfBirth>
        <mainEntry>false</mainEntry>
      </dateOfBirthItem>
      <dateOfBirthItem>
        <uid>11</uid>
        <dateOfBirth>10 Dec 1948</dateOfBirth>
        <mainEntry>true</mainEntry>
      </dateOfBirthItem>
    </dateOfBirthList>
    <placeOfBirthList>
      <placeOfBirthItem>
        <uid>20</uid>
        <placeOfBirth>Safed, Palestine</placeOfBirth>
        <mainEntry>true</mainEntry>
      </placeOfBirthItem>
    </placeOfBirthList>
    <nationalityList>
      <nationality>
        <uid>30</uid>
        <country>Iraq</country>
        <mainEntry>true</mainEntry>
      </nationality>
    </nationalityList>
  </sdnEntry>
  <sdnEntry>
    <uid>12345</uid>
    <sdnType>Entity</sdnType>
    <dateOfBirthList>
      <dateOfBirthItem>
        <uid>40</uid>
        <dateOfBirth>not a date</dateOfBirth>
        <mainEntry>true</mainEntry>
      </dateOfBirthItem>
    </dateOfBirthList>
  </sdnEntry>
</sdnList>
"""


UN_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<CONSOLIDATED_LIST dateGenerated="2024-06-01T00:00:00">
  <INDIVIDUALS>
    <INDIVIDUAL>
      <DATAID>6908555</DATAID>
      <VERSIONNUM>1</VERSIONNUM>
      <FIRST_NAME>Jane</FIRST_NAME>
      <SECOND_NAME>Q</SECOND_NAME>
      <THIRD_NAME>Public</THIRD_NAME>
      <UN_LIST_TYPE>DPRK</UN_LIST_TYPE>
      <REFERENCE_NUMBER>KPi.033</REFERENCE_NUMBER>
      <LISTED_ON>2016-11-30</LISTED_ON>
      <COMMENTS1>Official of the Korea Mining Development Trading Corporation.</COMMENTS1>
      <DESIGNATION>
        <VALUE>Representative</VALUE>
      </DESIGNATION>
      <NATIONALITY>
        <VALUE>Democratic People's Republic of Korea</VALUE>
      </NATIONALITY>
      <INDIVIDUAL_ALIAS>
        <QUALITY>Good</QUALITY>
        <ALIAS_NAME>Jane Public</ALIAS_NAME>
      </INDIVIDUAL_ALIAS>
      <INDIVIDUAL_ALIAS>
        <QUALITY>Low</QUALITY>
        <ALIAS_NAME>jane q public</ALIAS_NAME>
      </INDIVIDUAL_ALIAS>
      <INDIVIDUAL_ADDRESS>
        <CITY>Pyongyang</CITY>
        <COUNTRY>Democratic People's Republic of Korea</COUNTRY>
      </INDIVIDUAL_ADDRESS>
      <INDIVIDUAL_DATE_OF_BIRTH>
        <TYPE_OF_DATE>EXACT</TYPE_OF_DATE>
        <DATE>1966-04-19</DATE>
      </INDIVIDUAL_DATE_OF_BIRTH>
      <INDIVIDUAL_PLACE_OF_BIRTH>
        <CITY>Pyongyang</CITY>
        <COUNTRY>Democratic People's Republic of Korea</COUNTRY>
      </INDIVIDUAL_PLACE_OF_BIRTH>
    </INDIVIDUAL>
    <INDIVIDUAL>
      <DATAID>110101</DATAID>
      <UN_LIST_TYPE>Al-Qaida</UN_LIST_TYPE>
      <REFERENCE_NUMBER>QDi.001</REFERENCE_NUMBER>
      <LISTED_ON>not a date</LISTED_ON>
      <NATIONALITY>
        <VALUE>Iraq</VALUE>
        <VALUE>Jordan</VALUE>
      </NATIONALITY>
      <INDIVIDUAL_DATE_OF_BIRTH>
        <TYPE_OF_DATE>APPROXIMATELY</TYPE_OF_DATE>
        <YEAR>1960</YEAR>
      </INDIVIDUAL_DATE_OF_BIRTH>
    </INDIVIDUAL>
  </INDIVIDUALS>
  <ENTITIES>
    <ENTITY>
      <DATAID>113244</DATAID>
      <FIRST_NAME>AL-NUSRAH FRONT FOR THE PEOPLE OF THE LEVANT</FIRST_NAME>
      <UN_LIST_TYPE>Al-Qaida</UN_LIST_TYPE>
      <REFERENCE_NUMBER>QDe.137</REFERENCE_NUMBER>
      <LISTED_ON>2013-05-14</LISTED_ON>
      <ENTITY_ALIAS>
        <ALIAS_NAME>Jabhat al-Nusrah</ALIAS_NAME>
      </ENTITY_ALIAS>
      <ENTITY_ADDRESS>
        <STREET>Unknown Street</STREET>
        <CITY>Idlib</CITY>
        <COUNTRY>Syrian Arab Republic</COUNTRY>
      </ENTITY_ADDRESS>
    </ENTITY>
  </ENTITIES>
</CONSOLIDATED_LIST>
"""


@pytest.fixture
def db_provider():
    """In-memory SQLite provider with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    provider = create_test_provider(engine=engine)
    provider.init()
    provider.create_tables()
    yield provider
    provider.close()


@pytest.fixture
def store(db_provider):
    """SanctionsStore over the in-memory database."""
    return SanctionsStore(db_provider, batch_size=2)


@pytest.fixture
def synced_at():
    return SYNCED_AT


@pytest.fixture
def ofac_xml():
    return OFAC_XML


@pytest.fixture
def un_xml():
    return UN_XML
