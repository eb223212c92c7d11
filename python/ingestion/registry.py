"""
ListSource-keyed registry of the four list integrations
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from config_manager import ConfigManager, default_sources
from database.models import ListSource
from ingestion.base import LoggerLike, Normalizer, Parser, SourceAdapter
from ingestion.eu import normalize_eu, parse_eu
from ingestion.fetchers import Fetcher, build_fetcher
from ingestion.interpol import normalize_interpol, parse_interpol
from ingestion.ofac import normalize_ofac, parse_ofac
from ingestion.un import normalize_un, parse_un

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceDefinition:
    """Static description of one list integration"""
    source: ListSource
    label: str
    config_key: str
    parser: Parser
    normalizer: Normalizer
    empty_message: str
    fixture_name: Optional[str] = None
    sample_unit: str = "sample entities"
    sample_note: str = "NOTE: This is demonstration data only."

    def success_message(self, count: int, is_sample: bool = False) -> str:
        if is_sample:
            return (
                f"{self.label} data synchronization completed with sample data. "
                f"{count} {self.sample_unit} processed. {self.sample_note}"
            )
        return f"{self.label} data synchronization completed successfully. {count} entities processed."

    def failure_message(self, reason: str) -> str:
        return f"{self.label} sync failed: {reason}"


SOURCES: Dict[ListSource, SourceDefinition] = {
    ListSource.OFAC: SourceDefinition(
        source=ListSource.OFAC,
        label="OFAC",
        config_key="ofac",
        parser=parse_ofac,
        normalizer=normalize_ofac,
        empty_message="No SDN entries found in OFAC data",
    ),
    ListSource.UN: SourceDefinition(
        source=ListSource.UN,
        label="UN",
        config_key="un",
        parser=parse_un,
        normalizer=normalize_un,
        empty_message="No individuals or entities found in UN consolidated list",
    ),
    ListSource.EU: SourceDefinition(
        source=ListSource.EU,
        label="EU",
        config_key="eu",
        parser=parse_eu,
        normalizer=normalize_eu,
        empty_message="No sanction entities found in EU consolidated list",
        fixture_name="eu_consolidated_sample.xml",
        sample_note=(
            "NOTE: This is demonstration data only - real implementation requires "
            "authorized access to EU Financial Sanctions Database."
        ),
    ),
    ListSource.INTERPOL: SourceDefinition(
        source=ListSource.INTERPOL,
        label="Interpol",
        config_key="interpol",
        parser=parse_interpol,
        normalizer=normalize_interpol,
        empty_message="No Red Notice entries found in Interpol data",
        fixture_name="interpol_red_notices_sample.json",
        sample_unit="sample Red Notice entries",
        sample_note=(
            "NOTE: This is demonstration data only - real implementation requires "
            "Interpol authorization."
        ),
    ),
}

# Order used for fan-out detail lines
FAN_OUT_ORDER = (ListSource.OFAC, ListSource.EU, ListSource.UN, ListSource.INTERPOL)


def get_definition(source: ListSource) -> SourceDefinition:
    """Look up a list integration

    Raises:
        KeyError: If the source has no integration
    """
    return SOURCES[ListSource(source)]


def build_adapter(
    source: ListSource,
    config: Optional[ConfigManager] = None,
    logger: Optional[LoggerLike] = None,
    fetcher: Optional[Fetcher] = None
) -> SourceAdapter:
    """Create the adapter for one list

    Args:
        source: List to build
        config: Configuration supplying the fetch settings (defaults apply without one)
        logger: Logger injected into the adapter
        fetcher: Explicit fetch strategy, overriding configuration

    Returns:
        SourceAdapter ready to fetch_and_parse()
    """
    definition = get_definition(source)
    if fetcher is None:
        if config is not None:
            source_config = config.get_source(definition.config_key)
        else:
            source_config = default_sources()[definition.config_key]
        fetcher = build_fetcher(source_config, definition.fixture_name)

    return SourceAdapter(
        source=definition.source,
        fetcher=fetcher,
        parser=definition.parser,
        normalizer=definition.normalizer,
        label=definition.label,
        logger=logger,
    )
