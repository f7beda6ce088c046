import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from bs4 import Tag

from eex_scraper.config.settings import EEX_CONFIG
from eex_scraper.scraper.utils import ScraperUtils

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCTION_MONTH = "Unknown"
VOLUME_HEADER = "Volume Offered"


class TableKind(Enum):
    REGION = "Region"
    TECHNOLOGY = "Technology"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class AuctionMetadata:
    """Auction-level values read from the results section (never stored as such)"""
    auction_date: date
    production_month: str
    reserve_price: Decimal


@dataclass
class AuctionRow:
    """One parsed line of the regional or technology table"""
    label: str
    volume_offered: int
    volume_allocated: int
    weighted_avg_price: Decimal


def _find_production_month(section: Tag) -> Optional[str]:
    # Month header spanning the four data columns, e.g. <th colspan="4">February 2025</th>
    for header in section.find_all('th', attrs={'colspan': '4'}):
        if ScraperUtils.is_month_year(header.get_text()):
            return ScraperUtils.clean_text(header.get_text())

    for header in section.find_all('th'):
        if ScraperUtils.is_month_year(header.get_text()):
            return ScraperUtils.clean_text(header.get_text())

    return ScraperUtils.find_month_year(ScraperUtils.clean_text(section.get_text(' ')))


def extract_metadata(section: Tag, today: Optional[date] = None) -> AuctionMetadata:
    """
    Extract auction date, production month and reserve price

    Missing values never fail the run: the production month falls back to
    "Unknown" and the reserve price to the configured default.

    Args:
        section: Results section element
        today: Scrape date, used as the auction date

    Returns:
        AuctionMetadata for the current results
    """
    production_month = _find_production_month(section)
    if production_month:
        logger.info(f"Found production month: {production_month}")
    else:
        production_month = UNKNOWN_PRODUCTION_MONTH
        logger.warning("Could not find production month")

    # The page carries no auction date; the day the results are scraped is used
    auction_date = today or date.today()

    section_text = ScraperUtils.clean_text(section.get_text(' '))
    reserve_price = ScraperUtils.parse_reserve_price(section_text)
    if reserve_price is not None:
        logger.info(f"Found reserve price: {reserve_price}")
    else:
        reserve_price = Decimal(EEX_CONFIG['default_reserve_price'])
        logger.warning(f"Could not find reserve price, using default: {reserve_price}")

    metadata = AuctionMetadata(
        auction_date=auction_date,
        production_month=production_month,
        reserve_price=reserve_price,
    )
    logger.info(f"Extracted metadata: auction={metadata.auction_date}, "
                f"production={metadata.production_month}, reserve={metadata.reserve_price}")
    return metadata


def extract_cell_text(cell: Tag, wrapper: str = EEX_CONFIG['header_marker']) -> str:
    """Text of a table cell, preferring a nested <p> over the cell's own text"""
    inner = cell.find(wrapper)
    element = inner if inner is not None else cell
    return ScraperUtils.clean_text(element.get_text(' '))


def _is_header_row(cells: List[Tag], kind: TableKind) -> bool:
    for cell in cells:
        text = cell.get_text(' ')
        if kind.label in text or VOLUME_HEADER in text:
            return True
    return False


def parse_row(cells: List[Tag]) -> Optional[AuctionRow]:
    """Build an AuctionRow from the first four cells, or None if any field is unusable"""
    if len(cells) < 4:
        return None

    label = extract_cell_text(cells[0])
    volume_offered = ScraperUtils.parse_volume(extract_cell_text(cells[1]))
    volume_allocated = ScraperUtils.parse_volume(extract_cell_text(cells[2]))
    avg_price = ScraperUtils.parse_price(extract_cell_text(cells[3]))

    if not label or volume_offered is None or volume_allocated is None or avg_price is None:
        return None

    return AuctionRow(
        label=label,
        volume_offered=volume_offered,
        volume_allocated=volume_allocated,
        weighted_avg_price=avg_price,
    )


def extract_rows(table: Optional[Tag], kind: TableKind) -> List[AuctionRow]:
    """
    Convert the data rows of a results table into AuctionRow records

    Rows restating the header, rows with fewer than four cells and rows with
    any unparseable field are skipped; the rest of the table is still read.

    Args:
        table: Regional or technology table, None if it was not found
        kind: Which table this is

    Returns:
        Parsed rows in page order
    """
    if table is None:
        return []

    rows = []
    data_rows = [row for row in table.find_all('tr') if row.find('td') is not None]
    data_rows = [row for row in data_rows
                 if not _is_header_row(row.find_all('td'), kind)]

    logger.info(f"Found {len(data_rows)} {kind.name.lower()} data rows")

    for row in data_rows:
        cells = row.find_all('td')
        if len(cells) < 4:
            logger.debug(f"Skipping {kind.name.lower()} row with {len(cells)} cells")
            continue

        parsed = parse_row(cells)
        if parsed is None:
            logger.warning(f"Failed to parse {kind.name.lower()} row: "
                           f"{ScraperUtils.clean_text(row.get_text(' '))}")
            continue

        rows.append(parsed)
        logger.debug(f"Parsed {kind.name.lower()}: {parsed.label} - "
                     f"{parsed.volume_allocated} MWh at €{parsed.weighted_avg_price}/MWh")

    return rows
