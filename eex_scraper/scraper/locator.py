"""
Results-section and table discovery for the EEX French auctions page.

The page markup changes without notice, so the results section is found by
trying an ordered list of named strategies. Each strategy is a plain
function taking the parsed document and returning the section or None; the
first one that matches wins.
"""

import re
import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from eex_scraper.config.settings import EEX_CONFIG
from eex_scraper.scraper.utils import MONTH_NAMES

logger = logging.getLogger(__name__)

RESULTS_WORD = re.compile(r'\bResults\b')
HEADING_TAGS = ['h1', 'h2', 'h3', 'h4']
IGNORED_PARENTS = {'script', 'style', 'title', 'head', 'noscript'}
TABLE_HEADER_WORDS = ("Region", "Volume", "Price")

Strategy = Callable[[BeautifulSoup], Optional[Tag]]


def recent_month_labels(today: Optional[date] = None, months_back: int = 3) -> List[str]:
    """
    Production-month labels likely to appear on the current results page

    Covers the next month, the current month and `months_back` months before
    it, most recent first, e.g. ["March 2025", "February 2025", ...].
    """
    today = today or date.today()
    labels = []
    for offset in range(1, -months_back - 1, -1):
        month_index = today.year * 12 + (today.month - 1) + offset
        year, month = divmod(month_index, 12)
        labels.append(f"{MONTH_NAMES[month]} {year}")
    return labels


def _enclosing_table_container(node: NavigableString) -> Optional[Tag]:
    """Walk up from a text node to the nearest element that holds a table"""
    if isinstance(node, Comment) or node.parent is None:
        return None
    if node.parent.name in IGNORED_PARENTS:
        return None

    for parent in node.parents:
        if parent.name == '[document]':
            return None
        if parent.name == 'table' or parent.find('table') is not None:
            return parent if parent.name != 'table' else parent.parent
    return None


def _first_container_for_text(soup: BeautifulSoup, pattern) -> Optional[Tag]:
    for node in soup.find_all(string=pattern):
        container = _enclosing_table_container(node)
        if container is not None:
            return container
    return None


def find_by_layout_heading(soup: BeautifulSoup,
                           layout_class: str = EEX_CONFIG['results_layout_class']) -> Optional[Tag]:
    """Layout container (e.g. div.col-xl-8.offset-xl-2) holding a "Results" heading"""
    selector = 'div.' + '.'.join(layout_class.split())
    for container in soup.select(selector):
        for heading in container.find_all(HEADING_TAGS):
            if RESULTS_WORD.search(heading.get_text()):
                return container
    return None


def find_by_results_text(soup: BeautifulSoup) -> Optional[Tag]:
    """Any element mentioning "Results", widened to the block holding the tables"""
    return _first_container_for_text(soup, RESULTS_WORD)


def find_by_month_label(soup: BeautifulSoup, month_labels: Iterable[str]) -> Optional[Tag]:
    """Any element mentioning a known recent production month"""
    labels = [label for label in month_labels if label]
    if not labels:
        return None
    pattern = re.compile('|'.join(re.escape(label) for label in labels))
    return _first_container_for_text(soup, pattern)


def find_by_table_headers(soup: BeautifulSoup) -> Optional[Tag]:
    """Parent of the first table whose text mentions Region, Volume and Price"""
    for table in soup.find_all('table'):
        text = table.get_text(' ')
        if all(word in text for word in TABLE_HEADER_WORDS):
            return table.parent
    return None


class ResultsSectionLocator:
    """
    Applies the section strategies in priority order

    Without explicit month_labels, the month-label strategy derives its
    labels from `today()` on every lookup, so a long-lived locator follows
    the calendar.
    """

    def __init__(self, month_labels: Optional[List[str]] = None,
                 layout_class: Optional[str] = None,
                 today: Optional[Callable[[], date]] = None):
        self.fixed_month_labels = month_labels
        self.today = today or date.today
        self.layout_class = layout_class or EEX_CONFIG['results_layout_class']

        self.strategies: List[Tuple[str, Strategy]] = [
            ('layout_heading', lambda soup: find_by_layout_heading(soup, self.layout_class)),
            ('results_text', find_by_results_text),
            ('month_label', lambda soup: find_by_month_label(soup, self.month_labels)),
            ('table_headers', find_by_table_headers),
        ]

    @property
    def month_labels(self) -> List[str]:
        if self.fixed_month_labels is not None:
            return self.fixed_month_labels
        return recent_month_labels(self.today(), months_back=EEX_CONFIG['recent_month_window'])

    def locate(self, soup: BeautifulSoup) -> Optional[Tag]:
        """Return the results section, or None if no strategy matches"""
        for name, strategy in self.strategies:
            section = strategy(soup)
            if section is not None:
                logger.info(f"Found Results section using strategy: {name}")
                return section
            logger.debug(f"Section strategy {name} found nothing")

        logger.warning("Could not find Results section on EEX page")
        return None


def locate_results_section(soup: BeautifulSoup,
                           month_labels: Optional[List[str]] = None) -> Optional[Tag]:
    return ResultsSectionLocator(month_labels=month_labels).locate(soup)


def find_regional_table(section: Tag, header_marker: str = EEX_CONFIG['header_marker']) -> Optional[Tag]:
    """First table whose header marker element (<p>) mentions Region"""
    for table in section.find_all('table'):
        if any('Region' in marker.get_text() for marker in table.find_all(header_marker)):
            return table
    return None


def find_technology_table(section: Tag, header_marker: str = EEX_CONFIG['header_marker'],
                          exclude: Optional[Tag] = None) -> Optional[Tag]:
    """First table with a plain "Technology" cell that is not wrapped in the header marker"""
    for table in section.find_all('table'):
        if exclude is not None and table is exclude:
            continue
        has_plain_cell = any('Technology' in cell.get_text() for cell in table.find_all('td'))
        has_marked_header = any(
            'Technology' in marker.get_text() for marker in table.find_all(header_marker)
        )
        if has_plain_cell and not has_marked_header:
            return table
    return None


def locate_tables(section: Tag) -> Tuple[Optional[Tag], Optional[Tag]]:
    """
    Find the regional and technology tables inside the results section

    Returns:
        (regional_table, technology_table), either may be None
    """
    regional = find_regional_table(section)
    if regional is not None:
        logger.info("Found regional data table")
    else:
        logger.warning("Could not find regional data table")

    technology = find_technology_table(section, exclude=regional)
    if technology is not None:
        logger.info("Found technology data table")
    else:
        logger.warning("Could not find technology data table")

    return regional, technology
