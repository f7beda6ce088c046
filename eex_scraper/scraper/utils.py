import re
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from fake_useragent import UserAgent

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)

MONTH_YEAR_PATTERN = re.compile(r'\b(' + '|'.join(MONTH_NAMES) + r')\s+(\d{4})\b')

# Currency marker directly followed by a number, e.g. "€ 0,15"
PRICE_PATTERN = re.compile(r'(?:€|\bEUR\b)\s*(\d[\d.,]*)', re.IGNORECASE)

# "The reserve price for the May auctions is: 0,15 €/MWh"
RESERVE_PRICE_PATTERN = re.compile(
    r'reserve price.*?(\d+[.,]\d+).*?(?:€|EUR)\s*/\s*MWh',
    re.IGNORECASE | re.DOTALL
)


class ScraperUtils:
    """Parsing helpers for EEX auction pages"""

    @staticmethod
    def clean_text(text: Optional[str]) -> str:
        """Trim and collapse runs of whitespace (including nbsp) to one space"""
        if not text:
            return ""
        return re.sub(r'\s+', ' ', text).strip()

    @staticmethod
    def parse_volume(volume_str: Optional[str]) -> Optional[int]:
        """
        Parse a volume in MWh

        Dots are thousands separators on this page, so every non-digit is
        dropped: "236.995" -> 236995, "1.943.184" -> 1943184.

        Args:
            volume_str: Volume cell text

        Returns:
            Integer volume or None if no digits are present
        """
        if not volume_str:
            return None

        digits = re.sub(r'\D', '', volume_str)
        if not digits:
            logger.debug(f"Could not parse volume: {volume_str!r}")
            return None

        return int(digits)

    @staticmethod
    def normalize_decimal(number_str: str) -> Optional[Decimal]:
        """
        Convert a number using European or English separators to Decimal

        Rules:
            - both '.' and ',' present: the rightmost one is the decimal
              separator, the other one groups thousands ("1.234,56" -> 1234.56)
            - one separator occurring once: decimal ("0,15" -> 0.15,
              "1.234" -> 1.234)
            - one separator occurring several times: thousands
              ("1.943.184" -> 1943184)
        """
        token = number_str.strip().strip('.,')
        if not token:
            return None

        has_dot = '.' in token
        has_comma = ',' in token

        if has_dot and has_comma:
            decimal_sep = '.' if token.rfind('.') > token.rfind(',') else ','
            group_sep = ',' if decimal_sep == '.' else '.'
            token = token.replace(group_sep, '').replace(decimal_sep, '.')
        elif has_dot or has_comma:
            sep = '.' if has_dot else ','
            if token.count(sep) > 1:
                token = token.replace(sep, '')
            else:
                token = token.replace(sep, '.')

        try:
            return Decimal(token)
        except InvalidOperation:
            return None

    @staticmethod
    def parse_price(price_str: Optional[str]) -> Optional[Decimal]:
        """
        Extract a price in €/MWh from a cell such as "€ 0.49" or "€ 0,15"

        Args:
            price_str: Price cell text

        Returns:
            Decimal price, or None when there is no currency marker or number
        """
        if not price_str:
            return None

        match = PRICE_PATTERN.search(price_str)
        if not match:
            logger.debug(f"Could not parse price: {price_str!r}")
            return None

        price = ScraperUtils.normalize_decimal(match.group(1))
        if price is None:
            logger.debug(f"Could not parse price: {price_str!r}")
        return price

    @staticmethod
    def parse_reserve_price(text: Optional[str]) -> Optional[Decimal]:
        """Find the reserve price announced in the results text"""
        if not text:
            return None

        match = RESERVE_PRICE_PATTERN.search(text)
        if not match:
            return None

        try:
            return Decimal(match.group(1).replace(',', '.'))
        except InvalidOperation:
            return None

    @staticmethod
    def find_month_year(text: Optional[str]) -> Optional[str]:
        """Return the first "<MonthName> <YYYY>" label in text"""
        if not text:
            return None

        match = MONTH_YEAR_PATTERN.search(text)
        if match:
            return f"{match.group(1)} {match.group(2)}"
        return None

    @staticmethod
    def is_month_year(text: Optional[str]) -> bool:
        """Check whether text is exactly a "<MonthName> <YYYY>" label"""
        cleaned = ScraperUtils.clean_text(text)
        return bool(cleaned) and MONTH_YEAR_PATTERN.fullmatch(cleaned) is not None

    @staticmethod
    def get_random_user_agent() -> str:
        """Get a random user agent string"""
        ua = UserAgent()
        return ua.random
