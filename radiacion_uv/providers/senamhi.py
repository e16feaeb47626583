"""
SENAMHI Provider for Radiación UV

Backup source. Scrapes the SENAMHI "radiación UV numérico" page and
harvests (city, UV value) pairs. Uses curl_cffi with Chrome impersonation,
the page rejects plain HTTP clients intermittently.

The page markup is undocumented and changes without notice, so extraction
is a list of independent patterns run over the raw HTML. What we rely on is
the acceptance rule, not the patterns:

- value must be in (0, 20]
- name must be longer than 2 characters
- de-duplicate by case-insensitive name, first occurrence wins

Any failure degrades to None.
"""

import asyncio
import logging
import re
from typing import Callable, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup
from curl_cffi.requests import AsyncSession

from radiacion_uv.config import SENAMHI_UV_URL
from radiacion_uv.gazetteer import CityUV
from radiacion_uv.resilience import fetch_or_none

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_UV_VALUE = 20.0

# "Lima: 11 UV", "Cusco - 14.5 índice"
NAME_SEPARATOR_VALUE = re.compile(
    r"(\w+(?:\s+\w+)*)\s*[:\-]\s*(\d+\.?\d*)\s*(?:UV|uv|índice)",
    re.IGNORECASE,
)

# "Arequipa 13 UV"
NAME_VALUE = re.compile(
    r"(\w+(?:\s+\w+)*)\s*(\d+\.?\d*)\s*(?:UV|uv)",
    re.IGNORECASE,
)

NUMERIC_CELL = re.compile(r"^\d+\.?\d*$")

Candidate = Tuple[str, str]


def _regex_extractor(pattern: re.Pattern) -> Callable[[str], Iterator[Candidate]]:
    def extract(html: str) -> Iterator[Candidate]:
        for match in pattern.finditer(html):
            yield match.group(1), match.group(2)
    return extract


def _table_cell_pairs(html: str) -> Iterator[Candidate]:
    """Adjacent <td> pairs where the second cell is a bare number."""
    soup = BeautifulSoup(html, "html.parser")
    for cell in soup.find_all("td"):
        neighbour = cell.find_next_sibling("td")
        if neighbour is None:
            continue
        name = cell.get_text(strip=True)
        value = neighbour.get_text(strip=True)
        if name and NUMERIC_CELL.match(value):
            yield name, value


# Order matters for de-duplication
EXTRACTORS: List[Callable[[str], Iterator[Candidate]]] = [
    _regex_extractor(NAME_SEPARATOR_VALUE),
    _regex_extractor(NAME_VALUE),
    _table_cell_pairs,
]


def accept_candidate(name: str, value: float) -> bool:
    """Acceptance rule for a scraped (name, value) pair."""
    return 0 < value <= MAX_UV_VALUE and len(name) >= MIN_NAME_LENGTH


def extract_uv_readings(html: str) -> List[CityUV]:
    """
    Run every extractor over the page and keep valid, unique readings.

    Args:
        html: Raw page text

    Returns:
        List of CityUV in discovery order (possibly empty)
    """
    readings: List[CityUV] = []
    seen = set()

    for extractor in EXTRACTORS:
        for raw_name, raw_value in extractor(html):
            name = raw_name.strip()
            try:
                value = float(raw_value)
            except ValueError:
                continue

            if not accept_candidate(name, value):
                continue

            key = name.lower()
            if key in seen:
                continue
            seen.add(key)
            readings.append({"ciudad": name, "uv": value})

    return readings


class SenamhiProvider:
    """
    Provider for SENAMHI city UV values via web scraping.

    Never raises: fetch() returns None on failure or when nothing usable
    was found on the page.
    """

    NAME = "SenamhiProvider"
    IMPERSONATE = "chrome"

    def __init__(
        self,
        url: str = SENAMHI_UV_URL,
        timeout: float = 15.0,
    ):
        self.url = url
        self.timeout = timeout
        logger.debug(f"[{self.NAME}] Initialized ({url}, timeout {timeout}s)")

    async def _download(self) -> Optional[str]:
        """Fetch the raw page. Returns None on a non-200 answer."""
        async with AsyncSession(impersonate=self.IMPERSONATE) as session:
            logger.info(f"[{self.NAME}] GET {self.url}")
            resp = await session.get(self.url, timeout=self.timeout)

        if resp.status_code != 200:
            logger.warning(f"[{self.NAME}] HTTP {resp.status_code}")
            return None

        return resp.text

    async def _request(self) -> Optional[List[CityUV]]:
        html = await self._download()
        if not html:
            return None

        # CPU-bound, runs in a worker thread
        readings = await asyncio.to_thread(extract_uv_readings, html)
        if not readings:
            logger.warning(f"[{self.NAME}] Page fetched but no UV values found")
            return None

        logger.info(f"[{self.NAME}] [OK] Extracted UV for {len(readings)} cities")
        return readings

    async def fetch(self) -> Optional[List[CityUV]]:
        """
        Fetch and parse the SENAMHI UV page.

        Returns:
            List of CityUV, or None on failure / empty page
        """
        return await fetch_or_none(self._request, self.NAME)
