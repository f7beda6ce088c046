"""
Pytest configuration and fixtures for the EEX scraper tests.
"""

import threading
from datetime import date

import pytest
import requests
from bs4 import BeautifulSoup

from eex_scraper.database.db_manager import DatabaseManager


SCRAPE_DATE = date(2025, 3, 14)

REGIONAL_TABLE = """
<table class="table">
  <thead><tr><th colspan="4">February 2025</th></tr></thead>
  <tbody>
    <tr>
      <td><p><strong>Region</strong></p></td>
      <td><p><strong>Volume Offered (MWh)</strong></p></td>
      <td><p><strong>Volume Allocated (MWh)</strong></p></td>
      <td><p><strong>Weighted Average Price</strong></p></td>
    </tr>
    <tr><td><p>Auvergne-Rh&ocirc;ne-Alpes</p></td><td><p>1.943.184</p></td><td><p>236.995</p></td><td><p>&euro; 0.49</p></td></tr>
    <tr><td><p>Bretagne</p></td><td><p>120.500</p></td><td><p>98.000</p></td><td><p>&euro; 0,15</p></td></tr>
    <tr><td><p>Grand   Est</p></td><td><p>845.210</p></td><td><p>402.113</p></td><td><p>&euro; 0.50</p></td></tr>
    <tr><td><p>Corse</p></td><td><p>n/a</p></td><td><p>-</p></td><td><p>&euro; 0.40</p></td></tr>
    <tr><td colspan="4"><p>Volumes in MWh</p></td></tr>
  </tbody>
</table>
"""

TECHNOLOGY_TABLE = """
<table class="table">
  <tr><td>Technology</td><td>Volume Offered (MWh)</td><td>Volume Allocated (MWh)</td><td>Weighted Average Price</td></tr>
  <tr><td>Hydro</td><td>2.500.000</td><td>1.200.000</td><td>&euro; 0.55</td></tr>
  <tr><td>Wind</td><td>1.100.000</td><td>900.000</td><td>&euro; 0.52</td></tr>
  <tr><td>Solar</td><td>600.000</td><td>450.000</td><td>0.47</td></tr>
</table>
"""

RESULTS_PAGE = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>French Auctions Power | EEX</title></head>
<body>
  <nav><a href="/en/market-data">Market Data</a></nav>
  <div class="row">
    <div class="col-xl-8 offset-xl-2">
      <h2>Results</h2>
      <p>The reserve price for the May auctions is: 0,15 &euro;/MWh</p>
      {REGIONAL_TABLE}
      {TECHNOLOGY_TABLE}
    </div>
  </div>
</body>
</html>
"""

REGIONS_ONLY_PAGE = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body>
  <div class="col-xl-8 offset-xl-2">
    <h2>Results</h2>
    {REGIONAL_TABLE}
  </div>
</body>
</html>
"""

EMPTY_TABLES_PAGE = """<!DOCTYPE html>
<html>
<body>
  <div class="col-xl-8 offset-xl-2">
    <h2>Results</h2>
    <table>
      <tr><td><p>Region</p></td><td><p>Volume Offered</p></td><td><p>Volume Allocated</p></td><td><p>Price</p></td></tr>
      <tr><td><p>Normandie</p></td><td><p>-</p></td><td><p>-</p></td><td><p>-</p></td></tr>
    </table>
  </div>
</body>
</html>
"""

NO_RESULTS_PAGE = """<!DOCTYPE html>
<html><body><div><p>Page under maintenance</p></div></body></html>
"""


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, html: str = RESULTS_PAGE, status_code: int = 200):
        self.content = html.encode('utf-8')
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)


class FakeSession:
    """Returns or raises the queued outcomes in order"""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    """Records backoff delays instead of waiting; can simulate an interrupt"""

    def __init__(self, interrupt_on: int = None):
        self.delays = []
        self.interrupt_on = interrupt_on

    def __call__(self, seconds: float) -> bool:
        self.delays.append(seconds)
        return self.interrupt_on is not None and len(self.delays) >= self.interrupt_on


class StaticFetcher:
    """Fetcher returning fixed markup"""

    def __init__(self, html: str = RESULTS_PAGE):
        self.html = html
        self.calls = 0
        self.interrupted = False

    def fetch(self, url=None):
        self.calls += 1
        return soup_of(self.html)

    def interrupt(self):
        self.interrupted = True


class BlockingFetcher(StaticFetcher):
    """Fetcher that holds every caller until released, tracking overlap"""

    def __init__(self, html: str = RESULTS_PAGE):
        super().__init__(html)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def fetch(self, url=None):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        self.entered.set()
        self.release.wait(5)
        with self._lock:
            self.active -= 1
        return super().fetch(url)


@pytest.fixture
def db_manager(tmp_path):
    """Database manager on a fresh SQLite file"""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'auctions.db'}")
    yield manager
    manager.engine.dispose()


@pytest.fixture
def results_soup():
    return soup_of(RESULTS_PAGE)
