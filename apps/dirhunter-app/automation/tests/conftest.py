"""Shared fixtures: import path, isolated app data directory and fake browser objects."""

import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from errors import (
    FieldFillFailed,
    FieldNotFound,
    NavigationFailure,
    RevealControlNotFound,
    SubmitButtonNotFound,
)
from models import FieldMappingEntry, PageExtraction


VALID_DESCRIPTION = (
    "DirHunter profiles directory sites and submits your product listing "
    "to each of them automatically."
)


@pytest.fixture(autouse=True)
def app_data_dir(monkeypatch, tmp_path):
    """Keep databases, screenshots and the stop signal file inside tmp_path."""
    data_dir = tmp_path / "app-data"
    monkeypatch.setenv("DIRHUNTER_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture()
def submission_data():
    from config import SubmissionData
    return SubmissionData(
        name="DirHunter",
        url="https://dirhunter.example",
        email="team@dirhunter.example",
        description=VALID_DESCRIPTION,
        category="Productivity",
        tags=["automation", "directories"],
    )


class FakeDriver:
    """
    In-memory stand-in for the Playwright driver.

    Selectors listed in `present` exist on the page; everything else is
    missing; present selectors listed in `refused` reject the value.
    Every call is logged with a timestamp.
    """

    def __init__(self, present=(), navigation_error: Optional[str] = None,
                 reveal_ok: bool = True, submit_navigates: bool = True,
                 extractions: Optional[Dict[str, PageExtraction]] = None,
                 fill_error: Optional[Exception] = None, refused=()):
        self.present = set(present)
        self.navigation_error = navigation_error
        self.reveal_ok = reveal_ok
        self.submit_navigates = submit_navigates
        self.extractions = extractions or {}
        self.fill_error = fill_error
        self.refused = set(refused)
        self.calls: List[tuple] = []
        self.filled: Dict[str, str] = {}
        self.current_url = ""

    def _log(self, *call):
        self.calls.append(call + (time.monotonic(),))

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def navigate(self, url: str) -> None:
        self._log("navigate", url)
        if self.navigation_error:
            raise NavigationFailure(url, self.navigation_error)
        self.current_url = url

    async def reveal(self, snippet: str) -> None:
        self._log("reveal", snippet)
        if not self.reveal_ok:
            raise RevealControlNotFound(snippet)

    async def extract(self) -> PageExtraction:
        self._log("extract", self.current_url)
        extraction = self.extractions.get(self.current_url)
        if extraction is None:
            raise ValueError(f"no page at {self.current_url}")
        return extraction

    async def fill_field(self, key: str, entry: FieldMappingEntry, value: str) -> None:
        self._log("fill_field", key)
        if self.fill_error is not None:
            raise self.fill_error
        if entry.selector not in self.present:
            raise FieldNotFound(key, entry.selector)
        if entry.selector in self.refused:
            raise FieldFillFailed(key, entry.selector, "Input cannot be filled")
        self.filled[key] = value

    async def submit(self, selector: str) -> bool:
        self._log("submit", selector)
        if selector not in self.present:
            raise SubmitButtonNotFound(selector)
        return self.submit_navigates

    async def screenshot(self, name: str) -> Optional[str]:
        self._log("screenshot", name)
        return f"/tmp/{name}.png"


class FakeBrowser:
    """Async context manager standing in for BrowserAutomation."""

    instances: List["FakeBrowser"] = []

    def __init__(self, headless: bool = False, navigation_timeout_ms: int = 30000):
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.closed = False
        FakeBrowser.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True


@pytest.fixture()
def fake_driver_cls():
    return FakeDriver


@pytest.fixture()
def fake_browser_cls():
    FakeBrowser.instances = []
    return FakeBrowser
