"""
Submission orchestrator.
Drives one directory through the fill-and-submit state machine:

    init -> navigated -> (revealed) -> filled -> (awaiting_captcha) -> submitted
         -> success | failed | manual_required

Browser work goes through an injected driver, so the same orchestrator runs
with or without a site profile and is testable with a fake driver.
"""

import asyncio
from typing import Dict, List, Optional, Protocol

from loguru import logger

from config import Settings, SubmissionData
from errors import (
    FieldFillFailed,
    FieldNotFound,
    NavigationFailure,
    RevealControlNotFound,
    SubmitButtonNotFound,
)
from form_logic import GENERIC_SUBMIT_SELECTOR
from models import (
    DirectoryRecord,
    FieldMappingEntry,
    SiteConfig,
    SubmissionMethod,
    SubmissionResult,
    SubmissionState,
)
from utils.helpers import sanitize_filename
from utils.simple_logger import slog


class SubmissionDriver(Protocol):
    """Browser capability used by the orchestrator."""

    async def navigate(self, url: str) -> None:
        """Load a page. Raises NavigationFailure."""
        ...

    async def reveal(self, snippet: str) -> None:
        """Click a reveal control. Raises RevealControlNotFound."""
        ...

    async def fill_field(self, key: str, entry: FieldMappingEntry, value: str) -> None:
        """Fill one mapped field. Raises FieldNotFound or FieldFillFailed."""
        ...

    async def submit(self, selector: str) -> bool:
        """Activate the submit control; True if a navigation followed. Raises SubmitButtonNotFound."""
        ...

    async def screenshot(self, name: str) -> Optional[str]:
        ...


def _screenshot_name(directory_name: str) -> str:
    return f"error_{sanitize_filename(directory_name, 'directory')}"


class _Run:
    """Mutable state of a single submission attempt."""

    def __init__(self):
        self.states: List[SubmissionState] = []
        self.fields_filled: List[str] = []
        self.fields_skipped: List[str] = []
        self.used_site_config = False
        self.screenshot: Optional[str] = None

    def enter(self, state: SubmissionState):
        self.states.append(state)
        slog.detail_debug(f"   State: {state.value}")

    def result(self, state: SubmissionState, message: str) -> SubmissionResult:
        self.enter(state)
        return SubmissionResult(
            success=state == SubmissionState.SUCCESS,
            message=message,
            requires_manual=state == SubmissionState.MANUAL_REQUIRED,
            used_site_config=self.used_site_config,
            state=state,
            states=list(self.states),
            fields_filled=list(self.fields_filled),
            fields_skipped=list(self.fields_skipped),
            screenshot=self.screenshot,
        )


class SubmissionOrchestrator:
    """
    Fill-and-submit state machine for one directory at a time.

    Never raises for per-directory problems: every outcome is a
    SubmissionResult.
    """

    def __init__(self, driver: SubmissionDriver, settings: Settings,
                 site_configs: Optional[Dict[str, SiteConfig]] = None):
        """
        Args:
            driver: Browser capability (navigate, reveal, fill, submit, screenshot)
            settings: Delays, CAPTCHA wait and screenshot policy
            site_configs: Site profiles keyed by directory name
        """
        self.driver = driver
        self.settings = settings
        self.site_configs = site_configs or {}

    async def _pause(self, ms: int):
        if ms > 0:
            await asyncio.sleep(ms / 1000)

    async def _capture_error(self, run: _Run, directory: DirectoryRecord):
        if self.settings.capture_screenshot_on_error:
            run.screenshot = await self.driver.screenshot(_screenshot_name(directory.name))

    async def _fail(self, run: _Run, directory: DirectoryRecord, message: str) -> SubmissionResult:
        await self._capture_error(run, directory)
        return run.result(SubmissionState.FAILED, message)

    async def submit(self, directory: DirectoryRecord, data: SubmissionData) -> SubmissionResult:
        """
        Run one directory through the state machine.

        Args:
            directory: Directory to submit to
            data: Values to place into mapped fields

        Returns:
            SubmissionResult with the terminal state and the state trail
        """
        run = _Run()
        try:
            return await self._run(run, directory, data)
        except Exception as e:
            logger.error(f"Unexpected error submitting to {directory.name}: {e}")
            await self._capture_error(run, directory)
            return run.result(SubmissionState.FAILED, f"Unexpected error: {e}")

    async def _run(self, run: _Run, directory: DirectoryRecord, data: SubmissionData) -> SubmissionResult:
        run.enter(SubmissionState.INIT)

        # Init -> Navigated
        target_url = directory.target_url
        try:
            await self.driver.navigate(target_url)
        except NavigationFailure as e:
            slog.detail_warning(f"Navigation error: {e.cause}")
            return await self._fail(run, directory, f"Navigation failed: {e.cause}")
        await self._pause(self.settings.settle_delay_ms)
        run.enter(SubmissionState.NAVIGATED)

        # Navigated -> Revealed (only when the form is not at an explicit submit URL)
        if directory.reveal_control and not directory.has_submit_url:
            try:
                await self.driver.reveal(directory.reveal_control)
                await self._pause(self.settings.settle_delay_ms)
                run.enter(SubmissionState.REVEALED)
            except RevealControlNotFound as e:
                slog.detail_warning(f"{e} - continuing without reveal step")

        # Profile checks
        site_config = self.site_configs.get(directory.name)
        if site_config is None:
            return run.result(
                SubmissionState.MANUAL_REQUIRED,
                f"No site profile for {directory.name}; page visited, submit manually at {target_url}",
            )
        if not site_config.is_usable:
            reason = site_config.error or "site flagged for manual submission"
            return run.result(SubmissionState.MANUAL_REQUIRED, f"Manual submission required: {reason}")
        if site_config.form is None:
            if site_config.submission_method == SubmissionMethod.LINK and site_config.recommended_link:
                message = f"No form in site profile; submission link: {site_config.recommended_link.href}"
            else:
                message = "No form in site profile"
            return await self._fail(run, directory, message)

        # -> Filled
        run.used_site_config = True
        try:
            await self._fill(run, site_config, data)
        except Exception as e:
            slog.detail_warning(f"Fill error: {e}")
            return await self._fail(run, directory, f"Fill failed: {e}")
        run.enter(SubmissionState.FILLED)

        # Filled -> AwaitingCaptcha
        if site_config.requires_captcha:
            run.enter(SubmissionState.AWAITING_CAPTCHA)
            logger.warning(
                f"🔐 CAPTCHA detected - solve it in the browser "
                f"({self.settings.captcha_wait_ms / 1000:.0f}s)"
            )
            await self._pause(self.settings.captcha_wait_ms)

        # -> Submitted
        selector = site_config.form.submit_button_selector or GENERIC_SUBMIT_SELECTOR
        try:
            navigated = await self.driver.submit(selector)
        except SubmitButtonNotFound as e:
            slog.detail_warning(str(e))
            return await self._fail(run, directory, str(e))
        run.enter(SubmissionState.SUBMITTED)
        if not navigated:
            slog.detail("   No navigation after submit (asynchronous submission)")
        await self._pause(self.settings.post_submit_delay_ms)

        filled = len(run.fields_filled)
        return run.result(
            SubmissionState.SUCCESS,
            f"Submitted with site profile ({filled} field{'s' if filled != 1 else ''} filled)",
        )

    async def _fill(self, run: _Run, site_config: SiteConfig, data: SubmissionData):
        """Fill every mapped key that has a value. Missing or refused fields are skipped."""
        for key, entry in site_config.form.fields.items():
            value = data.value_for(key)
            if value is None:
                continue
            try:
                await self.driver.fill_field(key, entry, value)
                run.fields_filled.append(key)
                slog.detail_success(f"Filled {key}")
            except (FieldNotFound, FieldFillFailed) as e:
                run.fields_skipped.append(key)
                slog.detail_warning(f"{e} - skipping")
