"""Tests for the fill-and-submit state machine, driven by a fake driver."""

import asyncio

import pytest

from config import Settings
from models import (
    DirectoryRecord,
    FieldMappingEntry,
    FormBlock,
    PageLink,
    SiteConfig,
    SubmissionMethod,
    SubmissionState as S,
)
from site_profiler import build_failure_config
from submission_orchestrator import SubmissionOrchestrator


DIRECTORY = DirectoryRecord(name="Test Dir", url="https://ex.test")


def fast_settings(**overrides) -> Settings:
    values = dict(settle_delay_ms=0, post_submit_delay_ms=0, captcha_wait_ms=0)
    values.update(overrides)
    return Settings(**values)


def form_config(requires_captcha=False, submit_selector="#send") -> SiteConfig:
    return SiteConfig(
        url="https://ex.test",
        has_form=True,
        requires_captcha=requires_captcha,
        submission_method=SubmissionMethod.FORM,
        form=FormBlock(
            fields={
                "name": FieldMappingEntry(selector="#name"),
                "email": FieldMappingEntry(selector='input[type="email"]', type="email"),
                "twitter": FieldMappingEntry(selector="#twitter"),
            },
            submit_button_selector=submit_selector,
        ),
    )


def run_submit(driver, data, configs=None, directory=DIRECTORY, **settings):
    orchestrator = SubmissionOrchestrator(driver, fast_settings(**settings), configs)
    return asyncio.run(orchestrator.submit(directory, data))


def test_happy_path(fake_driver_cls, submission_data):
    driver = fake_driver_cls(present={"#name", 'input[type="email"]', "#send"})

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.success is True
    assert result.state == S.SUCCESS
    assert result.states == [S.INIT, S.NAVIGATED, S.FILLED, S.SUBMITTED, S.SUCCESS]
    assert result.used_site_config is True
    # twitter has no value in the submission data, so it is never attempted
    assert result.fields_filled == ["name", "email"]
    assert driver.filled == {"name": "DirHunter", "email": "team@dirhunter.example"}
    assert result.message == "Submitted with site profile (2 fields filled)"
    assert [c[1] for c in driver.called("submit")] == ["#send"]


def test_captcha_wait_happens_between_fill_and_submit(fake_driver_cls, submission_data):
    driver = fake_driver_cls(present={"#name", 'input[type="email"]', "#send"})

    result = run_submit(
        driver, submission_data, {"Test Dir": form_config(requires_captcha=True)},
        captcha_wait_ms=200,
    )

    assert result.states == [S.INIT, S.NAVIGATED, S.FILLED, S.AWAITING_CAPTCHA, S.SUBMITTED, S.SUCCESS]
    last_fill = driver.called("fill_field")[-1][-1]
    submit_at = driver.called("submit")[0][-1]
    assert submit_at - last_fill >= 0.19


def test_no_profile_is_manual_after_visiting(fake_driver_cls, submission_data):
    driver = fake_driver_cls()

    result = run_submit(driver, submission_data, {})

    assert result.success is False
    assert result.requires_manual is True
    assert result.state == S.MANUAL_REQUIRED
    assert result.used_site_config is False
    assert "https://ex.test" in result.message
    assert driver.called("navigate")
    assert not driver.called("fill_field")
    assert not driver.called("submit")


def test_unusable_profile_is_manual(fake_driver_cls, submission_data):
    driver = fake_driver_cls()
    configs = {"Test Dir": build_failure_config("https://ex.test", "Domain not found")}

    result = run_submit(driver, submission_data, configs)

    assert result.state == S.MANUAL_REQUIRED
    assert result.message == "Manual submission required: Domain not found"
    assert not driver.called("fill_field")


def test_link_profile_fails_with_link(fake_driver_cls, submission_data):
    link = PageLink(text="Submit", href="https://ex.test/new")
    config = SiteConfig(
        url="https://ex.test",
        submission_method=SubmissionMethod.LINK,
        submission_links=[link],
        recommended_link=link,
    )

    result = run_submit(fake_driver_cls(), submission_data, {"Test Dir": config})

    assert result.state == S.FAILED
    assert result.message == "No form in site profile; submission link: https://ex.test/new"


def test_navigation_failure(fake_driver_cls, submission_data):
    driver = fake_driver_cls(navigation_error="Domain not found")

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.state == S.FAILED
    assert result.states == [S.INIT, S.FAILED]
    assert result.message == "Navigation failed: Domain not found"
    assert result.screenshot == "/tmp/error_Test_Dir.png"
    assert not driver.called("fill_field")


def test_navigation_failure_without_screenshot(fake_driver_cls, submission_data):
    driver = fake_driver_cls(navigation_error="Connection refused")

    result = run_submit(
        driver, submission_data, {"Test Dir": form_config()},
        capture_screenshot_on_error=False,
    )

    assert result.screenshot is None
    assert not driver.called("screenshot")


def test_missing_field_is_skipped(fake_driver_cls, submission_data):
    driver = fake_driver_cls(present={'input[type="email"]', "#send"})

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.success is True
    assert result.fields_skipped == ["name"]
    assert result.fields_filled == ["email"]
    assert result.message == "Submitted with site profile (1 field filled)"


def test_submit_button_missing_fails(fake_driver_cls, submission_data):
    driver = fake_driver_cls(present={"#name", 'input[type="email"]'})

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.state == S.FAILED
    assert result.states[-2:] == [S.FILLED, S.FAILED]
    assert "#send" in result.message
    assert result.screenshot is not None


def test_generic_submit_selector_when_profile_has_none(fake_driver_cls, submission_data):
    from form_logic import GENERIC_SUBMIT_SELECTOR
    driver = fake_driver_cls(present={"#name", GENERIC_SUBMIT_SELECTOR})

    result = run_submit(driver, submission_data, {"Test Dir": form_config(submit_selector=None)})

    assert result.success is True
    assert driver.called("submit")[0][1] == GENERIC_SUBMIT_SELECTOR


def test_refused_field_is_skipped_and_form_still_submitted(fake_driver_cls, submission_data):
    driver = fake_driver_cls(
        present={"#name", 'input[type="email"]', "#send"},
        refused={"#name"},
    )

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.success is True
    assert result.fields_skipped == ["name"]
    assert result.fields_filled == ["email"]
    assert driver.filled == {"email": "team@dirhunter.example"}
    assert [c[1] for c in driver.called("submit")] == ["#send"]


def test_error_outside_driver_errors_fails(fake_driver_cls, submission_data):
    driver = fake_driver_cls(fill_error=RuntimeError("driver bug"))

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.state == S.FAILED
    assert result.message == "Fill failed: driver bug"
    assert not driver.called("submit")


def test_submission_without_navigation_still_succeeds(fake_driver_cls, submission_data):
    driver = fake_driver_cls(present={"#name", "#send"}, submit_navigates=False)

    result = run_submit(driver, submission_data, {"Test Dir": form_config()})

    assert result.success is True


class TestReveal:

    def test_reveal_runs_without_submit_url(self, fake_driver_cls, submission_data):
        directory = DirectoryRecord(name="Test Dir", url="https://ex.test", reveal_control="#open")
        driver = fake_driver_cls(present={"#name", "#send"})

        result = run_submit(driver, submission_data, {"Test Dir": form_config()}, directory=directory)

        assert [c[1] for c in driver.called("reveal")] == ["#open"]
        assert S.REVEALED in result.states
        assert result.success is True

    def test_reveal_skipped_with_submit_url(self, fake_driver_cls, submission_data):
        directory = DirectoryRecord(
            name="Test Dir", url="https://ex.test",
            submit_url="https://ex.test/submit", reveal_control="#open",
        )
        driver = fake_driver_cls(present={"#name", "#send"})

        result = run_submit(driver, submission_data, {"Test Dir": form_config()}, directory=directory)

        assert not driver.called("reveal")
        assert driver.called("navigate")[0][1] == "https://ex.test/submit"
        assert S.REVEALED not in result.states

    def test_reveal_failure_continues(self, fake_driver_cls, submission_data):
        directory = DirectoryRecord(name="Test Dir", url="https://ex.test", reveal_control="#open")
        driver = fake_driver_cls(present={"#name", "#send"}, reveal_ok=False)

        result = run_submit(driver, submission_data, {"Test Dir": form_config()}, directory=directory)

        assert result.success is True
        assert S.REVEALED not in result.states


@pytest.mark.parametrize("bad_config", [
    build_failure_config("https://ex.test", "Timeout"),
    SiteConfig(url="https://ex.test", manual_submission_required=True),
])
def test_manual_profiles_never_fill(fake_driver_cls, submission_data, bad_config):
    driver = fake_driver_cls(present={"#name", "#send"})
    result = run_submit(driver, submission_data, {"Test Dir": bad_config})
    assert result.requires_manual is True
    assert driver.filled == {}
