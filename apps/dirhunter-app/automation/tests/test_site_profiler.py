"""Tests for building site profiles from page extractions."""

from database.profile_store import serialize_site_configs
from models import (
    ExtractedForm,
    PageExtraction,
    PageLink,
    RawFieldDescriptor,
    SubmissionMethod,
    SubmitControl,
)
from site_profiler import NO_SUBMISSION_PATH_ERROR, build_failure_config, build_field_mapping, build_site_config


def extraction_with_fields(fields, submit=None, links=(), **kwargs) -> PageExtraction:
    form = ExtractedForm(
        index=0,
        action="https://ex.test/submit",
        method="post",
        fields=[RawFieldDescriptor(**f) for f in fields],
        submit_button=submit,
    )
    return PageExtraction(url="https://ex.test", forms=[form], links=list(links), **kwargs)


def test_name_and_email_profile():
    extraction = extraction_with_fields([
        {"id": "name", "type": "text"},
        {"type": "email"},
    ])

    config = build_site_config(extraction, url="https://ex.test")

    assert config.has_form is True
    assert config.submission_method == SubmissionMethod.FORM
    assert set(config.form.fields) == {"name", "email"}
    assert config.form.fields["name"].selector == "#name"
    assert config.form.fields["email"].selector == 'input[type="email"]'
    assert config.manual_submission_required is None
    assert config.error is None


def test_form_block_details():
    extraction = extraction_with_fields(
        [
            {"name": "category", "type": "select",
             "options": [{"value": "ai", "text": "AI"}, {"value": "dev", "text": "Dev"}]},
            {"name": "description", "type": "textarea"},
        ],
        submit=SubmitControl(tag="button", type="submit", class_name="btn send", text="Send"),
    )

    config = build_site_config(extraction)
    form = config.form

    assert form.index == 0
    assert form.method == "post"
    assert form.action == "https://ex.test/submit"
    assert form.submit_button_selector == ".btn"
    assert form.submit_button_text == "Send"
    assert [o.value for o in form.fields["category"].options] == ["ai", "dev"]
    assert form.fields["description"].type == "textarea"
    assert form.fields["description"].options is None


def test_last_field_wins_for_shared_key():
    mapping = build_field_mapping([
        RawFieldDescriptor(name="email", type="email"),
        RawFieldDescriptor(name="email_confirm", type="email"),
    ])
    assert mapping["email"].selector == '[name="email_confirm"]'


def test_unclassified_and_hidden_fields_left_out():
    mapping = build_field_mapping([
        RawFieldDescriptor(name="csrf_token", type="hidden"),
        RawFieldDescriptor(name="foo", type="text"),
        RawFieldDescriptor(name="website", type="url"),
    ])
    assert list(mapping) == ["url"]


def test_only_first_form_is_mapped():
    extraction = PageExtraction(
        url="https://ex.test",
        forms=[
            ExtractedForm(index=0, fields=[RawFieldDescriptor(name="email", type="email")]),
            ExtractedForm(index=1, fields=[RawFieldDescriptor(name="website", type="url")]),
        ],
    )
    config = build_site_config(extraction)
    assert list(config.form.fields) == ["email"]


def test_captcha_detected_without_form():
    extraction = PageExtraction(url="https://ex.test", has_hcaptcha=True)
    config = build_site_config(extraction)
    assert config.requires_captcha is True
    assert config.has_form is False


def test_link_method_when_no_form():
    extraction = PageExtraction(
        url="https://ex.test",
        links=[
            PageLink(text="About", href="https://ex.test/about"),
            PageLink(text="Submit a tool", href="https://ex.test/new"),
        ],
    )

    config = build_site_config(extraction)

    assert config.submission_method == SubmissionMethod.LINK
    assert config.recommended_link.href == "https://ex.test/new"
    assert [l.href for l in config.submission_links] == ["https://ex.test/new"]
    assert config.form is None
    assert config.manual_submission_required is None


def test_links_recorded_alongside_form():
    extraction = extraction_with_fields(
        [{"name": "email", "type": "email"}],
        links=[PageLink(text="Register", href="https://ex.test/register")],
    )
    config = build_site_config(extraction)
    assert config.submission_method == SubmissionMethod.FORM
    assert len(config.submission_links) == 1
    assert config.recommended_link is None


def test_form_with_only_buttons_is_not_a_form():
    extraction = extraction_with_fields([{"type": "submit"}, {"type": "hidden", "name": "token"}])
    config = build_site_config(extraction)
    assert config.has_form is False
    assert config.submission_method == SubmissionMethod.MANUAL


def test_manual_when_nothing_found():
    config = build_site_config(PageExtraction(url="https://ex.test"))
    assert config.submission_method == SubmissionMethod.MANUAL
    assert config.manual_submission_required is True
    assert config.error == NO_SUBMISSION_PATH_ERROR
    assert config.is_usable is False


def test_failure_config():
    config = build_failure_config("https://ex.test", "Domain not found")
    assert config.to_dict() == {
        "url": "https://ex.test",
        "hasForm": False,
        "requiresCaptcha": False,
        "submissionMethod": "manual",
        "manualSubmissionRequired": True,
        "error": "Domain not found",
    }


def test_rebuilding_is_byte_identical():
    fields = [
        {"id": "name", "type": "text"},
        {"name": "email", "type": "email"},
        {"name": "contact_email", "type": "email"},
        {"name": "tags"},
    ]
    first = serialize_site_configs({"Test Dir": build_site_config(extraction_with_fields(fields))})
    second = serialize_site_configs({"Test Dir": build_site_config(extraction_with_fields(fields))})
    assert first == second


def test_checkbox_never_takes_over_a_text_field():
    extraction = extraction_with_fields([
        {"id": "name", "type": "text"},
        {"name": "website", "type": "url"},
        {"name": "link_back", "type": "checkbox"},
        {"name": "logo", "type": "file"},
    ])

    config = build_site_config(extraction)

    assert config.form.fields["url"].selector == '[name="website"]'
    assert "logo" not in config.form.fields


def test_form_of_only_checkboxes_still_counts_as_form():
    extraction = extraction_with_fields([{"name": "agree_terms", "type": "checkbox"}])
    config = build_site_config(extraction)
    assert config.has_form is True
    assert config.form.fields == {}
