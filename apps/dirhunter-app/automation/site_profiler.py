"""
Site profile builder.
Turns one page extraction into a reusable SiteConfig: which canonical field
lives behind which selector, how the site accepts submissions, and whether
a CAPTCHA is present.
"""

from typing import Dict, Iterable

from form_logic import (
    UNCLASSIFIED,
    build_selector,
    build_submit_selector,
    classify_field,
    find_submission_links,
    is_fillable_field,
    is_mappable_field,
    is_low_confidence_selector,
)
from models import (
    FieldMappingEntry,
    FormBlock,
    PageExtraction,
    RawFieldDescriptor,
    SiteConfig,
    SubmissionMethod,
)
from utils.simple_logger import slog


NO_SUBMISSION_PATH_ERROR = "No submission form or link found"


def build_field_mapping(fields: Iterable[RawFieldDescriptor]) -> Dict[str, FieldMappingEntry]:
    """
    Map canonical keys to selectors for one form's fields.

    Unclassified fields and checkbox, radio or file inputs are left out.
    When several fields share a canonical key the last one in extraction
    order wins.
    """
    mapping: Dict[str, FieldMappingEntry] = {}

    for field in fields:
        if not is_mappable_field(field):
            continue
        key = classify_field(field)
        if key == UNCLASSIFIED:
            slog.detail_debug(f"   Unclassified field: name={field.name!r} id={field.id!r} label={field.label!r}")
            continue

        selector = build_selector(field)
        if is_low_confidence_selector(selector):
            slog.detail_warning(f"Low-confidence selector for '{key}': {selector}")

        field_type = (field.type or "text").lower()
        mapping[key] = FieldMappingEntry(
            selector=selector,
            type=field_type,
            source_name=field.name,
            source_id=field.id,
            options=list(field.options) if field_type == "select" and field.options else None,
        )

    return mapping


def build_site_config(extraction: PageExtraction, url: str = "") -> SiteConfig:
    """
    Build the site profile for one extracted page.

    Only the first form is mapped. Never raises for empty pages: a page with
    no usable form and no submission link yields a manual profile.

    Args:
        extraction: Page extractor output
        url: Directory URL to record (defaults to the extracted page URL)

    Returns:
        SiteConfig for this site
    """
    site_url = url or extraction.url
    first_form = extraction.first_form
    form_fields = [f for f in first_form.fields if is_fillable_field(f)] if first_form else []
    has_form = len(form_fields) > 0
    submission_links = find_submission_links(extraction.links)

    config = SiteConfig(
        url=site_url,
        has_form=has_form,
        requires_captcha=extraction.requires_captcha,
        submission_method=SubmissionMethod.MANUAL,
    )

    if has_form:
        config.submission_method = SubmissionMethod.FORM
        submit_control = first_form.submit_button
        config.form = FormBlock(
            index=first_form.index,
            action=first_form.action,
            method=first_form.method,
            fields=build_field_mapping(form_fields),
            submit_button_selector=build_submit_selector(submit_control),
            submit_button_text=submit_control.text if submit_control else None,
        )

    if submission_links:
        config.submission_links = submission_links
        if not has_form:
            config.submission_method = SubmissionMethod.LINK
            config.recommended_link = submission_links[0]

    if config.submission_method == SubmissionMethod.MANUAL:
        config.manual_submission_required = True
        config.error = NO_SUBMISSION_PATH_ERROR

    return config


def build_failure_config(url: str, error: str) -> SiteConfig:
    """Profile for a site whose analysis failed (navigation, extraction...)."""
    return SiteConfig(
        url=url,
        has_form=False,
        requires_captcha=False,
        submission_method=SubmissionMethod.MANUAL,
        manual_submission_required=True,
        error=error or "Analysis failed",
    )
