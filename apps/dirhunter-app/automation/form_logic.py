"""
Testable form profiling logic - extracted for unit testing.
This module contains pure functions that can be tested without browser/Playwright.
"""

from typing import List, NamedTuple, Optional
import re

from models import RawFieldDescriptor, SubmitControl, PageLink


# Canonical field keys, in classifier priority order
CANONICAL_KEYS = (
    "name", "firstName", "lastName", "email", "url", "description",
    "category", "tags", "title", "company", "phone", "twitter",
    "linkedin", "github", "logo", "screenshot", "video", "pricing",
)

UNCLASSIFIED = "unclassified"

# Control types that are never treated as fillable fields
SKIPPED_INPUT_TYPES = ("hidden", "submit", "button", "reset", "image")

# Controls that take no typed value; counted in field statistics but never mapped
UNMAPPED_INPUT_TYPES = ("checkbox", "radio", "file")

# Keywords in an anchor's href or text that suggest a submission page
SUBMISSION_LINK_KEYWORDS = ["submit", "add", "register"]

# Used when a profile has no submit selector of its own
GENERIC_SUBMIT_SELECTOR = 'button[type="submit"], input[type="submit"]'

_CSS_IDENTIFIER = re.compile(r"^-?[_a-zA-Z][_a-zA-Z0-9-]*$")


def _field_source_text(field: RawFieldDescriptor) -> str:
    """First non-empty of name, id, label - lower-cased."""
    return (field.name or field.id or field.label or "").strip().lower()


def classify_field(field: RawFieldDescriptor) -> str:
    """
    Map a raw field descriptor to one canonical field key.

    Rules are checked in a fixed order and the first match wins, so
    "first_name" is firstName and never name.

    Args:
        field: Extracted field attributes

    Returns:
        A key from CANONICAL_KEYS, or UNCLASSIFIED
    """
    source = _field_source_text(field)
    input_type = (field.type or "").lower()

    if "name" in source and "first" not in source and "last" not in source:
        return "name"
    if "first" in source and "name" in source:
        return "firstName"
    if "last" in source and "name" in source:
        return "lastName"
    if "email" in source or input_type == "email":
        return "email"
    if any(w in source for w in ["url", "website", "link"]) or input_type == "url":
        return "url"
    if "description" in source or input_type == "textarea":
        return "description"
    if "category" in source:
        return "category"
    if "tag" in source:
        return "tags"
    if "title" in source:
        return "title"
    if "company" in source or "organization" in source:
        return "company"
    if "phone" in source or input_type == "tel":
        return "phone"
    if "twitter" in source:
        return "twitter"
    if "linkedin" in source:
        return "linkedin"
    if "github" in source:
        return "github"
    if "logo" in source or "image" in source:
        return "logo"
    if "screenshot" in source:
        return "screenshot"
    if "video" in source:
        return "video"
    if "pricing" in source or "price" in source:
        return "pricing"

    return UNCLASSIFIED


def field_key(field: RawFieldDescriptor) -> str:
    """
    Key used to track a field: its canonical key, or for unclassified
    fields the lower-cased name/id/label itself ("unknown" if all are empty).
    """
    key = classify_field(field)
    if key != UNCLASSIFIED:
        return key
    return _field_source_text(field) or "unknown"


def is_fillable_field(field: RawFieldDescriptor) -> bool:
    """
    True for controls a user can type into or choose from. Checkboxes,
    radios and file inputs count (they make a form and show up in field
    statistics) even though is_mappable_field leaves them out.
    """
    return (field.type or "").lower() not in SKIPPED_INPUT_TYPES


def is_mappable_field(field: RawFieldDescriptor) -> bool:
    """True for fillable controls that take a typed or selected value."""
    return is_fillable_field(field) and (field.type or "").lower() not in UNMAPPED_INPUT_TYPES


def _quote_attr(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def id_selector(element_id: str) -> str:
    """#id for plain identifiers, attribute form for anything CSS would reject."""
    if _CSS_IDENTIFIER.match(element_id):
        return f"#{element_id}"
    return f'[id="{_quote_attr(element_id)}"]'


def build_selector(field: RawFieldDescriptor) -> str:
    """
    Build a selector to re-locate a field on a later visit.

    Priority: id, then name, then a type-based selector. The type-based
    selector may match several elements (see is_low_confidence_selector).
    """
    if field.id:
        return id_selector(field.id)
    if field.name:
        return f'[name="{_quote_attr(field.name)}"]'

    input_type = (field.type or "text").lower()
    if input_type in ("textarea", "select"):
        return input_type
    return f'input[type="{_quote_attr(input_type)}"]'


def is_low_confidence_selector(selector: str) -> bool:
    """True for type-based selectors, which are not tied to one element."""
    if not selector:
        return True
    return not (selector.startswith("#") or selector.startswith("[id=") or selector.startswith("[name="))


def build_submit_selector(control: Optional[SubmitControl]) -> Optional[str]:
    """
    Selector for a form's submit control: id, then first class token,
    then a generic submit selector by tag.
    """
    if control is None:
        return None
    if control.id:
        return id_selector(control.id)

    class_tokens = (control.class_name or "").split()
    if class_tokens:
        first_class = class_tokens[0]
        if _CSS_IDENTIFIER.match(first_class):
            return f".{first_class}"
        return f'[class~="{_quote_attr(first_class)}"]'

    if (control.tag or "").lower() == "input":
        return 'input[type="submit"]'
    return 'button[type="submit"]'


def is_submission_link(link: PageLink) -> bool:
    """Check if an anchor's href or text suggests a submission page."""
    href = (link.href or "").lower()
    text = (link.text or "").lower()
    return any(kw in href or kw in text for kw in SUBMISSION_LINK_KEYWORDS)


def find_submission_links(links: List[PageLink]) -> List[PageLink]:
    return [link for link in links if is_submission_link(link)]


# ==================== REVEAL CONTROL ====================

class RevealAttempt(NamedTuple):
    """One tier of the reveal-control fallback chain."""
    tier: str       # selector | text | data-modal | class
    kind: str       # "selector" -> click a selector, "text" -> click by text
    value: str


def parse_reveal_control(snippet: str) -> List[RevealAttempt]:
    """
    Turn a declarative reveal-control snippet into ordered click attempts.

    A snippet without markup is a selector and yields a single attempt.
    Otherwise the attempts are, in order: inner text, data-modal attribute,
    first class token. Tiers with nothing to extract are left out.

    Args:
        snippet: e.g. '<button class="btn open-form" data-modal="submit">Add tool</button>'

    Returns:
        Attempts in the order they should be tried
    """
    snippet = (snippet or "").strip()
    if not snippet:
        return []

    if "<" not in snippet:
        return [RevealAttempt("selector", "selector", snippet)]

    attempts = []

    text_match = re.search(r">([^<]+)<", snippet)
    button_text = text_match.group(1).strip() if text_match else ""
    if button_text:
        attempts.append(RevealAttempt("text", "text", button_text))

    modal_match = re.search(r'data-modal="([^"]+)"', snippet)
    if modal_match:
        attempts.append(RevealAttempt(
            "data-modal", "selector", f'[data-modal="{_quote_attr(modal_match.group(1))}"]'
        ))

    class_match = re.search(r'class="([^"]+)"', snippet)
    if class_match:
        tokens = class_match.group(1).split()
        if tokens:
            first_class = tokens[0]
            if _CSS_IDENTIFIER.match(first_class):
                attempts.append(RevealAttempt("class", "selector", f".{first_class}"))
            else:
                attempts.append(RevealAttempt("class", "selector", f'[class~="{_quote_attr(first_class)}"]'))

    return attempts
