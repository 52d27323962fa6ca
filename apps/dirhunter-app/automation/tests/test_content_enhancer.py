"""Tests for AI content suggestions (no network)."""

import asyncio

from config import SubmissionData
from content_enhancer import (
    ContentEnhancer,
    ContentSuggestion,
    apply_suggestion,
    build_enhancement_prompt,
    parse_enhancement_response,
)

LONG_DESCRIPTION = "Plan, schedule and publish directory submissions from one dashboard, in minutes."

RESPONSE = """Here you go:
DESCRIPTION: [Plan, schedule and publish directory submissions from one dashboard, in minutes.]
CATEGORY: Productivity
TAGS: [automation, directories, seo]
"""


def test_parse_response():
    suggestion = parse_enhancement_response(RESPONSE)
    assert suggestion.description == LONG_DESCRIPTION
    assert suggestion.category == "Productivity"
    assert suggestion.tags == "automation, directories, seo"


def test_parse_missing_lines():
    suggestion = parse_enhancement_response("category: SaaS\nTAGS:   \n")
    assert suggestion == ContentSuggestion(description=None, category="SaaS", tags=None)
    assert parse_enhancement_response(None) == ContentSuggestion()


def test_prompt_lists_website_and_categories():
    prompt = build_enhancement_prompt({"url": "https://tool.test", "title": "Tool"})
    assert "Website: https://tool.test" in prompt
    assert "Current Description: N/A" in prompt
    assert "AI Tools" in prompt


def test_apply_suggestion_skips_invalid_values(submission_data):
    suggestion = ContentSuggestion(description="Too short", category="SaaS", tags="a, b")

    updated = apply_suggestion(submission_data, suggestion)

    assert updated.description == submission_data.description
    assert updated.category == "SaaS"
    assert updated.tags == "a, b"
    assert submission_data.category == "Productivity"


def test_apply_suggestion_uses_valid_description(submission_data):
    updated = apply_suggestion(submission_data, ContentSuggestion(description=LONG_DESCRIPTION))
    assert updated.description == LONG_DESCRIPTION
    assert updated.tags == submission_data.tags


def test_placeholder_keys_disable_enhancer():
    assert not ContentEnhancer("").enabled
    assert not ContentEnhancer("YOUR_OPENAI_KEY").enabled
    assert not ContentEnhancer("sk-your-key-here").enabled
    assert ContentEnhancer("sk-abc123").enabled


def test_disabled_enhancer_returns_empty_suggestion():
    suggestion = asyncio.run(ContentEnhancer("").generate_all({"url": "https://tool.test"}))
    assert suggestion == ContentSuggestion()


def test_api_error_returns_empty_suggestion(monkeypatch):
    enhancer = ContentEnhancer("sk-abc123")

    async def failing_call(prompt):
        raise RuntimeError("rate_limit_exceeded")

    monkeypatch.setattr(enhancer, "_call_openai", failing_call)
    assert asyncio.run(enhancer.generate_all({"url": "https://tool.test"})) == ContentSuggestion()


def test_generate_all_parses_response(monkeypatch):
    enhancer = ContentEnhancer("sk-abc123")

    async def fake_call(prompt):
        return RESPONSE

    monkeypatch.setattr(enhancer, "_call_openai", fake_call)
    suggestion = asyncio.run(enhancer.generate_all({"url": "https://tool.test"}))
    assert suggestion.category == "Productivity"
