"""
Optional content enhancement via OpenAI.
Asks for a better description, category and tag list for a website. Any
failure yields empty suggestions and the original values are kept.
"""

import asyncio
import json
import re
from typing import Any, Dict, NamedTuple, Optional

import aiohttp
from loguru import logger
from pydantic import ValidationError

from config import SubmissionData

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"

CATEGORIES = [
    "AI Tools", "SaaS", "Productivity", "Marketing", "Analytics", "Design",
    "Development", "Business", "Finance", "Education", "Other",
]

SYSTEM_PROMPT = (
    "You are an expert at creating optimized directory submission content. "
    "Follow the format exactly."
)


class ContentSuggestion(NamedTuple):
    """Suggested values; None where nothing usable came back."""
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[str] = None


def build_enhancement_prompt(website: Dict[str, Any]) -> str:
    """Prompt for the DESCRIPTION/CATEGORY/TAGS response format."""
    return f"""Based on this website information, generate optimized directory submission content:

Website: {website.get('url') or 'N/A'}
Title: {website.get('title') or 'N/A'}
Current Description: {website.get('description') or 'N/A'}
Keywords: {website.get('keywords') or 'N/A'}

Generate:
1. Description: A compelling 150-200 character description
2. Category: ONE category from: {', '.join(CATEGORIES)}
3. Tags: 5-10 relevant, lowercase, comma-separated tags

Format your response EXACTLY like this:
DESCRIPTION: [your description here]
CATEGORY: [category name]
TAGS: [tag1, tag2, tag3, ...]"""


def parse_enhancement_response(content: Optional[str]) -> ContentSuggestion:
    """
    Parse DESCRIPTION:/CATEGORY:/TAGS: lines out of a model response.

    Missing or empty lines become None.
    """
    if not content:
        return ContentSuggestion()

    def line_value(label: str) -> Optional[str]:
        match = re.search(rf"^[ \t]*{label}:[ \t]*(.*?)[ \t]*$", content, re.IGNORECASE | re.MULTILINE)
        if not match:
            return None
        value = match.group(1).strip().strip("[]").strip()
        return value or None

    return ContentSuggestion(
        description=line_value("DESCRIPTION"),
        category=line_value("CATEGORY"),
        tags=line_value("TAGS"),
    )


def apply_suggestion(data: SubmissionData, suggestion: ContentSuggestion) -> SubmissionData:
    """
    Copy of the submission data with non-null suggestions applied.
    A suggestion that fails validation (e.g. a too-short description) is ignored.
    """
    updated = data.model_dump()
    for field in ("description", "category", "tags"):
        value = getattr(suggestion, field)
        if value is None:
            continue
        candidate = dict(updated, **{field: value})
        try:
            SubmissionData(**candidate)
        except ValidationError:
            logger.debug(f"Ignoring enhanced {field}: does not pass validation")
            continue
        updated = candidate
    return SubmissionData(**updated)


class ContentEnhancer:
    """OpenAI chat-completions client for submission content."""

    def __init__(self, api_key: str = "", model: str = "gpt-4o-mini"):
        self.api_key = api_key or ""
        self.model = model
        self.enabled = bool(self.api_key) and not (
            self.api_key.startswith("YOUR_") or self.api_key.startswith("sk-your")
        )

    async def _call_openai(self, prompt: str) -> Optional[str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}"
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": 200,
            "temperature": 0.7,
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(
                OPENAI_CHAT_URL,
                headers=headers,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=60)
            ) as response:
                response_text = await response.text()

                if response.status == 401:
                    raise RuntimeError("invalid_api_key: Your OpenAI API key is invalid or expired")
                if response.status == 429:
                    raise RuntimeError("rate_limit_exceeded: OpenAI rate limit or quota exceeded")
                if response.status != 200:
                    raise RuntimeError(f"OpenAI error ({response.status}): {response_text[:200]}")

                result = json.loads(response_text)
                if 'choices' not in result or not result['choices']:
                    raise RuntimeError("OpenAI returned no choices")
                return result['choices'][0].get('message', {}).get('content')

    async def generate_all(self, website: Dict[str, Any]) -> ContentSuggestion:
        """
        Suggest description, category and tags for a website.

        Args:
            website: {url, title, description, keywords}

        Returns:
            ContentSuggestion (all None when disabled or on any failure)
        """
        if not self.enabled:
            return ContentSuggestion()

        try:
            content = await self._call_openai(build_enhancement_prompt(website))
        except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError, RuntimeError) as e:
            logger.warning(f"⚠️ AI content generation failed: {e}")
            return ContentSuggestion()

        return parse_enhancement_response(content)
