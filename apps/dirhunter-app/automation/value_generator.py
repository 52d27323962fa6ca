"""
Derives default submission values from a website's own metadata.
"""

from typing import Any, Dict, List

from models import PageMetadata


# Checked in order; first family with a hit wins
CATEGORY_KEYWORDS = [
    ("AI Tools", ["ai", "artificial intelligence"]),
    ("SaaS", ["saas", "software as a service"]),
    ("Productivity", ["productivity"]),
    ("Marketing", ["marketing"]),
    ("Analytics", ["analytics"]),
    ("Design", ["design"]),
    ("Development", ["development", "developer"]),
    ("Business", ["business"]),
    ("Finance", ["finance"]),
    ("Education", ["education"]),
]

COMMON_TAGS = [
    "ai", "automation", "productivity", "saas", "marketing", "analytics",
    "design", "development", "business", "finance", "education", "tool",
    "platform", "software", "app", "web", "mobile", "cloud", "api", "integration",
]

MAX_KEYWORD_TAGS = 5
MAX_TAGS = 10


def derive_category(keywords: str = "", description: str = "") -> str:
    """
    Pick a category by substring match on keywords + description.
    Matching is plain substring, so "ai" also hits words like "email".
    """
    text = f"{keywords or ''} {description or ''}".lower()
    for category, needles in CATEGORY_KEYWORDS:
        if any(needle in text for needle in needles):
            return category
    return "Other"


def derive_tags(keywords: str = "", description: str = "") -> str:
    """Comma-separated tags: vocabulary hits, then up to five keyword entries."""
    text = f"{keywords or ''} {description or ''}".lower()
    tags: List[str] = []

    for tag in COMMON_TAGS:
        if tag in text and tag not in tags:
            tags.append(tag)

    if keywords:
        entries = [k.strip().lower() for k in keywords.split(",")]
        for entry in [k for k in entries if len(k) > 2][:MAX_KEYWORD_TAGS]:
            if entry not in tags:
                tags.append(entry)

    return ", ".join(tags[:MAX_TAGS])


def generate_smart_values(metadata: PageMetadata, url: str) -> Dict[str, Any]:
    """Submission values derived from page metadata."""
    return {
        "name": metadata.og_title or metadata.twitter_title or metadata.title or "",
        "url": metadata.canonical_url or metadata.og_url or url,
        "description": metadata.og_description or metadata.twitter_description or metadata.description or "",
        "title": metadata.title or "",
        "keywords": metadata.keywords or "",
        "author": metadata.author or "",
        "language": metadata.language or "en",
        "logo": metadata.favicon or "",
        "image": metadata.og_image or metadata.twitter_image or "",
        "category": derive_category(metadata.keywords, metadata.description),
        "tags": derive_tags(metadata.keywords, metadata.description),
    }
