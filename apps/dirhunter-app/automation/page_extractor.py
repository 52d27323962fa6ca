"""
Page form extractor.
Walks every form on the loaded page inside the browser and returns the raw
field descriptors, submit controls, anchors, CAPTCHA markers and metadata.
"""

from typing import Any, Dict

from pydantic import ValidationError

from models import PageExtraction
from utils.simple_logger import slog


# Runs inside the page via page.evaluate()
EXTRACT_SCRIPT = r"""
() => {
    const SKIPPED = ['hidden', 'submit', 'button', 'reset', 'image'];
    const text = (el) => (el && el.textContent ? el.textContent.trim() : '');

    const forms = [];
    document.querySelectorAll('form').forEach((form, index) => {
        const formData = {
            index: index,
            action: form.action || '',
            method: (form.method || 'get').toLowerCase(),
            fields: [],
            submitButton: null,
        };

        form.querySelectorAll('input, textarea, select').forEach((field) => {
            const tag = field.tagName.toLowerCase();
            const type = tag === 'select' ? 'select' : ((field.type || tag).toLowerCase());
            if (SKIPPED.includes(type)) return;

            let label = '';
            if (field.id) {
                const forLabel = document.querySelector(`label[for="${CSS.escape(field.id)}"]`);
                if (forLabel) label = text(forLabel);
            }
            if (!label) {
                const parentLabel = field.closest('label');
                if (parentLabel) label = text(parentLabel);
            }
            if (!label) label = field.getAttribute('aria-label') || '';

            const options = [];
            if (tag === 'select') {
                field.querySelectorAll('option').forEach((option) => {
                    options.push({ value: option.value, text: text(option) });
                });
            }

            const minLength = field.getAttribute('minlength');
            const maxLength = field.getAttribute('maxlength');

            formData.fields.push({
                type: type,
                name: field.name || '',
                id: field.id || '',
                placeholder: field.placeholder || '',
                label: label,
                required: !!field.required,
                pattern: field.getAttribute('pattern') || '',
                minLength: minLength !== null && !isNaN(parseInt(minLength)) ? parseInt(minLength) : null,
                maxLength: maxLength !== null && !isNaN(parseInt(maxLength)) ? parseInt(maxLength) : null,
                options: options,
            });
        });

        const submitBtn =
            form.querySelector('button[type="submit"]') ||
            form.querySelector('input[type="submit"]') ||
            form.querySelector('button:not([type])');
        if (submitBtn) {
            formData.submitButton = {
                tag: submitBtn.tagName.toLowerCase(),
                type: (submitBtn.getAttribute('type') || '').toLowerCase(),
                id: submitBtn.id || '',
                className: typeof submitBtn.className === 'string' ? submitBtn.className : '',
                text: text(submitBtn) || submitBtn.value || 'Submit',
            };
        }

        forms.push(formData);
    });

    const links = [];
    document.querySelectorAll('a[href]').forEach((a) => {
        links.push({ text: text(a), href: a.href || '' });
    });

    const metadata = {
        title: document.title || '',
        language: document.documentElement.lang || 'en',
    };
    const metaKeys = {
        'description': 'description',
        'keywords': 'keywords',
        'author': 'author',
        'og:title': 'ogTitle',
        'og:description': 'ogDescription',
        'og:image': 'ogImage',
        'og:url': 'ogUrl',
        'twitter:card': 'twitterCard',
        'twitter:title': 'twitterTitle',
        'twitter:description': 'twitterDescription',
        'twitter:image': 'twitterImage',
    };
    document.querySelectorAll('meta').forEach((meta) => {
        const name = meta.getAttribute('name') || meta.getAttribute('property');
        const content = meta.getAttribute('content');
        if (!name || !content) return;
        const key = metaKeys[name.toLowerCase()];
        if (key) metadata[key] = content;
    });
    const favicon = document.querySelector('link[rel*="icon"]');
    if (favicon) metadata.favicon = favicon.href;
    const canonical = document.querySelector('link[rel="canonical"]');
    if (canonical) metadata.canonicalUrl = canonical.href;

    return {
        url: window.location.href,
        title: document.title || '',
        forms: forms,
        links: links,
        hasRecaptcha: !!document.querySelector('.g-recaptcha, [data-sitekey], iframe[src*="recaptcha"]'),
        hasHcaptcha: !!document.querySelector('.h-captcha, iframe[src*="hcaptcha"]'),
        metadata: metadata,
    };
}
"""


def parse_extraction(raw: Dict[str, Any]) -> PageExtraction:
    """
    Validate the extractor script's output into a PageExtraction.

    Raises:
        ValueError: if the page returned something that is not an extraction
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Unexpected extraction result: {type(raw).__name__}")
    try:
        return PageExtraction.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Malformed extraction result: {e.error_count()} error(s)") from e


async def extract_page(page) -> PageExtraction:
    """Run the extractor on a Playwright page."""
    raw = await page.evaluate(EXTRACT_SCRIPT)
    extraction = parse_extraction(raw)
    slog.detail(
        f"   Extracted {len(extraction.forms)} form(s), "
        f"{len(extraction.all_fields)} field(s), {len(extraction.links)} link(s)"
    )
    return extraction
