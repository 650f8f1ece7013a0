"""
Text sanitization for LLM output and hh.ru HTML.

LLM responses are persisted and shown as plain text, so any markdown the model
emits despite the prompt rules is stripped before saving:

    from jobswipe.common.text_sanitizer import sanitize_llm_text, strip_html

    sanitize_llm_text("**Опыт** в _B2B_ - маркетинге")
    # Returns: "Опыт в B2B маркетинге"

    strip_html("<p>Задачи: <strong>SEO</strong></p>")
    # Returns: "Задачи: SEO"
"""

import re

from bs4 import BeautifulSoup


def sanitize_markdown(text: str) -> str:
    """
    Remove markdown formatting from text, keeping the content.

    Handles bold, italic, strikethrough, inline code, links, headers and
    horizontal rules.
    """
    if not text:
        return text

    # Order matters - process complex patterns first
    text = re.sub(r'```[\s\S]*?```', lambda m: m.group(0).replace('```', '').strip(), text)
    text = re.sub(r'`([^`]+)`', r'\1', text)

    # Links (keep link text)
    text = re.sub(r'\[([^\]]+)\]\([^)]+\)', r'\1', text)

    # Bold+italic, bold, italic
    text = re.sub(r'\*{3}([^*]+)\*{3}', r'\1', text)
    text = re.sub(r'\*{2}([^*]+)\*{2}', r'\1', text)
    text = re.sub(r'_{2}([^_]+)_{2}', r'\1', text)
    text = re.sub(r'(?<!\w)\*([^*\n]+)\*(?!\w)', r'\1', text)
    text = re.sub(r'(?<!\w)_([^_\n]+)_(?!\w)', r'\1', text)

    text = re.sub(r'~~([^~]+)~~', r'\1', text)

    # Headers (# ## ### etc at start of line)
    text = re.sub(r'^#{1,6}\s+', '', text, flags=re.MULTILINE)

    # Horizontal rules
    text = re.sub(r'^[-*_]{3,}\s*$', '', text, flags=re.MULTILINE)

    return text


def sanitize_llm_text(text: str) -> str:
    """
    Flatten an LLM response into a single plain-text paragraph.

    After markdown removal every remaining `*`, `#`, `_` and `-` is replaced
    by a space and whitespace is collapsed, so "B2B-маркетинг" becomes
    "B2B маркетинг".
    """
    if not text:
        return ""

    text = sanitize_markdown(text)
    text = re.sub(r"[*#_\-]", " ", text)
    return re.sub(r'\s+', ' ', text).strip()


def strip_html(html: str) -> str:
    """Convert an hh.ru HTML fragment into plain text."""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return re.sub(r'\s+', ' ', text).strip()
