"""
Markdown rendering, table of contents and reading stats for post bodies.
"""
import math
import re
from html import unescape

import markdown

from .conf import blog_settings

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "toc"]

_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]+\)")
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_HEADER = re.compile(r"^#{1,6}\s", re.MULTILINE)


def _converter():
    return markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)


def render_markdown(text):
    """Render a post body to HTML. Headings get the same ids as the TOC."""
    return _converter().convert(text or "")


def _flatten(tokens, max_depth):
    for token in tokens:
        if token["level"] <= max_depth:
            yield {
                "depth": token["level"],
                "text": unescape(token["name"]),
                "id": token["id"],
            }
        yield from _flatten(token.get("children", []), max_depth)


def extract_headings(text, max_depth=None):
    """
    Return the table of contents as a flat list of
    ``{"depth": int, "text": str, "id": str}`` in document order.

    Headings deeper than ``max_depth`` (TOC_MAX_DEPTH) and headings without
    text are skipped.
    """
    if max_depth is None:
        max_depth = blog_settings.TOC_MAX_DEPTH

    md = _converter()
    md.convert(text or "")
    return [item for item in _flatten(md.toc_tokens, max_depth) if item["text"]]


def _plain_text(text):
    plain = re.sub(r"#{1,6}\s", "", text)
    plain = re.sub(r"\*\*([^*]+)\*\*", r"\1", plain)
    plain = re.sub(r"\*([^*]+)\*", r"\1", plain)
    plain = _CODE_BLOCK.sub("", plain)
    plain = _IMAGE.sub("", plain)
    plain = _LINK.sub(r"\1", plain)
    plain = re.sub(r"`([^`]+)`", r"\1", plain)
    return re.sub(r"<[^>]*>", "", plain)


def calculate_stats(text):
    """Word count, reading time (minutes) and structural counts for a body."""
    text = text or ""
    plain = _plain_text(text)
    words = plain.split()
    word_count = len(words)

    return {
        "word_count": word_count,
        "reading_time": math.ceil(word_count / blog_settings.WORDS_PER_MINUTE),
        "characters": len(plain),
        "characters_no_spaces": len(re.sub(r"\s", "", plain)),
        "headers": len(_HEADER.findall(_CODE_BLOCK.sub("", text))),
        "images": len(_IMAGE.findall(text)),
        "links": len(_LINK.findall(_IMAGE.sub("", text))),
        "code_blocks": len(_CODE_BLOCK.findall(text)),
    }
