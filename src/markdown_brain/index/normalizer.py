"""Markdown to plain text and word tokens."""

import logging
import re

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)

_MD = MarkdownIt("commonmark").enable("table")

HTML_TAG_RE = re.compile(r"<[^>]*>")
INLINE_SPACE_RE = re.compile(r"[ \t\r\f\v]+")
WORD_RE = re.compile(r"\w+")


def normalize(raw_body: str) -> tuple[str, list[str]]:
    """Convert a markdown body into (plain_text, tokens).

    Tokens are the lower-cased words of the plain text, in order. If the
    markdown cannot be parsed the raw body is used as plain text.
    """
    try:
        plain_text = markdown_to_text(raw_body)
    except Exception as e:
        logger.debug("Falling back to raw text, markdown parse failed: %s", e)
        plain_text = raw_body.strip()
    return plain_text, tokenize(plain_text)


def tokenize(text: str) -> list[str]:
    """Split text into lower-cased word tokens."""
    return WORD_RE.findall(text.lower())


def markdown_to_text(markdown: str) -> str:
    """Strip markdown structure, keeping the readable text.

    Each block becomes one line; whitespace inside a line is collapsed.
    """
    lines: list[str] = []
    for token in _MD.parse(markdown):
        if token.type == "inline":
            text = _inline_text(token.children or [])
        elif token.type in ("fence", "code_block"):
            text = token.content
        elif token.type == "html_block":
            text = HTML_TAG_RE.sub("", token.content)
        else:
            continue
        for line in text.splitlines():
            line = INLINE_SPACE_RE.sub(" ", line).strip()
            if line:
                lines.append(line)
    return "\n".join(lines).strip()


def _inline_text(children) -> str:
    parts: list[str] = []
    for child in children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type == "softbreak":
            parts.append(" ")
        elif child.type == "hardbreak":
            parts.append("\n")
        elif child.type == "html_inline":
            parts.append(HTML_TAG_RE.sub("", child.content))
        elif child.type == "image":
            parts.append(child.content)  # alt text
    return "".join(parts)
