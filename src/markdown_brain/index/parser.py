"""Parser for YAML frontmatter and document titles."""

import logging
from datetime import date, datetime
from pathlib import PurePosixPath
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def parse_frontmatter(content: str, file_path: str = "") -> tuple[dict[str, Any], str]:
    """
    Parse YAML frontmatter from markdown content.

    Content without a frontmatter block, or with invalid YAML, or whose YAML
    is not a mapping, yields empty metadata and the content unchanged.

    Args:
        content: The full markdown content
        file_path: Relative path, used only for log messages

    Returns:
        Tuple of (metadata, content_without_frontmatter)
    """
    if not content.startswith("---"):
        return {}, content

    parts = content.split("---", 2)
    if len(parts) < 3:
        return {}, content

    try:
        raw = yaml.safe_load(parts[1])
    except yaml.YAMLError as e:
        logger.debug("Invalid YAML frontmatter in %s: %s", file_path, e)
        return {}, content

    if raw is None:
        # Empty frontmatter block
        return {}, parts[2].lstrip("\n")
    if not isinstance(raw, dict):
        return {}, content

    metadata = {str(key): _coerce_value(value) for key, value in raw.items()}
    return metadata, parts[2].lstrip("\n")


def _coerce_value(value: Any) -> Any:
    """Coerce a YAML value into a JSON-friendly variant."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    # datetime is a subclass of date
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [_coerce_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _coerce_value(v) for k, v in value.items()}
    return str(value)


def derive_title(metadata: dict[str, Any], file_path: str) -> str:
    """Title from frontmatter, or from the filename when absent.

    ``notes/weekly-review.md`` becomes ``weekly review``.
    """
    title = metadata.get("title")
    if isinstance(title, (str, int, float)) and not isinstance(title, bool):
        title = str(title).strip()
        if title:
            return title
    stem = PurePosixPath(file_path).stem
    return stem.replace("-", " ").replace("_", " ")
