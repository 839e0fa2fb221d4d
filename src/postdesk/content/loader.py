"""Frontmatter parsing for index documents."""
import re
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from postdesk.content.schemas import PostFrontmatter

logger = structlog.get_logger()

FRONTMATTER_PATTERN = re.compile(
    r"^---\s*\n(.*?)\n---\s*(?:\n(.*))?$",
    re.DOTALL,
)


def parse_frontmatter(content: str) -> tuple[dict[str, object], str]:
    """Parse YAML frontmatter from markdown content.

    Args:
        content: Raw file content with optional frontmatter.

    Returns:
        Tuple of (frontmatter dict, remaining content).
        Returns empty dict if no frontmatter found.
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        return {}, content

    if not isinstance(data, dict):
        return {}, content
    return data, match.group(2) or ""


def read_title(index_path: Path) -> str | None:
    """Read the frontmatter title of an index document.

    Unreadable files and malformed frontmatter yield None.
    """
    try:
        raw = index_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("index_unreadable", path=str(index_path), error=str(e))
        return None

    frontmatter, _ = parse_frontmatter(raw)

    try:
        meta = PostFrontmatter.model_validate(frontmatter)
    except ValidationError:
        return None

    return meta.title
