"""Helpers for reading definition files (YAML front matter + markdown body)."""

from typing import Any, Callable, TypeVar

import yaml

T = TypeVar("T")


class InvalidDefError(Exception):
    """Definition file is malformed."""

    def __init__(self, kind: str, def_id: str, reason: str):
        super().__init__(f"Invalid {kind} '{def_id}': {reason}")
        self.kind = kind
        self.def_id = def_id
        self.reason = reason


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split raw file content into front matter and body.

    Content without a leading ``---`` block is returned as body with empty
    front matter.

    Raises:
        yaml.YAMLError: If the front matter is not valid YAML
        ValueError: If the front matter is not a mapping
    """
    text = content.replace("\r\n", "\n")
    if not text.startswith("---\n"):
        return {}, text

    end_delimiter = text.find("\n---", 3)
    if end_delimiter == -1:
        return {}, text

    frontmatter_text = text[4:end_delimiter]
    body = text[end_delimiter + 4 :]
    if body.startswith("\n"):
        body = body[1:]

    raw = yaml.safe_load(frontmatter_text)
    if raw is None:
        return {}, body
    if not isinstance(raw, dict):
        raise ValueError("front matter must be a mapping")
    return raw, body


def parse_definition(
    content: str,
    def_id: str,
    parse_fn: Callable[[str, dict[str, Any], str], T],
    kind: str = "skill",
) -> T:
    """
    Parse YAML front matter + markdown body with type conversion.

    Args:
        content: Raw file content
        def_id: Definition ID (passed to parse_fn for context)
        parse_fn: Callback(def_id, frontmatter, body) -> typed object
        kind: Definition kind used in error messages

    Returns:
        The typed object returned by parse_fn

    Raises:
        InvalidDefError: If the front matter cannot be parsed
    """
    try:
        frontmatter, body = parse_frontmatter(content)
    except (yaml.YAMLError, ValueError) as e:
        raise InvalidDefError(kind, def_id, str(e)) from e
    return parse_fn(def_id, frontmatter, body)
