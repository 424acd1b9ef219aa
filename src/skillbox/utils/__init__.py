"""Utilities package."""

from skillbox.utils.def_loader import InvalidDefError, parse_definition, parse_frontmatter
from skillbox.utils.logging import setup_logging

__all__ = [
    "InvalidDefError",
    "parse_definition",
    "parse_frontmatter",
    "setup_logging",
]
