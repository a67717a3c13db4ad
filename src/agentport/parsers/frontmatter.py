"""YAML front matter splitting shared by every Markdown-based input.

Artifacts, rule documents and agent definitions may all start with a YAML
block delimited by ``---`` lines. The delimiter is found with a regex and
the block itself is parsed with PyYAML's ``safe_load``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml

# Match YAML frontmatter: ---\n...\n---\n (the closing line may end the file)
_FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)

# Match a fenced YAML block: ```yaml\n...\n```
_YAML_FENCE_PATTERN = re.compile(r"```ya?ml\s*\n(.*?)```", re.DOTALL)


@dataclass(frozen=True)
class FrontMatter:
    """Result of splitting a document into front matter and body.

    Attributes:
        data: The parsed mapping, or None when there is no front matter or
            it did not parse to a mapping.
        body: The text after the front matter block (the whole text when
            there is none).
        present: True if a ``---`` block was found at all.
        error: The YAML error message when the block failed to parse.
    """

    data: dict[str, Any] | None
    body: str
    present: bool = False
    error: str | None = None


def split_front_matter(text: str) -> FrontMatter:
    """Split *text* into its front matter and body.

    Never raises: malformed YAML is reported through ``FrontMatter.error``.
    """
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return FrontMatter(data=None, body=text)

    body = text[match.end():]
    try:
        loaded = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        return FrontMatter(data=None, body=body, present=True, error=str(exc))

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        return FrontMatter(
            data=None,
            body=body,
            present=True,
            error=f"front matter is a {type(loaded).__name__}, not a mapping",
        )
    return FrontMatter(data=loaded, body=body, present=True)


def find_yaml_block(text: str) -> dict[str, Any] | None:
    """Return the first YAML mapping in *text*.

    Front matter wins; otherwise the first fenced ```yaml block that parses
    to a mapping is used.
    """
    front = split_front_matter(text)
    if front.data:
        return front.data
    for match in _YAML_FENCE_PATTERN.finditer(text):
        try:
            loaded = yaml.safe_load(match.group(1))
        except yaml.YAMLError:
            continue
        if isinstance(loaded, dict):
            return loaded
    return None
