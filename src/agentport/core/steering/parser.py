"""Parsing and loading of steering rule documents.

A rule document is Markdown with optional YAML front matter::

    ---
    inclusion: fileMatch
    fileMatchPattern: "*.py"
    ---
    ## Code Style
    - 4 spaces
    - black formatting

    ## Testing
    Every change needs a test.

Each ``## Heading`` opens a section whose key is the heading lower-cased
with whitespace runs replaced by ``_`` (``code_style``). A body made of
bullet lines becomes a tuple of the bullet texts; anything else becomes
the stripped text. A document without sections is kept whole under the
single key ``general_guidance``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from agentport.core.steering.models import RuleDocument, SectionValue
from agentport.exceptions import RuleDocumentError
from agentport.parsers.frontmatter import split_front_matter

logger = logging.getLogger(__name__)

GUIDE_FILENAME = "CONFLICT_RESOLUTION_GUIDE.md"
GENERAL_KEY = "general_guidance"

_SECTION_PATTERN = re.compile(r"^##\s+(.+?)\s*$", re.MULTILINE)
_BULLET_PATTERN = re.compile(r"^\s*[-*]\s+(.*)$")


def section_key(heading: str) -> str:
    """Normalize a section heading to its key."""
    return re.sub(r"\s+", "_", heading.strip().lower())


def _section_value(body: str) -> SectionValue:
    lines = [line for line in body.strip().splitlines() if line.strip()]
    if lines and all(_BULLET_PATTERN.match(line) for line in lines):
        return tuple(_BULLET_PATTERN.match(line).group(1).strip() for line in lines)
    return body.strip()


def parse_sections(body: str) -> dict[str, SectionValue]:
    """Split a document body into section key -> value.

    A repeated heading keeps its last body. Text before the first section
    heading is ignored unless there are no sections at all.
    """
    matches = list(_SECTION_PATTERN.finditer(body))
    if not matches:
        text = body.strip()
        return {GENERAL_KEY: text} if text else {}

    sections: dict[str, SectionValue] = {}
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(body)
        sections[section_key(match.group(1))] = _section_value(body[match.end():end])
    return sections


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def parse_rule_document(text: str, source_name: str, path: Path | None = None) -> RuleDocument:
    """Parse the text of one rule document.

    Never raises. Malformed front matter is recorded in
    ``RuleDocument.parse_error`` and the sections are still parsed from the
    body, so validation can report the document.
    """
    front = split_front_matter(text)
    data = front.data or {}
    return RuleDocument(
        source_name=source_name,
        inclusion=_optional_str(data.get("inclusion")),
        file_match_pattern=_optional_str(data.get("fileMatchPattern")),
        agent_filter=_optional_str(data.get("agentFilter")),
        project_type=_optional_str(data.get("projectType")),
        sections=parse_sections(front.body),
        path=path,
        front_matter_present=front.present,
        parse_error=front.error,
        body=front.body,
    )


def load_rule_document(path: Path, *, strict: bool = False) -> RuleDocument:
    """Read and parse the rule document at *path*.

    Args:
        path: The Markdown file.
        strict: Raise instead of recording a front matter parse error.

    Raises:
        RuleDocumentError: If the file cannot be read, or if *strict* and
            its front matter is malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RuleDocumentError(f"Cannot read rule document {path}: {exc}") from exc
    document = parse_rule_document(text, path.name, path)
    if strict and document.parse_error:
        raise RuleDocumentError(f"Malformed front matter in {path}: {document.parse_error}")
    return document


def load_rule_documents(directory: Path) -> list[RuleDocument]:
    """Load every ``*.md`` rule document in *directory*, sorted by name.

    The generated conflict resolution guide is skipped. Unreadable files
    are logged and skipped; a missing directory yields an empty list.
    """
    if not directory.is_dir():
        logger.debug("No steering directory at %s", directory)
        return []

    documents: list[RuleDocument] = []
    for path in sorted(directory.glob("*.md")):
        if path.name == GUIDE_FILENAME or not path.is_file():
            continue
        try:
            documents.append(load_rule_document(path))
        except RuleDocumentError:
            logger.warning("Skipping unreadable rule document: %s", path, exc_info=True)
    logger.debug("Loaded %d rule documents from %s", len(documents), directory)
    return documents
