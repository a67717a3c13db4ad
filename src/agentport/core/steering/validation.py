"""Structural validation of rule documents.

Errors make a document invalid and exclude it from every merge:

- malformed YAML front matter;
- an ``inclusion`` value other than ``always``, ``conditional``
  (or its spelling ``fileMatch``) and ``manual``;
- conditional inclusion without any match predicate
  (``fileMatch`` specifically requires ``fileMatchPattern``);
- a section heading with an empty body.

Warnings never invalidate: missing front matter, empty body, no headers.
"""

from __future__ import annotations

import logging
from pathlib import Path

from agentport.core.steering.models import (
    FileValidation,
    InclusionMode,
    RuleDocument,
    ValidationReport,
)
from agentport.core.steering.parser import GUIDE_FILENAME, load_rule_document
from agentport.exceptions import RuleDocumentError

logger = logging.getLogger(__name__)


def validate_document(document: RuleDocument) -> FileValidation:
    result = FileValidation(document.source_name)

    if document.parse_error:
        result.errors.append(f"Invalid YAML in front matter: {document.parse_error}")

    mode = document.mode
    if mode is None:
        result.errors.append(f"Invalid inclusion value: {document.inclusion}")
    elif document.inclusion == "fileMatch" and not document.file_match_pattern:
        result.errors.append("fileMatchPattern required when inclusion is fileMatch")
    elif mode is InclusionMode.CONDITIONAL and not document.has_predicate:
        result.errors.append(
            "conditional inclusion requires fileMatchPattern, agentFilter or projectType"
        )

    for key, value in document.sections.items():
        if value == "" or value == ():
            result.errors.append(f"Section '{key}' is empty")

    if not document.front_matter_present:
        result.warnings.append("No front matter found - rule will always be included")
    body = document.body.strip()
    if not body:
        result.warnings.append("Rule file has no content")
    elif "#" not in body:
        result.warnings.append("No markdown headers found - consider organizing content with headers")
    return result


def partition_documents(
    documents: list[RuleDocument],
) -> tuple[ValidationReport, list[RuleDocument], list[RuleDocument]]:
    """Validate each document on its own.

    Documents sharing a source name (one ``tech.md`` per scope) are judged
    independently: an invalid one never excludes a valid namesake.

    Returns:
        ``(report, valid, invalid)`` with both lists in input order.
    """
    report = ValidationReport()
    valid: list[RuleDocument] = []
    invalid: list[RuleDocument] = []
    for document in documents:
        outcome = validate_document(document)
        key = report.add(outcome, document.path)
        if outcome.valid:
            valid.append(document)
        else:
            invalid.append(document)
            logger.warning("Invalid rule document %s: %s", key, "; ".join(outcome.errors))
    return report, valid, invalid


def validate_consistency(documents: list[RuleDocument]) -> ValidationReport:
    """Validate every document; the report holds one entry per document."""
    return partition_documents(documents)[0]


def validate_directory(directory: Path) -> ValidationReport:
    """Validate every rule document in *directory*, unreadable ones included."""
    report = ValidationReport()
    for path in sorted(directory.glob("*.md")):
        if path.name == GUIDE_FILENAME or not path.is_file():
            continue
        try:
            document = load_rule_document(path)
        except RuleDocumentError as exc:
            report.add(FileValidation(path.name, errors=[f"Failed to read file: {exc}"]), path)
            continue
        report.add(validate_document(document), path)
    return report
