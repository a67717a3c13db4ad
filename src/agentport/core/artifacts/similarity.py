"""String-similarity ranking for missing-artifact suggestions.

Similarity between two names is derived from their Levenshtein edit
distance::

    similarity(a, b) = (max_len - distance(a, b)) / max_len

computed on lower-cased base names (directory and extension removed).
Two empty names are identical (similarity 1.0).
"""

from __future__ import annotations

from pathlib import Path

from agentport.core.artifacts.models import Suggestion, SuggestionKind
from agentport.core.artifacts.scopes import canonical_name, split_name
from agentport.core.artifacts.types import ArtifactType

DEFAULT_LIMIT = 5
DEFAULT_MIN_CONFIDENCE = 0.3


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between *a* and *b* (unit costs)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Return the normalized similarity of two names in ``[0, 1]``."""
    left = split_name(a)[0].lower()
    right = split_name(b)[0].lower()
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(left, right)) / longest


def rank_candidates(
    name: str,
    candidates: list[tuple[str, Path]],
    *,
    limit: int = DEFAULT_LIMIT,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> list[Suggestion]:
    """Rank ``(file name, directory)`` candidates by similarity to *name*.

    Candidates at or below *min_confidence* are dropped. Ties keep the
    order in which candidates were given. At most *limit* suggestions are
    returned, sorted by descending confidence.
    """
    scored = [
        Suggestion(
            kind=SuggestionKind.SIMILAR_FILE,
            candidate_name=file_name,
            candidate_dir=directory,
            confidence=similarity(name, file_name),
        )
        for file_name, directory in candidates
    ]
    kept = [s for s in scored if s.confidence > min_confidence]
    kept.sort(key=lambda s: -s.confidence)
    return kept[:limit]


def create_new_suggestion(artifact_type: ArtifactType, name: str, directory: Path) -> Suggestion:
    """Build the lowest-priority "create a new file" suggestion."""
    return Suggestion(
        kind=SuggestionKind.CREATE_NEW,
        candidate_name=canonical_name(artifact_type, name),
        candidate_dir=directory,
        confidence=0.0,
    )


def suggest(
    artifact_type: ArtifactType,
    name: str,
    candidate_files: list[str],
    directory: Path | None = None,
    *,
    limit: int = DEFAULT_LIMIT,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> list[Suggestion]:
    """Suggest replacements for a missing *name* among *candidate_files*.

    Returns up to *limit* similar files, best first, followed by exactly
    one create-new suggestion.

    Args:
        artifact_type: Type of the missing artifact.
        name: The name that failed to resolve.
        candidate_files: File names available in one scope directory.
        directory: That directory (defaults to the current directory).
        limit: Maximum number of similar-file suggestions.
        min_confidence: Similarity floor for a candidate to be kept.
    """
    where = directory if directory is not None else Path(".")
    ranked = rank_candidates(
        name,
        [(file_name, where) for file_name in candidate_files],
        limit=limit,
        min_confidence=min_confidence,
    )
    return [*ranked, create_new_suggestion(artifact_type, name, where)]
