"""Configuration for agentport.

Defaults describe the conventional framework layout::

    <root>/bmad-core/<type-dir>/...                  base-framework scope
    <root>/common/<type-dir>/...                     shared scope
    <root>/expansion-packs/<name>/<type-dir>/...     extension scopes

Everything can be overridden from a YAML file (``agentport.yaml`` at the
project root, or an explicit path). Unknown keys and wrongly typed values
are rejected with ``ConfigError`` so that a typo never silently falls back
to a default.

Example::

    layout:
      base_dir: core
    naming:
      prefixes: [acme-]
    suggestions:
      limit: 3
    precedence:
      team.md: {rank: 5, class: project}
    sensitive_keys: [error_handling]
    manifests:
      my-pack:
        procedure: [bootstrap.md]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from agentport.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "agentport.yaml"


@dataclass(frozen=True)
class ScopeLayout:
    """Directory names of the three scope roots, relative to the project root."""

    base_dir: str = "bmad-core"
    common_dir: str = "common"
    extensions_dir: str = "expansion-packs"


@dataclass(frozen=True)
class NamingConventions:
    """Prefix and suffix variants tried when a canonical name is missing."""

    prefixes: tuple[str, ...] = ("bmad-", "common-")
    suffixes: tuple[str, ...] = ("-task", "-template", "-checklist", "-util")


@dataclass(frozen=True)
class SuggestionSettings:
    """Ranking limits for missing-artifact suggestions.

    Attributes:
        limit: Maximum number of similar-file suggestions (the create-new
            fallback comes on top of this).
        min_confidence: Candidates at or below this similarity are dropped.
    """

    limit: int = 5
    min_confidence: float = 0.3


@dataclass(frozen=True)
class AgentPortConfig:
    """Complete agentport configuration.

    Attributes:
        layout: Scope directory names.
        naming: Naming-variant prefixes and suffixes.
        suggestions: Suggestion ranking limits.
        max_workers: Worker threads for parallel resolution. 1 means
            sequential.
        max_depth: How many levels of sub-dependencies are followed when
            building the dependency graph.
        precedence: Extra rule-document precedence entries, mapping a
            source name to ``(rank, class name)``.
        sensitive_keys: Extra structurally sensitive rule keys.
        manifests: Extra extension dependency manifests, mapping an
            extension name to ``{type name: [artifact names]}``.
    """

    layout: ScopeLayout = field(default_factory=ScopeLayout)
    naming: NamingConventions = field(default_factory=NamingConventions)
    suggestions: SuggestionSettings = field(default_factory=SuggestionSettings)
    max_workers: int = 1
    max_depth: int = 8
    precedence: dict[str, tuple[int, str]] = field(default_factory=dict)
    sensitive_keys: tuple[str, ...] = ()
    manifests: dict[str, dict[str, list[str]]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _section(data: dict[str, Any], name: str, cls: type) -> Any:
    raw = data.get(name)
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(raw).__name__}")
    allowed = {f.name for f in fields(cls)}
    unknown = set(raw) - allowed
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")
    values: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in raw:
            continue
        value = raw[f.name]
        default = getattr(cls(), f.name)
        if isinstance(default, tuple):
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{name}.{f.name}' must be a list of strings")
            value = tuple(value)
        elif isinstance(default, bool) or not isinstance(value, type(default)):
            if not (isinstance(default, float) and isinstance(value, int)):
                raise ConfigError(
                    f"'{name}.{f.name}' must be {type(default).__name__}, "
                    f"got {type(value).__name__}"
                )
        values[f.name] = value
    return cls(**values)


def _positive_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigError(f"'{key}' must be a positive integer, got {value!r}")
    return value


_PRECEDENCE_CLASSES = {
    "framework",
    "general",
    "structure",
    "tech",
    "product",
    "project",
    "agent",
    "diagnostic",
    "unlisted",
}


def _precedence(data: dict[str, Any]) -> dict[str, tuple[int, str]]:
    raw = data.get("precedence") or {}
    if not isinstance(raw, dict):
        raise ConfigError("'precedence' must be a mapping")
    entries: dict[str, tuple[int, str]] = {}
    for source, entry in raw.items():
        if isinstance(entry, int) and not isinstance(entry, bool):
            entries[str(source)] = (entry, "unlisted")
        elif isinstance(entry, dict) and isinstance(entry.get("rank"), int):
            entries[str(source)] = (entry["rank"], str(entry.get("class", "unlisted")))
        else:
            raise ConfigError(
                f"precedence entry {source!r} must be an int or {{rank, class}}"
            )
        class_name = entries[str(source)][1]
        if class_name not in _PRECEDENCE_CLASSES:
            raise ConfigError(f"precedence entry {source!r} has unknown class {class_name!r}")
    return entries


def _manifests(data: dict[str, Any]) -> dict[str, dict[str, list[str]]]:
    raw = data.get("manifests") or {}
    if not isinstance(raw, dict):
        raise ConfigError("'manifests' must be a mapping")
    result: dict[str, dict[str, list[str]]] = {}
    for extension, by_type in raw.items():
        if not isinstance(by_type, dict):
            raise ConfigError(f"manifest {extension!r} must map types to lists")
        entry: dict[str, list[str]] = {}
        for type_name, names in by_type.items():
            if not isinstance(names, list):
                raise ConfigError(f"manifest {extension!r}.{type_name} must be a list")
            entry[str(type_name)] = [str(n) for n in names]
        result[str(extension)] = entry
    return result


_TOP_LEVEL_KEYS = {
    "layout",
    "naming",
    "suggestions",
    "max_workers",
    "max_depth",
    "precedence",
    "sensitive_keys",
    "manifests",
}


def config_from_dict(data: dict[str, Any]) -> AgentPortConfig:
    """Build a validated ``AgentPortConfig`` from a plain mapping.

    Raises:
        ConfigError: On unknown keys or wrongly typed values.
    """
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    sensitive = data.get("sensitive_keys") or []
    if not isinstance(sensitive, list) or not all(isinstance(k, str) for k in sensitive):
        raise ConfigError("'sensitive_keys' must be a list of strings")

    suggestions = _section(data, "suggestions", SuggestionSettings)
    if suggestions.limit < 1 or not 0.0 <= suggestions.min_confidence < 1.0:
        raise ConfigError("suggestions.limit must be >= 1 and min_confidence in [0, 1)")

    return AgentPortConfig(
        layout=_section(data, "layout", ScopeLayout),
        naming=_section(data, "naming", NamingConventions),
        suggestions=suggestions,
        max_workers=_positive_int(data, "max_workers", 1),
        max_depth=_positive_int(data, "max_depth", 8),
        precedence=_precedence(data),
        sensitive_keys=tuple(sensitive),
        manifests=_manifests(data),
    )


def load_config(path: Path | None = None, root: Path | None = None) -> AgentPortConfig:
    """Load configuration from *path*, or from ``<root>/agentport.yaml``.

    Returns the default configuration when no file is given or found.

    Raises:
        ConfigError: If the file cannot be read or is invalid.
    """
    if path is None and root is not None:
        candidate = root / CONFIG_FILENAME
        path = candidate if candidate.is_file() else None
    if path is None:
        return AgentPortConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping")

    logger.debug("Loaded configuration from %s", path)
    return config_from_dict(data)
