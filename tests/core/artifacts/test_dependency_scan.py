"""Tests for ArtifactResolver caching and whole-agent dependency scans."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentport.config import AgentPortConfig
from agentport.core.artifacts import ArtifactReference, ArtifactResolver, ArtifactType
from agentport.core.artifacts.resolver import sub_reference
from agentport.parsers.agent_definition import AgentDefinition
from tests.helpers import CountingFileSystem, write_file


def _agent(agent_id: str, *refs: tuple[ArtifactType, str], extension: str | None = None) -> AgentDefinition:
    return AgentDefinition(
        agent_id=agent_id,
        extension=extension,
        dependencies=[ArtifactReference(t, n) for t, n in refs],
    )


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


class TestResolutionCaching:
    """Tests for cached lookups and cache introspection."""

    def test_second_lookup_touches_no_filesystem(self, project_root: Path) -> None:
        fs = CountingFileSystem()
        resolver = ArtifactResolver(project_root, fs=fs)
        context = resolver.context_for(None)
        first = resolver.resolve(context, ArtifactType.PROCEDURE, "create-story.md")
        calls_after_first = fs.total
        second = resolver.resolve(context, ArtifactType.PROCEDURE, "create-story.md")
        assert second is first
        assert fs.total == calls_after_first

    def test_missing_results_are_cached_too(self, project_root: Path) -> None:
        fs = CountingFileSystem()
        resolver = ArtifactResolver(project_root, fs=fs)
        context = resolver.context_for(None)
        resolver.resolve(context, ArtifactType.PROCEDURE, "ghost")
        calls = fs.total
        resolver.resolve(context, ArtifactType.PROCEDURE, "ghost")
        assert fs.total == calls

    def test_contexts_do_not_share_entries(self, resolver_factory) -> None:
        resolver = resolver_factory()
        base = resolver.resolve(resolver.context_for(None), ArtifactType.PROCEDURE, "create-story")
        ext = resolver.resolve(
            resolver.context_for("game-pack"), ArtifactType.PROCEDURE, "create-story"
        )
        assert base.resolved_path != ext.resolved_path
        assert resolver.get_cache_statistics().size == 2

    def test_statistics_count_hits_and_misses(self, resolver_factory) -> None:
        resolver = resolver_factory()
        context = resolver.context_for(None)
        resolver.resolve(context, ArtifactType.PROCEDURE, "create-story")
        resolver.resolve(context, ArtifactType.PROCEDURE, "create-story")
        resolver.resolve(context, ArtifactType.PROCEDURE, "create-epic")
        stats = resolver.get_cache_statistics()
        assert stats.size == 2
        assert stats.hits == 1
        assert stats.misses == 2

    def test_clear_cache_forces_fresh_lookup(self, project_root: Path) -> None:
        fs = CountingFileSystem()
        resolver = ArtifactResolver(project_root, fs=fs)
        context = resolver.context_for(None)
        resolver.resolve(context, ArtifactType.PROCEDURE, "create-story")
        resolver.clear_cache()
        assert resolver.get_cache_statistics().size == 0
        before = fs.total
        resolver.resolve(context, ArtifactType.PROCEDURE, "create-story")
        assert fs.total > before

    def test_clear_cache_drops_graph(self, resolver_factory, project_root: Path) -> None:
        resolver = resolver_factory()
        resolver.scan_dependencies(_agent("dev", (ArtifactType.PROCEDURE, "create-story")))
        assert resolver.get_cache_statistics().graph_size == 2
        resolver.clear_cache()
        assert resolver.get_cache_statistics().graph_size == 0


class TestResolveMany:
    """Tests for batch resolution."""

    def test_parallel_matches_sequential(self, project_root: Path) -> None:
        refs = [
            ArtifactReference(ArtifactType.PROCEDURE, "create-story"),
            ArtifactReference(ArtifactType.PROCEDURE, "ghost"),
            ArtifactReference(ArtifactType.TEMPLATE, "story-tmpl"),
            ArtifactReference(ArtifactType.UTILITY, "workflow-management"),
            ArtifactReference(ArtifactType.CHECKLIST, "story-dod-checklist"),
        ]
        sequential = ArtifactResolver(project_root)
        parallel = ArtifactResolver(project_root, AgentPortConfig(max_workers=4))
        context = sequential.context_for("game-pack")
        expected = sequential.resolve_many(context, refs)
        actual = parallel.resolve_many(parallel.context_for("game-pack"), refs)
        assert [r.resolved_path for r in actual] == [r.resolved_path for r in expected]
        assert [r.searched_paths for r in actual] == [r.searched_paths for r in expected]
        assert [r.suggestions for r in actual] == [r.suggestions for r in expected]


# ---------------------------------------------------------------------------
# scan_dependencies
# ---------------------------------------------------------------------------


class TestScanDependencies:
    """Tests for full-agent scans."""

    def test_complete_agent(self, resolver_factory) -> None:
        resolver = resolver_factory()
        report = resolver.scan_dependencies(
            _agent(
                "dev",
                (ArtifactType.PROCEDURE, "create-story.md"),
                (ArtifactType.TEMPLATE, "story-tmpl.yaml"),
            )
        )
        assert report.is_complete
        assert report.errors == []
        assert set(report.resolved) == {ArtifactType.PROCEDURE, ArtifactType.TEMPLATE}
        assert report.statistics() == {"total": 2, "resolved": 2, "missing": 0, "cycles": 0}

    def test_missing_dependency_is_reported(self, resolver_factory) -> None:
        resolver = resolver_factory()
        report = resolver.scan_dependencies(
            _agent("dev", (ArtifactType.PROCEDURE, "create-stroy.md"))
        )
        assert not report.is_complete
        missing = report.missing[ArtifactType.PROCEDURE][0]
        assert missing.name == "create-stroy.md"
        assert not missing.implicit
        assert missing.suggestions[0].candidate_name == "create-story.md"
        assert report.errors == ["Missing procedure 'create-stroy.md' (16 paths searched)"]

    def test_skipped_types_become_warnings(self, resolver_factory) -> None:
        resolver = resolver_factory()
        agent = _agent("dev")
        agent.skipped.append(("workflows", "greenfield.yaml"))
        report = resolver.scan_dependencies(agent)
        assert report.skipped == [("workflows", "greenfield.yaml")]
        assert report.warnings == [
            "Skipped 'greenfield.yaml': unknown dependency type 'workflows'"
        ]
        assert report.is_complete

    def test_implicit_manifest_dependencies(self, tmp_path: Path) -> None:
        """An infrastructure agent with nothing on disk misses all five implicit artifacts."""
        resolver = ArtifactResolver(tmp_path)
        report = resolver.scan_dependencies(
            _agent("infra", extension="bmad-infrastructure-devops")
        )
        missing = [m for items in report.missing.values() for m in items]
        assert len(missing) == 5
        assert all(m.implicit for m in missing)
        assert all("implicit" in line for line in report.errors)

    def test_declared_reference_not_repeated_as_implicit(self, tmp_path: Path) -> None:
        resolver = ArtifactResolver(tmp_path)
        report = resolver.scan_dependencies(
            _agent(
                "infra",
                (ArtifactType.DATA_FILE, "bmad-kb"),
                extension="bmad-infrastructure-devops",
            )
        )
        data_missing = report.missing[ArtifactType.DATA_FILE]
        assert [(m.name, m.implicit) for m in data_missing] == [("bmad-kb", False)]
        assert report.statistics()["total"] == 5

    def test_config_manifest_is_used(self, project_root: Path) -> None:
        config = AgentPortConfig(manifests={"game-pack": {"tasks": ["create-epic.md"]}})
        resolver = ArtifactResolver(project_root, config)
        report = resolver.scan_dependencies(_agent("designer", extension="game-pack"))
        assert "create-epic.md" in report.resolved[ArtifactType.PROCEDURE]

    def test_cycle_is_reported_once(self, project_root: Path) -> None:
        tasks = project_root / "bmad-core" / "tasks"
        write_file(tasks / "alpha.md", "# Alpha\nSee [[beta.md]]\n")
        write_file(tasks / "beta.md", "# Beta\nSee [[gamma.md]]\n")
        write_file(tasks / "gamma.md", "# Gamma\nSee [[alpha.md]]\n")
        resolver = ArtifactResolver(project_root)
        report = resolver.scan_dependencies(_agent("dev", (ArtifactType.PROCEDURE, "alpha.md")))
        assert [c.cycle for c in report.cycles] == [
            ("procedure:alpha", "procedure:beta", "procedure:gamma", "procedure:alpha")
        ]
        assert (
            "Circular dependency: procedure:alpha -> procedure:beta -> "
            "procedure:gamma -> procedure:alpha"
        ) in report.warnings
        assert report.is_complete

    def test_diamond_is_not_a_cycle(self, project_root: Path) -> None:
        tasks = project_root / "bmad-core" / "tasks"
        write_file(tasks / "top.md", "[[left.md]] [[right.md]]\n")
        write_file(tasks / "left.md", "[[bottom.md]]\n")
        write_file(tasks / "right.md", "[[bottom.md]]\n")
        write_file(tasks / "bottom.md", "# Bottom\n")
        resolver = ArtifactResolver(project_root)
        report = resolver.scan_dependencies(_agent("dev", (ArtifactType.PROCEDURE, "top")))
        assert report.cycles == []
        assert resolver.get_cache_statistics().graph_size == 5

    def test_self_reference_is_a_cycle(self, project_root: Path) -> None:
        write_file(project_root / "bmad-core" / "tasks" / "loop.md", "{{loop.md}}\n")
        resolver = ArtifactResolver(project_root)
        report = resolver.scan_dependencies(_agent("dev", (ArtifactType.PROCEDURE, "loop")))
        assert [c.cycle for c in report.cycles] == [("procedure:loop", "procedure:loop")]

    def test_same_stem_of_different_types_is_not_a_cycle(self, project_root: Path) -> None:
        write_file(
            project_root / "bmad-core" / "tasks" / "story-dod.md",
            "Finish with [[checklists/story-dod.md]]\n",
        )
        write_file(project_root / "bmad-core" / "checklists" / "story-dod.md", "- [ ] Done\n")
        resolver = ArtifactResolver(project_root)
        report = resolver.scan_dependencies(_agent("dev", (ArtifactType.PROCEDURE, "story-dod")))
        assert report.cycles == []
        assert resolver.get_cache_statistics().graph_size == 3

    def test_ambiguous_references_warn(self, project_root: Path) -> None:
        write_file(
            project_root / "bmad-core" / "tasks" / "mixed.md",
            "[[create-story]] and **create_story.md**\n",
        )
        resolver = ArtifactResolver(project_root)
        report = resolver.scan_dependencies(_agent("dev", (ArtifactType.PROCEDURE, "mixed")))
        assert (
            "Ambiguous references in mixed: 'create-story' and 'create_story.md' "
            "name the same artifact"
        ) in report.warnings

    def test_scan_is_deterministic(self, project_root: Path) -> None:
        tasks = project_root / "bmad-core" / "tasks"
        write_file(tasks / "alpha.md", "[[beta.md]] [[gamma.md]]\n")
        write_file(tasks / "beta.md", "[[alpha.md]]\n")
        write_file(tasks / "gamma.md", "[[alpha.md]]\n")
        agent = _agent("dev", (ArtifactType.PROCEDURE, "alpha"))
        first = ArtifactResolver(project_root).scan_dependencies(agent).to_dict()
        second = ArtifactResolver(project_root, AgentPortConfig(max_workers=4)).scan_dependencies(
            agent
        ).to_dict()
        assert first == second
        assert first["cycles"] == [
            ["procedure:alpha", "procedure:beta", "procedure:alpha"],
            ["procedure:alpha", "procedure:gamma", "procedure:alpha"],
        ]


class TestSubReference:
    """Tests for the type inference of nested references."""

    @pytest.mark.parametrize(
        ("dependency", "expected"),
        [
            ("templates/prd-tmpl.yaml", ArtifactType.TEMPLATE),
            ("checklist/done.md", ArtifactType.CHECKLIST),
            ("prd-tmpl.yaml", ArtifactType.TEMPLATE),
            ("other.md", ArtifactType.PROCEDURE),
            ("bare-name", ArtifactType.PROCEDURE),
            ("unknown-dir/notes.md", ArtifactType.PROCEDURE),
        ],
    )
    def test_type_inference(self, dependency: str, expected: ArtifactType) -> None:
        ref = sub_reference(dependency, ArtifactType.PROCEDURE)
        assert ref.type is expected

    def test_name_drops_directory(self) -> None:
        assert sub_reference("data/kb.md", ArtifactType.UTILITY).name == "kb.md"


@pytest.fixture
def resolver_factory(project_root: Path):
    def make(config: AgentPortConfig | None = None) -> ArtifactResolver:
        return ArtifactResolver(project_root, config)

    return make
