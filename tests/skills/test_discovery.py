"""Tests for SkillDiscovery."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from skillbox.skills.discovery import SkillDiscovery
from skillbox.skills.models import SkillRoot


@pytest.fixture
def user_root(tmp_path: Path) -> Path:
    root = tmp_path / "user-skills"
    root.mkdir()
    return root


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project-skills"
    root.mkdir()
    return root


def roots_for(user_root: Path, project_root: Path | None = None) -> list[SkillRoot]:
    roots = [SkillRoot(path=user_root, location="user")]
    if project_root is not None:
        roots.append(SkillRoot(path=project_root, location="project"))
    return roots


class TestSkillDiscoveryBundles:
    def test_discovers_skill_with_metadata(self, user_root, make_skill):
        """A SKILL.md bundle becomes a Skill with front matter and body."""
        skill_dir = make_skill(
            user_root,
            "test-skill",
            frontmatter="name: Test Skill\ndescription: A test skill\n",
            body="# Test Skill\n\nThis is the skill content.\n",
        )

        result = SkillDiscovery().discover(roots_for(user_root))

        assert result.errors == []
        assert len(result.skills) == 1
        skill = result.skills[0]
        assert skill.id == "test-skill"
        assert skill.metadata.name == "Test Skill"
        assert skill.metadata.description == "A test skill"
        assert skill.content == "# Test Skill\n\nThis is the skill content."
        assert skill.location == "user"
        assert skill.folder_path == skill_dir.resolve()
        assert skill.file_path == skill_dir.resolve() / "SKILL.md"
        assert skill.scripts == []
        assert skill.references == []

    def test_missing_fields_fall_back_to_folder_name(self, user_root, make_skill):
        make_skill(user_root, "bare-skill", frontmatter="version: 1\n")

        result = SkillDiscovery().discover(roots_for(user_root))

        skill = result.skills[0]
        assert skill.metadata.name == "bare-skill"
        assert skill.metadata.description == ""

    def test_manifest_without_front_matter(self, user_root):
        skill_dir = user_root / "plain"
        skill_dir.mkdir()
        (skill_dir / "SKILL.md").write_text("Just instructions.\n")

        result = SkillDiscovery().discover(roots_for(user_root))

        assert result.errors == []
        assert result.skills[0].metadata.name == "plain"
        assert result.skills[0].content == "Just instructions."

    def test_directories_without_manifest_are_ignored(self, user_root, make_skill):
        make_skill(user_root, "real-skill")
        (user_root / "not-a-skill").mkdir()
        (user_root / "stray-file.md").write_text("hello")

        result = SkillDiscovery().discover(roots_for(user_root))

        assert [s.id for s in result.skills] == ["real-skill"]
        assert result.errors == []

    def test_missing_root_is_skipped(self, tmp_path, user_root, make_skill):
        make_skill(user_root, "real-skill")
        roots = [
            SkillRoot(path=tmp_path / "does-not-exist", location="project"),
            SkillRoot(path=user_root, location="user"),
        ]

        result = SkillDiscovery().discover(roots)

        assert [s.id for s in result.skills] == ["real-skill"]
        assert result.errors == []


class TestSkillDiscoveryPartialFailure:
    def test_malformed_bundle_does_not_abort_scan(self, user_root, make_skill):
        """A broken bundle is reported and its siblings still load."""
        make_skill(user_root, "a-good-skill")
        broken_dir = make_skill(
            user_root, "b-broken-skill", frontmatter="name: [unclosed\n"
        )
        make_skill(user_root, "c-good-skill")

        result = SkillDiscovery().discover(roots_for(user_root))

        assert [s.id for s in result.skills] == ["a-good-skill", "c-good-skill"]
        assert len(result.errors) == 1
        assert result.errors[0].path == broken_dir.resolve()
        assert "b-broken-skill" in result.errors[0].message

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permission bits are ignored for root",
    )
    def test_unreadable_bundle_does_not_abort_scan(self, user_root, make_skill):
        make_skill(user_root, "aaa")
        locked_dir = make_skill(user_root, "locked")
        make_skill(user_root, "zzz")
        locked_dir.chmod(0)
        try:
            result = SkillDiscovery().discover(roots_for(user_root))
        finally:
            locked_dir.chmod(0o755)

        assert [s.id for s in result.skills] == ["aaa", "zzz"]
        assert [e.path for e in result.errors] == [locked_dir.resolve()]

    def test_manifest_check_error_is_reported(self, user_root, make_skill):
        make_skill(user_root, "aaa")
        locked_dir = make_skill(user_root, "locked")
        make_skill(user_root, "zzz")
        real_stat = Path.stat

        def flaky_stat(path, *args, **kwargs):
            if path.parent.name == "locked" and path.name == "SKILL.md":
                raise PermissionError(13, "Permission denied", str(path))
            return real_stat(path, *args, **kwargs)

        with patch.object(Path, "stat", flaky_stat):
            result = SkillDiscovery().discover(roots_for(user_root))

        assert [s.id for s in result.skills] == ["aaa", "zzz"]
        assert len(result.errors) == 1
        assert result.errors[0].path == locked_dir.resolve()
        assert "Permission denied" in result.errors[0].message

    def test_non_mapping_front_matter_is_an_error(self, user_root, make_skill):
        make_skill(user_root, "list-skill", frontmatter="- one\n- two\n")

        result = SkillDiscovery().discover(roots_for(user_root))

        assert result.skills == []
        assert len(result.errors) == 1


class TestSkillDiscoveryScripts:
    def test_enumerates_nested_scripts(self, user_root, make_skill):
        skill_dir = make_skill(
            user_root,
            "tools",
            files={
                "scripts/deploy.sh": "echo deploy",
                "scripts/build.js": "console.log('build')",
                "scripts/lib/helper.py": "print('help')",
                "scripts/data.csv": "a,b",
            },
        )

        skill = SkillDiscovery().discover(roots_for(user_root)).skills[0]

        by_path = {script.relative_path: script for script in skill.scripts}
        assert list(by_path) == [
            "scripts/build.js",
            "scripts/data.csv",
            "scripts/deploy.sh",
            "scripts/lib/helper.py",
        ]
        assert by_path["scripts/deploy.sh"].interpreter == "bash"
        assert by_path["scripts/build.js"].interpreter == "node"
        assert by_path["scripts/lib/helper.py"].interpreter == "python3"
        assert by_path["scripts/lib/helper.py"].name == "helper.py"
        # Unmapped extensions are listed but have no interpreter
        assert by_path["scripts/data.csv"].interpreter is None
        assert by_path["scripts/deploy.sh"].absolute_path == (
            skill_dir.resolve() / "scripts" / "deploy.sh"
        )

    def test_script_paths_stay_under_skill_folder(self, user_root, make_skill):
        make_skill(
            user_root,
            "tools",
            files={"scripts/a.py": "", "scripts/nested/deeper/b.sh": ""},
        )

        skill = SkillDiscovery().discover(roots_for(user_root)).skills[0]

        assert skill.scripts
        for script in skill.scripts:
            assert script.absolute_path.is_relative_to(skill.folder_path)
            assert script.absolute_path == skill.folder_path / script.relative_path

    def test_hidden_and_cache_entries_are_skipped(self, user_root, make_skill):
        make_skill(
            user_root,
            "tools",
            files={
                "scripts/run.py": "",
                "scripts/.secret.sh": "",
                "scripts/.hidden/inner.sh": "",
                "scripts/__pycache__/run.cpython-312.pyc": "",
            },
        )

        skill = SkillDiscovery().discover(roots_for(user_root)).skills[0]

        assert [s.relative_path for s in skill.scripts] == ["scripts/run.py"]

    def test_symlink_escaping_skill_folder_is_skipped(
        self, tmp_path, user_root, make_skill
    ):
        outside = tmp_path / "outside.sh"
        outside.write_text("echo outside")
        skill_dir = make_skill(user_root, "tools", files={"scripts/ok.sh": ""})
        (skill_dir / "scripts" / "escape.sh").symlink_to(outside)

        skill = SkillDiscovery().discover(roots_for(user_root)).skills[0]

        assert [s.name for s in skill.scripts] == ["ok.sh"]

    def test_script_descriptions_from_front_matter(self, user_root, make_skill):
        make_skill(
            user_root,
            "tools",
            frontmatter=(
                "name: tools\n"
                "scripts:\n"
                "  deploy.sh: Deploy the app\n"
                "  scripts/lib/check.py: Run checks\n"
            ),
            files={"scripts/deploy.sh": "", "scripts/lib/check.py": ""},
        )

        skill = SkillDiscovery().discover(roots_for(user_root)).skills[0]

        descriptions = {s.name: s.description for s in skill.scripts}
        assert descriptions == {"check.py": "Run checks", "deploy.sh": "Deploy the app"}

    def test_enumerates_references(self, user_root, make_skill):
        skill_dir = make_skill(
            user_root,
            "docs",
            files={"references/guide.md": "# Guide", "references/api/openapi.yaml": ""},
        )

        skill = SkillDiscovery().discover(roots_for(user_root)).skills[0]

        folder = skill_dir.resolve()
        assert skill.references == [
            str(folder / "references" / "api" / "openapi.yaml"),
            str(folder / "references" / "guide.md"),
        ]


class TestSkillDiscoveryRoots:
    def test_location_comes_from_root(self, user_root, project_root, make_skill):
        make_skill(user_root, "mine")
        make_skill(project_root, "ours")

        result = SkillDiscovery().discover(roots_for(user_root, project_root))

        locations = {s.id: s.location for s in result.skills}
        assert locations == {"mine": "user", "ours": "project"}

    def test_project_skill_shadows_user_skill(
        self, user_root, project_root, make_skill
    ):
        make_skill(user_root, "shared", frontmatter="description: user copy\n")
        make_skill(project_root, "shared", frontmatter="description: project copy\n")

        result = SkillDiscovery().discover(roots_for(user_root, project_root))

        assert len(result.skills) == 1
        assert result.skills[0].location == "project"
        assert result.skills[0].metadata.description == "project copy"


class TestSkillDiscoveryCache:
    def test_discover_uses_cache(self, user_root, make_skill):
        discovery = SkillDiscovery()
        roots = roots_for(user_root)
        make_skill(user_root, "first")

        first = discovery.discover(roots)
        make_skill(user_root, "second")
        second = discovery.discover(roots)

        assert second is first
        assert [s.id for s in second.skills] == ["first"]

    def test_refresh_bypasses_cache(self, user_root, make_skill):
        discovery = SkillDiscovery()
        roots = roots_for(user_root)
        make_skill(user_root, "first")
        discovery.discover(roots)

        make_skill(user_root, "second")
        result = discovery.refresh(roots)

        assert [s.id for s in result.skills] == ["first", "second"]
        # The refreshed result replaces the cached one
        assert discovery.discover(roots) is result

    def test_clear_cache(self, user_root, make_skill):
        discovery = SkillDiscovery()
        roots = roots_for(user_root)
        make_skill(user_root, "first")
        discovery.discover(roots)

        make_skill(user_root, "second")
        discovery.clear_cache()

        assert len(discovery.discover(roots).skills) == 2

    def test_cache_is_keyed_by_roots(self, user_root, project_root, make_skill):
        discovery = SkillDiscovery()
        make_skill(user_root, "mine")
        make_skill(project_root, "ours")

        only_user = discovery.discover(roots_for(user_root))
        both = discovery.discover(roots_for(user_root, project_root))

        assert len(only_user.skills) == 1
        assert len(both.skills) == 2
