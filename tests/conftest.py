"""Shared test fixtures for skillbox test suite."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from skillbox.core.events import EventEmitter
from skillbox.core.store import MemoryStore
from skillbox.skills.models import DiscoveryResult, Script, Skill, SkillMetadata
from skillbox.skills.registry import SkillRegistry
from skillbox.utils.config import Config


def write_skill(
    root: Path,
    skill_id: str,
    frontmatter: str = "name: {id}\ndescription: A test skill\n",
    body: str = "# Instructions\nDo the thing.\n",
    files: dict[str, str] | None = None,
) -> Path:
    """Create a skill bundle under root and return its folder."""
    skill_dir = root / skill_id
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(
        f"---\n{frontmatter.format(id=skill_id)}---\n\n{body}"
    )
    for relative_path, content in (files or {}).items():
        path = skill_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return skill_dir


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config with workspace pointing to tmp_path."""
    return Config(workspace=tmp_path)


@pytest.fixture
def sample_skill() -> Skill:
    """Skill without scripts."""
    return Skill(
        id="test-skill",
        metadata=SkillMetadata(name="test-skill", description="A test skill"),
        content="# Instructions\nDo the thing.",
        location="user",
        file_path=Path("/path/to/test-skill/SKILL.md"),
        folder_path=Path("/path/to/test-skill"),
    )


@pytest.fixture
def another_skill() -> Skill:
    """Skill with a single bash script and one reference."""
    return Skill(
        id="another-skill",
        metadata=SkillMetadata(name="another-skill", description="Another test skill"),
        content="# More Instructions",
        location="project",
        file_path=Path("/path/to/another-skill/SKILL.md"),
        folder_path=Path("/path/to/another-skill"),
        scripts=[
            Script(
                name="deploy.sh",
                relative_path="scripts/deploy.sh",
                absolute_path=Path("/path/to/another-skill/scripts/deploy.sh"),
                interpreter="bash",
            )
        ],
        references=["/path/to/another-skill/references/README.md"],
    )


@pytest.fixture
def fake_discovery(sample_skill: Skill, another_skill: Skill) -> MagicMock:
    """Discovery double returning the two sample skills."""
    discovery = MagicMock()
    discovery.discover.return_value = DiscoveryResult(
        skills=[sample_skill, another_skill]
    )
    return discovery


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def events() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def registry(
    fake_discovery: MagicMock, memory_store: MemoryStore, events: EventEmitter
) -> SkillRegistry:
    """Uninitialized registry wired to the fake discovery."""
    return SkillRegistry(discovery=fake_discovery, store=memory_store, events=events)


@pytest.fixture(autouse=True)
def reset_registry_singleton():
    SkillRegistry.reset_instance()
    yield
    SkillRegistry.reset_instance()


@pytest.fixture
def make_skill():
    """Factory creating skill bundles on disk: make_skill(root, id, ...)."""
    return write_skill


@pytest.fixture
def anyio_backend() -> str:
    """The code under test is built on asyncio; run anyio tests on it only."""
    return "asyncio"
