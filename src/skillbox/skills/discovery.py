"""Skill discovery: scan skill roots for SKILL.md bundles."""

import logging
import stat
from pathlib import Path
from typing import Any, Iterable

from skillbox.skills.interpreter import resolve_interpreter
from skillbox.skills.models import (
    DiscoveryError,
    DiscoveryResult,
    Script,
    Skill,
    SkillLocation,
    SkillMetadata,
    SkillRoot,
)
from skillbox.utils.def_loader import parse_definition

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "SKILL.md"
SCRIPTS_DIR = "scripts"
REFERENCES_DIR = "references"

_SKIPPED_NAMES = {"__pycache__", "node_modules"}


class SkillDiscovery:
    """
    Scan skill roots and build Skill records.

    Each direct subdirectory of a root that contains a SKILL.md is a bundle.
    A bundle that fails to load is reported as a DiscoveryError and the scan
    carries on with its siblings. Results are cached per set of roots.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[SkillRoot, ...], DiscoveryResult] = {}

    def discover(self, roots: Iterable[SkillRoot]) -> DiscoveryResult:
        """
        Return skills found under the given roots, using the cache if possible.

        Args:
            roots: Roots in precedence order; later roots shadow earlier ones
                when two bundles share an id

        Returns:
            DiscoveryResult with the loaded skills and per-bundle errors
        """
        key = tuple(roots)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._scan(key)
        self._cache[key] = result
        return result

    def refresh(self, roots: Iterable[SkillRoot]) -> DiscoveryResult:
        """Rescan the given roots, ignoring any cached result."""
        key = tuple(roots)
        self._cache.pop(key, None)
        return self.discover(key)

    def clear_cache(self) -> None:
        """Drop every cached scan result."""
        self._cache.clear()

    def _scan(self, roots: tuple[SkillRoot, ...]) -> DiscoveryResult:
        skills: dict[str, Skill] = {}
        errors: list[DiscoveryError] = []

        for root in roots:
            root_path = root.path.expanduser().resolve()
            if not root_path.is_dir():
                logger.warning(f"Skills directory not found: {root_path}")
                continue

            try:
                entries = sorted(root_path.iterdir())
            except OSError as e:
                logger.warning(f"Cannot list skills directory {root_path}: {e}")
                errors.append(DiscoveryError(path=root_path, message=str(e)))
                continue

            for skill_dir in entries:
                if skill_dir.name.startswith("."):
                    continue

                manifest = skill_dir / MANIFEST_FILENAME
                try:
                    if not skill_dir.is_dir():
                        continue
                    if not _has_manifest(manifest):
                        logger.debug(f"No {MANIFEST_FILENAME} found in {skill_dir.name}")
                        continue
                    skill = self._load_skill(skill_dir, manifest, root.location)
                except Exception as e:
                    logger.warning(f"Failed to load skill {skill_dir.name}: {e}")
                    errors.append(DiscoveryError(path=skill_dir, message=str(e)))
                    continue

                if skill.id in skills:
                    logger.info(
                        f"Skill '{skill.id}' at {skill_dir} shadows "
                        f"{skills[skill.id].folder_path}"
                    )
                skills[skill.id] = skill

        logger.debug(f"Discovered {len(skills)} skill(s), {len(errors)} error(s)")
        return DiscoveryResult(skills=list(skills.values()), errors=errors)

    def _load_skill(
        self, skill_dir: Path, manifest: Path, location: SkillLocation
    ) -> Skill:
        """Read one bundle. Any exception marks the bundle as failed."""
        content = manifest.read_text(encoding="utf-8")

        def build(def_id: str, frontmatter: dict[str, Any], body: str) -> Skill:
            name = frontmatter.get("name") or def_id
            description = frontmatter.get("description") or ""
            return Skill(
                id=def_id,
                metadata=SkillMetadata(name=str(name), description=str(description)),
                content=body.strip(),
                location=location,
                file_path=manifest,
                folder_path=skill_dir,
                scripts=self._collect_scripts(
                    skill_dir, _script_descriptions(frontmatter)
                ),
                references=self._collect_references(skill_dir),
            )

        return parse_definition(content, skill_dir.name, build)

    def _collect_scripts(
        self, skill_dir: Path, descriptions: dict[str, str]
    ) -> list[Script]:
        scripts = []
        for path in _bundle_files(skill_dir, SCRIPTS_DIR):
            relative_path = path.relative_to(skill_dir).as_posix()
            scripts.append(
                Script(
                    name=path.name,
                    relative_path=relative_path,
                    absolute_path=path,
                    interpreter=resolve_interpreter(path.suffix),
                    description=descriptions.get(relative_path)
                    or descriptions.get(path.name),
                )
            )
        return scripts

    def _collect_references(self, skill_dir: Path) -> list[str]:
        return [str(path) for path in _bundle_files(skill_dir, REFERENCES_DIR)]


def _bundle_files(skill_dir: Path, subdir: str) -> list[Path]:
    """
    List files under skill_dir/subdir recursively, sorted.

    Hidden entries and cache folders are skipped, as is anything whose real
    location is outside the skill folder.
    """
    directory = skill_dir / subdir
    if not directory.is_dir():
        return []

    real_root = skill_dir.resolve()
    files = []
    for path in sorted(directory.rglob("*")):
        parts = path.relative_to(directory).parts
        if any(part.startswith(".") or part in _SKIPPED_NAMES for part in parts):
            continue
        if not path.is_file():
            continue
        if not path.resolve().is_relative_to(real_root):
            logger.warning(f"Skipping {path}: resolves outside {skill_dir}")
            continue
        files.append(path)
    return files


def _has_manifest(manifest: Path) -> bool:
    """True if the manifest is a regular file. Unreadable paths raise OSError."""
    try:
        return stat.S_ISREG(manifest.stat().st_mode)
    except (FileNotFoundError, NotADirectoryError):
        return False


def _script_descriptions(frontmatter: dict[str, Any]) -> dict[str, str]:
    """Read the optional `scripts:` mapping of script name -> description."""
    raw = frontmatter.get("scripts")
    if not isinstance(raw, dict):
        return {}
    return {str(key): str(value) for key, value in raw.items() if value}
