"""Skill registry: discovered skills merged with persisted per-skill state."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, get_args

from pydantic import ValidationError

from skillbox.core.events import EventEmitter
from skillbox.core.exceptions import SkillNotFoundError
from skillbox.core.store import JsonFileStore, MemoryStore, StateStore
from skillbox.skills.discovery import SkillDiscovery
from skillbox.skills.models import (
    DiscoveryError,
    DiscoveryResult,
    InvocationMode,
    Skill,
    SkillRoot,
    SkillsChanged,
    SkillState,
)

if TYPE_CHECKING:
    from skillbox.utils.config import Config

logger = logging.getLogger(__name__)

SKILLS_CHANGED_EVENT = "skills-changed"
STATE_STORE_KEY = "skillStates"


class SkillRegistry:
    """
    Registry of discovered skills and their persisted state.

    State is keyed by skill id and outlives individual discovery scans: every
    initialize/refresh re-attaches stored state to the freshly built Skill
    records and gives unseen ids the default state (enabled, auto).

    Every mutation writes the whole state map to the store and emits one
    SKILLS_CHANGED_EVENT with the resulting snapshot. Mutations and refreshes
    are serialized by a lock and notifications are delivered while it is
    held, so listeners must not await registry mutations directly.
    """

    _instance: "SkillRegistry | None" = None

    @classmethod
    def get_instance(cls, config: "Config | None" = None) -> "SkillRegistry":
        """
        Get the process-wide registry, creating it on first use.

        Args:
            config: Used to build the registry if none exists yet
        """
        if cls._instance is None:
            cls._instance = cls.from_config(config) if config else cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the process-wide registry (for tests)."""
        cls._instance = None

    @staticmethod
    def from_config(config: "Config") -> "SkillRegistry":
        """Create SkillRegistry from config."""
        return SkillRegistry(
            roots=config.skill_roots(),
            store=JsonFileStore.from_config(config),
        )

    def __init__(
        self,
        roots: list[SkillRoot] | None = None,
        store: StateStore | None = None,
        discovery: SkillDiscovery | None = None,
        events: EventEmitter | None = None,
    ):
        self.roots = list(roots or [])
        self.store = store or MemoryStore()
        self.discovery = discovery or SkillDiscovery()
        self.events = events or EventEmitter()

        self._skills: dict[str, Skill] = {}
        self._states: dict[str, SkillState] = {}
        self._errors: list[DiscoveryError] = []
        self._initialized = False
        self._init_task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Discover skills and attach persisted state.

        Concurrent callers share one in-flight initialization. Once it has
        completed, further calls return immediately; after a failure the next
        call starts over.
        """
        if self._initialized:
            return

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())

        task = self._init_task
        try:
            await asyncio.shield(task)
        finally:
            if task.done() and self._init_task is task:
                self._init_task = None

    async def _initialize(self) -> None:
        async with self._lock:
            result = await self._discover()
            persisted = await self._load_states()
            states = self._merge_states(result, persisted)
            await self._persist(states)
            self._commit(result, states)
            self._initialized = True
            logger.info(
                f"Skill registry initialized with {len(self._skills)} skill(s)"
            )
            await self._emit_changed()

    async def refresh(self) -> None:
        """
        Rescan skill roots, keeping the in-memory state map.

        Before initialization this simply initializes, so stored state is
        never overwritten by defaults.
        """
        if not self._initialized:
            await self.initialize()
            return

        async with self._lock:
            self.discovery.clear_cache()
            result = await self._discover()
            states = self._merge_states(result, self._states)
            await self._persist(states)
            self._commit(result, states)
            logger.info(f"Skill registry refreshed: {len(self._skills)} skill(s)")
            await self._emit_changed()

    async def _discover(self) -> DiscoveryResult:
        result = await asyncio.to_thread(self.discovery.discover, self.roots)
        for error in result.errors:
            logger.warning(f"Skipped skill at {error.path}: {error.message}")
        return result

    async def _load_states(self) -> dict[str, SkillState]:
        raw = await self.store.get(STATE_STORE_KEY)
        if not raw:
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring malformed '{STATE_STORE_KEY}' record")
            return {}

        states = {}
        for skill_id, record in raw.items():
            try:
                states[skill_id] = SkillState.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Ignoring invalid state for skill '{skill_id}': {e}")
        return states

    @staticmethod
    def _merge_states(
        result: DiscoveryResult, base: dict[str, SkillState]
    ) -> dict[str, SkillState]:
        """Copy of base with the default state added for unseen ids."""
        states = dict(base)
        for skill in result.skills:
            if skill.id not in states:
                states[skill.id] = SkillState()
        return states

    def _commit(self, result: DiscoveryResult, states: dict[str, SkillState]) -> None:
        self._skills = {skill.id: skill for skill in result.skills}
        self._states = states
        self._errors = list(result.errors)

    async def _persist(self, states: dict[str, SkillState]) -> None:
        records = {skill_id: state.to_record() for skill_id, state in states.items()}
        await self.store.set(STATE_STORE_KEY, records)
        await self.store.save()

    def snapshot(self) -> SkillsChanged:
        """Current skills and states, as carried by change notifications."""
        return SkillsChanged(
            skills=list(self._skills.values()),
            states={
                skill_id: state.model_copy()
                for skill_id, state in self._states.items()
            },
        )

    async def _emit_changed(self) -> None:
        await self.events.emit(SKILLS_CHANGED_EVENT, self.snapshot())

    def on_change(self, listener: Callable[[SkillsChanged], Any]) -> Callable[[], None]:
        """Subscribe to SKILLS_CHANGED_EVENT. Returns an unsubscribe callable."""
        return self.events.subscribe(SKILLS_CHANGED_EVENT, listener)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_skills(self) -> list[Skill]:
        return list(self._skills.values())

    def get_enabled_skills(self) -> list[Skill]:
        return [skill for skill in self._skills.values() if self._state(skill.id).enabled]

    def get_auto_skills(self) -> list[Skill]:
        return [
            skill
            for skill in self.get_enabled_skills()
            if self._state(skill.id).invocation_mode == "auto"
        ]

    def get_manual_skills(self) -> list[Skill]:
        return [
            skill
            for skill in self.get_enabled_skills()
            if self._state(skill.id).invocation_mode == "manual"
        ]

    def get_skill(self, skill_id: str) -> Skill | None:
        return self._skills.get(skill_id)

    def get_skill_by_name(self, name: str) -> Skill | None:
        """Find a skill by its display name, falling back to its id."""
        for skill in self._skills.values():
            if skill.metadata.name == name:
                return skill
        return self._skills.get(name)

    def get_skill_state(self, skill_id: str) -> SkillState | None:
        state = self._states.get(skill_id)
        return state.model_copy() if state else None

    def get_states(self) -> dict[str, SkillState]:
        return {skill_id: state.model_copy() for skill_id, state in self._states.items()}

    def get_skill_content(self, skill_id: str) -> str | None:
        skill = self._skills.get(skill_id)
        return skill.content if skill else None

    def get_skill_scripts(self, skill_id: str) -> list[str]:
        """Absolute paths of the skill's scripts."""
        skill = self._skills.get(skill_id)
        if skill is None:
            return []
        return [str(script.absolute_path) for script in skill.scripts]

    def get_skill_references(self, skill_id: str) -> list[str]:
        skill = self._skills.get(skill_id)
        return list(skill.references) if skill else []

    def get_discovery_errors(self) -> list[DiscoveryError]:
        """Bundles that failed to load during the last scan."""
        return list(self._errors)

    def _state(self, skill_id: str) -> SkillState:
        return self._states.get(skill_id) or SkillState()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def enable_skill(self, skill_id: str) -> SkillState:
        return await self._update_state(
            skill_id, lambda state: state.model_copy(update={"enabled": True})
        )

    async def disable_skill(self, skill_id: str) -> SkillState:
        return await self._update_state(
            skill_id, lambda state: state.model_copy(update={"enabled": False})
        )

    async def toggle_skill(self, skill_id: str) -> SkillState:
        return await self._update_state(
            skill_id,
            lambda state: state.model_copy(update={"enabled": not state.enabled}),
        )

    async def set_invocation_mode(
        self, skill_id: str, mode: InvocationMode
    ) -> SkillState:
        """
        Switch a skill between automatic and manual invocation.

        Raises:
            ValueError: If mode is not "auto" or "manual"
            SkillNotFoundError: If the skill is not discovered
        """
        if mode not in get_args(InvocationMode):
            raise ValueError(f"Invalid invocation mode: {mode}")
        return await self._update_state(
            skill_id, lambda state: state.model_copy(update={"invocation_mode": mode})
        )

    async def record_skill_usage(self, skill_id: str) -> SkillState:
        """Set the skill's last_used timestamp to now (UTC)."""
        now = datetime.now(timezone.utc)
        return await self._update_state(
            skill_id, lambda state: state.model_copy(update={"last_used": now})
        )

    async def _update_state(
        self, skill_id: str, change: Callable[[SkillState], SkillState]
    ) -> SkillState:
        """
        Apply change to one skill's state, persist the map, then notify.

        Raises:
            SkillNotFoundError: If the skill is not discovered; nothing is
                written and no notification is emitted

        If the store write fails the error propagates and the in-memory state
        is left as it was.
        """
        async with self._lock:
            if skill_id not in self._skills:
                raise SkillNotFoundError(skill_id)

            state = change(self._state(skill_id))
            states = {**self._states, skill_id: state}
            await self._persist(states)
            self._states = states
            await self._emit_changed()

        return state.model_copy()


def get_skill_registry(config: "Config | None" = None) -> SkillRegistry:
    """Get the process-wide skill registry."""
    return SkillRegistry.get_instance(config)
