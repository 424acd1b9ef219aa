"""Custom exceptions for skillbox."""


class SkillNotFoundError(Exception):
    """Raised when a skill id is not among the discovered skills."""

    def __init__(self, skill_id: str):
        super().__init__(f"Skill not found: {skill_id}")
        self.skill_id = skill_id
