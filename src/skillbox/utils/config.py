"""Configuration management for skillbox."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

if TYPE_CHECKING:
    from skillbox.skills.models import SkillRoot

DEFAULT_WORKSPACE = Path.home() / ".skillbox"


# ============================================================================
# Configuration Models
# ============================================================================


class ScriptSettings(BaseModel):
    """Policy applied when running skill scripts."""

    allowed_interpreters: list[str] = Field(
        default_factory=lambda: ["python3", "bash", "node"]
    )
    script_timeout: float = Field(default=300.0, gt=0)  # seconds
    require_script_approval: bool = True

    @field_validator("allowed_interpreters")
    @classmethod
    def interpreters_must_be_named(cls, v: list[str]) -> list[str]:
        names = [name.strip() for name in v]
        if any(not name for name in names):
            raise ValueError("allowed_interpreters entries must be non-empty")
        return names


class ApiConfig(BaseModel):
    """HTTP API configuration."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config(BaseModel):
    """
    Main configuration for skillbox.

    Configuration is loaded from the workspace directory (~/.skillbox/):
    1. config.user.yaml - User configuration
    2. config.runtime.yaml - Runtime state (optional, overrides user)

    Every field has a default, so a workspace without config files is valid.
    """

    workspace: Path
    skills_path: Path = Field(default=Path("skills"))
    project_skills_path: Path | None = None
    logging_path: Path = Field(default=Path(".logs"))
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    state_path: Path = Field(default=Path("state.json"))
    scripts: ScriptSettings = Field(default_factory=ScriptSettings)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @model_validator(mode="after")
    def resolve_paths(self) -> "Config":
        """Resolve relative paths to absolute using workspace."""
        for field_name in ("skills_path", "logging_path", "state_path"):
            path = getattr(self, field_name)
            if path.is_absolute():
                raise ValueError(f"{field_name} must be relative, got: {path}")
            setattr(self, field_name, self.workspace / path)

        # Project skills live outside the workspace, next to the code
        if self.project_skills_path is not None:
            self.project_skills_path = self.project_skills_path.expanduser().absolute()
        return self

    def skill_roots(self) -> list["SkillRoot"]:
        """User root first, then project root (project skills shadow user ones)."""
        from skillbox.skills.models import SkillRoot

        roots = [SkillRoot(path=self.skills_path, location="user")]
        if self.project_skills_path is not None:
            roots.append(SkillRoot(path=self.project_skills_path, location="project"))
        return roots

    @classmethod
    def load(cls, workspace_dir: Path) -> "Config":
        """
        Load configuration from the workspace directory.

        Args:
            workspace_dir: Path to workspace directory

        Returns:
            Config instance with all settings loaded and validated

        Raises:
            ValidationError: If configuration is invalid
        """
        config_data: dict = {"workspace": workspace_dir}

        user_config = workspace_dir / "config.user.yaml"
        runtime_config = workspace_dir / "config.runtime.yaml"

        if user_config.exists():
            with open(user_config) as f:
                user_data = yaml.safe_load(f) or {}
            config_data = cls._deep_merge(config_data, user_data)

        # Deep merge runtime config (overrides user)
        if runtime_config.exists():
            with open(runtime_config) as f:
                runtime_data = yaml.safe_load(f) or {}
            config_data = cls._deep_merge(config_data, runtime_data)

        return cls.model_validate(config_data)

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """
        Deep merge override dict into base dict.

        Args:
            base: Base dictionary
            override: Override dictionary (takes precedence)

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
