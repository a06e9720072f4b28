from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "bookrender.yml"


class PageLayout(str, Enum):
    """How converted documents are written to disk."""

    PAGE = "page"
    FRAGMENT = "fragment"


class CodeCheckConfig(BaseModel):
    """Syntax checking applied to fenced code samples before rendering."""

    enabled: bool = Field(default=True, description="Toggle code sample checking.")
    languages: list[str] = Field(
        default_factory=lambda: ["python"],
        description="Languages checked with the interpreter's own parser.",
    )
    commands: dict[str, list[str]] = Field(
        default_factory=dict,
        description=(
            "Mapping from fence language to an external checker command. The sample "
            "is written to a temporary file whose path is appended to the command."
        ),
    )

    @field_validator("languages", mode="before")
    def _normalize_languages(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip().lower() for item in value if str(item).strip()]

    @field_validator("commands", mode="before")
    def _normalize_commands(cls, value: Any) -> dict[str, list[str]]:
        if not value:
            return {}
        if not isinstance(value, dict):
            raise ValueError("code_checks.commands must be a mapping of language to command.")
        commands: dict[str, list[str]] = {}
        for language, command in value.items():
            if isinstance(command, str):
                command = command.split()
            if not command:
                raise ValueError(f"Checker command for '{language}' cannot be empty.")
            commands[str(language).strip().lower()] = [str(part) for part in command]
        return commands


class Config(BaseModel):
    title: str | None = Field(
        default=None,
        description="Book title; falls back to the title declared in the manifest.",
    )
    content_dir: Path = Field(default=Path("."))
    manifest: Path = Field(default=Path("config/structure.yml"))
    output_dir: Path = Field(default=Path("site"))
    templates_dir: Path | None = Field(
        default=None,
        description="Optional directory holding a custom page.html template.",
    )
    layout: PageLayout = Field(default=PageLayout.PAGE)
    output_suffix: str = Field(default=".html")
    table_of_contents: bool = Field(
        default=False,
        description="Write an index.html listing the book structure at the output root.",
    )
    code_checks: CodeCheckConfig = Field(default_factory=CodeCheckConfig)

    @field_validator("content_dir", "manifest", "output_dir", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("templates_dir", mode="before")
    def _ensure_optional_path(cls, value: Any) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @field_validator("output_suffix")
    def _normalize_suffix(cls, value: str) -> str:
        text = value.strip()
        if not text:
            return ".html"
        if not text.startswith("."):
            text = f".{text}"
        return text.lower()


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    The ``path`` argument may point to a file (e.g., ``/book/bookrender.yml``) or a
    directory containing that file. All relative paths inside the configuration
    are interpreted relative to the directory holding the config file.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    base_dir: Path
    if candidate.is_dir():
        # A project directory without a config file runs on defaults.
        config_file = candidate / CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    cfg = Config(**data)

    def _abs_required(value: Path) -> Path:
        return value if value.is_absolute() else (base_dir / value).resolve()

    cfg.content_dir = _abs_required(cfg.content_dir)
    cfg.manifest = _abs_required(cfg.manifest)
    cfg.output_dir = _abs_required(cfg.output_dir)
    if cfg.templates_dir is not None:
        cfg.templates_dir = _abs_required(cfg.templates_dir)

    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path} must define a mapping, got {type(data).__name__}")
    return data
