from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

Level = Literal["L1", "L2", "L3", "L4", "L5"]
LEVELS: tuple = ("L1", "L2", "L3", "L4", "L5")

Pillar = Literal[
    "docs",
    "style",
    "build",
    "test",
    "security",
    "observability",
    "env",
    "task_discovery",
    "product",
]
PILLARS: tuple = (
    "docs",
    "style",
    "build",
    "test",
    "security",
    "observability",
    "env",
    "task_discovery",
    "product",
)

CHECK_TYPES = (
    "file_exists",
    "path_glob",
    "any_of",
    "github_workflow_event",
    "github_action_present",
    "build_command_detect",
    "dependency_detect",
)


def level_rank(level: str) -> int:
    """Position of a level in the fixed L1..L5 order. Raises ValueError for unknown labels."""
    return LEVELS.index(level)


def next_level(level: Optional[str]) -> Optional[str]:
    """Level above `level` (None -> L1), or None when already at the top."""
    if level is None:
        return LEVELS[0]
    idx = level_rank(level) + 1
    return LEVELS[idx] if idx < len(LEVELS) else None


def coerce_check_payload(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrite a raw check mapping so it validates against CheckDefinition:
    unknown `type` values become `unsupported` checks that fail at evaluation time
    instead of rejecting the whole profile.
    """
    if not isinstance(raw, dict):
        return raw
    data = dict(raw)
    kind = data.get("type")
    if kind not in CHECK_TYPES and kind != "unsupported":
        data["declared_type"] = str(kind)
        data["type"] = "unsupported"
    return data


class BaseCheck(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    description: str = ""
    pillar: Pillar
    level: Level
    required: bool = False
    suggestions: List[str] = Field(default_factory=list)
    template: Optional[str] = None  # remediation template name, e.g. AGENTS.md


class FileExistsCheck(BaseCheck):
    type: Literal["file_exists"] = "file_exists"
    path: str
    content_regex: Optional[str] = None
    case_sensitive: bool = True


class PathGlobCheck(BaseCheck):
    type: Literal["path_glob"] = "path_glob"
    pattern: str
    min_matches: int = Field(default=1, ge=0)
    max_matches: Optional[int] = Field(default=None, ge=0)


class GitHubWorkflowEventCheck(BaseCheck):
    type: Literal["github_workflow_event"] = "github_workflow_event"
    event: str


class GitHubActionPresentCheck(BaseCheck):
    type: Literal["github_action_present"] = "github_action_present"
    action: str


class BuildCommandDetectCheck(BaseCheck):
    type: Literal["build_command_detect"] = "build_command_detect"
    commands: List[str] = Field(min_length=1)


class DependencyDetectCheck(BaseCheck):
    type: Literal["dependency_detect"] = "dependency_detect"
    packages: List[str] = Field(min_length=1)


class UnsupportedCheck(BaseCheck):
    """Placeholder for a rubric entry whose type this engine does not know."""
    type: Literal["unsupported"] = "unsupported"
    declared_type: str = "unknown"


class AnyOfCheck(BaseCheck):
    type: Literal["any_of"] = "any_of"
    checks: List["CheckDefinition"] = Field(min_length=1)
    min_pass: int = Field(default=1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _inherit_parent_fields(cls, data: Any) -> Any:
        # Nested entries default to the parent's pillar/level and get a derived id.
        if not isinstance(data, dict):
            return data
        nested = data.get("checks")
        if not isinstance(nested, list):
            return data
        parent_id = data.get("id", "any_of")
        filled = []
        for i, child in enumerate(nested):
            if isinstance(child, dict):
                child = coerce_check_payload(child)
                child.setdefault("pillar", data.get("pillar"))
                child.setdefault("level", data.get("level"))
                child.setdefault("id", f"{parent_id}.{i}")
                child.setdefault("name", child["id"])
            filled.append(child)
        return {**data, "checks": filled}


CheckDefinition = Annotated[
    Union[
        FileExistsCheck,
        PathGlobCheck,
        AnyOfCheck,
        GitHubWorkflowEventCheck,
        GitHubActionPresentCheck,
        BuildCommandDetectCheck,
        DependencyDetectCheck,
        UnsupportedCheck,
    ],
    Field(discriminator="type"),
]

AnyOfCheck.model_rebuild()

_CHECK_ADAPTER: TypeAdapter = TypeAdapter(CheckDefinition)


def parse_check(raw: Dict[str, Any]) -> BaseCheck:
    """Validate one raw mapping into its concrete check model."""
    return _CHECK_ADAPTER.validate_python(coerce_check_payload(raw))


class CheckResult(BaseModel):
    """One evaluated fact: a check definition's pass/fail outcome against a snapshot."""

    check_id: str
    check_name: str
    pillar: Pillar
    level: Level
    required: bool
    passed: bool
    message: str = ""
    matched_files: Optional[List[str]] = None
    details: Optional[Dict[str, Any]] = None
    suggestions: Optional[List[str]] = None
