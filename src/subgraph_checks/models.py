from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Immutable model that reads and writes the orchestrator's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# --- Inbound check event ---


class SubgraphRef(_WireModel):
    name: str
    hash: str


class SchemaRef(_WireModel):
    hash: str
    subgraphs: list[SubgraphRef] | None = None


class GitContext(_WireModel):
    branch: str | None = None
    commit: str | None = None
    committer: str | None = None
    message: str | None = None
    remote_url: str | None = None


class CheckStep(_WireModel):
    task_id: str
    graph_id: str
    graph_variant: str
    workflow_id: str
    git_context: GitContext | None = None


class CheckEvent(_WireModel):
    check_step: CheckStep
    base_schema: SchemaRef
    proposed_schema: SchemaRef
    git_context: GitContext | None = None

    @property
    def task_id(self) -> str:
        return self.check_step.task_id

    @property
    def graph_id(self) -> str:
        return self.check_step.graph_id

    @property
    def graph_variant(self) -> str:
        return self.check_step.graph_variant

    @property
    def workflow_id(self) -> str:
        return self.check_step.workflow_id

    @property
    def branch(self) -> str | None:
        """The proposed change's git branch, from the check step or the event."""
        for context in (self.check_step.git_context, self.git_context):
            if context is not None and context.branch:
                return context.branch
        return None


class SourceDocument(_WireModel):
    hash: str
    source: str | None = None


# --- Check results ---


class ViolationLevel(StrEnum):
    ERROR = "ERROR"
    WARNING = "WARNING"


class CheckStatus(StrEnum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class Coordinate(_WireModel):
    line: int
    column: int
    byte_offset: int


class SourceLocation(_WireModel):
    subgraph_name: str | None = None
    start: Coordinate
    end: Coordinate


class Violation(_WireModel):
    level: ViolationLevel
    message: str
    rule: str
    source_locations: list[SourceLocation] = Field(default_factory=list)


class CheckResult(_WireModel):
    task_id: str
    workflow_id: str
    status: CheckStatus
    violations: list[Violation] = Field(default_factory=list)


class CallbackOutcome(_WireModel):
    """What the orchestrator answered to a check callback."""

    typename: str
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.typename == "CustomCheckResult"
