"""Pydantic models for estate readiness scoring and plan diffing."""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["low", "medium", "high"]
StepKind = Literal["missing", "risk", "general"]
Confidence = Literal["low", "medium", "high"]
ActionModule = Literal["documents", "tasks", "properties", "contacts", "invoices"]


class WireModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Readiness Scoring Types
# =============================================================================


class ReadinessSignal(WireModel):
    """One gap ("missing") or concern ("at risk") surfaced to the user."""

    key: str = Field(..., description="Stable identifier for estate + category")
    label: str = Field(..., description="Human-readable text")
    severity: Severity = Field(..., description="low | medium | high")
    reason: Optional[str] = Field(None, description="Short explanation shown under the label")
    count: Optional[int] = Field(None, ge=1, description="Aggregated count, when applicable")


class CategoryScore(WireModel):
    """Score for a single readiness category."""

    score: int = Field(..., ge=0, description="Points earned")
    max: int = Field(..., ge=0, description="Fixed category weight")


class ReadinessBreakdown(WireModel):
    documents: CategoryScore
    tasks: CategoryScore
    properties: CategoryScore
    contacts: CategoryScore
    finances: CategoryScore


class ReadinessRaw(WireModel):
    """Raw counters behind the score."""

    total_documents: int = 0
    present_document_subjects: list[str] = Field(default_factory=list)
    missing_document_subjects: list[str] = Field(default_factory=list)
    total_tasks: int = 0
    completed_tasks: int = 0
    incomplete_tasks: int = 0
    overdue_tasks: int = 0
    total_properties: int = 0
    total_contacts: int = 0
    total_invoices: int = 0
    total_expenses: int = 0


class ReadinessSignals(WireModel):
    missing: list[ReadinessSignal] = Field(default_factory=list)
    at_risk: list[ReadinessSignal] = Field(default_factory=list)


class ReadinessResult(WireModel):
    """Complete readiness assessment for an estate. Never persisted."""

    score: int = Field(..., ge=0, le=100, description="Sum of category scores, capped at 100")
    breakdown: ReadinessBreakdown
    raw: ReadinessRaw
    signals: ReadinessSignals


class CategoryResult(BaseModel):
    """Intermediate output of one category scorer."""

    score: int
    raw: dict[str, Any] = Field(default_factory=dict)
    missing: list[ReadinessSignal] = Field(default_factory=list)
    at_risk: list[ReadinessSignal] = Field(default_factory=list)


class TaskStatus(str, Enum):
    """Completion classification of a single task record."""

    COMPLETED = "completed"
    OVERDUE = "overdue"
    PENDING = "pending"


# =============================================================================
# Plan Types
# =============================================================================


class PlanStep(WireModel):
    """One prioritized next step. `id` is stable for the same underlying issue."""

    id: str
    title: str
    details: Optional[str] = None
    href: str
    kind: StepKind
    severity: Severity
    count: Optional[int] = None


class PlanMeta(WireModel):
    """Cache metadata stored alongside a generated plan."""

    input_hash: str
    signals: ReadinessSignals


class ReadinessPlan(WireModel):
    estate_id: str
    generated_at: str = Field(..., description="ISO-8601 timestamp")
    generator: str = Field(..., description="Generation strategy, e.g. heuristic-v1")
    steps: list[PlanStep] = Field(default_factory=list)
    meta: Optional[PlanMeta] = None


class PlanStepSnapshot(WireModel):
    """Lighter projection of a plan step retained for diffing."""

    id: str
    title: str
    severity: Severity
    href: Optional[str] = None
    kind: Optional[StepKind] = None


class PlanSnapshot(WireModel):
    estate_id: str
    generated_at: str
    steps: list[PlanStepSnapshot] = Field(default_factory=list)


class SeverityChange(WireModel):
    id: str
    title: str
    from_severity: Severity = Field(..., alias="from")
    to: Severity
    href: Optional[str] = None


class PlanDiff(WireModel):
    has_previous: bool
    added: list[PlanStepSnapshot] = Field(default_factory=list)
    removed: list[PlanStepSnapshot] = Field(default_factory=list)
    severity_changed: list[SeverityChange] = Field(default_factory=list)
    total_changes: int = 0


# =============================================================================
# Impact & Ranking Types
# =============================================================================


class ImpactEstimate(WireModel):
    estimated_score_delta: int = Field(..., ge=1, le=15)
    affected_signals: Optional[int] = None
    confidence: Confidence


class RankedPlanStep(WireModel):
    step: PlanStep
    module: ActionModule
    priority: int
    is_new: bool = False
    severity_increased: bool = False
    impact: ImpactEstimate


# =============================================================================
# Constants
# =============================================================================

# Category max points - must sum to 100
CATEGORY_MAX_POINTS = {
    "documents": 30,
    "tasks": 25,
    "properties": 15,
    "contacts": 15,
    "finances": 15,
}

MAX_READINESS_SCORE = 100

SEVERITY_RANK = {"high": 3, "medium": 2, "low": 1}

KIND_RANK = {"missing": 2, "risk": 1, "general": 0}

HEURISTIC_GENERATOR = "heuristic-v1"


def severity_rank(severity: Optional[str]) -> int:
    """Numeric rank for a severity; unknown values rank lowest (0)."""
    return SEVERITY_RANK.get(severity or "", 0)


def kind_rank(kind: Optional[str]) -> int:
    return KIND_RANK.get(kind or "", 0)
