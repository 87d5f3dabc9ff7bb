"""Canonical records shared by every source adapter.

Sources disagree on almost everything (ids, pay units, what a "client" is), so
adapters normalize into `Listing` and the pipeline only ever sees that shape.
`Opportunity` is a scored listing, `HuntLog` is the audit row of one run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


PayType = Literal["hourly", "fixed", "annual"]
OpportunityStatus = Literal["new", "reviewing", "applied", "rejected", "accepted"]
HuntStatus = Literal["completed", "failed", "cancelled"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SkillEvidence(BaseModel):
    source: str                 # e.g. "github", "linkedin", "manual"
    proficiency: int = Field(ge=1, le=10)
    detail: str = ""


class Skill(BaseModel):
    name: str
    proficiency: int = Field(ge=1, le=10)
    category: str = "general"
    market_demand: float = Field(default=0.5, ge=0.0, le=1.0)
    avg_hourly_rate: Optional[float] = None
    evidence: List[SkillEvidence] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("skill name must not be empty")
        return v

    @property
    def key(self) -> str:
        return self.name.lower()


class ClientInfo(BaseModel):
    """Who is paying: a marketplace client, an employer or a startup."""

    name: Optional[str] = None
    rating: Optional[float] = None
    payment_verified: Optional[bool] = None
    total_spent: Optional[float] = None
    hire_rate: Optional[float] = None
    projects_completed: Optional[int] = None
    location: Optional[str] = None
    member_since: Optional[str] = None

    # startup boards
    stage: Optional[str] = None
    funding: Optional[float] = None
    size: Optional[str] = None
    investors: List[str] = Field(default_factory=list)


class Listing(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: str
    external_id: str
    url: str
    title: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)

    pay_min: Optional[float] = None
    pay_max: Optional[float] = None
    pay_type: PayType = "hourly"

    client_info: ClientInfo = Field(default_factory=ClientInfo)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    discovered_at: datetime = Field(default_factory=utcnow)
    expires_at: Optional[datetime] = None

    def to_opportunity(self, match_score: float) -> "Opportunity":
        return Opportunity(**self.model_dump(), match_score=match_score)


class Opportunity(Listing):
    match_score: float = Field(ge=0.0, le=1.0)
    status: OpportunityStatus = "new"


class HuntLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    hunt_name: str
    started_at: datetime
    completed_at: datetime
    opportunities_found: int = 0
    status: HuntStatus
    error_message: Optional[str] = None
    execution_time_ms: int = 0
