"""
Subscription plans and registration quotas.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlanTier(str, Enum):
    CREADOR = "CREADOR"
    PROFESIONAL = "PROFESIONAL"
    ELITE = "ELITE"


# Registrations allowed per billing period
PLAN_LIMITS: Dict[PlanTier, int] = {
    PlanTier.CREADOR: 4,
    PlanTier.PROFESIONAL: 20,
    PlanTier.ELITE: 100,
}

# Plan assumed when the entitlement check is bypassed
DEV_MODE_PLAN = PlanTier.PROFESIONAL


def parse_plan(value: Optional[str]) -> Optional[PlanTier]:
    """Map a plan name to its tier, or None when unknown."""
    if not value:
        return None
    try:
        return PlanTier(value.strip().upper())
    except ValueError:
        return None


def registrations_limit(plan: Optional[PlanTier]) -> int:
    """Quota for a plan; an unknown plan has no quota."""
    if plan is None:
        return 0
    return PLAN_LIMITS[plan]


class SubscriptionRecord(BaseModel):
    """Active subscription as read from billing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    plan: Optional[PlanTier] = None
    status: str = "active"
    current_period_end: datetime
    registrations_used: int = Field(default=0, ge=0)

    @property
    def registrations_limit(self) -> int:
        return registrations_limit(self.plan)

    @property
    def has_quota(self) -> bool:
        return self.registrations_used < self.registrations_limit

    def to_status_dict(self) -> dict:
        """Status payload; a subscription without a known plan is shown as CREADOR."""
        plan = self.plan or PlanTier.CREADOR
        return {
            "id": self.id,
            "plan": plan.value,
            "status": self.status,
            "currentPeriodEnd": self.current_period_end.isoformat(),
            "registrationsUsed": self.registrations_used,
            "registrationsLimit": registrations_limit(plan),
        }


class CheckoutSession(BaseModel):
    session_id: str
    url: Optional[str] = None
