"""
Billing integration.

Subscriptions live in the payment provider. Each subscription carries its
plan name and the number of registrations consumed in the current period as
metadata (``planName``, ``registrationsUsed``).
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import stripe
import structlog

from ..config import Settings
from ..errors import BillingError, ConfigurationError, ValidationError
from .plans import CheckoutSession, PlanTier, SubscriptionRecord, parse_plan

logger = structlog.get_logger(__name__)

# Used when the provider returns no usable period end
FALLBACK_PERIOD = timedelta(days=30)


class Billing(ABC):
    """Abstract base class for the subscription/payment system."""

    @abstractmethod
    async def get_active_subscription(self, email: str) -> Optional[SubscriptionRecord]:
        """Return the subscriber's active subscription, or None."""
        pass

    @abstractmethod
    async def increment_usage(self, subscription_id: str) -> int:
        """Add one consumed registration and return the new count."""
        pass

    @abstractmethod
    async def create_checkout_session(
        self, plan: PlanTier, is_yearly: bool, email: str
    ) -> CheckoutSession:
        pass


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a provider object or a plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    try:
        return obj[name]
    except (KeyError, TypeError):
        return getattr(obj, name, default)


def _period_end(subscription: Any) -> datetime:
    raw = _field(subscription, "current_period_end")
    if raw is None:
        # Newer API versions move the period onto subscription items
        items = _field(_field(subscription, "items"), "data") or []
        if items:
            raw = _field(items[0], "current_period_end")

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass

    logger.warning("Invalid subscription period end", value=raw)
    return datetime.now(timezone.utc) + FALLBACK_PERIOD


def _usage(metadata: Any) -> int:
    try:
        return max(int(_field(metadata, "registrationsUsed") or 0), 0)
    except (TypeError, ValueError):
        return 0


class StripeBilling(Billing):
    """Billing backed by Stripe subscriptions."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[Any] = None,
    ):
        self.settings = settings
        self._client = client
        self._usage_locks: Dict[str, asyncio.Lock] = {}

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.settings.stripe_secret_key:
                raise ConfigurationError("STRIPE_SECRET_KEY no está configurada")
            self._client = stripe.StripeClient(self.settings.stripe_secret_key)
        return self._client

    async def _call(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except stripe.StripeError as e:
            logger.error("Stripe request failed", error=str(e))
            raise BillingError(getattr(e, "user_message", None) or str(e)) from e

    async def _find_active(self, email: str) -> Optional[Any]:
        customers = await self._call(
            self.client.customers.list, params={"email": email, "limit": 1}
        )
        customer_list = _field(customers, "data") or []
        if not customer_list:
            return None

        subscriptions = await self._call(
            self.client.subscriptions.list,
            params={
                "customer": _field(customer_list[0], "id"),
                "status": "active",
                "limit": 1,
            },
        )
        subscription_list = _field(subscriptions, "data") or []
        return subscription_list[0] if subscription_list else None

    async def get_active_subscription(self, email: str) -> Optional[SubscriptionRecord]:
        subscription = await self._find_active(email)
        if subscription is None:
            return None

        metadata = _field(subscription, "metadata")
        plan_name = _field(metadata, "planName")
        plan = parse_plan(plan_name)
        if plan is None:
            logger.warning(
                "Subscription has no known planName",
                subscription_id=_field(subscription, "id"),
                plan_name=plan_name,
            )

        return SubscriptionRecord(
            id=_field(subscription, "id"),
            plan=plan,
            status=_field(subscription, "status") or "active",
            current_period_end=_period_end(subscription),
            registrations_used=_usage(metadata),
        )

    async def increment_usage(self, subscription_id: str) -> int:
        lock = self._usage_locks.setdefault(subscription_id, asyncio.Lock())
        async with lock:
            # Re-read so the write is based on the current counter, not the
            # value seen during the entitlement check.
            subscription = await self._call(
                self.client.subscriptions.retrieve, subscription_id
            )
            used = _usage(_field(subscription, "metadata")) + 1
            await self._call(
                self.client.subscriptions.update,
                subscription_id,
                params={"metadata": {"registrationsUsed": str(used)}},
            )
        return used

    async def create_checkout_session(
        self, plan: PlanTier, is_yearly: bool, email: str
    ) -> CheckoutSession:
        if not email:
            raise ValidationError("Email es requerido")

        period = "YEARLY" if is_yearly else "MONTHLY"
        price_id = self.settings.stripe_price_id(plan.value, is_yearly)
        if not price_id or "_id" in price_id:
            raise ConfigurationError(
                f"Price ID para el plan {plan.value} "
                f"({'anual' if is_yearly else 'mensual'}) no está configurado. "
                f"Por favor, configura STRIPE_PRICE_{plan.value}_{period}"
            )

        public_url = self.settings.public_url.rstrip("/")
        plan_metadata = {"planName": plan.value, "isYearly": str(is_yearly).lower()}
        session = await self._call(
            self.client.checkout.sessions.create,
            params={
                "mode": "subscription",
                "payment_method_types": ["card"],
                "line_items": [{"price": price_id, "quantity": 1}],
                "customer_email": email,
                "success_url": f"{public_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
                "cancel_url": f"{public_url}/?canceled=true",
                "metadata": plan_metadata,
                "subscription_data": {
                    "metadata": {**plan_metadata, "registrationsUsed": "0"},
                },
            },
        )

        logger.info("Checkout session created", session_id=_field(session, "id"), plan=plan.value)
        return CheckoutSession(session_id=_field(session, "id"), url=_field(session, "url"))
