"""
Stripe webhook event handlers.

Events arrive already signature-verified (see
``StripeBillingProvider.construct_webhook_event``). Each handler feeds the
subscription in the event into the lifecycle manager's single transition.

Key events handled:
- customer.subscription.created: premium if active/trialing, else pending
- customer.subscription.updated: renewals extend expiry; failed payments downgrade
- customer.subscription.deleted: revoke access

Other event types are acknowledged and ignored.

To test locally:
    stripe listen --forward-to localhost:8000/api/v1/billing/webhook/
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from moorings.billing.lifecycle import SubscriptionLifecycleManager
    from moorings.billing.lifecycle import TransitionResult
    from moorings.billing.providers import WebhookEvent

logger = logging.getLogger(__name__)


def handle_subscription_created(
    manager: SubscriptionLifecycleManager,
    event: WebhookEvent,
) -> TransitionResult:
    subscription = event.subscription()
    logger.info(
        "customer.subscription.created: subscription=%s, status=%s",
        subscription.subscription_id,
        subscription.status,
    )
    return manager.apply_provider_subscription(subscription)


def handle_subscription_updated(
    manager: SubscriptionLifecycleManager,
    event: WebhookEvent,
) -> TransitionResult:
    subscription = event.subscription()
    logger.info(
        "customer.subscription.updated: subscription=%s, status=%s, cancel_at_period_end=%s",
        subscription.subscription_id,
        subscription.status,
        subscription.cancel_at_period_end,
    )
    return manager.apply_provider_subscription(subscription)


def handle_subscription_deleted(
    manager: SubscriptionLifecycleManager,
    event: WebhookEvent,
) -> TransitionResult:
    subscription = event.subscription()
    logger.info(
        "customer.subscription.deleted: subscription=%s, customer=%s",
        subscription.subscription_id,
        subscription.customer_id,
    )
    return manager.apply_provider_subscription(subscription, deleted=True)


EVENT_HANDLERS: dict[str, Callable] = {
    "customer.subscription.created": handle_subscription_created,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
}


def dispatch_event(
    manager: SubscriptionLifecycleManager,
    event: WebhookEvent,
) -> TransitionResult:
    from moorings.billing.lifecycle import TransitionResult

    handler = EVENT_HANDLERS.get(event.type)
    if handler is None:
        logger.info("Ignoring unhandled Stripe event %s (%s)", event.type, event.id)
        return TransitionResult(applied=False, reason="unhandled_event")
    return handler(manager, event)
