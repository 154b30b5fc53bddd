"""
Billing error taxonomy.

Every error carries a human readable ``detail`` and a stable ``code``. The API
layer maps each class to one HTTP status (see
``moorings.core.api.exceptions``).
"""

from __future__ import annotations


class BillingError(Exception):
    """Base exception for billing-related errors."""

    def __init__(self, detail: str, code: str = "billing_error"):
        self.detail = detail
        self.code = code
        super().__init__(detail)


class BillingValidationError(BillingError):
    """Malformed request, for example a missing promo code."""

    def __init__(self, detail: str, code: str = "validation_error"):
        super().__init__(detail, code=code)


class PromoCodeRejectedError(BillingValidationError):
    """A promo code exists but cannot be used right now (or does not exist)."""

    def __init__(self, detail: str, reason: str):
        self.reason = reason
        super().__init__(detail, code=f"promo_{reason}")


class NotFoundError(BillingError):
    def __init__(self, detail: str, code: str = "not_found"):
        super().__init__(detail, code=code)


class ConflictError(BillingError):
    """
    The request clashes with current state, such as a second grant for an
    already premium user or a promo cap race lost to another checkout.
    """

    def __init__(self, detail: str, code: str = "conflict"):
        super().__init__(detail, code=code)


class ExternalProviderError(BillingError):
    """Stripe call failed. Local state is untouched and the request may be retried."""

    def __init__(
        self,
        detail: str = "Payment provider request failed. Please try again.",
        code: str = "provider_error",
    ):
        super().__init__(detail, code=code)


class SignatureVerificationError(BillingError):
    """Webhook payload failed signature verification and was discarded."""

    def __init__(
        self,
        detail: str = "Invalid webhook signature.",
        code: str = "invalid_signature",
    ):
        super().__init__(detail, code=code)


class UpgradeRequiredError(BillingError):
    """A premium-only action was attempted without premium access."""

    def __init__(
        self,
        detail: str = "Premium subscription required.",
        code: str = "upgrade_required",
    ):
        super().__init__(detail, code=code)
