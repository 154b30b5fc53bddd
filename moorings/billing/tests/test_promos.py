"""
Tests for the promo code engine.

These tests cover:
- Rejection reasons and the order they are checked in
- Case-insensitive lookup
- Redemption against the usage cap, including two checkouts racing for the
  last use, sequentially and from two threads
- Admin creation and deactivation rules
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError
from django.db import connections
from django.db import transaction
from django.utils import timezone

from moorings.billing.constants import DiscountType
from moorings.billing.constants import PromoRejection
from moorings.billing.errors import BillingValidationError
from moorings.billing.errors import ConflictError
from moorings.billing.errors import NotFoundError
from moorings.billing.errors import PromoCodeRejectedError
from moorings.billing.models import PromoCode
from moorings.billing.promos import create_promo_code
from moorings.billing.promos import deactivate_promo_code
from moorings.billing.promos import evaluate_promo
from moorings.billing.promos import record_redemption
from moorings.billing.promos import validate_promo_code
from moorings.billing.tests.factories import PromoCodeFactory


@pytest.mark.django_db
class TestValidatePromoCode:
    def test_valid_code(self):
        PromoCodeFactory(code="SUMMER10")

        validation = validate_promo_code("SUMMER10")

        assert validation.is_valid
        assert validation.promo.code == "SUMMER10"
        assert validation.message == ""

    def test_lookup_is_case_insensitive(self):
        PromoCodeFactory(code="SUMMER10")

        validation = validate_promo_code("  summer10 ")

        assert validation.is_valid
        assert validation.code == "SUMMER10"

    def test_blank_code_is_a_validation_error(self):
        with pytest.raises(BillingValidationError) as exc_info:
            validate_promo_code("   ")
        assert exc_info.value.code == "promo_code_required"

    def test_unknown_code(self):
        validation = validate_promo_code("NOPE")

        assert validation.rejection == PromoRejection.INVALID
        assert validation.message == "Invalid promo code"

    def test_inactive_code(self):
        PromoCodeFactory(code="OLD", is_active=False)

        validation = validate_promo_code("OLD")

        assert validation.rejection == PromoRejection.INACTIVE
        assert validation.message == "This promo code is no longer active"

    def test_expired_code(self):
        PromoCodeFactory(code="GONE", expires_at=timezone.now() - timedelta(days=1))

        validation = validate_promo_code("GONE")

        assert validation.rejection == PromoRejection.EXPIRED
        assert validation.message == "This promo code has expired"

    def test_code_valid_at_exact_expiry_instant(self):
        now = timezone.now()
        PromoCodeFactory(code="EDGE", expires_at=now)

        assert validate_promo_code("EDGE", now).is_valid

    def test_usage_limit_reached(self):
        PromoCodeFactory(code="FIVE", max_uses=5, current_uses=5)

        validation = validate_promo_code("FIVE")

        assert validation.rejection == PromoRejection.USAGE_LIMIT_REACHED
        assert validation.message == "This promo code has reached its usage limit"

    def test_inactive_is_reported_before_expired_and_used_up(self):
        PromoCodeFactory(
            code="ALLBAD",
            is_active=False,
            expires_at=timezone.now() - timedelta(days=1),
            max_uses=1,
            current_uses=1,
        )

        assert validate_promo_code("ALLBAD").rejection == PromoRejection.INACTIVE

    def test_expired_is_reported_before_used_up(self):
        PromoCodeFactory(
            code="OLDFULL",
            expires_at=timezone.now() - timedelta(days=1),
            max_uses=1,
            current_uses=1,
        )

        assert validate_promo_code("OLDFULL").rejection == PromoRejection.EXPIRED

    def test_validation_does_not_consume_a_use(self):
        promo = PromoCodeFactory(code="PEEK", max_uses=1)

        validate_promo_code("PEEK")
        validate_promo_code("PEEK")

        promo.refresh_from_db()
        assert promo.current_uses == 0

    def test_raise_if_rejected_carries_reason(self):
        PromoCodeFactory(code="OLD", is_active=False)

        with pytest.raises(PromoCodeRejectedError) as exc_info:
            validate_promo_code("OLD").raise_if_rejected()

        assert exc_info.value.reason == "inactive"
        assert exc_info.value.code == "promo_inactive"

    def test_evaluate_promo_handles_missing_promo(self):
        assert evaluate_promo(None, timezone.now()) == PromoRejection.INVALID


@pytest.mark.django_db
class TestRecordRedemption:
    def test_increments_current_uses(self):
        promo = PromoCodeFactory(max_uses=3, current_uses=1)

        record_redemption(promo.pk)

        promo.refresh_from_db()
        assert promo.current_uses == 2

    def test_unlimited_code_keeps_counting(self):
        promo = PromoCodeFactory(max_uses=None, current_uses=1000)

        record_redemption(promo.pk)

        promo.refresh_from_db()
        assert promo.current_uses == 1001

    def test_refuses_past_the_cap(self):
        promo = PromoCodeFactory(max_uses=5, current_uses=5)

        with pytest.raises(ConflictError) as exc_info:
            record_redemption(promo.pk)

        assert exc_info.value.code == "promo_usage_limit_reached"
        promo.refresh_from_db()
        assert promo.current_uses == 5

    def test_two_checkouts_racing_for_the_last_use(self):
        """
        Both checkouts validate while one use is left, then both redeem.
        Exactly one redemption succeeds.
        """
        promo = PromoCodeFactory(code="LASTONE", max_uses=1)

        first = validate_promo_code("LASTONE")
        second = validate_promo_code("LASTONE")
        assert first.is_valid
        assert second.is_valid

        outcomes = []
        for validation in (first, second):
            try:
                record_redemption(validation.promo.pk)
            except ConflictError:
                outcomes.append(False)
            else:
                outcomes.append(True)

        assert outcomes.count(True) == 1
        promo.refresh_from_db()
        assert promo.current_uses == 1
        assert PromoCode.objects.increment_uses_if_below_cap(promo.pk) is False

    def test_database_refuses_uses_over_cap(self):
        promo = PromoCodeFactory(max_uses=1, current_uses=1)

        with pytest.raises(IntegrityError), transaction.atomic():
            PromoCode.objects.filter(pk=promo.pk).update(current_uses=2)


@pytest.mark.django_db(transaction=True)
class TestConcurrentRedemption:
    def test_simultaneous_redemptions_of_the_last_use(self):
        """Two threads redeem the last use at once; exactly one wins."""
        promo = PromoCodeFactory(code="LASTONE", max_uses=1)
        barrier = threading.Barrier(2)

        def redeem(_):
            barrier.wait(timeout=5)
            try:
                record_redemption(promo.pk)
            except ConflictError:
                return False
            finally:
                connections.close_all()
            return True

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = list(pool.map(redeem, range(2)))

        assert sorted(outcomes) == [False, True]
        promo.refresh_from_db()
        assert promo.current_uses == 1


@pytest.mark.django_db
class TestCreatePromoCode:
    def test_normalizes_code(self):
        promo = create_promo_code(" spring25 ", DiscountType.PERCENTAGE, Decimal(25))

        assert promo.code == "SPRING25"
        assert promo.current_uses == 0
        assert promo.is_active

    def test_duplicate_code_is_a_conflict(self):
        PromoCodeFactory(code="DUP")

        with pytest.raises(ConflictError) as exc_info:
            create_promo_code("dup", DiscountType.FIXED, Decimal(5))

        assert exc_info.value.code == "promo_code_exists"

    @pytest.mark.parametrize("value", ["0", "-5", "100.01"])
    def test_rejects_out_of_range_percentages(self, value):
        with pytest.raises(BillingValidationError) as exc_info:
            create_promo_code("BAD", DiscountType.PERCENTAGE, Decimal(value))
        assert exc_info.value.code == "invalid_discount_value"

    def test_allows_hundred_percent(self):
        promo = create_promo_code("FREEYEAR", DiscountType.PERCENTAGE, Decimal(100))
        assert promo.discount_value == Decimal(100)

    def test_rejects_non_positive_fixed_discount(self):
        with pytest.raises(BillingValidationError):
            create_promo_code("ZERO", DiscountType.FIXED, Decimal(0))

    def test_rejects_zero_max_uses(self):
        with pytest.raises(BillingValidationError) as exc_info:
            create_promo_code("NOUSE", DiscountType.FIXED, Decimal(5), max_uses=0)
        assert exc_info.value.code == "invalid_max_uses"

    def test_deactivate(self):
        promo = PromoCodeFactory(code="STOP")

        deactivate_promo_code(promo.pk)

        promo.refresh_from_db()
        assert promo.is_active is False
        assert validate_promo_code("STOP").rejection == PromoRejection.INACTIVE

    def test_deactivate_unknown_promo(self):
        with pytest.raises(NotFoundError):
            deactivate_promo_code(999999)
