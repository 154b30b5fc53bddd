from datetime import UTC
from datetime import datetime

import pytest

from moorings.billing.constants import add_one_year
from moorings.billing.models import PromoCode
from moorings.billing.models import normalize_code
from moorings.billing.tests.factories import PromoCodeFactory


class TestAddOneYear:
    def test_regular_date(self):
        moment = datetime(2026, 3, 15, 9, 30, tzinfo=UTC)
        assert add_one_year(moment) == datetime(2027, 3, 15, 9, 30, tzinfo=UTC)

    def test_leap_day(self):
        moment = datetime(2028, 2, 29, tzinfo=UTC)
        assert add_one_year(moment) == datetime(2029, 2, 28, tzinfo=UTC)


class TestNormalizeCode:
    def test_strips_and_upper_cases(self):
        assert normalize_code("  summer10 ") == "SUMMER10"

    def test_none_is_empty(self):
        assert normalize_code(None) == ""


@pytest.mark.django_db
class TestPromoCodeModel:
    def test_code_is_normalized_on_save(self):
        promo = PromoCodeFactory(code=" winter5 ")
        assert PromoCode.objects.get(pk=promo.pk).code == "WINTER5"

    def test_get_by_code(self):
        promo = PromoCodeFactory(code="WINTER5")

        assert PromoCode.objects.get_by_code("winter5") == promo
        assert PromoCode.objects.get_by_code("") is None
        assert PromoCode.objects.get_by_code("OTHER") is None
