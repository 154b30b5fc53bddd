"""
Management command to reconcile local subscription state with Stripe.

Checks every user with a Stripe subscription, plus premium users whose
expiry has passed, and converges them through the same transition the
webhooks use. Useful after webhook outages.

Usage:
    python manage.py reconcile_subscriptions
    python manage.py reconcile_subscriptions --email someone@example.com
"""

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.db.models import Q
from django.utils import timezone

from moorings.billing.constants import SubscriptionStatus
from moorings.billing.errors import BillingError
from moorings.billing.lifecycle import SubscriptionLifecycleManager
from moorings.billing.providers import get_billing_provider
from moorings.users.models import User


class Command(BaseCommand):
    help = "Reconcile user subscription state with Stripe"

    def add_arguments(self, parser):
        parser.add_argument(
            "--email",
            help="Only reconcile the user with this email address",
        )

    def handle(self, *args, **options):
        manager = SubscriptionLifecycleManager(get_billing_provider())

        users = User.objects.filter(
            ~Q(stripe_subscription_id="")
            | Q(
                subscription_status=SubscriptionStatus.PREMIUM,
                subscription_expires_at__lt=timezone.now(),
            ),
        )
        if options["email"]:
            user = User.objects.get_by_email(options["email"])
            if user is None:
                raise CommandError(f"No user with email {options['email']}")
            users = users.filter(pk=user.pk)

        changed = failed = 0
        for user in users.order_by("pk"):
            try:
                result = manager.reconcile(user)
            except BillingError as exc:
                failed += 1
                self.stdout.write(
                    self.style.WARNING(f"  Failed: {user.email} ({exc.detail})"),
                )
                continue
            if result.applied:
                changed += 1
                self.stdout.write(
                    self.style.SUCCESS(f"  Synced: {user.email} -> {result.status}"),
                )

        self.stdout.write(f"Reconciled {changed} user(s), {failed} failure(s)")
