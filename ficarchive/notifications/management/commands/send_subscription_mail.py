"""
notifications/management/commands/send_subscription_mail.py

Sends one digest per subscriber for everything queued since the
last run. Scheduled by notifications.scheduler; safe to run by hand.
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from notifications.services.subscriptions import deliver_subscription_mail


class Command(BaseCommand):
    help = "Send queued subscription notices as per-subscriber digests"

    def handle(self, *args, **options):
        now = timezone.now()

        self.stdout.write(
            self.style.NOTICE(
                f"[{now:%Y-%m-%d %H:%M:%S}] Sending queued subscription mail"
            )
        )

        sent = deliver_subscription_mail()

        self.stdout.write(
            self.style.SUCCESS(
                f"[{now:%Y-%m-%d %H:%M:%S}] Completed: {sent} digest(s) sent"
            )
        )
