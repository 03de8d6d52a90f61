from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone

from works.models import Work, Series


class Notification(models.Model):
    """
    In-app copy of an email sent to a user.
    Notifications are NOT the source of truth. They mirror mail
    sent when works are posted, gifted or revealed.
    """

    # =====================================================
    # CATEGORY (one per mail kind)
    # =====================================================
    class Category(models.TextChoices):
        COAUTHOR = "coauthor", "Co-creator added"
        GIFT = "gift", "Gift"
        PROMPT = "prompt", "Prompt fill"
        RELATED_WORK = "related_work", "Related work"
        SUBSCRIPTION = "subscription", "Subscription"

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User who receives this notification"
    )

    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        db_index=True
    )

    title = models.CharField(
        max_length=200,
        help_text="Short headline shown in notification list"
    )

    message = models.TextField(
        help_text="Detailed message shown when expanded"
    )

    work = models.ForeignKey(
        Work,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications"
    )

    is_read = models.BooleanField(
        default=False,
        db_index=True
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read"]),
            models.Index(fields=["recipient", "category", "is_read"]),
        ]

    def __str__(self):
        return (
            f"{self.recipient} | "
            f"{self.category.upper()} | "
            f"{self.title}"
        )


# ============================================================
#   SUBSCRIPTIONS
# ============================================================
class SubscriptionQuerySet(models.QuerySet):
    def for_subscribable(self, model, ids):
        return self.filter(
            content_type=ContentType.objects.get_for_model(model),
            object_id__in=list(ids),
        )

    def for_users(self, user_ids):
        """Creator subscriptions to any of ``user_ids``."""
        return self.for_subscribable(get_user_model(), user_ids)

    def for_work(self, work):
        """
        Everyone who should hear about new content on ``work``:
        subscribers to the work itself, to any of its creators,
        and to any series it belongs to.
        """
        series_ids = work.series.values_list("id", flat=True)

        return (
            self.for_subscribable(Work, [work.pk])
            | self.for_users(work.owner_user_ids())
            | self.for_subscribable(Series, series_ids)
        ).distinct()


class Subscription(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="subscriptions",
        help_text="Subscriber"
    )

    # Work, User (creator) or Series
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    subscribable = GenericForeignKey("content_type", "object_id")

    created_at = models.DateTimeField(auto_now_add=True)

    objects = SubscriptionQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "content_type", "object_id"],
                name="unique_subscription",
            ),
        ]
        indexes = [
            models.Index(fields=["content_type", "object_id"]),
        ]

    def __str__(self):
        return f"{self.user} → {self.content_type.model} #{self.object_id}"


class QueuedSubscriptionMail(models.Model):
    """
    A subscription notice waiting for the next batched delivery.
    """

    subscription = models.ForeignKey(
        Subscription,
        on_delete=models.CASCADE,
        related_name="queued_mail"
    )

    # Work or Chapter the notice is about
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    creation = GenericForeignKey("content_type", "object_id")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Queued {self.content_type.model} #{self.object_id} for {self.subscription.user}"
