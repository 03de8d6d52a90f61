"""
Subscription mail queue.

Posting a work or chapter only *queues* notices here; a scheduled job
(see ``notifications.scheduler``) later sends each subscriber one
digest covering everything queued for them since the last run.
"""

import logging
from collections import OrderedDict

from django.contrib.contenttypes.models import ContentType
from django.db import transaction

from notifications.models import Notification, QueuedSubscriptionMail
from notifications.services.mailers import archive_name, creator_byline, deliver
from works.models import Chapter, Work

logger = logging.getLogger(__name__)


def queue_subscription(subscription, creation):
    """Queue a notice about ``creation`` for ``subscription``'s user."""
    return QueuedSubscriptionMail.objects.create(
        subscription=subscription,
        content_type=ContentType.objects.get_for_model(creation),
        object_id=creation.pk,
    )


def describe_creation(creation):
    if isinstance(creation, Chapter):
        work = creation.work
        return (
            f"Chapter {creation.position} of “{work.title}” "
            f"by {creator_byline(work)}"
        )

    if isinstance(creation, Work):
        return f"“{creation.title}” by {creator_byline(creation)}"

    return str(creation)


def deliver_subscription_mail():
    """
    Drain the queue: one digest email per subscriber.

    Entries whose creation has since been deleted are dropped silently.
    Returns the number of digests sent.
    """
    entries = (
        QueuedSubscriptionMail.objects
        .select_related("subscription__user", "content_type")
        .order_by("created_at", "id")
    )

    # subscriber → {(content_type_id, object_id): entry ids / creation}
    pending = OrderedDict()
    stale_ids = []

    for entry in entries:
        creation = entry.creation
        if creation is None:
            stale_ids.append(entry.pk)
            continue

        user = entry.subscription.user
        digest = pending.setdefault(user.pk, {"user": user, "items": OrderedDict(), "ids": []})
        digest["items"].setdefault((entry.content_type_id, entry.object_id), creation)
        digest["ids"].append(entry.pk)

    if stale_ids:
        QueuedSubscriptionMail.objects.filter(pk__in=stale_ids).delete()
        logger.info("Dropped %d queued notices for deleted creations.", len(stale_ids))

    sent = 0

    for digest in pending.values():
        user = digest["user"]
        creations = list(digest["items"].values())
        lines = "\n".join(f"- {describe_creation(creation)}" for creation in creations)

        first = creations[0]
        work = first.work if isinstance(first, Chapter) else first

        with transaction.atomic():
            deliver(
                user=user,
                category=Notification.Category.SUBSCRIPTION,
                work=work if len(creations) == 1 else None,
                title="New content from your subscriptions",
                message=f"{len(creations)} new update(s) from your subscriptions.",
                subject="New content from your subscriptions",
                body=(
                    f"Hello {user.username},\n\n"
                    f"The following were posted since your last update:\n\n"
                    f"{lines}\n\n"
                    f"You are receiving this email because you subscribed "
                    f"to these works, series or creators.\n\n"
                    f"— {archive_name()}"
                ),
                # a failed send keeps the entries queued
                defer=False,
            )

            QueuedSubscriptionMail.objects.filter(pk__in=digest["ids"]).delete()

        sent += 1

    logger.info("Sent %d subscription digest(s).", sent)
    return sent
