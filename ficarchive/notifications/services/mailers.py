import logging
from functools import partial

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import transaction

from curation.models import Collection
from notifications.models import Notification
from works.models import Work

logger = logging.getLogger(__name__)

User = get_user_model()


# ============================================================
# SHARED HELPERS
# ============================================================

def archive_name():
    return getattr(settings, "ARCHIVE_NAME", "Fanfic Archive")


def creator_byline(work):
    if work.anonymous:
        return "Anonymous"

    bylines = [pseud.byline for pseud in work.pseuds.select_related("user")]
    return ", ".join(bylines) or "Anonymous"


def deliver(*, user, category, work, title, message, subject, body, defer=True):
    """
    Record the in-app notification, then email the user.

    The email goes out once the surrounding transaction commits, so a
    rolled-back save (a preview) sends nothing. Under autocommit it is
    sent right away. Mail is sent with fail_silently=False: transport
    errors reach whoever triggered the save, or the commit.
    """
    Notification.objects.create(
        recipient=user,
        category=category,
        work=work,
        title=title,
        message=message,
    )

    if not user.email:
        logger.info("User %s has no email address; in-app notice only.", user.pk)
        return

    email = partial(
        send_mail,
        subject=f"[{archive_name()}] {subject}",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )

    if defer:
        transaction.on_commit(email)
    else:
        email()


# ============================================================
# DISPATCH BY KIND
# ============================================================

def send(kind, target_user_id, creation_id, collection_id=None, *, creation_model=Work):
    """
    Send one notice of ``kind`` to one user.

    ``kind`` is a Notification.Category: COAUTHOR, GIFT or PROMPT.
    ``creation_id`` names a Work unless ``creation_model`` says otherwise
    (a Series, for co-creator notices).
    """
    creation = creation_model.objects.get(pk=creation_id)
    collection = (
        Collection.objects.get(pk=collection_id)
        if collection_id is not None
        else None
    )

    match Notification.Category(kind):
        case Notification.Category.COAUTHOR:
            send_coauthor_notification(target_user_id, creation)

        case Notification.Category.GIFT:
            send_recipient_notification(target_user_id, creation, collection)

        case Notification.Category.PROMPT:
            send_prompter_notification(target_user_id, creation, collection)

        case other:
            raise ValueError(f"{other.label} notices are not sent one at a time.")


# ============================================================
# CO-CREATOR ADDED
# ============================================================

def send_coauthor_notification(user_id, creation):
    """
    Tell a user one of their pseuds was listed as co-creator of a
    work or series.
    """
    user = User.objects.get(pk=user_id)
    kind = creation.creation_type.lower()

    message = (
        f"You have been listed as a co-creator of the {kind} "
        f"“{creation.title}”."
    )

    deliver(
        user=user,
        category=Notification.Category.COAUTHOR,
        work=creation if isinstance(creation, Work) else None,
        title="Co-creator notification",
        message=message,
        subject="Co-creator notification",
        body=(
            f"Hello {user.username},\n\n"
            f"{message}\n\n"
            f"If this is a mistake, you can remove yourself from the "
            f"{kind}'s creator list.\n\n"
            f"— {archive_name()}"
        ),
    )


# ============================================================
# GIFT RECIPIENT
# ============================================================

def send_recipient_notification(user_id, work, collection=None):
    user = User.objects.get(pk=user_id)

    message = f"{creator_byline(work)} has given you the work “{work.title}”."
    if collection is not None:
        message += f" It was posted to the collection “{collection.title}”."

    deliver(
        user=user,
        category=Notification.Category.GIFT,
        work=work,
        title="A gift work for you",
        message=message,
        subject=(
            f"A gift work for you from {collection.title}"
            if collection is not None
            else "A gift work for you"
        ),
        body=(
            f"Hello {user.username},\n\n"
            f"{message}\n\n"
            f"Enjoy!\n\n"
            f"— {archive_name()}"
        ),
    )


# ============================================================
# PROMPT FILLED
# ============================================================

def send_prompter_notification(user_id, work, collection=None):
    """Tell a user their prompt was claimed and filled by ``work``."""
    user = User.objects.get(pk=user_id)

    message = f"Someone has responded to your prompt with the work “{work.title}”."
    if collection is not None:
        message += f" It was posted in the challenge “{collection.title}”."

    deliver(
        user=user,
        category=Notification.Category.PROMPT,
        work=work,
        title="A response to your prompt",
        message=message,
        subject=(
            f"A response to your prompt in {collection.title}"
            if collection is not None
            else "A response to your prompt"
        ),
        body=(
            f"Hello {user.username},\n\n"
            f"{message}\n\n"
            f"— {archive_name()}"
        ),
    )


# ============================================================
# RELATED WORK
# ============================================================

def send_related_work_notification(user_id, relationship):
    user = User.objects.get(pk=user_id)
    work = relationship.work
    kind = "translation" if relationship.translation else "related work"

    message = (
        f"{creator_byline(work)} posted “{work.title}”, a {kind} "
        f"of your work “{relationship.parent.title}”."
    )

    deliver(
        user=user,
        category=Notification.Category.RELATED_WORK,
        work=work,
        title=f"New {kind}",
        message=message,
        subject=f"A new {kind} of your work",
        body=(
            f"Hello {user.username},\n\n"
            f"{message}\n\n"
            f"— {archive_name()}"
        ),
    )
