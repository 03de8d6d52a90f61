"""
Notifications triggered by posting works, chapters and series.

The save paths in ``works.services.posting`` call the three lifecycle
hooks explicitly:

    on_create        → right after the first save
    on_before_update → right before a later save, with the stored state
    on_after_save    → once the save is committed

Recipient (gift) mail only goes out from ``on_after_save`` so that a
preview, which runs the update hook but never commits, sends none.
"""

import logging

from accounts.models import Preference
from accounts.services.bylines import parse_bylines
from notifications.models import Notification, Subscription
from notifications.services import mailers
from notifications.services.subscriptions import queue_subscription
from works.models import Chapter, Series, Work

logger = logging.getLogger(__name__)


def _unique(pseuds):
    seen = {}
    for pseud in pseuds:
        seen.setdefault(pseud.pk, pseud)
    return list(seen.values())


# ============================================================
# LIFECYCLE HOOKS
# ============================================================

def on_create(creation, *, acting_user):
    """Creation was just saved for the first time."""
    notify_co_authors(creation, acting_user=acting_user)

    if isinstance(creation, Series) or not creation.posted:
        return

    do_notify(creation)


def on_before_update(creation, old_state, *, acting_user):
    """
    Creation is about to be saved over ``old_state`` (a CreationState
    of the stored row).
    """
    notify_co_authors(creation, acting_user=acting_user)

    if isinstance(creation, Series) or not creation.posted:
        return

    if not creation.is_valid():
        logger.info(
            "%s %s failed validation; skipping notifications.",
            creation.creation_type, creation.pk,
        )
        return

    if not old_state.posted:
        # draft → posted
        do_notify(creation)
    else:
        notify_subscribers_on_reveal(creation, old_state)


def on_after_save(creation):
    """Creation's save has been committed."""
    match creation:
        case Work():
            notify_recipients(creation)


def do_notify(creation):
    match creation:
        case Work():
            notify_parents(creation)
            notify_subscribers(creation)
            notify_prompters(creation)

        # the first chapter is covered by the work's own notice
        case Chapter(position=position) if position != 1:
            notify_subscribers(creation)

        case _:
            pass


# ============================================================
# CO-CREATORS
# ============================================================

def notify_co_authors(creation, *, acting_user):
    """
    Email pseuds newly listed as creators, then reconcile creatorships.

    Chapters count under their work: a chapter's own authors list is
    checked against the pseuds the work already credits, and the notice
    is about the work. The acting user's own pseuds are never notified.
    """
    work = creation.work if isinstance(creation, Chapter) else creation

    if work is not None and creation.authors and acting_user is not None:
        known = set(work.pseuds.values_list("pk", flat=True))
        known.update(acting_user.pseuds.values_list("pk", flat=True))

        new_authors = [
            pseud for pseud in _unique(creation.authors)
            if pseud.pk not in known
        ]

        for pseud in new_authors:
            mailers.send(
                Notification.Category.COAUTHOR,
                pseud.user_id,
                work.pk,
                creation_model=type(work),
            )

        if new_authors:
            logger.info(
                "Notified %d new co-creator(s) of %s %s.",
                len(new_authors), work.creation_type, work.pk,
            )

    save_creatorships(creation)


def save_creatorships(creation):
    """
    Make the creation's pseuds match its authors list.

    New pseuds are also credited one level out: a chapter's work, or a
    work's first chapter and its series. Pending removals come off the
    creation and, for a work, its first chapter.
    """
    if creation is None:
        raise ValueError("Cannot save creatorships without a creation.")

    current = set(creation.pseuds.values_list("pk", flat=True))
    new_authors = [
        pseud for pseud in _unique(creation.authors)
        if pseud.pk not in current
    ]

    for pseud in new_authors:
        creation.pseuds.add(pseud)

        match creation:
            case Chapter():
                creation.work.pseuds.add(pseud)

            case Work():
                first_chapter = creation.first_chapter()
                if first_chapter is not None:
                    first_chapter.pseuds.add(pseud)

                for series in creation.series.all():
                    series.pseuds.add(pseud)

    removals = _unique(creation.authors_to_remove)
    if removals:
        creation.pseuds.remove(*removals)

        if isinstance(creation, Work):
            first_chapter = creation.first_chapter()
            if first_chapter is not None:
                first_chapter.pseuds.remove(*removals)


# ============================================================
# GIFT RECIPIENTS
# ============================================================

def notify_recipients(work):
    """
    Tell gift recipients about a posted, revealed work.
    Each user hears once per work, unless they opted out.
    """
    if not work.posted or work.unrevealed:
        return 0

    new_recipients = work.new_recipients
    if not new_recipients:
        return 0

    pseuds = parse_bylines(new_recipients, assume_matching_login=True)["pseuds"]

    user_ids = []
    for pseud in pseuds:
        if pseud.user_id not in user_ids:
            user_ids.append(pseud.user_id)

    # users without the opt-out flag
    wanted = set(
        Preference.objects.users_with_flag_off("recipient_emails_off", user_ids)
    )
    collection = work.primary_collection()
    collection_id = collection.pk if collection is not None else None

    sent = 0
    for user_id in user_ids:
        if user_id in wanted:
            mailers.send(Notification.Category.GIFT, user_id, work.pk, collection_id)
            sent += 1

    work.mark_recipients_notified()

    logger.info("Sent %d gift notification(s) for work %s.", sent, work.pk)
    return sent


# ============================================================
# SUBSCRIBERS
# ============================================================

def notify_subscribers(creation):
    """Queue subscription notices for a new work or chapter."""
    work = creation.work if isinstance(creation, Chapter) else creation

    if work is None or work.unrevealed or work.anonymous:
        return 0

    queued = 0
    for subscription in Subscription.objects.for_work(work):
        queue_subscription(subscription, creation)
        queued += 1

    logger.debug(
        "Queued %d subscription notice(s) for %s %s.",
        queued, creation.creation_type, creation.pk,
    )
    return queued


def notify_subscribers_on_reveal(work, old_state):
    """
    Queue creator-subscription notices when a posted work's creator
    has just become public.

    Fires only when the work was anonymous or unrevealed before this
    save and is neither now. Subscribers to the work itself already
    heard about it when it was posted.
    """
    if not isinstance(work, Work) or not work.posted:
        return 0

    if work.in_anon_collection or work.in_unrevealed_collection:
        return 0

    if not old_state.concealed:
        return 0

    queued = 0
    for subscription in Subscription.objects.for_users(work.owner_user_ids()):
        queue_subscription(subscription, work)
        queued += 1

    logger.info("Work %s revealed; queued %d creator notice(s).", work.pk, queued)
    return queued


# ============================================================
# PROMPTERS & PARENT WORKS
# ============================================================

def notify_prompters(work):
    if work.unrevealed:
        return 0

    user_ids = list(
        work.challenge_claims
        .order_by("requesting_pseud__user_id")
        .values_list("requesting_pseud__user_id", flat=True)
        .distinct()
    )
    if not user_ids:
        return 0

    collection = work.primary_collection()
    collection_id = collection.pk if collection is not None else None

    for user_id in user_ids:
        mailers.send(Notification.Category.PROMPT, user_id, work.pk, collection_id)

    return len(user_ids)


def notify_parents(work):
    if work.unrevealed:
        return 0

    notified = 0
    for relationship in work.parent_work_relationships.select_related("parent"):
        notified += relationship.notify_parent_owners()

    return notified
