from functools import partial

from django.db import transaction

from notifications.services import creation as creation_notifications
from works.models import Work
from works.state import CreationState


def save_creation(creation, *, acting_user=None):
    """
    Save a work, chapter or series and run its notification hooks.

    - any save     → full_clean first; an invalid creation raises
                     ValidationError and nothing is stored or sent
    - first save   → save, then on_create
    - later saves  → on_before_update (against the stored state), then save
    - both         → on_after_save once the write is committed
                     (immediately under autocommit)

    A stored work's concealment flags are re-derived from its collections
    before the update hook compares them with the stored row.

    Errors from the hooks propagate; side effects already made by an
    earlier step (queued notices, creatorships) are not undone unless
    the caller wraps this in its own transaction.
    """
    creation.full_clean()

    if creation.pk is None:
        creation.save()
        creation_notifications.on_create(creation, acting_user=acting_user)
    else:
        if isinstance(creation, Work):
            creation.refresh_visibility()

        old_state = CreationState.stored(creation)
        creation_notifications.on_before_update(
            creation, old_state, acting_user=acting_user
        )
        creation.save()

    transaction.on_commit(partial(creation_notifications.on_after_save, creation))
    return creation


def preview_creation(creation, *, acting_user=None):
    """
    Validate a pending edit without keeping it.

    Runs the update hook inside a transaction that is always rolled
    back, so nothing is stored, no mail leaves and the after-save hook
    never runs. Returns whether the creation is valid.
    """
    with transaction.atomic():
        if creation.pk is not None:
            old_state = CreationState.stored(creation)
            creation_notifications.on_before_update(
                creation, old_state, acting_user=acting_user
            )

        valid = creation.is_valid()
        transaction.set_rollback(True)

    return valid


def publish_creation(creation, *, acting_user=None):
    """Post a draft (or re-save a posted creation)."""
    creation.posted = True
    return save_creation(creation, acting_user=acting_user)


def sync_collection_visibility(work, *, acting_user=None):
    """
    Re-save ``work`` when joining or leaving a collection changed whether
    it is anonymous or unrevealed. A work leaving its last concealing
    collection goes through the reveal path of the update hook.
    Returns whether the work was saved.
    """
    if not work.refresh_visibility():
        return False

    save_creation(work, acting_user=acting_user)
    return True
