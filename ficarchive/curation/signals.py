from django.db.models.signals import post_save, post_delete, pre_delete
from django.dispatch import receiver

from curation.fragments import expire_collection_cache_for
from curation.models import (
    Collection,
    CollectionItem,
    CollectionParticipant,
    CollectionProfile,
)
from works.models import Work
from works.services.posting import sync_collection_visibility


# ===========================================================
# EXPIRE COLLECTION FRAGMENTS ON ANY RELATED CHANGE
# ===========================================================
@receiver(post_save, sender=Collection)
@receiver(post_delete, sender=Collection)
@receiver(post_save, sender=CollectionItem)
@receiver(post_delete, sender=CollectionItem)
@receiver(post_save, sender=CollectionParticipant)
@receiver(post_delete, sender=CollectionParticipant)
@receiver(post_save, sender=CollectionProfile)
@receiver(post_delete, sender=CollectionProfile)
@receiver(post_save, sender=Work)
@receiver(post_delete, sender=Work)
def expire_collection_fragments(sender, instance, **kwargs):
    expire_collection_cache_for(instance)


# Children lose their parent link before post_delete fires
@receiver(pre_delete, sender=Collection)
def expire_children_of_deleted_collection(sender, instance, **kwargs):
    expire_collection_cache_for(instance)


# ===========================================================
# KEEP WORK CONCEALMENT IN STEP WITH COLLECTIONS
# ===========================================================
def _deleting_works(origin):
    if isinstance(origin, Work):
        return True
    return getattr(origin, "model", None) is Work


@receiver(post_save, sender=CollectionItem)
@receiver(post_delete, sender=CollectionItem)
def sync_work_on_membership_change(sender, instance, origin=None, **kwargs):
    # fixture loading, or the work itself is being deleted
    if kwargs.get("raw") or _deleting_works(origin):
        return

    sync_collection_visibility(instance.work)


@receiver(post_save, sender=Collection)
def sync_works_on_collection_change(sender, instance, created, raw=False, **kwargs):
    if created or raw:
        return

    for work in instance.works.all():
        sync_collection_visibility(work)
