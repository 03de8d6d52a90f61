"""
Cached page fragments for collections.

Collection templates wrap their blurb and profile blocks in
``{% cache <timeout> collection-blurb collection.id %}`` (and the
``collection-profile`` equivalent). The helpers below build the matching
keys and expire them whenever a collection, or something shown inside
its blurb or profile, changes.
"""

import logging

from django.core.cache import cache
from django.core.cache.utils import make_template_fragment_key
from django.db import models

from curation.models import Collection

logger = logging.getLogger(__name__)


class Fragment(models.TextChoices):
    BLURB = "blurb", "Blurb"
    PROFILE = "profile", "Profile"


def collection_fragment_key(kind, collection_id):
    """Cache key of one collection fragment, as ``{% cache %}`` builds it."""
    kind = Fragment(kind)
    return make_template_fragment_key(f"collection-{kind.value}", [collection_id])


def _with_family(collection):
    return [collection, collection.parent, *collection.children.all()]


def resolve_affected_collections(record):
    """
    Return the collections whose cached fragments depend on ``record``.

    - a Collection            → itself, its parent and its children
    - anything with .collection  → that collection and its family
    - anything with .collections → every collection and its family
    - anything else           → nothing

    The result keeps first-seen order and lists each collection once.
    """
    if isinstance(record, Collection):
        candidates = _with_family(record)

    elif getattr(record, "collection", None) is not None:
        candidates = _with_family(record.collection)

    elif hasattr(record, "collections"):
        collections = record.collections
        if hasattr(collections, "all"):
            collections = collections.all() if record.pk else []

        candidates = []
        for collection in collections:
            candidates.extend(_with_family(collection))

    else:
        candidates = []

    affected = {}
    for collection in candidates:
        if collection is not None and collection.pk not in affected:
            affected[collection.pk] = collection

    return list(affected.values())


def expire_collection_cache_for(record):
    """Drop the blurb and profile fragments of every affected collection."""
    collections = resolve_affected_collections(record)

    for collection in collections:
        cache.delete_many([
            collection_fragment_key(kind, collection.pk)
            for kind in Fragment
        ])

    if collections:
        logger.debug(
            "Expired fragments for collections %s after change to %s",
            [collection.pk for collection in collections],
            type(record).__name__,
        )

    return collections
