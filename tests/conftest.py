"""Shared fixtures for the ficarchive test suite."""

import pytest
from django.core.cache import cache

from accounts.models import Pseud, User
from curation.models import Collection, CollectionItem
from notifications.models import Subscription
from works.models import Chapter, Work


@pytest.fixture(autouse=True)
def clear_fragment_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(username, *, email=None):
        return User.objects.create_user(
            username=username,
            email=f"{username}@example.com" if email is None else email,
            password="not-a-real-password",
        )

    return _make


@pytest.fixture
def author(make_user):
    return make_user("author")


@pytest.fixture
def make_pseud(db):
    def _make(user, name):
        return Pseud.objects.create(user=user, name=name)

    return _make


@pytest.fixture
def make_work(db):
    """Stored work credited to ``pseuds``, with a first chapter."""

    def _make(*pseuds, title="A Work", posted=False, chapter=True, **fields):
        work = Work.objects.create(title=title, posted=posted, **fields)
        work.pseuds.add(*pseuds)

        if chapter:
            first = Chapter.objects.create(work=work, position=1, posted=posted)
            first.pseuds.add(*pseuds)

        return work

    return _make


@pytest.fixture
def make_collection(db):
    def _make(name, *, parent=None, **fields):
        return Collection.objects.create(
            name=name,
            title=fields.pop("title", name.replace("-", " ").title()),
            parent=parent,
            **fields,
        )

    return _make


@pytest.fixture
def add_to_collection(db):
    def _add(work, collection):
        return CollectionItem.objects.create(work=work, collection=collection)

    return _add


@pytest.fixture
def subscribe(db):
    def _subscribe(user, subscribable):
        return Subscription.objects.create(user=user, subscribable=subscribable)

    return _subscribe


@pytest.fixture
def committed(django_capture_on_commit_callbacks):
    """Run on_commit callbacks registered inside the block, as a real commit would."""

    def _committed():
        return django_capture_on_commit_callbacks(execute=True)

    return _committed
