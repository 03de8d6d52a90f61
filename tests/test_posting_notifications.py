from smtplib import SMTPException

import pytest
from django.core.exceptions import ValidationError

from curation.models import Collection
from notifications.models import Notification, QueuedSubscriptionMail
from works.models import ChallengeClaim, Chapter, RelatedWork, Series, Work
from works.services.posting import publish_creation, save_creation


@pytest.fixture
def me(make_user):
    return make_user("me")


@pytest.fixture
def reader(make_user):
    return make_user("reader")


def queued_for(user):
    return QueuedSubscriptionMail.objects.filter(subscription__user=user)


# ============================================================
# SUBSCRIBERS
# ============================================================

def test_posting_new_work_queues_creator_subscription(me, reader, subscribe):
    subscribe(reader, me)

    work = Work(title="Fresh", posted=True)
    work.authors = [me.default_pseud]
    save_creation(work, acting_user=me)

    entry = queued_for(reader).get()
    assert entry.creation == work


def test_first_chapter_does_not_double_notify(me, reader, subscribe):
    subscribe(reader, me)

    work = Work(title="One Shot", posted=True)
    work.authors = [me.default_pseud]
    save_creation(work, acting_user=me)

    chapter = Chapter(work=work, position=1, posted=True)
    chapter.authors = [me.default_pseud]
    save_creation(chapter, acting_user=me)

    assert queued_for(reader).count() == 1


def test_later_chapter_notifies_work_subscribers(me, reader, subscribe, make_work):
    work = make_work(me.default_pseud, posted=True)
    subscribe(reader, work)

    chapter = Chapter(work=work, position=2, posted=True)
    chapter.authors = [me.default_pseud]
    save_creation(chapter, acting_user=me)

    entry = queued_for(reader).get()
    assert entry.creation == chapter


def test_series_subscribers_hear_about_new_works(me, reader, subscribe):
    series = Series.objects.create(title="Saga", posted=True)
    series.pseuds.add(me.default_pseud)
    subscribe(reader, series)

    work = Work.objects.create(title="Part Two")
    series.works.add(work)
    work.authors = [me.default_pseud]
    publish_creation(work, acting_user=me)

    assert queued_for(reader).count() == 1


def test_draft_to_posted_notifies_once(me, reader, subscribe, make_work):
    subscribe(reader, me)
    work = make_work(me.default_pseud, posted=False)

    publish_creation(work, acting_user=me)
    save_creation(work, acting_user=me)

    assert queued_for(reader).count() == 1


def test_saving_draft_notifies_nobody(me, reader, subscribe, make_work):
    subscribe(reader, me)
    work = make_work(me.default_pseud, posted=False)

    work.summary = "Still writing."
    save_creation(work, acting_user=me)

    assert not queued_for(reader).exists()


def test_series_is_never_announced(me, reader, subscribe):
    subscribe(reader, me)

    series = Series(title="Anthology", posted=True)
    series.authors = [me.default_pseud]
    save_creation(series, acting_user=me)

    assert not queued_for(reader).exists()


def test_invalid_update_is_rejected_before_anything_is_sent(me, make_user, reader, subscribe, make_work, committed, mailoutbox):
    make_user("alice")
    subscribe(reader, me)
    work = make_work(me.default_pseud, title="Kept", posted=False)
    work.add_recipients("alice")

    work.title = ""
    with pytest.raises(ValidationError):
        with committed():
            publish_creation(work, acting_user=me)

    assert Work.objects.get(pk=work.pk).title == "Kept"
    assert mailoutbox == []
    assert not queued_for(reader).exists()


@pytest.mark.parametrize("flag", ["is_anonymous", "is_unrevealed"])
def test_concealed_work_does_not_alert_subscribers(flag, me, reader, subscribe, make_work, make_collection, add_to_collection):
    subscribe(reader, me)
    work = make_work(me.default_pseud, posted=False)
    add_to_collection(work, make_collection("hidden", **{flag: True}))

    publish_creation(work, acting_user=me)

    assert not queued_for(reader).exists()


# ============================================================
# REVEALS
# ============================================================

@pytest.mark.parametrize("flag", ["is_anonymous", "is_unrevealed"])
def test_reveal_notifies_creator_subscribers_once(flag, me, reader, subscribe, make_work, make_user, make_collection, add_to_collection):
    work_fan = make_user("fan")
    work = make_work(me.default_pseud, posted=True)
    item = add_to_collection(work, make_collection("hidden", **{flag: True}))
    subscribe(reader, me)
    subscribe(work_fan, work)

    item.delete()
    save_creation(work, acting_user=me)

    assert queued_for(reader).count() == 1
    assert not queued_for(work_fan).exists()


def test_becoming_anonymous_is_not_a_reveal(me, reader, subscribe, make_work, make_collection, add_to_collection):
    work = make_work(me.default_pseud, posted=True)
    subscribe(reader, me)

    add_to_collection(work, make_collection("masquerade", is_anonymous=True))

    assert Work.objects.get(pk=work.pk).in_anon_collection is True
    assert not queued_for(reader).exists()


def test_posting_and_revealing_together_takes_posting_path(me, reader, subscribe, make_work, make_collection, add_to_collection):
    masquerade = make_collection("masquerade", is_anonymous=True)
    work = make_work(me.default_pseud, posted=False)
    add_to_collection(work, masquerade)
    subscribe(reader, me)

    # queryset update sends no signal: the reveal lands in the posting save
    Collection.objects.filter(pk=masquerade.pk).update(is_anonymous=False)
    publish_creation(work, acting_user=me)

    # only the posting notice, not a second reveal notice
    assert queued_for(reader).count() == 1


# ============================================================
# PROMPTERS & PARENT WORKS
# ============================================================

def test_prompters_are_told_about_fills(me, make_user, make_work, committed, mailoutbox):
    prompter = make_user("prompter")
    challenge = Collection.objects.create(name="fest", title="Summer Fest")
    work = make_work(me.default_pseud, posted=False)
    work.collection_items.create(collection=challenge)
    ChallengeClaim.objects.create(
        work=work, collection=challenge, requesting_pseud=prompter.default_pseud
    )

    with committed():
        publish_creation(work, acting_user=me)

    assert [message.to for message in mailoutbox] == [["prompter@example.com"]]
    assert "Summer Fest" in mailoutbox[0].subject
    assert Notification.objects.filter(
        recipient=prompter, category=Notification.Category.PROMPT
    ).exists()


def test_unrevealed_fill_stays_quiet(me, make_user, make_work, make_collection, add_to_collection, committed, mailoutbox):
    prompter = make_user("prompter")
    challenge = make_collection("fest", title="Summer Fest", is_unrevealed=True)
    work = make_work(me.default_pseud, posted=False)
    add_to_collection(work, challenge)
    ChallengeClaim.objects.create(
        work=work, collection=challenge, requesting_pseud=prompter.default_pseud
    )

    with committed():
        publish_creation(work, acting_user=me)

    assert mailoutbox == []


def test_parent_owners_are_told_about_responses(me, make_user, make_work, committed, mailoutbox):
    inspirer = make_user("inspirer")
    quiet = make_user("quiet")
    quiet.preference.related_works_emails_off = True
    quiet.preference.save()

    parent = make_work(inspirer.default_pseud, quiet.default_pseud, title="Original", posted=True)
    work = make_work(me.default_pseud, title="Remix", posted=False)
    RelatedWork.objects.create(work=work, parent=parent)

    with committed():
        publish_creation(work, acting_user=me)

    assert [message.to for message in mailoutbox] == [["inspirer@example.com"]]
    assert "“Original”" in mailoutbox[0].body


# ============================================================
# FAILURES
# ============================================================

def test_mail_failure_propagates_to_caller(me, make_user, make_work, committed, monkeypatch):
    prompter = make_user("prompter")
    challenge = Collection.objects.create(name="fest", title="Summer Fest")
    work = make_work(me.default_pseud, posted=False)
    ChallengeClaim.objects.create(
        work=work, collection=challenge, requesting_pseud=prompter.default_pseud
    )

    def broken_send_mail(**kwargs):
        raise SMTPException("relay down")

    monkeypatch.setattr("notifications.services.mailers.send_mail", broken_send_mail)

    with pytest.raises(SMTPException):
        with committed():
            publish_creation(work, acting_user=me)
