import pytest

from notifications.models import Notification
from works.models import Work
from works.services.posting import preview_creation, publish_creation, save_creation


@pytest.fixture
def me(make_user):
    return make_user("me")


@pytest.fixture
def gifted_draft(me, make_user, make_work):
    make_user("alice")
    make_user("bob")
    work = make_work(me.default_pseud, title="For You", posted=False)
    work.add_recipients("alice, bob")
    return work


def recipients_of(mailoutbox):
    return sorted(address for message in mailoutbox for address in message.to)


def test_posting_gift_notifies_each_recipient_once(me, gifted_draft, committed, mailoutbox):
    with committed():
        publish_creation(gifted_draft, acting_user=me)

    assert recipients_of(mailoutbox) == ["alice@example.com", "bob@example.com"]

    with committed():
        save_creation(gifted_draft, acting_user=me)

    assert len(mailoutbox) == 2
    assert gifted_draft.new_recipients == ""


def test_opted_out_recipient_gets_nothing(me, make_user, gifted_draft, committed, mailoutbox):
    carol = make_user("carol")
    carol.preference.recipient_emails_off = True
    carol.preference.save()
    gifted_draft.add_recipients("carol")

    with committed():
        publish_creation(gifted_draft, acting_user=me)

    assert recipients_of(mailoutbox) == ["alice@example.com", "bob@example.com"]
    assert not Notification.objects.filter(recipient=carol).exists()


def test_recipient_named_by_two_pseuds_is_notified_once(me, make_user, make_pseud, make_work, committed, mailoutbox):
    dana = make_user("dana")
    make_pseud(dana, "dee")
    work = make_work(me.default_pseud, posted=False)
    work.add_recipients("dana, dee (dana)")

    with committed():
        publish_creation(work, acting_user=me)

    assert recipients_of(mailoutbox) == ["dana@example.com"]


def test_primary_collection_is_mentioned(me, gifted_draft, make_collection, add_to_collection, committed, mailoutbox):
    exchange = make_collection("yuletide", title="Yuletide")
    add_to_collection(gifted_draft, exchange)

    with committed():
        publish_creation(gifted_draft, acting_user=me)

    assert all("from Yuletide" in message.subject for message in mailoutbox)


def test_unrevealed_gift_waits_for_reveal(me, gifted_draft, make_collection, add_to_collection, committed, mailoutbox):
    add_to_collection(gifted_draft, make_collection("secret-santa", is_unrevealed=True))

    with committed():
        publish_creation(gifted_draft, acting_user=me)

    assert mailoutbox == []
    assert gifted_draft.new_recipients == "alice, bob"


def test_preview_never_sends_gift_mail(me, make_user, make_work, committed, mailoutbox):
    make_user("alice")
    work = make_work(me.default_pseud, title="Almost", posted=True)
    work.add_recipients("alice")

    with committed() as callbacks:
        assert preview_creation(work, acting_user=me) is True

    assert callbacks == []
    assert mailoutbox == []
    assert work.new_recipients == "alice"


def test_recipient_mail_waits_for_commit(me, gifted_draft, mailoutbox):
    # inside the test transaction nothing is committed yet
    publish_creation(gifted_draft, acting_user=me)

    assert mailoutbox == []


def test_new_posted_gift_is_sent_after_first_save(me, make_user, committed, mailoutbox):
    make_user("erin")
    work = Work(title="Surprise", posted=True)
    work.authors = [me.default_pseud]

    with committed():
        save_creation(work, acting_user=me)
        work.add_recipients("erin")

    assert recipients_of(mailoutbox) == ["erin@example.com"]
