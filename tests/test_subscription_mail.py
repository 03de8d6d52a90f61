from unittest import mock

import pytest
from django.core.management import call_command

from notifications import scheduler
from notifications.models import Notification, QueuedSubscriptionMail
from notifications.services.subscriptions import (
    deliver_subscription_mail,
    queue_subscription,
)
from works.models import Chapter


@pytest.fixture
def reader(make_user):
    return make_user("reader")


def test_digest_groups_queued_notices_per_subscriber(author, reader, make_user, make_work, subscribe, mailoutbox):
    other_reader = make_user("other")
    first = make_work(author.default_pseud, title="First", posted=True)
    second = make_work(author.default_pseud, title="Second", posted=True)
    chapter = Chapter.objects.create(work=second, position=2, posted=True)

    creator_sub = subscribe(reader, author)
    queue_subscription(creator_sub, first)
    queue_subscription(creator_sub, second)
    queue_subscription(creator_sub, second)
    queue_subscription(subscribe(other_reader, second), chapter)

    sent = deliver_subscription_mail()

    assert sent == 2
    assert not QueuedSubscriptionMail.objects.exists()

    reader_mail = next(m for m in mailoutbox if m.to == ["reader@example.com"])
    assert "“First” by author" in reader_mail.body
    assert reader_mail.body.count("“Second” by author") == 1

    other_mail = next(m for m in mailoutbox if m.to == ["other@example.com"])
    assert "Chapter 2 of “Second”" in other_mail.body
    assert Notification.objects.filter(
        recipient=other_reader, category=Notification.Category.SUBSCRIPTION
    ).count() == 1


def test_notices_for_deleted_works_are_dropped(author, reader, make_work, subscribe, mailoutbox):
    work = make_work(author.default_pseud, posted=True)
    queue_subscription(subscribe(reader, author), work)
    work.delete()

    assert deliver_subscription_mail() == 0
    assert mailoutbox == []
    assert not QueuedSubscriptionMail.objects.exists()


def test_management_command_reports_digests(author, reader, make_work, subscribe, capsys):
    queue_subscription(subscribe(reader, author), make_work(author.default_pseud, posted=True))

    call_command("send_subscription_mail")

    assert "1 digest(s) sent" in capsys.readouterr().out


# ============================================================
# SCHEDULER
# ============================================================

@pytest.fixture
def fresh_scheduler(monkeypatch):
    monkeypatch.setattr(scheduler, "_scheduler", None)


def test_scheduler_stays_off_unless_enabled(settings, fresh_scheduler):
    settings.ENABLE_SCHEDULER = False

    assert scheduler.start_scheduler() is None


def test_scheduler_registers_subscription_job_once(settings, fresh_scheduler):
    settings.ENABLE_SCHEDULER = True
    settings.SUBSCRIPTION_MAIL_INTERVAL_MINUTES = 15

    with mock.patch.object(scheduler, "BackgroundScheduler") as background:
        first = scheduler.start_scheduler()
        second = scheduler.start_scheduler()

    assert first is second
    background.assert_called_once()
    first.add_job.assert_called_once()
    _, kwargs = first.add_job.call_args
    assert kwargs["minutes"] == 15
    assert kwargs["id"] == "send_subscription_mail"
    first.start.assert_called_once()


def test_scheduled_job_runs_the_command():
    with mock.patch.object(scheduler, "call_command") as command:
        scheduler.run_subscription_mail()

    command.assert_called_once_with("send_subscription_mail")
