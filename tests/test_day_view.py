"""Tests for the day view and its copy / email actions."""

import json
from datetime import date

import pytest

from src.notifications.clipboard import BufferClipboard, Clipboard, ClipboardError
from src.notifications.email_sender import EmailDeliveryError, EmailMessage, EmailSender, LoggingEmailSender

JUNE_3 = date(2024, 6, 3)
JUNE_4 = date(2024, 6, 4)


class DeniedClipboard(Clipboard):
    def write_text(self, text):
        raise ClipboardError("permission denied")


class FlakyEmailSender(EmailSender):
    """Fails the first message, delivers the rest"""

    def __init__(self, failure):
        self.failure = failure
        self.calls = []

    def send(self, message):
        self.calls.append(message)
        if len(self.calls) == 1:
            if isinstance(self.failure, Exception):
                raise self.failure
            return self.failure
        return True


class TestEntries:

    def test_two_meetings_listed_in_time_order(self, store, day_view, make_meeting):
        store.upsert(make_meeting(title="Review", time="10:00", participants=["b@y.com"]))
        store.upsert(make_meeting(title="Standup", time="09:00", participants=["a@x.com"]))

        entries = day_view.entries_for_date(JUNE_3)

        assert [entry["title"] for entry in entries] == ["Standup", "Review"]

    def test_times_are_non_decreasing(self, store, day_view, make_meeting):
        for time in ["16:00", "09:45", "13:00", "09:00", "11:15", "10:00"]:
            store.upsert(make_meeting(title=f"At {time}", time=time))

        times = [entry["time"] for entry in day_view.entries_for_date(JUNE_3)]

        assert times == sorted(times)
        assert len(times) == 6

    def test_only_the_selected_day(self, store, day_view, make_meeting):
        store.upsert(make_meeting(title="Today"))
        store.upsert(make_meeting(title="Tomorrow", day=JUNE_4))

        assert [entry["title"] for entry in day_view.entries_for_date("2024-06-04")] == ["Tomorrow"]

    def test_attendees_shown_by_short_name(self, store, day_view, make_meeting):
        store.upsert(make_meeting(participants=["alice@example.com", "bob.smith@corp.io"]))

        entry = day_view.entries_for_date(JUNE_3)[0]

        assert entry["attendees"] == ["alice", "bob.smith"]
        assert entry["participants"] == ["alice@example.com", "bob.smith@corp.io"]

    def test_meeting_dates(self, store, day_view, make_meeting):
        store.upsert(make_meeting(day=JUNE_4))
        store.upsert(make_meeting(day=JUNE_3))

        assert day_view.meeting_dates() == [JUNE_3, JUNE_4]


class TestCopyAll:

    def test_copies_text_block(self, store, day_view, make_meeting):
        store.upsert(make_meeting(title="Review", time="10:00", participants=["b@y.com", "c@z.com"],
                                  description="Sprint review"))
        store.upsert(make_meeting())
        clipboard = BufferClipboard()

        result = day_view.copy_all(JUNE_3, clipboard)

        expected = (
            "Meetings for June 3rd, 2024:\n\n"
            "Meeting 1:\n"
            "Title: Standup\n"
            "Date: June 3rd, 2024\n"
            "Time: 09:00\n"
            "Participants: a@x.com\n"
            "Description: \n\n"
            "Meeting 2:\n"
            "Title: Review\n"
            "Date: June 3rd, 2024\n"
            "Time: 10:00\n"
            "Participants: b@y.com, c@z.com\n"
            "Description: Sprint review\n\n"
        )
        assert result.copied
        assert clipboard.text == expected
        assert result.text == expected
        assert result.notification.title == "Meetings Copied!"

    def test_empty_day_copies_nothing(self, day_view):
        clipboard = BufferClipboard()

        result = day_view.copy_all(JUNE_3, clipboard)

        assert not result.copied
        assert result.notification.is_error
        assert clipboard.text is None

    def test_clipboard_failure_is_reported_not_raised(self, store, day_view, make_meeting):
        store.upsert(make_meeting())

        result = day_view.copy_all(JUNE_3, DeniedClipboard())

        assert not result.copied
        assert result.notification.title == "Copy Failed"
        assert result.notification.is_error


class TestSendEmailForDate:

    def test_one_email_per_meeting_in_time_order(self, store, day_view, make_meeting, email_sender):
        store.upsert(make_meeting(title="Review", time="10:00", participants=["b@y.com"]))
        store.upsert(make_meeting(title="Standup", participants=["a@x.com", "c@z.com"]))

        report = day_view.send_email_for_date(JUNE_3, email_sender)

        assert not report.blocked
        assert len(report.sent) == 2
        assert report.failed == []
        assert [m.subject for m in email_sender.sent] == [
            "Meeting: Standup - June 3rd, 2024",
            "Meeting: Review - June 3rd, 2024",
        ]
        assert email_sender.sent[0].to == ["a@x.com", "c@z.com"]
        assert "<p><strong>Time:</strong> 09:00</p>" in email_sender.sent[0].body

    def test_html_in_meeting_fields_is_escaped(self, store, day_view, make_meeting, email_sender):
        store.upsert(make_meeting(title="Q&A <live>", description="<b>bring notes</b>"))

        day_view.send_email_for_date(JUNE_3, email_sender)

        body = email_sender.sent[0].body
        assert "Q&amp;A &lt;live&gt;" in body
        assert "&lt;b&gt;bring notes&lt;/b&gt;" in body

    def test_empty_day_is_blocked(self, day_view, email_sender):
        report = day_view.send_email_for_date(JUNE_3, email_sender)

        assert report.blocked
        assert report.notifications[0].title == "No meetings scheduled"
        assert email_sender.sent == []

    def test_meeting_without_participants_blocks_every_send(self, store, day_view, make_meeting, email_sender):
        store.upsert(make_meeting(title="Standup"))
        store.upsert(make_meeting(title="Solo", time="10:00", participants=[]))

        report = day_view.send_email_for_date(JUNE_3, email_sender)

        assert report.blocked
        assert report.notifications[0].title == "No participants added"
        assert email_sender.sent == []

    @pytest.mark.parametrize("failure", [EmailDeliveryError("smtp down"), False])
    def test_failed_send_is_reported_and_rest_continue(self, store, day_view, make_meeting, failure):
        first = store.upsert(make_meeting(title="Standup"))
        second = store.upsert(make_meeting(title="Review", time="10:00"))
        sender = FlakyEmailSender(failure)

        report = day_view.send_email_for_date(JUNE_3, sender)

        assert len(sender.calls) == 2
        assert report.failed == [first.id]
        assert report.sent == [second.id]
        assert [n.is_error for n in report.notifications] == [True, False]

    def test_corrupt_stored_record_is_left_out(self, storage, day_view, email_sender):
        storage.set("meetings", json.dumps([
            {"title": "Standup", "date": "2024-06-03", "time": "09:00", "participants": ["a@x.com"]},
            {"title": "T", "date": "2024-06-03", "time": "10:00", "participants": ["a@x.com"], "description": 5},
        ]))

        report = day_view.send_email_for_date(JUNE_3, email_sender)

        assert len(report.sent) == 1
        assert [m.subject for m in email_sender.sent] == ["Meeting: Standup - June 3rd, 2024"]


class TestCollaborators:

    def test_buffer_clipboard_only_takes_text(self):
        clipboard = BufferClipboard()

        with pytest.raises(ClipboardError):
            clipboard.write_text(None)

        assert clipboard.text is None

    def test_logging_sender_refuses_message_without_recipients(self):
        with pytest.raises(EmailDeliveryError):
            LoggingEmailSender().send(EmailMessage(to=[], subject="Meeting: Standup", body=""))

    def test_logging_sender_reports_success(self):
        assert LoggingEmailSender().send(EmailMessage(to=["a@x.com"], subject="Meeting: Standup", body=""))
