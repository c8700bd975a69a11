import json

import pytest

from backend.manage import DEMO_PORTFOLIO, DEMO_TESTIMONIALS, build_parser, run


def _run(session, *argv):
    return run(build_parser().parse_args(list(argv)), session)


def test_seed_populates_listings(session, storage, capsys):
    assert _run(session, "seed") == 0
    assert f"Seeded {len(DEMO_PORTFOLIO) + len(DEMO_TESTIMONIALS)} rows" in capsys.readouterr().out
    assert [item.title for item in storage.get_portfolio_items()][0] == "Harbor Coffee Online Store"
    assert len(storage.get_featured_portfolio_items()) == 2
    assert len(storage.get_approved_testimonials()) == 2
    assert len(storage.get_featured_testimonials()) == 1


def test_contacts_listing(session, storage, capsys):
    storage.create_contact(
        first_name="Ann", last_name="Lee", email="ann@example.com", service="website", message="Hi"
    )
    assert _run(session, "contacts") == 0
    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["email"] == "ann@example.com"
    assert rows[0]["status"] == "new"


def test_contact_status(session, storage, capsys):
    contact = storage.create_contact(
        first_name="Ann", last_name="Lee", email="ann@example.com", service="website", message="Hi"
    )
    assert _run(session, "contact-status", str(contact.id), "contacted", "--read") == 0
    assert "is now contacted" in capsys.readouterr().out
    refreshed = storage.get_contact_by_id(contact.id)
    assert refreshed.status == "contacted"
    assert refreshed.is_read is True


def test_contact_status_unknown_id(session, capsys):
    assert _run(session, "contact-status", "404", "completed") == 1
    assert "not found" in capsys.readouterr().err


def test_contact_status_rejects_unknown_status(session):
    with pytest.raises(SystemExit):
        _run(session, "contact-status", "1", "archived")


def test_subscribers_listing(session, storage, capsys):
    storage.create_subscriber(email="a@example.com", source="website")
    storage.create_subscriber(email="b@example.com", is_active=False)
    assert _run(session, "subscribers") == 0
    rows = json.loads(capsys.readouterr().out)
    assert [row["email"] for row in rows] == ["a@example.com"]


def test_chat_log(session, storage, capsys):
    storage.create_chat_message(session_id="s1", sender_type="user", message="hello")
    storage.create_chat_message(session_id="s1", sender_type="bot", message="welcome")
    assert _run(session, "chat-log", "s1") == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].endswith(" user: hello")
    assert lines[1].endswith("  bot: welcome")
