from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError


def test_contact_lifecycle(storage):
    first = storage.create_contact(
        first_name="Ann", last_name="Lee", email="ann@example.com", service="website", message="Hi"
    )
    second = storage.create_contact(
        first_name="Bo", last_name="Ng", email="bo@example.com", service="mobile-app", message="Hey"
    )
    assert first.status == "new"
    assert first.is_read is False
    assert first.created_at is not None

    assert [c.id for c in storage.get_contacts()] == [second.id, first.id]
    assert storage.get_contact_by_id(first.id).email == "ann@example.com"
    assert storage.get_contact_by_id(9999) is None

    updated = storage.update_contact_status(first.id, "contacted")
    assert updated.status == "contacted"
    assert updated.is_read is False

    updated = storage.update_contact_status(first.id, "completed", is_read=True)
    assert updated.is_read is True
    assert storage.update_contact_status(9999, "contacted") is None


def test_users_and_projects(storage):
    user = storage.create_user(email="owner@example.com", name="Owner")
    assert user.role == "client"
    assert storage.get_user_by_id(user.id).name == "Owner"
    assert storage.get_user_by_email("owner@example.com").id == user.id
    assert storage.get_user_by_email("nobody@example.com") is None

    mine = storage.create_project(user_id=user.id, title="Shop", service_type="ecommerce")
    storage.create_project(title="Internal", service_type="website")
    assert mine.status == "planning"
    assert [p.title for p in storage.get_projects_by_user_id(user.id)] == ["Shop"]
    assert len(storage.get_projects()) == 2
    assert mine.user.email == "owner@example.com"

    before = mine.updated_at
    moved = storage.update_project_status(mine.id, "in-progress")
    assert moved.status == "in-progress"
    assert moved.updated_at >= before
    assert storage.update_project_status(9999, "testing") is None


def test_duplicate_user_email_rolls_back(storage):
    storage.create_user(email="dup@example.com", name="A")
    with pytest.raises(IntegrityError):
        storage.create_user(email="dup@example.com", name="B")
    # session remains usable after the failed insert
    assert storage.get_user_by_email("dup@example.com").name == "A"


def test_chat_messages(storage):
    storage.create_chat_message(session_id="s1", sender_type="user", message="hello")
    storage.create_chat_message(session_id="s1", sender_type="bot", message="hi there", meta='{"rule": "greeting"}')
    storage.create_chat_message(session_id="s2", sender_type="user", message="other")

    messages = storage.get_chat_messages("s1")
    assert [m.message for m in messages] == ["hello", "hi there"]
    assert messages[1].to_dict()["metadata"] == '{"rule": "greeting"}'
    assert storage.mark_chat_messages_as_read("s1") == 2
    assert all(m.is_read for m in storage.get_chat_messages("s1"))
    assert storage.get_chat_messages("s2")[0].is_read is False
    assert storage.get_chat_messages("missing") == []


def test_to_dict_uses_camel_case(storage):
    contact = storage.create_contact(
        first_name="Ann", last_name="Lee", email="ann@example.com", service="website", message="Hi"
    )
    data = contact.to_dict()
    assert data["firstName"] == "Ann"
    assert data["isRead"] is False
    assert isinstance(data["createdAt"], str)
    assert "first_name" not in data


def test_subscribers(storage):
    storage.create_subscriber(email="a@example.com", source="website")
    lapsed = storage.create_subscriber(email="b@example.com", source="referral", is_active=False)
    assert lapsed.unsubscribed_at is None
    assert [s.email for s in storage.get_active_subscribers()] == ["a@example.com"]
    with pytest.raises(IntegrityError):
        storage.create_subscriber(email="a@example.com")


def test_blog_posts(storage):
    author = storage.create_user(email="writer@example.com", name="Writer")
    post = storage.create_blog_post(
        title="Launch checklist",
        slug="launch-checklist",
        content="...",
        category="guides",
        author_id=author.id,
        is_published=True,
        published_at=datetime(2024, 3, 1),
    )
    storage.create_blog_post(title="Draft", slug="draft", content="...", category="guides")
    assert post.view_count == 0
    assert [p.slug for p in storage.get_published_blog_posts()] == ["launch-checklist"]
    assert storage.get_blog_post_by_slug("draft").is_published is False
    assert storage.get_blog_post_by_slug("missing") is None
    assert author.blog_posts[0].slug == "launch-checklist"
