"""Relational schema for the marketing site: leads, chat, showcase content, newsletter."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, inspect
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class SerializableMixin:
    """Adds a JSON-ready view keyed by camelCase column names."""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for attr in inspect(self).mapper.column_attrs:
            value = getattr(self, attr.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[_camel(attr.columns[0].name)] = value
        return data


class User(SerializableMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20))
    role = Column(String(50), nullable=False, default="client")  # client, admin, staff
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    projects = relationship("Project", back_populates="user")
    blog_posts = relationship("BlogPost", back_populates="author")


class Contact(SerializableMixin, Base):
    """Contact form submission."""
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20))
    service = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(50), nullable=False, default="new")  # new, contacted, in-progress, completed
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Project(SerializableMixin, Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"))
    title = Column(String(255), nullable=False)
    description = Column(Text)
    service_type = Column(String(100), nullable=False)  # website, mobile-app, ecommerce, ui-ux
    status = Column(String(50), nullable=False, default="planning")
    budget = Column(Integer)  # cents
    deadline = Column(DateTime)
    start_date = Column(DateTime)
    completed_date = Column(DateTime)
    project_url = Column(String(500))
    github_url = Column(String(500))
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="projects")
    testimonials = relationship("Testimonial", back_populates="project")


class ChatMessage(SerializableMixin, Base):
    """One line of a live-chat transcript, keyed by the widget's session id."""
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True)
    session_id = Column(String(255), nullable=False, index=True)
    sender_type = Column(String(20), nullable=False)  # user, bot, agent
    message = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", Text)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class PortfolioItem(SerializableMixin, Base):
    __tablename__ = "portfolio_items"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100), nullable=False)
    technologies = Column(Text)  # JSON array
    image_url = Column(String(500))
    project_url = Column(String(500))
    client_name = Column(String(255))
    completed_date = Column(DateTime)
    featured = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Testimonial(SerializableMixin, Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True)
    client_name = Column(String(255), nullable=False)
    client_title = Column(String(255))
    client_company = Column(String(255))
    message = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    avatar_url = Column(String(500))
    project_id = Column(Integer, ForeignKey("projects.id"))
    featured = Column(Boolean, nullable=False, default=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    project = relationship("Project", back_populates="testimonials")


class BlogPost(SerializableMixin, Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    excerpt = Column(Text)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"))
    category = Column(String(100), nullable=False)
    tags = Column(Text)  # JSON array
    featured_image = Column(String(500))
    meta_title = Column(String(255))
    meta_description = Column(Text)
    is_published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User", back_populates="blog_posts")


class Subscriber(SerializableMixin, Base):
    """Newsletter subscriber; email is unique across active and lapsed rows."""
    __tablename__ = "subscribers"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    source = Column(String(100))  # website, social, referral
    is_active = Column(Boolean, nullable=False, default=True)
    subscribed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    unsubscribed_at = Column(DateTime)
