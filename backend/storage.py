from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db_models import (
    BlogPost,
    ChatMessage,
    Contact,
    PortfolioItem,
    Project,
    Subscriber,
    Testimonial,
    User,
)

logger = logging.getLogger("thinkbright.storage")


class DatabaseStorage:
    """CRUD facade over the site schema; every method is one ORM round trip."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _insert(self, row: Any) -> Any:
        """Purpose: Add a row, commit, and reload server-side defaults.
        Inputs/Outputs: Input is a transient ORM instance; output is the persisted instance.
        Side Effects / State: Commits the session.
        Dependencies: Uses the bound Session.
        Failure Modes: IntegrityError and other SQLAlchemyError propagate after rollback.
        If Removed: Every create_* method must duplicate commit/rollback handling.
        Testing Notes: Insert a duplicate unique value and verify the session is still usable.
        """
        # Roll back before re-raising so the session stays usable.
        self._session.add(row)
        try:
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
        self._session.refresh(row)
        return row

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise

    # Contact operations

    def create_contact(self, **fields: Any) -> Contact:
        contact = self._insert(Contact(**fields))
        logger.info("Stored contact %s for service %s", contact.id, contact.service)
        return contact

    def get_contacts(self) -> List[Contact]:
        stmt = select(Contact).order_by(Contact.created_at.desc(), Contact.id.desc())
        return list(self._session.scalars(stmt))

    def get_contact_by_id(self, contact_id: int) -> Optional[Contact]:
        return self._session.get(Contact, contact_id)

    def update_contact_status(
        self, contact_id: int, status: str, is_read: Optional[bool] = None
    ) -> Optional[Contact]:
        """Set a contact's workflow status and, when given, its read flag."""
        contact = self._session.get(Contact, contact_id)
        if contact is None:
            return None
        contact.status = status
        if is_read is not None:
            contact.is_read = is_read
        self._commit()
        return contact

    # User operations

    def create_user(self, **fields: Any) -> User:
        return self._insert(User(**fields))

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self._session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._session.scalars(select(User).where(User.email == email)).first()

    # Project operations

    def create_project(self, **fields: Any) -> Project:
        return self._insert(Project(**fields))

    def get_projects(self) -> List[Project]:
        stmt = select(Project).order_by(Project.created_at.desc(), Project.id.desc())
        return list(self._session.scalars(stmt))

    def get_projects_by_user_id(self, user_id: int) -> List[Project]:
        stmt = (
            select(Project)
            .where(Project.user_id == user_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
        )
        return list(self._session.scalars(stmt))

    def update_project_status(self, project_id: int, status: str) -> Optional[Project]:
        project = self._session.get(Project, project_id)
        if project is None:
            return None
        project.status = status
        project.updated_at = datetime.utcnow()
        self._commit()
        return project

    # Chat operations

    def create_chat_message(self, **fields: Any) -> ChatMessage:
        return self._insert(ChatMessage(**fields))

    def get_chat_messages(self, session_id: str) -> List[ChatMessage]:
        """Transcript for one widget session, oldest first."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        return list(self._session.scalars(stmt))

    def mark_chat_messages_as_read(self, session_id: str) -> int:
        result = self._session.execute(
            update(ChatMessage).where(ChatMessage.session_id == session_id).values(is_read=True)
        )
        self._commit()
        return result.rowcount

    # Portfolio operations

    def get_portfolio_items(self) -> List[PortfolioItem]:
        stmt = (
            select(PortfolioItem)
            .where(PortfolioItem.is_active.is_(True))
            .order_by(PortfolioItem.sort_order.asc(), PortfolioItem.created_at.desc())
        )
        return list(self._session.scalars(stmt))

    def get_featured_portfolio_items(self) -> List[PortfolioItem]:
        stmt = (
            select(PortfolioItem)
            .where(PortfolioItem.featured.is_(True))
            .order_by(PortfolioItem.sort_order.asc())
        )
        return list(self._session.scalars(stmt))

    def create_portfolio_item(self, **fields: Any) -> PortfolioItem:
        return self._insert(PortfolioItem(**fields))

    # Testimonial operations

    def get_approved_testimonials(self) -> List[Testimonial]:
        stmt = (
            select(Testimonial)
            .where(Testimonial.is_approved.is_(True))
            .order_by(Testimonial.created_at.desc(), Testimonial.id.desc())
        )
        return list(self._session.scalars(stmt))

    def get_featured_testimonials(self) -> List[Testimonial]:
        stmt = (
            select(Testimonial)
            .where(Testimonial.featured.is_(True))
            .order_by(Testimonial.created_at.desc(), Testimonial.id.desc())
        )
        return list(self._session.scalars(stmt))

    def create_testimonial(self, **fields: Any) -> Testimonial:
        return self._insert(Testimonial(**fields))

    # Blog operations

    def get_published_blog_posts(self) -> List[BlogPost]:
        stmt = (
            select(BlogPost)
            .where(BlogPost.is_published.is_(True))
            .order_by(BlogPost.published_at.desc())
        )
        return list(self._session.scalars(stmt))

    def get_blog_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        return self._session.scalars(select(BlogPost).where(BlogPost.slug == slug)).first()

    def create_blog_post(self, **fields: Any) -> BlogPost:
        return self._insert(BlogPost(**fields))

    # Newsletter operations

    def create_subscriber(self, **fields: Any) -> Subscriber:
        subscriber = self._insert(Subscriber(**fields))
        logger.info("New newsletter subscriber %s from %s", subscriber.id, subscriber.source)
        return subscriber

    def get_active_subscribers(self) -> List[Subscriber]:
        stmt = (
            select(Subscriber)
            .where(Subscriber.is_active.is_(True))
            .order_by(Subscriber.subscribed_at.desc(), Subscriber.id.desc())
        )
        return list(self._session.scalars(stmt))
