"""Operator commands for the site database.

Usage:
    python -m backend.manage init-db
    python -m backend.manage seed
    python -m backend.manage contacts
    python -m backend.manage contact-status 12 contacted --read
    python -m backend.manage subscribers
    python -m backend.manage chat-log session_1700000000000_abc123xyz
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from . import database
from .config import BASE_DIR, load_settings
from .storage import DatabaseStorage

logger = logging.getLogger("thinkbright.manage")

CONTACT_STATUSES = ("new", "contacted", "in-progress", "completed")

DEMO_PORTFOLIO = [
    {
        "title": "Harbor Coffee Online Store",
        "description": "Storefront with subscriptions and local pickup scheduling.",
        "category": "ecommerce",
        "technologies": json.dumps(["Shopify", "Liquid", "Stripe"]),
        "client_name": "Harbor Coffee Co.",
        "featured": True,
        "sort_order": 1,
    },
    {
        "title": "FitTrack Mobile App",
        "description": "Workout logging app for iOS and Android with coach dashboards.",
        "category": "mobile-app",
        "technologies": json.dumps(["React Native", "Firebase"]),
        "client_name": "FitTrack",
        "featured": True,
        "sort_order": 2,
    },
    {
        "title": "Lakeside Dental Website",
        "description": "Responsive practice site with online appointment requests.",
        "category": "website",
        "technologies": json.dumps(["HTML", "Tailwind CSS", "JavaScript"]),
        "client_name": "Lakeside Dental",
        "sort_order": 3,
    },
]

DEMO_TESTIMONIALS = [
    {
        "client_name": "Maria Lopez",
        "client_title": "Owner",
        "client_company": "Harbor Coffee Co.",
        "message": "Online orders doubled within two months of launch.",
        "rating": 5,
        "featured": True,
        "is_approved": True,
    },
    {
        "client_name": "James Carter",
        "client_title": "Founder",
        "client_company": "FitTrack",
        "message": "Clear communication and the app shipped on schedule.",
        "rating": 5,
        "is_approved": True,
    },
]


def seed(storage: DatabaseStorage) -> int:
    """Insert demo showcase content; returns the number of rows created."""
    created = 0
    for item in DEMO_PORTFOLIO:
        storage.create_portfolio_item(**item)
        created += 1
    for testimonial in DEMO_TESTIMONIALS:
        storage.create_testimonial(**testimonial)
        created += 1
    return created


def _print_json(rows: List[dict]) -> None:
    print(json.dumps(rows, indent=2, ensure_ascii=False, default=str))


def run(args: argparse.Namespace, session: Session) -> int:
    """Purpose: Execute one parsed management command against a session.
    Inputs/Outputs: Inputs are parsed args and an open Session; output is an exit code.
    Side Effects / State: May create tables or write rows; prints results to stdout.
    Dependencies: Uses DatabaseStorage for every data operation.
    Failure Modes: Unknown contact ids return exit code 1; database errors propagate.
    If Removed: Operators have no way to review leads without raw SQL.
    Testing Notes: Run against an in-memory session and check stdout and exit codes.
    """
    storage = DatabaseStorage(session)
    if args.command == "seed":
        count = seed(storage)
        print(f"Seeded {count} rows")
    elif args.command == "contacts":
        _print_json([contact.to_dict() for contact in storage.get_contacts()])
    elif args.command == "contact-status":
        contact = storage.update_contact_status(args.contact_id, args.status, True if args.read else None)
        if contact is None:
            print(f"Contact {args.contact_id} not found", file=sys.stderr)
            return 1
        print(f"Contact {contact.id} is now {contact.status}")
    elif args.command == "subscribers":
        _print_json([subscriber.to_dict() for subscriber in storage.get_active_subscribers()])
    elif args.command == "chat-log":
        for message in storage.get_chat_messages(args.session_id):
            print(f"{message.created_at:%Y-%m-%d %H:%M:%S} {message.sender_type:>5}: {message.message}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="backend.manage", description="ThinkBright site database tools")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init-db", help="Create missing tables")
    subparsers.add_parser("seed", help="Insert demo portfolio items and testimonials")
    subparsers.add_parser("contacts", help="List contact form submissions, newest first")
    status = subparsers.add_parser("contact-status", help="Update a contact's workflow status")
    status.add_argument("contact_id", type=int)
    status.add_argument("status", choices=CONTACT_STATUSES)
    status.add_argument("--read", action="store_true", help="Also mark the contact as read")
    subparsers.add_parser("subscribers", help="List active newsletter subscribers")
    chat_log = subparsers.add_parser("chat-log", help="Print a chat session transcript")
    chat_log.add_argument("session_id")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    env_path = BASE_DIR / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    settings = load_settings()
    engine = database.configure(settings.database_url)
    database.init_db(engine)
    if args.command == "init-db":
        logger.info("Tables are up to date")
        return 0

    session = database.SessionLocal()
    try:
        return run(args, session)
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
