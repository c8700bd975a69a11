from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import database
from .chat_responder import SERVER_RESPONDER
from .config import load_settings
from .database import get_db
from .models import (
    ChatMessageRequest,
    ChatResult,
    ContactRequest,
    ContactResult,
    ListResult,
    SubscribeRequest,
    SubscribeResult,
)
from .storage import DatabaseStorage
from .utils import is_valid_email, missing_fields, utc_timestamp

BASE_DIR = Path(__file__).resolve().parent

ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)

log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_name, logging.INFO)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logging.getLogger("thinkbright").setLevel(log_level)
logger = logging.getLogger("thinkbright.api")

settings = load_settings()
database.configure(settings.database_url)

CACHE_CONTROL = "public, max-age=3600"
NOT_FOUND_PAGE = "<h1>404 - Page Not Found</h1>"


class SiteStaticFiles(StaticFiles):
    """Static pages with a one hour public cache."""

    def file_response(self, *args, **kwargs) -> Response:
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = CACHE_CONTROL
        return response


@asynccontextmanager
async def lifespan(_: FastAPI):
    database.init_db()
    logger.info("ThinkBright Web Solutions server running at http://%s:%s", settings.host, settings.port)
    logger.info("Database: %s", "Connected" if settings.database_configured else "Not configured")
    logger.info("Environment: %s", settings.environment)
    yield
    logger.info("Shutting down")


app = FastAPI(title="ThinkBright Web Solutions", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def failure(status_code: int, message: str) -> JSONResponse:
    """Build the ``{"success": false, "message": ...}`` error envelope."""
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    return DatabaseStorage(db)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Purpose: Map unparseable or ill-typed request bodies to the API error envelope.
    Inputs/Outputs: Inputs are the request and validation error; output is a 400 JSONResponse.
    Side Effects / State: Logs the validation errors at WARNING.
    Dependencies: Registered on the FastAPI app for RequestValidationError.
    Failure Modes: None.
    If Removed: Clients receive FastAPI's default 422 detail payload instead of the envelope.
    Testing Notes: POST malformed JSON to /api/contact and expect 400 "Invalid JSON data".
    """
    # Keep the validator detail in logs only.
    logger.warning("Rejected body for %s: %s", request.url.path, exc.errors())
    return failure(400, "Invalid JSON data")


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> Response:
    """Purpose: Render 404/405 as the API envelope under /api and as an HTML page elsewhere.
    Inputs/Outputs: Inputs are the request and HTTP exception; output is a Response.
    Side Effects / State: None.
    Dependencies: Catches errors raised by routing and SiteStaticFiles.
    Failure Modes: Other status codes keep their detail text.
    If Removed: Unknown API routes return FastAPI's {"detail": ...} body.
    Testing Notes: Request /api/nope and /nope.html and compare bodies.
    """
    # Wrong method on a known API path is reported like an unknown path.
    is_api = request.url.path.startswith("/api/")
    if exc.status_code in (404, 405):
        if is_api:
            return failure(404, "API endpoint not found")
        return HTMLResponse(NOT_FOUND_PAGE, status_code=404)
    if is_api:
        return failure(exc.status_code, str(exc.detail))
    return HTMLResponse(f"<h1>{exc.status_code} - {exc.detail}</h1>", status_code=exc.status_code)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("API error on %s", request.url.path)
    return failure(500, "Internal server error")


@app.get("/api/health")
def health() -> dict:
    """Purpose: Report liveness and whether a managed database is configured.
    Inputs/Outputs: No inputs; returns status, ISO timestamp, and database state.
    Side Effects / State: None.
    Dependencies: Reads module-level settings.
    Failure Modes: None.
    If Removed: Hosting health checks cannot probe the service.
    Testing Notes: Verify status "ok" and the database flag for both configurations.
    """
    # Database state reflects configuration, not a live probe.
    return {
        "status": "ok",
        "timestamp": utc_timestamp(),
        "database": "connected" if settings.database_configured else "not configured",
    }


@app.post("/api/contact", response_model=ContactResult, response_model_exclude_none=True)
def create_contact(request: ContactRequest, storage: DatabaseStorage = Depends(get_storage)):
    """Purpose: Capture a contact-form lead.
    Inputs/Outputs: Input is ContactRequest; output is ContactResult with the new contact id.
    Side Effects / State: Inserts a contacts row with status "new" and is_read False.
    Dependencies: Uses DatabaseStorage.create_contact and is_valid_email.
    Failure Modes: 400 for missing fields or bad email; database errors become 500.
    If Removed: The contact form cannot submit leads.
    Testing Notes: Submit valid and invalid payloads and check the stored row.
    """
    # Validate required fields before touching the database.
    required = (request.first_name, request.last_name, request.email, request.service, request.message)
    if missing_fields(required):
        return failure(400, "Missing required fields")
    if not is_valid_email(request.email):
        return failure(400, "Invalid email format")

    contact = storage.create_contact(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        phone=request.phone or None,
        service=request.service,
        message=request.message,
        status="new",
        is_read=False,
    )
    return ContactResult(
        success=True,
        message="Contact form submitted successfully",
        contact_id=contact.id,
    )


@app.get("/api/portfolio", response_model=ListResult, response_model_exclude_none=True)
def list_portfolio(storage: DatabaseStorage = Depends(get_storage)):
    """Active portfolio items in display order."""
    try:
        items = storage.get_portfolio_items()
    except SQLAlchemyError:
        logger.exception("Portfolio API error")
        return failure(500, "Error fetching portfolio items")
    return ListResult(success=True, data=[item.to_dict() for item in items])


@app.get("/api/portfolio/featured", response_model=ListResult, response_model_exclude_none=True)
def list_featured_portfolio(storage: DatabaseStorage = Depends(get_storage)):
    try:
        items = storage.get_featured_portfolio_items()
    except SQLAlchemyError:
        logger.exception("Featured portfolio API error")
        return failure(500, "Error fetching portfolio items")
    return ListResult(success=True, data=[item.to_dict() for item in items])


@app.get("/api/testimonials", response_model=ListResult, response_model_exclude_none=True)
def list_testimonials(storage: DatabaseStorage = Depends(get_storage)):
    """Approved testimonials, newest first."""
    try:
        testimonials = storage.get_approved_testimonials()
    except SQLAlchemyError:
        logger.exception("Testimonials API error")
        return failure(500, "Error fetching testimonials")
    return ListResult(success=True, data=[item.to_dict() for item in testimonials])


@app.get("/api/testimonials/featured", response_model=ListResult, response_model_exclude_none=True)
def list_featured_testimonials(storage: DatabaseStorage = Depends(get_storage)):
    try:
        testimonials = storage.get_featured_testimonials()
    except SQLAlchemyError:
        logger.exception("Featured testimonials API error")
        return failure(500, "Error fetching testimonials")
    return ListResult(success=True, data=[item.to_dict() for item in testimonials])


@app.post("/api/chat", response_model=ChatResult, response_model_exclude_none=True)
def create_chat_message(request: ChatMessageRequest, storage: DatabaseStorage = Depends(get_storage)):
    """Purpose: Relay a widget chat message and answer it with a canned reply.
    Inputs/Outputs: Input is ChatMessageRequest; output is ChatResult with both stored rows.
    Side Effects / State: Inserts the visitor message and the bot reply into chat_messages.
    Dependencies: Uses DatabaseStorage.create_chat_message and SERVER_RESPONDER.
    Failure Modes: 400 when sessionId or message is missing; database errors become 500.
    If Removed: The widget always falls back to its local replies and nothing is logged.
    Testing Notes: Send "what does it cost" and verify the pricing reply is stored as "bot".
    """
    # Persist the visitor line first so it survives a responder failure.
    if missing_fields((request.session_id, request.message)):
        return failure(400, "Missing required fields")

    user_message = storage.create_chat_message(
        session_id=request.session_id,
        sender_type=request.sender_type,
        message=request.message,
        is_read=False,
    )
    reply = SERVER_RESPONDER.respond(request.message)
    bot_message = storage.create_chat_message(
        session_id=request.session_id,
        sender_type="bot",
        message=reply,
        is_read=False,
    )
    logger.debug("Chat session %s answered with %d chars", request.session_id, len(reply))
    return ChatResult(
        success=True,
        user_message=user_message.to_dict(),
        bot_response=bot_message.to_dict(),
    )


@app.get("/api/chat/{session_id}")
def get_chat_transcript(session_id: str, storage: DatabaseStorage = Depends(get_storage)) -> dict:
    """Purpose: Return the stored transcript for one widget session.
    Inputs/Outputs: Input is session_id; output is a dict with the message list, oldest first.
    Side Effects / State: None.
    Dependencies: Uses DatabaseStorage.get_chat_messages.
    Failure Modes: Unknown session returns an empty list.
    If Removed: Staff cannot review a visitor conversation over HTTP.
    Testing Notes: Post two messages and verify four rows in order.
    """
    messages = storage.get_chat_messages(session_id)
    return {
        "success": True,
        "sessionId": session_id,
        "data": [message.to_dict() for message in messages],
    }


@app.post("/api/chat/{session_id}/read")
def mark_chat_read(session_id: str, storage: DatabaseStorage = Depends(get_storage)) -> dict:
    updated = storage.mark_chat_messages_as_read(session_id)
    return {"success": True, "sessionId": session_id, "updated": updated}


@app.post("/api/subscribe", response_model=SubscribeResult, response_model_exclude_none=True)
def subscribe(request: SubscribeRequest, storage: DatabaseStorage = Depends(get_storage)):
    """Purpose: Add a newsletter subscriber.
    Inputs/Outputs: Input is SubscribeRequest; output is SubscribeResult with the subscriber id.
    Side Effects / State: Inserts an active subscribers row.
    Dependencies: Uses DatabaseStorage.create_subscriber and is_valid_email.
    Failure Modes: 400 for missing/invalid email or an address that is already subscribed.
    If Removed: Newsletter signup on the site stops working.
    Testing Notes: Subscribe the same address twice and expect the duplicate message.
    """
    # The unique constraint on email is the duplicate check.
    if not request.email:
        return failure(400, "Email is required")
    if not is_valid_email(request.email):
        return failure(400, "Invalid email format")

    try:
        subscriber = storage.create_subscriber(
            email=request.email,
            first_name=request.first_name or None,
            last_name=request.last_name or None,
            source=request.source,
            is_active=True,
        )
    except IntegrityError:
        logger.info("Duplicate newsletter signup for %s", request.email)
        return failure(400, "Email already subscribed")
    return SubscribeResult(
        success=True,
        message="Successfully subscribed to newsletter",
        subscriber_id=subscriber.id,
    )


@app.get("/api/blog", response_model=ListResult, response_model_exclude_none=True)
def list_blog_posts(storage: DatabaseStorage = Depends(get_storage)):
    try:
        posts = storage.get_published_blog_posts()
    except SQLAlchemyError:
        logger.exception("Blog API error")
        return failure(500, "Error fetching blog posts")
    return ListResult(success=True, data=[post.to_dict() for post in posts])


@app.get("/api/blog/{slug}")
def get_blog_post(slug: str, storage: DatabaseStorage = Depends(get_storage)):
    """Single published post by slug; drafts are reported as missing."""
    post = storage.get_blog_post_by_slug(slug)
    if post is None or not post.is_published:
        return failure(404, "Blog post not found")
    return {"success": True, "data": post.to_dict()}


@app.options("/api/{path:path}", include_in_schema=False)
def api_options(path: str) -> Response:
    """Bare OPTIONS under /api; CORS preflights are answered by the middleware first."""
    return Response(status_code=200)


@app.get("/", include_in_schema=False)
def serve_index():
    """Purpose: Serve the site landing page.
    Inputs/Outputs: No inputs; returns index.html from the frontend directory.
    Side Effects / State: None.
    Dependencies: Uses settings.frontend_dir.
    Failure Modes: Missing index.html returns the 404 page.
    If Removed: The root URL falls through to the static mount.
    Testing Notes: Request "/" and verify HTML with the cache header.
    """
    index = settings.frontend_dir / "index.html"
    if not index.is_file():
        return HTMLResponse(NOT_FOUND_PAGE, status_code=404)
    return FileResponse(index, headers={"Cache-Control": CACHE_CONTROL})


if settings.frontend_dir.is_dir():
    app.mount("/", SiteStaticFiles(directory=settings.frontend_dir, html=True), name="static")
else:
    logger.warning("Frontend directory %s not found; static pages disabled", settings.frontend_dir)


def main() -> None:
    import uvicorn

    uvicorn.run("backend.app:app", host=settings.host, port=settings.port, log_level=log_level_name.lower())


if __name__ == "__main__":
    main()
