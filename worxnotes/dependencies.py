"""
Application container and FastAPI dependencies.

Everything the routers need is built once per application in
``build_services`` and hung off ``app.state`` so tests can create isolated
apps side by side.
"""
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from worxnotes.changefeed import ChangeFeed
from worxnotes.config import Settings
from worxnotes.database import create_engine, create_session_factory
from worxnotes.notifications import NotificationChannel, ToastRenderer
from worxnotes.preferences import PreferenceStore
from worxnotes.repository import SqlRepairRepository
from worxnotes.storage import AttachmentStorage
from worxnotes.suggestions import SuggestionMailer


@dataclass
class Services:
    settings: Settings
    engine: AsyncEngine
    repository: SqlRepairRepository
    notifications: NotificationChannel
    toasts: ToastRenderer
    preferences: PreferenceStore
    mailer: SuggestionMailer


def build_services(settings: Settings) -> Services:
    engine = create_engine(settings.backend_url, echo=settings.debug)
    notifications = NotificationChannel()
    return Services(
        settings=settings,
        engine=engine,
        repository=SqlRepairRepository(
            create_session_factory(engine),
            AttachmentStorage(settings.storage_dir),
            ChangeFeed(),
        ),
        notifications=notifications,
        toasts=ToastRenderer(notifications, timeout=settings.notification_timeout),
        preferences=PreferenceStore(settings.preferences_path),
        mailer=SuggestionMailer(
            api_key=settings.resend_api_key,
            api_url=settings.resend_api_url,
            sender=settings.suggestion_sender,
            recipient=settings.suggestion_recipient,
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
