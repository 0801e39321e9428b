"""
Service Container
Built once at startup and kept on app.state; owns the store connection and
the fan-out publisher lifecycle
"""

import logging
from typing import Optional

from fastapi import Request

from app.config import settings
from app.notifications import BroadcastHub, EmailNotifier, FanoutPublisher
from app.services.announcement_service import AnnouncementService
from app.services.club_service import ClubService
from app.services.event_service import EventService
from app.services.feedback_service import FeedbackService
from app.services.lost_found_service import LostFoundService
from app.services.user_service import UserService
from app.store import DocumentStore, build_store

logger = logging.getLogger(__name__)


class Container:
    def __init__(
        self,
        store: DocumentStore,
        publisher: Optional[FanoutPublisher] = None,
        notifier: Optional[EmailNotifier] = None,
        config=settings,
    ):
        self.config = config
        self.store = store
        self.publisher = publisher or FanoutPublisher(BroadcastHub())
        self.notifier = notifier

        deps = dict(store=self.store, publisher=self.publisher, notifier=self.notifier, config=config)
        self.users = UserService(**deps)
        self.events = EventService(**deps)
        self.clubs = ClubService(**deps)
        self.feedback = FeedbackService(**deps)
        self.lost_found = LostFoundService(**deps)
        self.announcements = AnnouncementService(**deps)

    @property
    def hub(self) -> BroadcastHub:
        return self.publisher.hub

    async def startup(self) -> None:
        await self.store.connect()
        logger.info("Container started: store=%s", type(self.store).__name__)

    async def shutdown(self) -> None:
        await self.publisher.close()
        await self.store.disconnect()
        logger.info("Container stopped")


def build_container(config=settings) -> Container:
    store = build_store()
    notifier = EmailNotifier(store, config) if config.EMAIL_NOTIFICATIONS_ENABLED else None
    return Container(store, FanoutPublisher(BroadcastHub()), notifier, config)


def get_container(request: Request) -> Container:
    return request.app.state.container
