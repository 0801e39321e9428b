"""
Service Base
Collaborators every resource service is constructed with
"""

import logging
from typing import Callable, List, Optional

from app.config import settings
from app.notifications import EmailNotifier, FanoutPublisher
from app.store import Collection, DocumentStore
from app.store.filters import SortSpec
from app.utils import total_pages

logger = logging.getLogger(__name__)


class ResourceService:
    """Holds the injected store, publisher and mail notifier"""

    def __init__(
        self,
        store: DocumentStore,
        publisher: FanoutPublisher,
        notifier: Optional[EmailNotifier] = None,
        config=settings,
    ):
        self.store = store
        self.publisher = publisher
        self.notifier = notifier
        self.config = config

    def page_params(self, page: Optional[int], limit: Optional[int]):
        page = max(int(page or 1), 1)
        limit = int(limit or self.config.DEFAULT_PAGE_SIZE)
        limit = min(max(limit, 1), self.config.MAX_PAGE_SIZE)
        return page, limit

    async def paginate(
        self,
        collection: Collection,
        key: str,
        filter: Optional[dict],
        sort: Optional[SortSpec],
        page: Optional[int],
        limit: Optional[int],
        view: Callable[[dict], dict],
    ) -> dict:
        """`{<key>: [...], total_pages, current_page, total}` listing envelope"""
        page, limit = self.page_params(page, limit)
        docs: List[dict] = await self.store.find(collection, filter, sort=sort, page=page, limit=limit)
        total = await self.store.count(collection, filter)
        return {
            key: [view(d) for d in docs],
            "total_pages": total_pages(total, limit),
            "current_page": page,
            "total": total,
        }

    def notify_in_background(self, label: str, func, *args, **kwargs) -> None:
        """Hand a mail job to the publisher's error boundary"""
        if self.notifier is None:
            return
        self.publisher.dispatch(label, func, *args, **kwargs)
