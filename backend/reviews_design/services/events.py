"""In-process event bus for review lifecycle events.

Handlers run synchronously, in subscription order, inside the request that
published the event, so they share its database session and transaction.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from reviews_design.schemas.settings import ReviewSettings
from reviews_design.services.media import MediaStore
from reviews_design.services.uploads import FileDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewCreated:
    """A review was stored. Carries the files submitted with it."""

    review_id: UUID
    subject_id: UUID
    is_logged_in: bool
    files: list[FileDescriptor] = field(default_factory=list)


@dataclass
class EventContext:
    """Request-scoped collaborators handed to every handler."""

    db: Session
    media: MediaStore
    config: ReviewSettings


Handler = Callable[[Any, EventContext], None]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: type) -> list[Handler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, event: Any, context: EventContext) -> None:
        handlers = self.handlers_for(type(event))
        logger.debug(f"Publishing {type(event).__name__} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(event, context)


event_bus = EventBus()
