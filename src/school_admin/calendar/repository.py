from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CalendarEvent


class CalendarEventRepository(Protocol):
    def get_by_id(self, event_id: str) -> Optional[CalendarEvent]:
        raise NotImplementedError

    def list_events(self, *, published_only: bool = False) -> Sequence[CalendarEvent]:
        raise NotImplementedError

    def create(self, event: CalendarEvent) -> str:
        raise NotImplementedError

    def update(self, event: CalendarEvent) -> bool:
        raise NotImplementedError

    def delete(self, event_id: str) -> bool:
        raise NotImplementedError
