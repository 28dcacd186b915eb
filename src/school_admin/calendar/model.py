from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import EventType, FeatureCategory, FeatureSource


@dataclass(frozen=True)
class CalendarEvent:
    """A one-off dated entry on the academic calendar."""

    event_id: str
    title: str
    event_date: date
    event_type: EventType
    is_published: bool
    academic_year_id: str
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "title": self.title,
            "description": self.description,
            "eventDate": self.event_date.isoformat(),
            "eventType": self.event_type.value,
            "isPublished": self.is_published,
            "academicYearId": self.academic_year_id,
        }


@dataclass(frozen=True)
class CalendarFeature:
    """Computed calendar entry; never persisted."""

    id: str
    name: str
    start_at: datetime
    end_at: datetime
    category: FeatureCategory
    source_type: FeatureSource
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "startAt": self.start_at.isoformat(timespec="milliseconds"),
            "endAt": self.end_at.isoformat(timespec="milliseconds"),
            "category": self.category.value,
            "type": self.source_type.value,
            "description": self.description,
        }
