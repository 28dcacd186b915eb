from __future__ import annotations

from datetime import datetime, tzinfo
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import DateLike, now_local, parse_datetime, to_local_date
from ..common.ids import new_id
from ..common.logging import get_logger
from ..common.validators import dedupe, require_present
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, BulkResult
from .repository import AttendanceLedger

log = get_logger(__name__)


def to_local_naive(value: Union[datetime, str], tz: tzinfo) -> datetime:
    if isinstance(value, str):
        value = parse_datetime(value)
    if value.tzinfo is not None:
        value = value.astimezone(tz).replace(tzinfo=None)
    return value


class BulkAttendanceRecorder:
    """Record attendance for many subjects on one day, once per (subject, day).

    Subjects that already have a record are reported, not overwritten. The
    batch insert ignores unique-key conflicts, so a concurrent call that wins
    the race only moves subjects from "created" to "already existing".
    """

    def __init__(self, ledger: AttendanceLedger, *, tz: tzinfo, clock: Optional[Callable[[], datetime]] = None):
        self._ledger = ledger
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))

    def record_bulk(
        self,
        subject_ids: Optional[Sequence[str]],
        date: Optional[DateLike],
        status: Union[str, Enum],
        notes: Optional[str],
        created_by: Optional[str],
        *,
        checkin_time: Optional[Union[datetime, str]] = None,
    ) -> BulkResult:
        if not subject_ids:
            raise ValidationError("no subjects supplied", field="subjectIds")
        if not isinstance(subject_ids, (list, tuple)) or not all(isinstance(s, str) and s.strip() for s in subject_ids):
            raise ValidationError("subjectIds must be a list of non-empty ids", field="subjectIds")
        require_present(date, "date")
        require_present(created_by, "createdBy")

        ids = dedupe(s.strip() for s in subject_ids)
        try:
            day = to_local_date(date, self._tz)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid date: {date!r}", field="date")

        existing = self._ledger.existing_subject_ids(ids, day)
        to_create = [s for s in ids if s not in existing]
        already = [s for s in ids if s in existing]

        if not to_create:
            log.info("bulk_attendance_all_exist", day=day.isoformat(), count=len(already))
            return BulkResult(
                created_count=0,
                already_existing_count=len(already),
                already_existing_subject_ids=already,
            )

        status_value = status.value if isinstance(status, Enum) else str(status)
        stamp: Optional[datetime] = None
        if self._ledger.tracks_checkin:
            try:
                stamp = to_local_naive(checkin_time, self._tz) if checkin_time else self._clock()
            except (AttributeError, ValueError):
                raise ValidationError(f"Invalid checkinTime: {checkin_time!r}", field="checkinTime")

        created_at = self._clock()
        records = [
            AttendanceRecord(
                attendance_id=new_id(),
                subject_id=subject_id,
                date=day,
                status=status_value,
                notes=notes or None,
                created_by=str(created_by),
                created_at=created_at,
                checkin_time=stamp,
                schedule_id=self._ledger.schedule_id,
            )
            for subject_id in to_create
        ]

        inserted = self._ledger.insert_ignore_many(records)
        stored = list(self._ledger.list_by_ids([r.attendance_id for r in records]))

        created_ids = {r.subject_id for r in stored}
        created = [s for s in to_create if s in created_ids]
        lost_race = [s for s in to_create if s not in created_ids]
        if lost_race:
            log.warning(
                "bulk_attendance_concurrent_insert",
                day=day.isoformat(),
                skipped=lost_race,
                inserted=inserted,
            )

        already_all = [s for s in ids if s in existing or s in lost_race]
        log.info(
            "bulk_attendance_recorded",
            day=day.isoformat(),
            created=len(created),
            already_exists=len(already_all),
            created_by=created_by,
        )

        by_subject = {r.subject_id: r for r in stored}
        return BulkResult(
            created_count=len(created),
            already_existing_count=len(already_all),
            created_subject_ids=created,
            already_existing_subject_ids=already_all,
            records=[by_subject[s] for s in created],
        )
