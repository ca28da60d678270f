"""Domain records consumed by the calendar engine.

Records arrive already authorized and already fetched by the caller; the engine
trusts them and never mutates them. All models are frozen.
"""
from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator

from coachcal.schemas.enums import LessonStatus
from coachcal.schemas.datetime import LocalDate, UTCInstant


class RecordModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class WorkItem(RecordModel):
    id: str
    title: str = ""


class ProgramDay(RecordModel):
    day_number: int = Field(ge=1, le=7)
    is_rest_day: bool = False
    work_items: tuple[WorkItem, ...] = ()
    title: str | None = None


class ProgramWeek(RecordModel):
    week_number: int = Field(ge=1)
    days: tuple[ProgramDay, ...] = ()


class ProgramAssignment(RecordModel):
    """A client's instance of a multi-week program anchored to a start date."""

    id: str
    client_id: str
    program_id: str
    start_date: LocalDate
    weeks: tuple[ProgramWeek, ...] = ()
    duration_weeks: int = Field(ge=0)
    title: str | None = None

    @property
    def total_days(self) -> int:
        return self.duration_weeks * 7

    @property
    def end_date(self) -> date | None:
        """Last local date on which the program is active (None if zero-length)."""
        if self.total_days <= 0:
            return None
        return self.start_date + timedelta(days=self.total_days - 1)


class ReplacementRecord(RecordModel):
    """Marks a program day as substituted by a coached lesson. Append-only."""

    assignment_id: str
    replaced_date: LocalDate
    lesson_id: str | None = None


class RoutineAssignment(RecordModel):
    id: str
    client_id: str
    routine_id: str
    start_date: LocalDate


class VideoAssignment(RecordModel):
    id: str
    client_id: str
    video_id: str
    due_date: LocalDate | None = None


class LessonEvent(RecordModel):
    """A single scheduled lesson; instants are absolute UTC."""

    id: str
    client_id: str
    coach_id: str
    start_instant: UTCInstant
    end_instant: UTCInstant
    status: LessonStatus = LessonStatus.CONFIRMED
    recurrence_group_id: str | None = None

    @model_validator(mode="after")
    def _check_order(self) -> "LessonEvent":
        if self.end_instant <= self.start_instant:
            raise ValueError("end_instant must be after start_instant")
        return self


class BlockedTime(RecordModel):
    """An interval in which a coach does not take lessons."""

    id: str
    coach_id: str
    start_instant: UTCInstant
    end_instant: UTCInstant

    @model_validator(mode="after")
    def _check_order(self) -> "BlockedTime":
        if self.end_instant <= self.start_instant:
            raise ValueError("end_instant must be after start_instant")
        return self
