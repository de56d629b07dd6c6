import re
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional, Literal
from uuid import uuid4


DayOfWeek = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
SkillLevel = Literal["Beginner", "Intermediate", "Advanced"]
LessonDuration = Literal[30, 60, 90]

DAYS_OF_WEEK: List[str] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _new_id() -> str:
    return str(uuid4())


# ===========================
# Availability
# ===========================

class TimeSlot(BaseModel):
    """Weekly availability window"""
    id: str = Field(default_factory=_new_id)
    day: DayOfWeek
    start_time: str  # HH:MM format, e.g., "09:00"
    end_time: str    # HH:MM format, e.g., "10:30"

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time_format(cls, value: str) -> str:
        if not _TIME_PATTERN.match(value):
            raise ValueError("must be in HH:MM format (e.g., '09:00')")
        return value

    @model_validator(mode="after")
    def check_time_order(self):
        if self.start_time >= self.end_time:
            raise ValueError(f"start time ({self.start_time}) must be before end time ({self.end_time})")
        return self


# ===========================
# People
# ===========================

class InstructorProfile(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    email: str = ""
    phone: str = ""
    instruments: List[str] = []           # Free text allowed for custom instruments
    skill_levels: List[SkillLevel] = []
    lesson_durations: List[LessonDuration] = []
    availability: List[TimeSlot] = []


class Student(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    email: str = ""
    phone: str = ""
    instruments: List[str] = []
    skill_level: SkillLevel
    preferred_duration: LessonDuration
    availability: List[TimeSlot] = []
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None


# ===========================
# Bookings
# ===========================

class Booking(BaseModel):
    """A committed lesson on an instructor's weekly calendar"""
    id: str = Field(default_factory=_new_id)
    instructor_id: str
    student_id: str
    student_name: str
    day: DayOfWeek
    start_time: str
    end_time: str
    instrument: str = ""
    recurring: bool = True
    notes: str = ""
    created_at: str  # ISO-8601

    def as_time_slot(self) -> TimeSlot:
        return TimeSlot.model_construct(
            id=self.id, day=self.day, start_time=self.start_time, end_time=self.end_time
        )


class BookingRequest(BaseModel):
    """Book one of the overlap slots of an instructor/student match"""
    instructor_id: str
    student_id: str
    slot_id: str
    recurring: bool = True
    notes: str = ""


# ===========================
# Matching
# ===========================

class ScoreBreakdown(BaseModel):
    instrument_score: int  # 0-30
    skill_score: int       # 0-25
    duration_score: int    # 0-20
    time_score: int        # 0-25


class MatchResult(BaseModel):
    """Compatibility of one student with one instructor (never persisted)"""
    student: Student
    score: int  # 0-100
    instrument_overlap: List[str]
    skill_level_match: bool
    duration_match: bool
    time_overlap: List[TimeSlot]
    breakdown: ScoreBreakdown


class MatchRequest(BaseModel):
    instructor: InstructorProfile
    student: Student


class RankRequest(BaseModel):
    instructor: InstructorProfile
    students: List[Student] = []


class OverlapRequest(BaseModel):
    slots_a: List[TimeSlot] = []
    slots_b: List[TimeSlot] = []
