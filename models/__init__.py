"""
Data models and Pydantic schemas for the music lesson scheduler.
"""
from .schemas import (
    DAYS_OF_WEEK,
    DayOfWeek,
    SkillLevel,
    LessonDuration,
    TimeSlot,
    InstructorProfile,
    Student,
    Booking,
    BookingRequest,
    ScoreBreakdown,
    MatchResult,
    MatchRequest,
    RankRequest,
    OverlapRequest
)

__all__ = [
    "DAYS_OF_WEEK",
    "DayOfWeek",
    "SkillLevel",
    "LessonDuration",
    "TimeSlot",
    "InstructorProfile",
    "Student",
    "Booking",
    "BookingRequest",
    "ScoreBreakdown",
    "MatchResult",
    "MatchRequest",
    "RankRequest",
    "OverlapRequest"
]
