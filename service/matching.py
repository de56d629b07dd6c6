"""
Availability and compatibility matching between instructors and students.

This module holds the pure scheduling core:
- interval overlap of weekly time slots
- the weighted four-factor compatibility score
- stable ranking of students for one instructor
- booking-conflict filtering of candidate slots

None of these functions touch storage. Records arrive fully normalized.
"""

import math
import logging
from typing import List, Sequence

from models.schemas import (
    TimeSlot, InstructorProfile, Student, Booking, MatchResult, ScoreBreakdown
)

logger = logging.getLogger(__name__)

# Score weights (sum to 100)
INSTRUMENT_WEIGHT = 30
SKILL_WEIGHT = 25
DURATION_WEIGHT = 20
TIME_WEIGHT = 25
POINTS_PER_OVERLAP = 5


def _to_minutes(time_str: str) -> int:
    """'09:30' -> 570"""
    hours, minutes = time_str.split(":")
    return int(hours) * 60 + int(minutes)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def find_overlaps(slots_a: Sequence[TimeSlot], slots_b: Sequence[TimeSlot]) -> List[TimeSlot]:
    """
    Intersect two collections of weekly time slots.

    Every slot of ``slots_a`` is compared with every slot of ``slots_b``; slots
    inside one collection are never merged. Each strictly positive
    intersection produces a new slot, in nested iteration order (A outer,
    B inner). Adjacent slots (one ends when the other starts) do not overlap.

    Args:
        slots_a: First collection (e.g. instructor availability)
        slots_b: Second collection (e.g. student availability)

    Returns:
        List of synthesized overlap slots, empty when nothing overlaps
    """
    overlaps = []

    for slot_a in slots_a:
        for slot_b in slots_b:
            if slot_a.day != slot_b.day:
                continue

            overlap_start = max(_to_minutes(slot_a.start_time), _to_minutes(slot_b.start_time))
            overlap_end = min(_to_minutes(slot_a.end_time), _to_minutes(slot_b.end_time))

            if overlap_start < overlap_end:
                overlaps.append(TimeSlot.model_construct(
                    id=f"match-{slot_a.id}-{slot_b.id}",
                    day=slot_a.day,
                    start_time=max(slot_a.start_time, slot_b.start_time, key=_to_minutes),
                    end_time=min(slot_a.end_time, slot_b.end_time, key=_to_minutes),
                ))

    return overlaps


def compute_match(instructor: InstructorProfile, student: Student) -> MatchResult:
    """
    Score how well a student fits an instructor (0-100).

    Sub-scores are independent and simply added:
    instruments (proportional, 30), skill level (25), lesson duration (20)
    and overlapping time slots (5 each, capped at 25).
    """
    instructor_instruments = set(instructor.instruments)
    instrument_overlap = [i for i in student.instruments if i in instructor_instruments]

    if student.instruments:
        instrument_score = _round_half_up(
            len(instrument_overlap) / len(student.instruments) * INSTRUMENT_WEIGHT
        )
    else:
        instrument_score = 0

    skill_level_match = student.skill_level in instructor.skill_levels
    skill_score = SKILL_WEIGHT if skill_level_match else 0

    duration_match = student.preferred_duration in instructor.lesson_durations
    duration_score = DURATION_WEIGHT if duration_match else 0

    time_overlap = find_overlaps(instructor.availability, student.availability)
    time_score = min(len(time_overlap) * POINTS_PER_OVERLAP, TIME_WEIGHT)

    score = instrument_score + skill_score + duration_score + time_score
    logger.debug(
        f"Match {instructor.name} <-> {student.name}: {score} "
        f"(instrument={instrument_score}, skill={skill_score}, "
        f"duration={duration_score}, time={time_score})"
    )

    return MatchResult(
        student=student,
        score=score,
        instrument_overlap=instrument_overlap,
        skill_level_match=skill_level_match,
        duration_match=duration_match,
        time_overlap=time_overlap,
        breakdown=ScoreBreakdown(
            instrument_score=instrument_score,
            skill_score=skill_score,
            duration_score=duration_score,
            time_score=time_score,
        ),
    )


def rank_matches(instructor: InstructorProfile, students: Sequence[Student]) -> List[MatchResult]:
    """Match every student and sort by score, highest first.

    ``sorted`` is stable, so students with equal scores keep their input order.
    """
    matches = [compute_match(instructor, student) for student in students]
    return sorted(matches, key=lambda match: -match.score)


def has_booking_conflict(slot: TimeSlot, bookings: Sequence[Booking]) -> bool:
    """True if the slot overlaps any existing booking on the same day."""
    booked = [booking.as_time_slot() for booking in bookings]
    return len(find_overlaps([slot], booked)) > 0


def filter_bookable_slots(slots: Sequence[TimeSlot], bookings: Sequence[Booking]) -> List[TimeSlot]:
    """Drop the candidate slots that collide with an existing booking."""
    bookable = []
    for slot in slots:
        if has_booking_conflict(slot, bookings):
            logger.debug(f"Slot {slot.day} {slot.start_time}-{slot.end_time} already booked")
            continue
        bookable.append(slot)
    return bookable
