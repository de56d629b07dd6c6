"""
Booking of matched lesson slots.
"""
import logging
from datetime import datetime, timezone
from typing import List

from models.schemas import Booking, TimeSlot, DAYS_OF_WEEK
from service.exceptions import BookingConflictError, NotFoundError
from service.matching import compute_match, filter_bookable_slots, has_booking_conflict
from service.storage import SchedulerRepository

logger = logging.getLogger(__name__)


def _calendar_bookings(repo: SchedulerRepository, instructor_id: str, student_id: str) -> List[Booking]:
    """Bookings that block a lesson: the instructor's plus the student's with anyone."""
    return [
        b for b in repo.list_bookings()
        if b.instructor_id == instructor_id or b.student_id == student_id
    ]


def bookable_slots(repo: SchedulerRepository, instructor_id: str, student_id: str) -> List[TimeSlot]:
    """Overlap slots of a match still free for both the instructor and the student."""
    instructor = repo.get_instructor(instructor_id)
    student = repo.get_student(student_id)
    match = compute_match(instructor, student)
    return filter_bookable_slots(match.time_overlap, _calendar_bookings(repo, instructor_id, student_id))


def book_match_slot(
    repo: SchedulerRepository,
    instructor_id: str,
    student_id: str,
    slot_id: str,
    recurring: bool = True,
    notes: str = ""
) -> Booking:
    """
    Commit one overlap slot of an instructor/student match as a booking.

    Args:
        repo: Repository holding instructors, students and bookings
        instructor_id: Instructor whose calendar receives the lesson
        student_id: Student being booked
        slot_id: Id of a slot in the match's ``time_overlap``
        recurring: Whether the lesson repeats weekly
        notes: Free-text notes

    Returns:
        The stored Booking

    Raises:
        NotFoundError: unknown instructor, student, or slot not in the overlap
        BookingConflictError: the slot overlaps an existing booking of the
            instructor, or one the student has with any instructor
    """
    instructor = repo.get_instructor(instructor_id)
    student = repo.get_student(student_id)
    match = compute_match(instructor, student)

    slot = next((s for s in match.time_overlap if s.id == slot_id), None)
    if slot is None:
        raise NotFoundError("Slot", slot_id)

    existing = _calendar_bookings(repo, instructor_id, student_id)
    if has_booking_conflict(slot, existing):
        logger.warning(
            f"Rejected booking for {student.name}: {slot.day} "
            f"{slot.start_time}-{slot.end_time} overlaps an existing booking"
        )
        raise BookingConflictError(
            f"{slot.day} {slot.start_time}-{slot.end_time} overlaps an existing booking.",
            details={"day": slot.day, "start_time": slot.start_time, "end_time": slot.end_time},
        )

    if match.instrument_overlap:
        instrument = match.instrument_overlap[0]
    elif student.instruments:
        instrument = student.instruments[0]
    else:
        instrument = ""

    booking = Booking(
        instructor_id=instructor.id,
        student_id=student.id,
        student_name=student.name,
        day=slot.day,
        start_time=slot.start_time,
        end_time=slot.end_time,
        instrument=instrument,
        recurring=recurring,
        notes=notes,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    return repo.add_booking(booking)


def sort_bookings(bookings: List[Booking]) -> List[Booking]:
    """Order bookings through the week: by weekday, then start time."""
    return sorted(bookings, key=lambda b: (DAYS_OF_WEEK.index(b.day), b.start_time))
