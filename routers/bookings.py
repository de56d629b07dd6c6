from typing import List, Optional
from fastapi import APIRouter, Depends, status
from models.schemas import Booking, BookingRequest
from service.booking import book_match_slot, sort_bookings
from service.storage import SchedulerRepository, get_repository

router = APIRouter()


@router.get("/bookings", response_model=List[Booking])
def list_bookings(
    instructor_id: Optional[str] = None,
    student_id: Optional[str] = None,
    repo: SchedulerRepository = Depends(get_repository)
):
    """List bookings ordered through the week, optionally for one instructor or student."""
    return sort_bookings(repo.list_bookings(instructor_id=instructor_id, student_id=student_id))


@router.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(request: BookingRequest, repo: SchedulerRepository = Depends(get_repository)):
    """
    Book one overlapping slot of an instructor/student match.

    Returns 409 if the slot collides with a lesson already on the
    instructor's calendar or on the student's.
    """
    return book_match_slot(
        repo,
        instructor_id=request.instructor_id,
        student_id=request.student_id,
        slot_id=request.slot_id,
        recurring=request.recurring,
        notes=request.notes,
    )


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(booking_id: str, repo: SchedulerRepository = Depends(get_repository)):
    repo.delete_booking(booking_id)
