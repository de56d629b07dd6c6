from typing import List
from fastapi import APIRouter, Depends, status
from models.schemas import InstructorProfile
from service.storage import SchedulerRepository, get_repository

router = APIRouter()


@router.get("/instructors", response_model=List[InstructorProfile])
def list_instructors(repo: SchedulerRepository = Depends(get_repository)):
    return repo.list_instructors()


@router.post("/instructors", response_model=InstructorProfile, status_code=status.HTTP_201_CREATED)
def create_instructor(instructor: InstructorProfile, repo: SchedulerRepository = Depends(get_repository)):
    """Create an instructor profile. Availability slots are validated here."""
    return repo.add_instructor(instructor)


@router.get("/instructors/{instructor_id}", response_model=InstructorProfile)
def get_instructor(instructor_id: str, repo: SchedulerRepository = Depends(get_repository)):
    return repo.get_instructor(instructor_id)


@router.put("/instructors/{instructor_id}", response_model=InstructorProfile)
def update_instructor(
    instructor_id: str,
    instructor: InstructorProfile,
    repo: SchedulerRepository = Depends(get_repository)
):
    """Replace an instructor profile; the path id wins over the body id."""
    return repo.update_instructor(instructor.model_copy(update={"id": instructor_id}))


@router.delete("/instructors/{instructor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_instructor(instructor_id: str, repo: SchedulerRepository = Depends(get_repository)):
    """Delete an instructor together with their bookings."""
    repo.delete_instructor(instructor_id)
