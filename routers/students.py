from typing import List
from fastapi import APIRouter, Depends, status
from models.schemas import Student
from service.storage import SchedulerRepository, get_repository

router = APIRouter()


@router.get("/students", response_model=List[Student])
def list_students(repo: SchedulerRepository = Depends(get_repository)):
    return repo.list_students()


@router.post("/students", response_model=Student, status_code=status.HTTP_201_CREATED)
def create_student(student: Student, repo: SchedulerRepository = Depends(get_repository)):
    return repo.add_student(student)


@router.get("/students/{student_id}", response_model=Student)
def get_student(student_id: str, repo: SchedulerRepository = Depends(get_repository)):
    return repo.get_student(student_id)


@router.put("/students/{student_id}", response_model=Student)
def update_student(
    student_id: str,
    student: Student,
    repo: SchedulerRepository = Depends(get_repository)
):
    return repo.update_student(student.model_copy(update={"id": student_id}))


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: str, repo: SchedulerRepository = Depends(get_repository)):
    """Delete a student. Their bookings go with them."""
    repo.delete_student(student_id)
