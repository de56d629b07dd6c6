from typing import List, Literal
from fastapi import APIRouter, Depends, Query
from config import settings
from models.schemas import (
    MatchResult, MatchRequest, RankRequest, OverlapRequest, TimeSlot
)
from service.booking import bookable_slots
from service.matching import compute_match, rank_matches, find_overlaps
from service.storage import SchedulerRepository, get_repository

# Create a router instance
router = APIRouter()


@router.get("/instructors/{instructor_id}/matches", response_model=List[MatchResult])
def list_matches(
    instructor_id: str,
    match_filter: Literal["all", "good", "bookable"] = Query("all", alias="filter"),
    repo: SchedulerRepository = Depends(get_repository)
):
    """
    Rank every stored student against an instructor.

    - all: every student, best match first
    - good: score at or above the good-match threshold
    - bookable: at least one overlapping slot and a minimum score
    """
    instructor = repo.get_instructor(instructor_id)
    matches = rank_matches(instructor, repo.list_students())

    if match_filter == "good":
        matches = [m for m in matches if m.score >= settings.good_match_threshold]
    elif match_filter == "bookable":
        matches = [m for m in matches if m.time_overlap and m.score >= settings.bookable_min_score]
    return matches


@router.get("/instructors/{instructor_id}/matches/{student_id}", response_model=MatchResult)
def get_match(
    instructor_id: str,
    student_id: str,
    repo: SchedulerRepository = Depends(get_repository)
):
    """Score one stored student against an instructor."""
    return compute_match(repo.get_instructor(instructor_id), repo.get_student(student_id))


@router.get("/instructors/{instructor_id}/matches/{student_id}/bookable-slots", response_model=List[TimeSlot])
def get_bookable_slots(
    instructor_id: str,
    student_id: str,
    repo: SchedulerRepository = Depends(get_repository)
):
    """Overlapping slots not already taken on the instructor's calendar."""
    return bookable_slots(repo, instructor_id, student_id)


@router.post("/match", response_model=MatchResult)
def match(request: MatchRequest):
    """Score a student against an instructor without touching storage."""
    return compute_match(request.instructor, request.student)


@router.post("/rank", response_model=List[MatchResult])
def rank(request: RankRequest):
    """Rank the given students against the given instructor."""
    return rank_matches(request.instructor, request.students)


@router.post("/overlaps", response_model=List[TimeSlot])
def overlaps(request: OverlapRequest):
    """Intersect two sets of weekly time slots."""
    return find_overlaps(request.slots_a, request.slots_b)
