"""
Key-value storage for instructors, students and bookings.

Each entity collection is kept as a list of plain dicts under a fixed key.
Stored data is migrated to the current schema version and normalized at
this boundary, so the matching core only ever sees complete records.
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from config import settings
from models.schemas import InstructorProfile, Student, Booking
from service.exceptions import AlreadyExistsError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

INSTRUCTORS_KEY = "mlb_instructors"
STUDENTS_KEY = "mlb_students"
BOOKINGS_KEY = "mlb_bookings"
SCHEMA_VERSION_KEY = "mlb_schema_version"

SCHEMA_VERSION = 2


# ===========================
# Stores
# ===========================

class KeyValueStore(ABC):
    """Minimal get/set interface the repository depends on."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store, used by default and in tests."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStore(KeyValueStore):
    """
    All keys in a single JSON document, rewritten on every set.

    An unreadable file raises ``StorageError`` and is left untouched.
    Writes go to a temporary file that replaces the document atomically.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error(f"Unreadable store file {self.path}: {e}")
            raise StorageError(
                f"Store file {self.path} is not valid JSON.",
                details={"path": str(self.path), "error": str(e)},
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


# ===========================
# Migrations and normalization
# ===========================

def _migrate_v1_to_v2(store: KeyValueStore) -> None:
    """Students used to carry a single ``instrument`` string."""
    students = store.get(STUDENTS_KEY, [])
    for student in students:
        legacy = student.pop("instrument", None)
        if "instruments" not in student:
            student["instruments"] = [legacy] if legacy else []
    store.set(STUDENTS_KEY, students)


MIGRATIONS: Dict[int, Callable[[KeyValueStore], None]] = {
    1: _migrate_v1_to_v2,
}


def migrate(store: KeyValueStore) -> int:
    """
    Bring stored data up to ``SCHEMA_VERSION``.

    Data written before versioning existed counts as version 1; an empty
    store starts at the current version.

    Returns:
        The version the store was at before migrating
    """
    version = store.get(SCHEMA_VERSION_KEY)
    if version is None:
        has_data = any(store.get(key) for key in (INSTRUCTORS_KEY, STUDENTS_KEY, BOOKINGS_KEY))
        version = 1 if has_data else SCHEMA_VERSION

    start_version = version
    while version < SCHEMA_VERSION:
        logger.info(f"Migrating store from schema v{version} to v{version + 1}")
        MIGRATIONS[version](store)
        version += 1

    store.set(SCHEMA_VERSION_KEY, version)
    return start_version


def normalize_student(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fill optional student fields that older records may lack."""
    student = dict(raw)
    student.setdefault("email", "")
    student.setdefault("phone", "")
    student["instruments"] = student.get("instruments") or []
    student["skill_level"] = student.get("skill_level") or "Beginner"
    student["preferred_duration"] = student.get("preferred_duration") or 60
    student["availability"] = student.get("availability") or []
    return student


def normalize_instructor(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fill optional instructor fields that older records may lack."""
    instructor = dict(raw)
    instructor.setdefault("email", "")
    instructor.setdefault("phone", "")
    for field in ("instruments", "skill_levels", "lesson_durations", "availability"):
        instructor[field] = instructor.get(field) or []
    return instructor


# ===========================
# Repository
# ===========================

class SchedulerRepository:
    """Typed access to the instructor, student and booking collections."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        migrate(store)

    # Instructors

    def list_instructors(self) -> List[InstructorProfile]:
        return [
            InstructorProfile.model_validate(normalize_instructor(raw))
            for raw in self.store.get(INSTRUCTORS_KEY, [])
        ]

    def set_instructors(self, instructors: List[InstructorProfile]) -> None:
        self.store.set(INSTRUCTORS_KEY, [i.model_dump(mode="json") for i in instructors])

    def get_instructor(self, instructor_id: str) -> InstructorProfile:
        for instructor in self.list_instructors():
            if instructor.id == instructor_id:
                return instructor
        raise NotFoundError("Instructor", instructor_id)

    def add_instructor(self, instructor: InstructorProfile) -> InstructorProfile:
        instructors = self.list_instructors()
        if any(i.id == instructor.id for i in instructors):
            raise AlreadyExistsError("Instructor", instructor.id)
        instructors.append(instructor)
        self.set_instructors(instructors)
        logger.info(f"Added instructor {instructor.id} ({instructor.name})")
        return instructor

    def update_instructor(self, instructor: InstructorProfile) -> InstructorProfile:
        instructors = self.list_instructors()
        for index, existing in enumerate(instructors):
            if existing.id == instructor.id:
                instructors[index] = instructor
                self.set_instructors(instructors)
                logger.info(f"Updated instructor {instructor.id}")
                return instructor
        raise NotFoundError("Instructor", instructor.id)

    def delete_instructor(self, instructor_id: str) -> None:
        instructors = self.list_instructors()
        remaining = [i for i in instructors if i.id != instructor_id]
        if len(remaining) == len(instructors):
            raise NotFoundError("Instructor", instructor_id)
        self.set_instructors(remaining)
        self.set_bookings([b for b in self.list_bookings() if b.instructor_id != instructor_id])
        logger.info(f"Deleted instructor {instructor_id} and their bookings")

    # Students

    def list_students(self) -> List[Student]:
        return [
            Student.model_validate(normalize_student(raw))
            for raw in self.store.get(STUDENTS_KEY, [])
        ]

    def set_students(self, students: List[Student]) -> None:
        self.store.set(STUDENTS_KEY, [s.model_dump(mode="json") for s in students])

    def get_student(self, student_id: str) -> Student:
        for student in self.list_students():
            if student.id == student_id:
                return student
        raise NotFoundError("Student", student_id)

    def add_student(self, student: Student) -> Student:
        students = self.list_students()
        if any(s.id == student.id for s in students):
            raise AlreadyExistsError("Student", student.id)
        students.append(student)
        self.set_students(students)
        logger.info(f"Added student {student.id} ({student.name})")
        return student

    def update_student(self, student: Student) -> Student:
        students = self.list_students()
        for index, existing in enumerate(students):
            if existing.id == student.id:
                students[index] = student
                self.set_students(students)
                logger.info(f"Updated student {student.id}")
                return student
        raise NotFoundError("Student", student.id)

    def delete_student(self, student_id: str) -> None:
        students = self.list_students()
        remaining = [s for s in students if s.id != student_id]
        if len(remaining) == len(students):
            raise NotFoundError("Student", student_id)
        self.set_students(remaining)
        self.set_bookings([b for b in self.list_bookings() if b.student_id != student_id])
        logger.info(f"Deleted student {student_id} and their bookings")

    # Bookings

    def list_bookings(self, instructor_id: Optional[str] = None, student_id: Optional[str] = None) -> List[Booking]:
        bookings = [Booking.model_validate(raw) for raw in self.store.get(BOOKINGS_KEY, [])]
        if instructor_id is not None:
            bookings = [b for b in bookings if b.instructor_id == instructor_id]
        if student_id is not None:
            bookings = [b for b in bookings if b.student_id == student_id]
        return bookings

    def set_bookings(self, bookings: List[Booking]) -> None:
        self.store.set(BOOKINGS_KEY, [b.model_dump(mode="json") for b in bookings])

    def add_booking(self, booking: Booking) -> Booking:
        bookings = self.list_bookings()
        bookings.append(booking)
        self.set_bookings(bookings)
        logger.info(
            f"Booked {booking.student_name} with instructor {booking.instructor_id} "
            f"on {booking.day} {booking.start_time}-{booking.end_time}"
        )
        return booking

    def delete_booking(self, booking_id: str) -> None:
        bookings = self.list_bookings()
        remaining = [b for b in bookings if b.id != booking_id]
        if len(remaining) == len(bookings):
            raise NotFoundError("Booking", booking_id)
        self.set_bookings(remaining)
        logger.info(f"Deleted booking {booking_id}")


def create_store() -> KeyValueStore:
    """Build the store configured in settings."""
    if settings.storage_backend == "json":
        logger.info(f"Using JSON file store at {settings.storage_path}")
        return JsonFileStore(settings.storage_path)
    return MemoryStore()


@lru_cache(maxsize=1)
def get_repository() -> SchedulerRepository:
    """FastAPI dependency returning the process-wide repository."""
    return SchedulerRepository(create_store())
