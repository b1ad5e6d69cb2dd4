"""
In-memory repositories for the record entities.

Each repository is a keyed map owned by a single writer. Callers that share a
repository between threads must serialize access themselves (the REST API
holds one lock per request).
"""

from abc import abstractmethod
from typing import Any, Dict, Iterator, List, Optional, TypeVar, Generic

from ..core.entities import Course, Instructor, Student
from ..core.interfaces import Repository
from ..core.exceptions import DuplicateEntityError, ResourceNotFoundError

T = TypeVar('T')


class BaseRepository(Repository[T], Generic[T]):
    """Base repository keeping entities in insertion order."""

    def __init__(self, entity_type: str):
        self._entity_type = entity_type
        self._entities: Dict[str, T] = {}

    @abstractmethod
    def _key(self, entity: T) -> str:
        """Primary key of an entity."""
        pass

    def save(self, entity: T) -> T:
        """Insert or replace an entity under its key."""
        self._entities[self._key(entity)] = entity
        return entity

    def add(self, entity: T) -> T:
        """Insert an entity, refusing to replace an existing one."""
        key = self._key(entity)
        if key in self._entities:
            raise DuplicateEntityError(
                f"{self._entity_type} {key} already exists",
                error_code=f"duplicate_{self._entity_type}",
                details={"key": key},
            )
        self._entities[key] = entity
        return entity

    def find_by_id(self, entity_id: str) -> Optional[T]:
        return self._entities.get(entity_id)

    def get(self, entity_id: str) -> T:
        """Find an entity by key or raise ResourceNotFoundError."""
        entity = self._entities.get(entity_id)
        if entity is None:
            raise ResourceNotFoundError(
                f"{self._entity_type.capitalize()} not found: {entity_id}",
                error_code=f"{self._entity_type}_not_found",
                details={"key": entity_id},
            )
        return entity

    def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """All entities whose attributes equal every filter value."""
        entities = list(self._entities.values())
        if filters:
            entities = [
                entity for entity in entities
                if all(getattr(entity, name, None) == value for name, value in filters.items())
            ]
        return entities

    def delete(self, entity_id: str) -> bool:
        return self._entities.pop(entity_id, None) is not None

    def count(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)


class StudentRepository(BaseRepository[Student]):
    """Students keyed by registration number."""

    def __init__(self):
        super().__init__("student")

    def _key(self, entity: Student) -> str:
        return entity.registration_number

    def find_active(self) -> List[Student]:
        return self.find_all({"active": True})


class CourseRepository(BaseRepository[Course]):
    """Courses keyed by course code."""

    def __init__(self):
        super().__init__("course")

    def _key(self, entity: Course) -> str:
        return entity.code

    def find_by_department(self, department: str) -> List[Course]:
        return self.find_all({"department": department})

    def find_by_instructor(self, instructor_id: str) -> List[Course]:
        return self.find_all({"instructor_id": instructor_id})


class InstructorRepository(BaseRepository[Instructor]):
    """Instructors keyed by entity id."""

    def __init__(self):
        super().__init__("instructor")

    def _key(self, entity: Instructor) -> str:
        return entity.id

    def find_by_employee_id(self, employee_id: str) -> Optional[Instructor]:
        for instructor in self._entities.values():
            if instructor.employee_id == employee_id:
                return instructor
        return None
