"""
Core entities for the CCRM platform.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .enums import Grade, PersonType, Semester
from .exceptions import InvalidCourseDefinitionError
from .interfaces import Profiled


class Person(Profiled):
    """Identity fields shared by every person variant."""

    def __init__(self, entity_id: Optional[str], full_name: str, email: str, person_type: PersonType):
        self._id = entity_id or str(uuid.uuid4())
        self._full_name = full_name
        self._email = email
        self._person_type = person_type
        self._created_at = datetime.now(timezone.utc)

    @property
    def id(self) -> str:
        return self._id

    @property
    def full_name(self) -> str:
        return self._full_name

    @property
    def email(self) -> str:
        return self._email

    @property
    def person_type(self) -> PersonType:
        return self._person_type

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self._id,
            'full_name': self._full_name,
            'email': self._email,
            'person_type': self._person_type.value,
            'created_at': self._created_at.isoformat(),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, name={self._full_name!r})"


class Student(Person):
    """Student entity owning its enrollments, keyed by course code."""

    def __init__(self, entity_id: Optional[str], full_name: str, email: str,
                 registration_number: str):
        super().__init__(entity_id, full_name, email, PersonType.STUDENT)
        self._registration_number = registration_number
        self._active = True
        self._enrollments: Dict[str, "Enrollment"] = {}

    @property
    def registration_number(self) -> str:
        return self._registration_number

    @property
    def active(self) -> bool:
        return self._active

    @property
    def enrollments(self) -> Dict[str, "Enrollment"]:
        """Read-only view of the enrollments; use the enrollment service to add one."""
        return dict(self._enrollments)

    def get_enrollment(self, course_code: str) -> Optional["Enrollment"]:
        return self._enrollments.get(course_code)

    def is_enrolled_in(self, course_code: str) -> bool:
        return course_code in self._enrollments

    def _attach_enrollment(self, enrollment: "Enrollment") -> None:
        self._enrollments[enrollment.course_code] = enrollment

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False

    @property
    def gpa(self) -> float:
        """
        Mean grade points over every enrollment.

        Ungraded enrollments score 0 and still count in the denominator, so a
        course in progress pulls the average down. Conventional GPA would skip
        them; existing reports depend on this behaviour, so it is kept.
        """
        if not self._enrollments:
            return 0.0
        total = sum(enrollment.points for enrollment in self._enrollments.values())
        return total / len(self._enrollments)

    def profile(self) -> str:
        active = "true" if self._active else "false"
        return f"{self._full_name} ({self._registration_number}) Active:{active} GPA:{self.gpa:.2f}"

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'registration_number': self._registration_number,
            'active': self._active,
            'enrollments': [enrollment.to_dict() for enrollment in self._enrollments.values()],
        })
        return base_dict


class Instructor(Person):
    """Instructor entity. Courses refer to instructors by id only."""

    def __init__(self, entity_id: Optional[str], full_name: str, email: str,
                 employee_id: str, department: str):
        super().__init__(entity_id, full_name, email, PersonType.INSTRUCTOR)
        self._employee_id = employee_id
        self._department = department

    @property
    def employee_id(self) -> str:
        return self._employee_id

    @property
    def department(self) -> str:
        return self._department

    def profile(self) -> str:
        return f"{self._full_name} [{self._department}]"

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            'employee_id': self._employee_id,
            'department': self._department,
        })
        return base_dict


@dataclass(frozen=True)
class Course:
    """Immutable course definition. Build through CourseBuilder."""
    code: str
    title: str
    credits: int
    semester: Semester
    department: str
    instructor_id: Optional[str] = None

    def __post_init__(self):
        if not self.code or not self.code.strip() or not self.title or not self.title.strip():
            raise InvalidCourseDefinitionError("Code/Title required")
        if isinstance(self.credits, bool) or not isinstance(self.credits, int) or self.credits <= 0:
            raise InvalidCourseDefinitionError(
                f"Credits must be a positive integer, got {self.credits!r}",
                details={"code": self.code},
            )
        if not isinstance(self.semester, Semester):
            raise InvalidCourseDefinitionError(
                f"Unknown semester: {self.semester!r}", details={"code": self.code}
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'title': self.title,
            'credits': self.credits,
            'semester': self.semester.name,
            'department': self.department,
            'instructor_id': self.instructor_id,
        }

    def __str__(self) -> str:
        return f"{self.code}-{self.title}({self.credits}cr) [{self.semester.name}]"


class CourseBuilder:
    """Fluent builder for Course; build() validates the result."""

    def __init__(self):
        self._code: Optional[str] = None
        self._title: Optional[str] = None
        self._credits: Optional[int] = None
        self._semester = Semester.FALL
        self._department = ""
        self._instructor_id: Optional[str] = None

    def code(self, code: str) -> "CourseBuilder":
        self._code = code
        return self

    def title(self, title: str) -> "CourseBuilder":
        self._title = title
        return self

    def credits(self, credits: int) -> "CourseBuilder":
        self._credits = credits
        return self

    def semester(self, semester: Semester) -> "CourseBuilder":
        self._semester = semester
        return self

    def department(self, department: str) -> "CourseBuilder":
        self._department = department
        return self

    def instructor(self, instructor_id: Optional[str]) -> "CourseBuilder":
        self._instructor_id = instructor_id
        return self

    def build(self) -> Course:
        if not self._code or not self._title:
            raise InvalidCourseDefinitionError("Code/Title required")
        return Course(
            code=self._code,
            title=self._title,
            credits=self._credits,
            semester=self._semester,
            department=self._department,
            instructor_id=self._instructor_id,
        )


class Enrollment:
    """Link between one student and one course, graded at most once at a time."""

    def __init__(self, student: Student, course: Course):
        self._student = student
        self._course = course
        self._enrolled_at = datetime.now(timezone.utc)
        self._grade: Optional[Grade] = None

    @property
    def student(self) -> Student:
        return self._student

    @property
    def course(self) -> Course:
        return self._course

    @property
    def course_code(self) -> str:
        return self._course.code

    @property
    def enrolled_at(self) -> datetime:
        return self._enrolled_at

    @property
    def grade(self) -> Optional[Grade]:
        return self._grade

    @property
    def is_graded(self) -> bool:
        return self._grade is not None

    @property
    def points(self) -> int:
        """Grade points, 0 while the course is in progress."""
        return self._grade.points if self._grade is not None else 0

    def assign_grade(self, grade: Grade) -> None:
        """Set the grade, replacing any earlier one."""
        self._grade = grade

    def to_dict(self) -> Dict[str, Any]:
        return {
            'registration_number': self._student.registration_number,
            'course_code': self._course.code,
            'enrolled_at': self._enrolled_at.isoformat(),
            'grade': self._grade.name if self._grade is not None else None,
        }

    def __repr__(self) -> str:
        grade = self._grade.name if self._grade is not None else "N/A"
        return f"Enrollment({self._student.registration_number} -> {self._course.code}, grade={grade})"
