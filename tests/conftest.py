# /tests/conftest.py

import pytest

from ccrm.core.entities import CourseBuilder, Student
from ccrm.core.enums import Semester
from ccrm.services import EnrollmentService


def make_course(code, title=None, credits=3, semester=Semester.FALL, department="CSE"):
    return (CourseBuilder()
            .code(code)
            .title(title or f"Course {code}")
            .credits(credits)
            .semester(semester)
            .department(department)
            .build())


def enroll_with_marks(service, student, courses, marks):
    """Enroll a student in each course and grade it; a mark of None leaves it ungraded."""
    for course, mark in zip(courses, marks):
        enrollment = service.enroll(student, course)
        if mark is not None:
            service.record_grade(enrollment, mark)
    return student


@pytest.fixture
def service():
    """A fresh enrollment engine."""
    return EnrollmentService()


@pytest.fixture
def course():
    return make_course("CS101", "Introduction to Programming", credits=4)


@pytest.fixture
def courses():
    """Ten distinct courses, enough to shape any GPA to one decimal place."""
    return [make_course(f"CS{100 + i}") for i in range(10)]


@pytest.fixture
def student():
    return Student("1", "Alice Johnson", "alice@university.edu", "R001")
