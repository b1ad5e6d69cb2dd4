"""
Enrollment and grading engine.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..core.entities import Course, Enrollment, Student
from ..core.enums import Grade
from ..core.exceptions import DuplicateEnrollmentError


DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class TranscriptLine:
    """One course on a student's transcript."""
    course_code: str
    title: str
    credits: int
    grade: Optional[Grade]

    @property
    def grade_label(self) -> str:
        return self.grade.name if self.grade is not None else "N/A"

    def __str__(self) -> str:
        return f"{self.course_code} | {self.title} | Grade: {self.grade_label}"


class EnrollmentService:
    """
    Enrolls students in courses, records grades and derives GPA reports.

    The service holds no state of its own: enrollments live on the student
    that owns them. Callers are expected to serialize access to the students
    they pass in.
    """

    def enroll(self, student: Student, course: Course) -> Enrollment:
        """Enroll a student in a course.

        Raises:
            DuplicateEnrollmentError: the student already has an enrollment
                for this course code.
        """
        if student.is_enrolled_in(course.code):
            raise DuplicateEnrollmentError(student.registration_number, course.code)

        enrollment = Enrollment(student, course)
        student._attach_enrollment(enrollment)
        return enrollment

    def record_grade(self, enrollment: Enrollment, mark: float) -> Grade:
        """Grade an enrollment from a mark, overwriting any previous grade."""
        grade = Grade.from_marks(mark)
        enrollment.assign_grade(grade)
        return grade

    def gpa(self, student: Student) -> float:
        """Mean grade points over all enrollments, ungraded ones scoring 0."""
        return student.gpa

    def gpa_distribution(self, students: Iterable[Student]) -> Dict[int, int]:
        """Count students per whole-number GPA bucket, in ascending bucket order."""
        counts: Dict[int, int] = {}
        for student in students:
            bucket = math.floor(self.gpa(student))
            counts[bucket] = counts.get(bucket, 0) + 1
        return {bucket: counts[bucket] for bucket in sorted(counts)}

    def top_students(self, students: Iterable[Student], n: int = DEFAULT_TOP_N) -> List[Student]:
        """The n students with the highest GPA; ties keep their original order."""
        if n <= 0:
            return []
        ranked = sorted(students, key=self.gpa, reverse=True)
        return ranked[:n]

    def transcript(self, student: Student) -> List[TranscriptLine]:
        """Transcript lines in the order the student enrolled."""
        return [
            TranscriptLine(
                course_code=enrollment.course_code,
                title=enrollment.course.title,
                credits=enrollment.course.credits,
                grade=enrollment.grade,
            )
            for enrollment in student.enrollments.values()
        ]
