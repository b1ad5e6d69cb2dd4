"""
Pipe-delimited interchange format for bulk import and export of records.

One entity per line, fields separated by ``|`` with no quoting or escaping,
and a single documentary header line that is skipped on import.
"""

import logging
import os
from typing import Any, Callable, Iterable, List, Optional, TextIO, TypeVar, Union

from ..core.entities import Course, CourseBuilder, Student
from ..core.enums import Semester
from ..core.exceptions import InterchangeIOError, InterchangeParseError, ValidationError
from ..core.interfaces import Repository

logger = logging.getLogger(__name__)

T = TypeVar('T')
PathLike = Union[str, "os.PathLike[str]"]

DELIMITER = "|"
STUDENT_HEADER = "id|regNo|name|email"
COURSE_HEADER = "code|title|credits|semester|department"
STUDENT_COLUMNS = 4
COURSE_COLUMNS = 5


class InterchangeCodec:
    """Reads and writes students and courses in the interchange format."""

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding

    # Stream level

    def write_students(self, students: Iterable[Student], stream: TextIO) -> int:
        """Write the header and one line per student. Returns the number of students."""
        return self._write_lines(STUDENT_HEADER, self._student_lines(students), stream)

    def write_courses(self, courses: Iterable[Course], stream: TextIO) -> int:
        """Write the header and one line per course. Returns the number of courses."""
        return self._write_lines(COURSE_HEADER, self._course_lines(courses), stream)

    def read_students(self, stream: TextIO,
                      repository: Optional[Repository[Student]] = None) -> List[Student]:
        """Parse students; each one is saved to ``repository`` as soon as it parses."""
        return self._read_entities(stream, self._parse_student, repository)

    def read_courses(self, stream: TextIO,
                     repository: Optional[Repository[Course]] = None) -> List[Course]:
        """Parse courses; each one is saved to ``repository`` as soon as it parses."""
        return self._read_entities(stream, self._parse_course, repository)

    # Path level

    def export_students(self, students: Iterable[Student], path: PathLike) -> int:
        count = self._export(path, STUDENT_HEADER, self._student_lines(students))
        logger.info("Exported %d students to %s", count, os.fspath(path))
        return count

    def export_courses(self, courses: Iterable[Course], path: PathLike) -> int:
        count = self._export(path, COURSE_HEADER, self._course_lines(courses))
        logger.info("Exported %d courses to %s", count, os.fspath(path))
        return count

    def import_students(self, path: PathLike,
                        repository: Optional[Repository[Student]] = None) -> List[Student]:
        students = self._import(path, lambda stream: self.read_students(stream, repository))
        logger.info("Imported %d students from %s", len(students), os.fspath(path))
        return students

    def import_courses(self, path: PathLike,
                       repository: Optional[Repository[Course]] = None) -> List[Course]:
        courses = self._import(path, lambda stream: self.read_courses(stream, repository))
        logger.info("Imported %d courses from %s", len(courses), os.fspath(path))
        return courses

    # Internals

    def _student_lines(self, students: Iterable[Student]) -> List[str]:
        return [
            self._join([s.id, s.registration_number, s.full_name, s.email])
            for s in students
        ]

    def _course_lines(self, courses: Iterable[Course]) -> List[str]:
        return [
            self._join([c.code, c.title, str(c.credits), c.semester.name, c.department])
            for c in courses
        ]

    @staticmethod
    def _join(fields: List[str]) -> str:
        for field in fields:
            if field is None or DELIMITER in field or "\n" in field or "\r" in field:
                raise ValidationError(
                    f"Field cannot be written to the interchange format: {field!r}",
                    error_code="unencodable_field",
                )
        return DELIMITER.join(fields)

    @staticmethod
    def _write_lines(header: str, lines: List[str], stream: TextIO) -> int:
        stream.write(header + "\n")
        for line in lines:
            stream.write(line + "\n")
        return len(lines)

    @staticmethod
    def _parse_student(cols: List[str]) -> Student:
        _require_columns(cols, STUDENT_COLUMNS)
        entity_id, registration_number, full_name, email = cols[:STUDENT_COLUMNS]
        return Student(entity_id, full_name, email, registration_number)

    @staticmethod
    def _parse_course(cols: List[str]) -> Course:
        _require_columns(cols, COURSE_COLUMNS)
        code, title, credits, semester, department = cols[:COURSE_COLUMNS]
        return (CourseBuilder()
                .code(code)
                .title(title)
                .credits(int(credits))
                .semester(Semester.from_name(semester))
                .department(department)
                .build())

    @staticmethod
    def _read_entities(stream: TextIO, parse_line: Callable[[List[str]], T],
                       repository: Optional[Repository[T]]) -> List[T]:
        parsed: List[T] = []
        try:
            for line_number, line in enumerate(stream, 1):
                if line_number == 1:
                    continue
                line = line.rstrip("\r\n")
                if not line.strip():
                    continue
                try:
                    entity = parse_line(line.split(DELIMITER))
                except (ValueError, ValidationError) as e:
                    message = e.message if isinstance(e, ValidationError) else str(e)
                    raise InterchangeParseError(
                        message,
                        line_number=line_number,
                        details={"line": line, "parsed": list(parsed)},
                    ) from e
                parsed.append(entity)
                if repository is not None:
                    repository.save(entity)
        except (OSError, UnicodeDecodeError) as e:
            raise InterchangeIOError(f"Failed to read interchange data: {e}") from e
        return parsed

    def _export(self, path: PathLike, header: str, lines: List[str]) -> int:
        # Lines are already formatted; a bad field never truncates the destination.
        try:
            with open(path, "w", encoding=self._encoding, newline="") as stream:
                return self._write_lines(header, lines, stream)
        except OSError as e:
            raise InterchangeIOError(f"Failed to write {os.fspath(path)}: {e}", path=os.fspath(path)) from e

    def _import(self, path: PathLike, read: Callable[[TextIO], List[Any]]) -> List[Any]:
        try:
            with open(path, "r", encoding=self._encoding, newline="") as stream:
                return read(stream)
        except InterchangeIOError as e:
            e.path = os.fspath(path)
            e.details["path"] = e.path
            raise
        except OSError as e:
            raise InterchangeIOError(f"Failed to read {os.fspath(path)}: {e}", path=os.fspath(path)) from e


def _require_columns(cols: List[str], expected: int) -> None:
    if len(cols) < expected:
        raise ValueError(f"expected {expected} columns, got {len(cols)}")
