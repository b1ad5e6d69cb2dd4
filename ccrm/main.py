"""
Main entry point for the CCRM platform.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import AppConfig
from .core.entities import Student, Instructor, CourseBuilder
from .core.enums import Semester
from .core.exceptions import CCRMException, DuplicateEnrollmentError
from .persistence import StudentRepository, CourseRepository, InstructorRepository, InterchangeCodec
from .services import EnrollmentService

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ENROLLMENT_NOTE = ("Interchange files hold students and courses only; "
                   "enrollments and grades from earlier sessions are not stored, so GPAs start at 0.00.")


def setup_logging(level: str = "INFO") -> None:
    """Send platform logs to stderr in one format."""
    root_logger = logging.getLogger("ccrm")
    root_logger.setLevel(level.upper())
    if not any(getattr(h, "_ccrm_handler", False) for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ccrm_handler = True
        root_logger.addHandler(handler)


class CCRMApplication:
    """Wires configuration, repositories, the engine and the codec together."""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig()
        self.students = StudentRepository()
        self.courses = CourseRepository()
        self.instructors = InstructorRepository()
        self.enrollment_service = EnrollmentService()
        self.codec = InterchangeCodec()
        self._rest_api = None

    @property
    def config(self) -> AppConfig:
        return self._config

    def load(self) -> None:
        """Load the records kept in the data folder, if any."""
        if self._config.students_path.exists():
            self.codec.import_students(self._config.students_path, self.students)
        if self._config.courses_path.exists():
            self.codec.import_courses(self._config.courses_path, self.courses)

    def save(self) -> None:
        """Write all students and courses back to the data folder."""
        self._config.ensure_data_folder()
        self.codec.export_students(self.students.find_all(), self._config.students_path)
        self.codec.export_courses(self.courses.find_all(), self._config.courses_path)

    def import_files(self, students_path: Optional[str], courses_path: Optional[str]) -> None:
        if students_path:
            imported = self.codec.import_students(students_path, self.students)
            print(f"✓ Imported {len(imported)} students from {students_path}")
        if courses_path:
            imported = self.codec.import_courses(courses_path, self.courses)
            print(f"✓ Imported {len(imported)} courses from {courses_path}")

    def export_files(self, students_path: str, courses_path: str) -> None:
        count = self.codec.export_students(self.students.find_all(), students_path)
        print(f"✓ Exported {count} students to {students_path}")
        count = self.codec.export_courses(self.courses.find_all(), courses_path)
        print(f"✓ Exported {count} courses to {courses_path}")

    def print_transcripts(self) -> None:
        for student in self.students:
            print(f"\n--- {student.full_name} Transcript ---")
            for line in self.enrollment_service.transcript(student):
                print(line)
            print(f"GPA: {self.enrollment_service.gpa(student):.2f}")

    def print_reports(self, top_n: Optional[int] = None) -> None:
        students = self.students.find_all()
        print("\n--- GPA Distribution ---")
        for bucket, count in self.enrollment_service.gpa_distribution(students).items():
            print(f"GPA {bucket} : {count} students")

        print("\n--- Top Students ---")
        limit = top_n if top_n is not None else self._config.top_n
        for student in self.enrollment_service.top_students(students, limit):
            print(f"{student.full_name} GPA:{self.enrollment_service.gpa(student):.2f}")

    def create_rest_api(self):
        """Build the FastAPI application over this application's state."""
        if self._rest_api is None:
            from .api.rest_api import CCRMRestAPI

            self._rest_api = CCRMRestAPI(
                self._config,
                self.enrollment_service,
                self.students,
                self.courses,
                self.instructors,
                self.codec,
            )
        return self._rest_api

    def start_rest_server(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """Serve the REST API until interrupted."""
        import uvicorn

        host = host or self._config.rest_host
        port = port or self._config.rest_port
        print(f"✓ REST server starting on {host}:{port}")
        print(f"  - API Docs: http://localhost:{port}/docs")
        uvicorn.run(
            self.create_rest_api().app,
            host=host,
            port=port,
            log_level=self._config.log_level.lower()
        )

    def create_sample_data(self) -> None:
        """Create sample records for demonstration."""
        instructor = Instructor(None, "Grace Hopper", "grace@university.edu", "E100", "CSE")
        self.instructors.add(instructor)

        courses = [
            CourseBuilder().code("CS101").title("Introduction to Programming").credits(4)
            .semester(Semester.FALL).department("CSE").instructor(instructor.id).build(),
            CourseBuilder().code("CS201").title("Data Structures").credits(4)
            .semester(Semester.SPRING).department("CSE").instructor(instructor.id).build(),
            CourseBuilder().code("MA110").title("Discrete Mathematics").credits(3)
            .semester(Semester.SUMMER).department("MATH").build(),
        ]
        for course in courses:
            self.courses.add(course)

        students = [
            Student("1", "Alice Johnson", "alice@university.edu", "R001"),
            Student("2", "Bob Smith", "bob@university.edu", "R002"),
            Student("3", "Carol Davis", "carol@university.edu", "R003"),
        ]
        for student in students:
            self.students.add(student)

    def run_demo(self) -> None:
        """Run a demonstration of the enrollment engine."""
        print("Running CCRM demonstration...")
        self.create_sample_data()

        marks = {
            "R001": {"CS101": 95, "CS201": 88, "MA110": 79},
            "R002": {"CS101": 62, "CS201": 45},
            "R003": {"CS101": 71, "MA110": None},
        }
        for registration_number, course_marks in marks.items():
            student = self.students.get(registration_number)
            for code, mark in course_marks.items():
                enrollment = self.enrollment_service.enroll(student, self.courses.get(code))
                if mark is not None:
                    self.enrollment_service.record_grade(enrollment, mark)

        try:
            self.enrollment_service.enroll(self.students.get("R001"), self.courses.get("CS101"))
        except DuplicateEnrollmentError as e:
            print(f"Rejected: {e.message}")

        print("\n=== Profiles ===")
        for person in self.students.find_all() + self.instructors.find_all():
            print(person.profile())

        self.print_transcripts()
        self.print_reports()
        print("\n✓ Demo completed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ccrm", description="Campus Course & Records Manager",
                                     epilog=ENROLLMENT_NOTE)
    parser.add_argument("--config", type=str, help="Configuration file path (JSON)")
    parser.add_argument("--data-folder", type=str, help="Folder holding the record files")
    parser.add_argument("--log-level", type=str, help="Logging level, e.g. INFO or DEBUG")

    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import interchange files into the data folder")
    import_parser.add_argument("--students", type=str, help="Students file")
    import_parser.add_argument("--courses", type=str, help="Courses file")

    export_parser = subparsers.add_parser("export", help="Export the data folder's records")
    export_parser.add_argument("--students", type=str, default="students_export.txt", help="Students output file")
    export_parser.add_argument("--courses", type=str, default="courses_export.txt", help="Courses output file")

    report_parser = subparsers.add_parser(
        "report", help="Print GPA distribution and top students (session enrollments only)")
    report_parser.add_argument("--top", type=int, help="Number of top students to list")

    subparsers.add_parser("transcript", help="Print every student's transcript (session enrollments only)")
    subparsers.add_parser("demo", help="Run demo mode")

    serve_parser = subparsers.add_parser("serve", help="Start the REST server")
    serve_parser.add_argument("--host", type=str, help="REST server host")
    serve_parser.add_argument("--port", type=int, help="REST server port")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig.load(args.config).with_overrides(
            data_folder=args.data_folder,
            log_level=args.log_level,
        )
        setup_logging(config.log_level)
        application = CCRMApplication(config)

        if args.command == "demo":
            application.run_demo()
            return 0

        application.load()
        if args.command == "import":
            if not args.students and not args.courses:
                print("Nothing to import: pass --students and/or --courses")
                return 2
            application.import_files(args.students, args.courses)
            application.save()
        elif args.command == "export":
            application.export_files(args.students, args.courses)
        elif args.command == "report":
            print(ENROLLMENT_NOTE)
            application.print_reports(args.top)
        elif args.command == "transcript":
            print(ENROLLMENT_NOTE)
            application.print_transcripts()
        elif args.command == "serve":
            application.start_rest_server(args.host, args.port)
    except CCRMException as e:
        logger.error("%s failed: %s", args.command, e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
