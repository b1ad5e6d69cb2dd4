"""
REST API for the CCRM platform using FastAPI.
"""

import logging
import threading
from typing import Optional, Dict, List
from datetime import datetime, timezone
from pathlib import Path
from pydantic import BaseModel, Field

from fastapi import FastAPI, HTTPException, status

from .. import __version__
from ..config import AppConfig
from ..core.entities import Student, Instructor, CourseBuilder, Course, Enrollment
from ..core.enums import Semester
from ..core.exceptions import (
    CCRMException, ValidationError, DuplicateEnrollmentError, DuplicateEntityError,
    ResourceNotFoundError, InterchangeParseError, InterchangeIOError,
)
from ..services import EnrollmentService, TranscriptLine
from ..persistence import StudentRepository, CourseRepository, InstructorRepository, InterchangeCodec

logger = logging.getLogger(__name__)

SEMESTER_PATTERN = r'^(' + '|'.join(s.name for s in Semester) + r')$'
# Exported fields must not contain the interchange delimiter or a line break.
FIELD_PATTERN = r'^[^|\r\n]*$'
EMAIL_PATTERN = r'^[^@|\s]+@[^@|\s]+\.[^@|\s]+$'


# Pydantic models for API
class StudentCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=64, pattern=FIELD_PATTERN)
    registration_number: str = Field(..., min_length=1, max_length=32, pattern=FIELD_PATTERN)
    full_name: str = Field(..., min_length=1, max_length=200, pattern=FIELD_PATTERN)
    email: str = Field(..., pattern=EMAIL_PATTERN)


class EnrollmentResponse(BaseModel):
    registration_number: str
    course_code: str
    enrolled_at: datetime
    grade: Optional[str] = None
    points: int


class StudentResponse(BaseModel):
    id: str
    registration_number: str
    full_name: str
    email: str
    active: bool
    gpa: float
    profile: str
    enrollments: List[EnrollmentResponse] = []
    created_at: datetime


class CourseCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, pattern=FIELD_PATTERN)
    title: str = Field(..., min_length=1, max_length=200, pattern=FIELD_PATTERN)
    credits: int = Field(..., ge=1, le=10)
    semester: str = Field(..., pattern=SEMESTER_PATTERN)
    department: str = Field("", max_length=100, pattern=FIELD_PATTERN)
    instructor_id: Optional[str] = None


class CourseResponse(BaseModel):
    code: str
    title: str
    credits: int
    semester: str
    department: str
    instructor_id: Optional[str] = None


class InstructorCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=64)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r'^[^@]+@[^@]+\.[^@]+$')
    employee_id: str = Field(..., min_length=1, max_length=32)
    department: str = Field(..., min_length=1, max_length=100)


class InstructorResponse(BaseModel):
    id: str
    full_name: str
    email: str
    employee_id: str
    department: str
    profile: str
    created_at: datetime


class EnrollmentRequest(BaseModel):
    registration_number: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)


class GradeRequest(BaseModel):
    mark: float = Field(..., ge=0, le=100)


class TranscriptLineResponse(BaseModel):
    course_code: str
    title: str
    credits: int
    grade: Optional[str] = None


class TranscriptResponse(BaseModel):
    registration_number: str
    full_name: str
    lines: List[TranscriptLineResponse]
    gpa: float


class DistributionBucket(BaseModel):
    bucket: int
    count: int


class TopStudentResponse(BaseModel):
    registration_number: str
    full_name: str
    gpa: float


class InterchangeImportRequest(BaseModel):
    students_path: Optional[str] = None
    courses_path: Optional[str] = None


class InterchangeResponse(BaseModel):
    success: bool
    message: str
    students: int = 0
    courses: int = 0
    students_path: Optional[str] = None
    courses_path: Optional[str] = None


def _http_error(error: CCRMException) -> HTTPException:
    """Map a platform exception to an HTTP error."""
    message = error.message
    if isinstance(error, ResourceNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (DuplicateEnrollmentError, DuplicateEntityError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, InterchangeParseError):
        # File content stays out of responses; the log has the full message.
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
        message = f"Malformed record at line {error.line_number}"
    elif isinstance(error, InterchangeIOError) and isinstance(error.__cause__, FileNotFoundError):
        code = status.HTTP_404_NOT_FOUND
        message = "Interchange file not found"
    elif isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail={"error": error.error_code, "message": message})


class CCRMRestAPI:
    """REST API over the enrollment engine and the record repositories."""

    def __init__(self, config: AppConfig, enrollment_service: EnrollmentService,
                 student_repo: StudentRepository, course_repo: CourseRepository,
                 instructor_repo: InstructorRepository, codec: InterchangeCodec):
        self._config = config
        self._enrollment_service = enrollment_service
        self._student_repo = student_repo
        self._course_repo = course_repo
        self._instructor_repo = instructor_repo
        self._codec = codec

        # Repositories are single-writer; every request runs under this lock.
        self._lock = threading.RLock()

        self.app = FastAPI(
            title="CCRM API",
            description="Campus course records: students, courses, enrollments and grades",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            """Root endpoint."""
            return {
                "message": "CCRM API",
                "version": __version__,
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        # Student endpoints
        @self.app.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
        async def create_student(student_data: StudentCreate):
            """Create a new student."""
            try:
                with self._lock:
                    student = Student(
                        student_data.id,
                        student_data.full_name,
                        student_data.email,
                        student_data.registration_number,
                    )
                    self._student_repo.add(student)
                    logger.info("Added student %s", student.registration_number)
                    return self._student_to_response(student)
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.get("/students/{registration_number}", response_model=StudentResponse)
        async def get_student(registration_number: str):
            """Get a student by registration number."""
            try:
                with self._lock:
                    return self._student_to_response(self._student_repo.get(registration_number))
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.get("/students", response_model=List[StudentResponse])
        async def list_students(skip: int = 0, limit: int = 100, active: Optional[bool] = None):
            """List students, optionally only active or inactive ones."""
            with self._lock:
                if active:
                    students = self._student_repo.find_active()
                else:
                    students = self._student_repo.find_all({"active": active} if active is not None else None)
                return [self._student_to_response(student) for student in students[skip:skip + limit]]

        @self.app.post("/students/{registration_number}/deactivate", response_model=StudentResponse)
        async def deactivate_student(registration_number: str):
            """Mark a student inactive. Enrollments are kept."""
            try:
                with self._lock:
                    student = self._student_repo.get(registration_number)
                    student.deactivate()
                    return self._student_to_response(student)
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.get("/students/{registration_number}/transcript", response_model=TranscriptResponse)
        async def get_transcript(registration_number: str):
            """Transcript of one student."""
            try:
                with self._lock:
                    student = self._student_repo.get(registration_number)
                    lines = self._enrollment_service.transcript(student)
                    return TranscriptResponse(
                        registration_number=student.registration_number,
                        full_name=student.full_name,
                        lines=[self._transcript_line_to_response(line) for line in lines],
                        gpa=self._enrollment_service.gpa(student),
                    )
            except CCRMException as e:
                raise _http_error(e) from e

        # Course endpoints
        @self.app.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
        async def create_course(course_data: CourseCreate):
            """Create a new course."""
            try:
                with self._lock:
                    if course_data.instructor_id is not None:
                        self._instructor_repo.get(course_data.instructor_id)
                    course = (CourseBuilder()
                              .code(course_data.code)
                              .title(course_data.title)
                              .credits(course_data.credits)
                              .semester(Semester[course_data.semester])
                              .department(course_data.department)
                              .instructor(course_data.instructor_id)
                              .build())
                    self._course_repo.add(course)
                    logger.info("Added course %s", course)
                    return self._course_to_response(course)
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.get("/courses/{code}", response_model=CourseResponse)
        async def get_course(code: str):
            """Get a course by code."""
            try:
                with self._lock:
                    return self._course_to_response(self._course_repo.get(code))
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.get("/courses", response_model=List[CourseResponse])
        async def list_courses(skip: int = 0, limit: int = 100, department: Optional[str] = None,
                               instructor_id: Optional[str] = None):
            """List courses, optionally for one department or one instructor."""
            with self._lock:
                if department is not None and instructor_id is not None:
                    courses = self._course_repo.find_all({"department": department, "instructor_id": instructor_id})
                elif department is not None:
                    courses = self._course_repo.find_by_department(department)
                elif instructor_id is not None:
                    courses = self._course_repo.find_by_instructor(instructor_id)
                else:
                    courses = self._course_repo.find_all()
                return [self._course_to_response(course) for course in courses[skip:skip + limit]]

        # Instructor endpoints
        @self.app.post("/instructors", response_model=InstructorResponse, status_code=status.HTTP_201_CREATED)
        async def create_instructor(instructor_data: InstructorCreate):
            """Create a new instructor."""
            try:
                with self._lock:
                    if self._instructor_repo.find_by_employee_id(instructor_data.employee_id) is not None:
                        raise DuplicateEntityError(
                            f"Employee id already in use: {instructor_data.employee_id}",
                            error_code="duplicate_employee_id",
                        )
                    instructor = Instructor(
                        instructor_data.id,
                        instructor_data.full_name,
                        instructor_data.email,
                        instructor_data.employee_id,
                        instructor_data.department,
                    )
                    self._instructor_repo.add(instructor)
                    return self._instructor_to_response(instructor)
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.get("/instructors", response_model=List[InstructorResponse])
        async def list_instructors():
            """List all instructors."""
            with self._lock:
                return [self._instructor_to_response(i) for i in self._instructor_repo.find_all()]

        # Enrollment endpoints
        @self.app.post("/enrollments", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
        async def enroll_student(request: EnrollmentRequest):
            """Enroll a student in a course."""
            try:
                with self._lock:
                    student = self._student_repo.get(request.registration_number)
                    course = self._course_repo.get(request.course_code)
                    enrollment = self._enrollment_service.enroll(student, course)
                    logger.info("Enrolled %s in %s", student.registration_number, course.code)
                    return self._enrollment_to_response(enrollment)
            except DuplicateEnrollmentError as e:
                logger.warning("Rejected enrollment: %s", e.message)
                raise _http_error(e) from e
            except CCRMException as e:
                raise _http_error(e) from e

        @self.app.put("/enrollments/{registration_number}/{course_code}/grade",
                      response_model=EnrollmentResponse)
        async def record_grade(registration_number: str, course_code: str, request: GradeRequest):
            """Grade an enrollment from a mark. Re-grading replaces the earlier grade."""
            try:
                with self._lock:
                    student = self._student_repo.get(registration_number)
                    enrollment = student.get_enrollment(course_code)
                    if enrollment is None:
                        raise ResourceNotFoundError(
                            f"{registration_number} is not enrolled in {course_code}",
                            error_code="enrollment_not_found",
                        )
                    grade = self._enrollment_service.record_grade(enrollment, request.mark)
                    logger.info("Graded %s in %s: %s", registration_number, course_code, grade.name)
                    return self._enrollment_to_response(enrollment)
            except CCRMException as e:
                raise _http_error(e) from e

        # Reports
        @self.app.get("/reports/gpa-distribution", response_model=List[DistributionBucket])
        async def gpa_distribution():
            """Students per whole-number GPA bucket, ascending."""
            with self._lock:
                distribution = self._enrollment_service.gpa_distribution(self._student_repo.find_all())
                return [DistributionBucket(bucket=b, count=c) for b, c in distribution.items()]

        @self.app.get("/reports/top-students", response_model=List[TopStudentResponse])
        async def top_students(n: Optional[int] = None):
            """The highest-GPA students."""
            limit = self._config.top_n if n is None else n
            if limit < 0:
                raise HTTPException(status_code=400, detail="n must not be negative")
            with self._lock:
                students = self._enrollment_service.top_students(self._student_repo.find_all(), limit)
                return [
                    TopStudentResponse(
                        registration_number=s.registration_number,
                        full_name=s.full_name,
                        gpa=self._enrollment_service.gpa(s),
                    )
                    for s in students
                ]

        # Interchange
        @self.app.post("/interchange/export", response_model=InterchangeResponse)
        async def export_records():
            """Write students and courses to the configured data folder."""
            try:
                with self._lock:
                    self._config.ensure_data_folder()
                    students = self._codec.export_students(self._student_repo.find_all(),
                                                           self._config.students_path)
                    courses = self._codec.export_courses(self._course_repo.find_all(),
                                                         self._config.courses_path)
                    return InterchangeResponse(
                        success=True,
                        message="Export completed",
                        students=students,
                        courses=courses,
                        students_path=str(self._config.students_path),
                        courses_path=str(self._config.courses_path),
                    )
            except CCRMException as e:
                logger.error("Export failed: %s", e.message)
                raise _http_error(e) from e

        @self.app.post("/interchange/import", response_model=InterchangeResponse)
        async def import_records(request: InterchangeImportRequest):
            """Load students and courses from the data folder; entities read before a failure stay loaded."""
            try:
                students_path = self._data_file(request.students_path, self._config.students_path)
                courses_path = self._data_file(request.courses_path, self._config.courses_path)
                with self._lock:
                    students = self._codec.import_students(students_path, self._student_repo)
                    courses = self._codec.import_courses(courses_path, self._course_repo)
                    return InterchangeResponse(
                        success=True,
                        message="Import completed",
                        students=len(students),
                        courses=len(courses),
                        students_path=str(students_path),
                        courses_path=str(courses_path),
                    )
            except CCRMException as e:
                logger.error("Import failed: %s", e.message)
                raise _http_error(e) from e

    def _data_file(self, requested: Optional[str], default: Path) -> Path:
        """Resolve a client-supplied file name; it must stay inside the data folder."""
        if not requested:
            return default
        root = self._config.data_folder.resolve()
        path = (root / requested).resolve()
        if path != root and root not in path.parents:
            raise ValidationError(
                "Import files must be inside the data folder",
                error_code="path_outside_data_folder",
            )
        return path

    def _student_to_response(self, student: Student) -> StudentResponse:
        """Convert Student entity to response model."""
        return StudentResponse(
            id=student.id,
            registration_number=student.registration_number,
            full_name=student.full_name,
            email=student.email,
            active=student.active,
            gpa=self._enrollment_service.gpa(student),
            profile=student.profile(),
            enrollments=[self._enrollment_to_response(e) for e in student.enrollments.values()],
            created_at=student.created_at,
        )

    def _course_to_response(self, course: Course) -> CourseResponse:
        """Convert Course entity to response model."""
        return CourseResponse(
            code=course.code,
            title=course.title,
            credits=course.credits,
            semester=course.semester.name,
            department=course.department,
            instructor_id=course.instructor_id,
        )

    def _instructor_to_response(self, instructor: Instructor) -> InstructorResponse:
        return InstructorResponse(
            id=instructor.id,
            full_name=instructor.full_name,
            email=instructor.email,
            employee_id=instructor.employee_id,
            department=instructor.department,
            profile=instructor.profile(),
            created_at=instructor.created_at,
        )

    @staticmethod
    def _enrollment_to_response(enrollment: Enrollment) -> EnrollmentResponse:
        return EnrollmentResponse(
            registration_number=enrollment.student.registration_number,
            course_code=enrollment.course_code,
            enrolled_at=enrollment.enrolled_at,
            grade=enrollment.grade.name if enrollment.grade is not None else None,
            points=enrollment.points,
        )

    @staticmethod
    def _transcript_line_to_response(line: TranscriptLine) -> TranscriptLineResponse:
        return TranscriptLineResponse(
            course_code=line.course_code,
            title=line.title,
            credits=line.credits,
            grade=line.grade.name if line.grade is not None else None,
        )
