"""
CCRM: Campus Course & Records Manager

Keeps the academic records of a small institution: students, instructors,
courses and enrollments, with grade assignment, GPA reporting and a
pipe-delimited interchange format for bulk import and export.
"""

__version__ = "1.0.0"
__author__ = "CCRM Development Team"
__description__ = "Campus Course & Records Manager"
