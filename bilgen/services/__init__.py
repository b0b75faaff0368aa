"""
Services Package
"""
from bilgen.services.store import SqlAlchemyStore, DuplicateAssignment
from bilgen.services.exam_service import ExamService
from bilgen.services.assignment_service import AssignmentService
from bilgen.services.submission_service import SubmissionService
from bilgen.services.grading_service import GradingService

__all__ = [
    'SqlAlchemyStore',
    'DuplicateAssignment',
    'ExamService',
    'AssignmentService',
    'SubmissionService',
    'GradingService',
]
