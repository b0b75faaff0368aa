"""
Models Package
Exports all database models
"""
from bilgen.models.user import User, Role, Classroom
from bilgen.models.exam import Exam, ExamStatus, Difficulty
from bilgen.models.homework import Homework, HomeworkStatus

__all__ = [
    'User', 'Role', 'Classroom',
    'Exam', 'ExamStatus', 'Difficulty',
    'Homework', 'HomeworkStatus',
]
