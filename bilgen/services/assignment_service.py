"""
Assignment Service
Fans an exam out to students as homework, plus homework read paths
"""
import logging
from dataclasses import dataclass, field

from bilgen.errors import ForbiddenError, NotFoundError, ValidationError
from bilgen.models import HomeworkStatus
from bilgen.services.store import DuplicateAssignment
from bilgen.services.visibility import questions_for_viewer
from bilgen.utils.helpers import to_id

logger = logging.getLogger(__name__)

ALREADY_ASSIGNED = "Already assigned to this student"


def parse_homework_status(raw):
    if raw in (None, ""):
        return None
    try:
        return HomeworkStatus(str(raw).upper())
    except ValueError:
        raise ValidationError(f"Invalid homework status: {raw}")


@dataclass
class FanoutResult:
    """Per-student outcomes of one assignment run"""
    assigned: list = field(default_factory=list)
    errors: list = field(default_factory=list)
    published: bool = False

    def to_dict(self):
        return {
            'assigned': self.assigned,
            'errors': self.errors,
            'published': self.published,
        }


class AssignmentService:
    """Homework assignment (fanout) and homework queries"""

    def __init__(self, store):
        self.store = store

    def _target_student_ids(self, actor, student_ids, classroom_id):
        targets = [to_id(sid, "student id") for sid in student_ids or []]

        if classroom_id in (None, ""):
            return targets

        classroom = self.store.get_classroom(to_id(classroom_id, "classroom id"))
        if classroom is None:
            raise NotFoundError("Classroom not found")

        if not actor.can_manage(classroom.teacher_id):
            raise ForbiddenError("You are not allowed to assign homework to this classroom")

        # The roster replaces any explicit list
        targets = classroom.student_ids
        if not targets:
            raise ValidationError("This classroom has no students")
        return targets

    def assign(self, actor, exam_id, student_ids=None, classroom_id=None, due_date=None):
        """
        Create one homework per valid student.

        Students already holding this exam are reported in ``errors`` and the
        rest still succeed. The first run that creates anything publishes a
        DRAFT exam.
        """
        if exam_id in (None, ""):
            raise ValidationError("Exam id is required")

        if student_ids is not None and not isinstance(student_ids, list):
            raise ValidationError("studentIds must be a list")

        if not student_ids and classroom_id in (None, ""):
            raise ValidationError("A student list or a classroom id is required")

        exam = self.store.get_exam(to_id(exam_id, "exam id"))
        if exam is None:
            raise NotFoundError("Exam not found")
        exam_pk = exam.id

        target_ids = self._target_student_ids(actor, student_ids, classroom_id)

        # Non-students are dropped silently
        students = self.store.find_students(target_ids)
        if not students:
            raise ValidationError("No valid students found")

        result = FanoutResult()
        for student in students:
            student_id, student_name = student.id, student.display_name
            try:
                homework = self.store.create_homework(
                    exam_id=exam_pk,
                    student_id=student_id,
                    teacher_id=actor.id,
                    due_date=due_date,
                )
            except DuplicateAssignment:
                result.errors.append({'studentId': student_id, 'message': ALREADY_ASSIGNED})
                continue
            result.assigned.append({
                'id': homework.id,
                'studentId': student_id,
                'studentName': student_name,
            })

        if result.assigned:
            result.published = self.store.publish_exam(exam_pk)

        logger.info(
            "Exam %s assigned by user %s: %d created, %d skipped%s",
            exam_pk, actor.id, len(result.assigned), len(result.errors),
            ", exam published" if result.published else "",
        )
        return result

    # ================= READS =================

    def list_students(self):
        return [student.to_summary() for student in self.store.list_students()]

    def list_for_teacher(self, actor, status=None, exam_id=None):
        """Admins see everything, teachers only what they assigned"""
        homeworks = self.store.list_homeworks(
            teacher_id=None if actor.is_admin else actor.id,
            exam_id=to_id(exam_id, "exam id") if exam_id not in (None, "") else None,
            status=parse_homework_status(status),
        )
        return [self._with_people(hw, student=True) for hw in homeworks]

    def list_for_student(self, actor, status=None):
        homeworks = self.store.list_homeworks(
            student_id=actor.id,
            status=parse_homework_status(status),
        )
        return [self._with_people(hw, student=False) for hw in homeworks]

    def get_for_viewer(self, actor, homework_id):
        """Homework detail with its exam's questions, redacted if needed"""
        homework = self.store.get_homework(to_id(homework_id, "homework id"))
        if homework is None:
            raise NotFoundError("Homework not found")

        if not actor.is_staff and not actor.owns(homework.student_id):
            raise ForbiddenError("You are not allowed to view this homework")

        exam = self.store.get_exam(homework.exam_id)
        data = homework.to_dict()
        data['exam'] = exam.to_dict(questions_for_viewer(exam.questions, actor, homework))
        data['student'] = homework.student.to_summary() if homework.student else None
        data['teacher'] = homework.teacher.to_summary() if homework.teacher else None
        return data

    def _with_people(self, homework, student):
        data = homework.to_dict()
        data['exam'] = homework.exam.to_summary() if homework.exam else None
        data['teacher'] = homework.teacher.to_summary() if homework.teacher else None
        if student:
            data['student'] = homework.student.to_summary() if homework.student else None
        return data
