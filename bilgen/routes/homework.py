"""
Homework Routes
Assignment, submission and grading
"""
from flask import Blueprint, jsonify, request

from bilgen.extensions import db
from bilgen.services import AssignmentService, GradingService, SqlAlchemyStore, SubmissionService
from bilgen.utils import ADMIN, STUDENT, TEACHER, parse_due_date, require_roles, school_timezone, to_id

homework_bp = Blueprint('homework', __name__)


def store():
    return SqlAlchemyStore(db.session)


@homework_bp.route('/students', methods=['GET'])
@require_roles(TEACHER, ADMIN)
def list_students(actor):
    """Students available for assignment"""
    return jsonify({'success': True, 'data': AssignmentService(store()).list_students()})


@homework_bp.route('/assign', methods=['POST'])
@require_roles(TEACHER, ADMIN)
def assign_homework(actor):
    """Assign an exam to a student list or a whole classroom"""
    payload = request.get_json(silent=True) or {}
    result = AssignmentService(store()).assign(
        actor,
        exam_id=payload.get('examId'),
        student_ids=payload.get('studentIds'),
        classroom_id=payload.get('classroomId'),
        due_date=parse_due_date(payload.get('dueDate'), school_timezone()),
    )
    return jsonify({
        'success': True,
        'message': f"Homework assigned to {len(result.assigned)} student(s)",
        'data': result.to_dict(),
    }), 201


@homework_bp.route('/teacher', methods=['GET'])
@require_roles(TEACHER, ADMIN)
def teacher_homeworks(actor):
    data = AssignmentService(store()).list_for_teacher(
        actor,
        status=request.args.get('status'),
        exam_id=request.args.get('examId'),
    )
    return jsonify({'success': True, 'data': data})


@homework_bp.route('/student', methods=['GET'])
@require_roles(STUDENT)
def student_homeworks(actor):
    data = AssignmentService(store()).list_for_student(actor, status=request.args.get('status'))
    return jsonify({'success': True, 'data': data})


@homework_bp.route('/<homework_id>', methods=['GET'])
@require_roles(TEACHER, ADMIN, STUDENT)
def get_homework(actor, homework_id):
    """Homework detail with exam questions"""
    return jsonify({
        'success': True,
        'data': AssignmentService(store()).get_for_viewer(actor, homework_id),
    })


@homework_bp.route('/<homework_id>/submit', methods=['PATCH'])
@require_roles(STUDENT)
def submit_homework(actor, homework_id):
    payload = request.get_json(silent=True) or {}
    outcome = SubmissionService(store()).submit(
        actor, to_id(homework_id, "homework id"), payload.get('answers')
    )

    data = outcome.homework.to_dict()
    if outcome.pending:
        data['autoScore'] = outcome.auto_score
        message = 'Homework submitted. Open-ended questions will be graded by your teacher.'
    else:
        message = 'Homework submitted and graded.'
    return jsonify({'success': True, 'message': message, 'data': data})


@homework_bp.route('/<homework_id>/grade', methods=['PATCH'])
@require_roles(TEACHER, ADMIN)
def grade_homework(actor, homework_id):
    payload = request.get_json(silent=True) or {}
    homework = GradingService(store()).grade(
        actor,
        to_id(homework_id, "homework id"),
        payload.get('grades'),
        feedback=payload.get('feedback'),
    )
    return jsonify({'success': True, 'message': 'Homework graded', 'data': homework.to_dict()})
