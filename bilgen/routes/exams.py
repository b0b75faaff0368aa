"""
Exam Routes
Exam generation, creation and management
"""
from flask import Blueprint, current_app, jsonify, request

from bilgen.extensions import db
from bilgen.services import ExamService, SqlAlchemyStore
from bilgen.services.content_provider import GenerationRequest, generate_exam, get_content_provider
from bilgen.utils import ADMIN, STUDENT, TEACHER, require_roles

exams_bp = Blueprint('exams', __name__)


def exam_service():
    return ExamService(
        SqlAlchemyStore(db.session),
        default_points=current_app.config['DEFAULT_QUESTION_POINTS'],
    )


@exams_bp.route('/generate', methods=['POST'])
@require_roles(TEACHER, ADMIN)
def generate(actor):
    """Generate exam questions with the content provider"""
    generation = GenerationRequest.from_payload(
        request.get_json(silent=True) or {},
        max_questions=current_app.config['MAX_GENERATED_QUESTIONS'],
    )
    data = generate_exam(
        get_content_provider(),
        generation,
        default_points=current_app.config['DEFAULT_QUESTION_POINTS'],
    )
    return jsonify({'success': True, 'message': 'Exam questions generated', 'data': data})


@exams_bp.route('', methods=['POST'])
@require_roles(TEACHER, ADMIN)
def create_exam(actor):
    exam = exam_service().create(actor, request.get_json(silent=True) or {})
    return jsonify({'success': True, 'message': 'Exam created', 'data': exam.to_dict()}), 201


@exams_bp.route('', methods=['GET'])
@require_roles(TEACHER, ADMIN)
def list_exams(actor):
    data = exam_service().list_for(actor, status=request.args.get('status'))
    return jsonify({'success': True, 'data': data})


@exams_bp.route('/<exam_id>', methods=['GET'])
@require_roles(TEACHER, ADMIN, STUDENT)
def get_exam(actor, exam_id):
    """Exam detail, answer keys hidden from students who have not submitted"""
    return jsonify({'success': True, 'data': exam_service().get_for_viewer(actor, exam_id)})


@exams_bp.route('/<exam_id>', methods=['PUT'])
@require_roles(TEACHER, ADMIN)
def update_exam(actor, exam_id):
    exam = exam_service().update(actor, exam_id, request.get_json(silent=True) or {})
    return jsonify({'success': True, 'message': 'Exam updated', 'data': exam.to_dict()})


@exams_bp.route('/<exam_id>', methods=['DELETE'])
@require_roles(TEACHER, ADMIN)
def delete_exam(actor, exam_id):
    exam_service().delete(actor, exam_id)
    return jsonify({'success': True, 'message': 'Exam deleted'})
