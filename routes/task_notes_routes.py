from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_optional, jwt_required
from services import task_notes as task_note_service
from utils.app_context import current_uid, get_store

task_notes_bp = Blueprint('task_notes', __name__)
CORS(task_notes_bp)


@task_notes_bp.route('/tasks/<string:task_id>/notes', methods=['GET'])
@jwt_optional
def get_notes_for_task(task_id):
    """
    Notes attached to a task, newest first
    ---
    tags:
      - Task Notes
    parameters:
      - in: path
        name: task_id
        type: string
        required: true
    responses:
      200:
        description: A list of task notes.
      403:
        description: Private project of another user.
    """
    return jsonify(task_note_service.get_notes_for_task(get_store(), current_uid(), task_id)), 200


@task_notes_bp.route('/tasks/<string:task_id>/notes', methods=['POST'])
@jwt_required
def create_task_note(task_id):
    data = request.get_json(silent=True) or {}
    if not (data.get('content') or '').strip():
        return jsonify({"error": "content is required"}), 400
    task_note = task_note_service.create_task_note(
        get_store(), current_uid(), {'taskId': task_id, 'content': data['content']}
    )
    return jsonify(task_note), 201


@task_notes_bp.route('/task-notes/<string:task_note_id>', methods=['PUT', 'PATCH'])
@jwt_required
def update_task_note(task_note_id):
    data = request.get_json(silent=True) or {}
    if not (data.get('content') or '').strip():
        return jsonify({"error": "content is required"}), 400
    return jsonify(task_note_service.update_task_note(get_store(), current_uid(), task_note_id, data)), 200


@task_notes_bp.route('/task-notes/<string:task_note_id>', methods=['DELETE'])
@jwt_required
def delete_task_note(task_note_id):
    task_note_service.delete_task_note(get_store(), current_uid(), task_note_id)
    return jsonify({"message": f"Task note {task_note_id} deleted"}), 200
