from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_optional, jwt_required
from services import notes as note_service
from utils.app_context import current_uid, get_store

notes_bp = Blueprint('notes', __name__)
CORS(notes_bp)


@notes_bp.route('/projects/<string:project_id>/notes', methods=['GET'])
@jwt_optional
def get_notes_for_project(project_id):
    """
    Project notes, newest first
    ---
    tags:
      - Notes
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: A list of notes.
    """
    return jsonify(note_service.get_notes_for_project(get_store(), current_uid(), project_id)), 200


@notes_bp.route('/notes', methods=['POST'])
@jwt_required
def create_note():
    data = request.get_json(silent=True) or {}
    if not all([data.get('projectId'), (data.get('content') or '').strip()]):
        return jsonify({"error": "projectId and content are required"}), 400
    return jsonify(note_service.create_note(get_store(), current_uid(), data)), 201


@notes_bp.route('/notes/<string:note_id>', methods=['PUT', 'PATCH'])
@jwt_required
def update_note(note_id):
    data = request.get_json(silent=True) or {}
    if not (data.get('content') or '').strip():
        return jsonify({"error": "content is required"}), 400
    return jsonify(note_service.update_note(get_store(), current_uid(), note_id, data)), 200


@notes_bp.route('/notes/<string:note_id>', methods=['DELETE'])
@jwt_required
def delete_note(note_id):
    note_service.delete_note(get_store(), current_uid(), note_id)
    return jsonify({"message": f"Note {note_id} deleted"}), 200
