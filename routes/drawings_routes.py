from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_required
from services import drawings as drawing_service
from utils.app_context import current_uid, get_store

drawings_bp = Blueprint('drawings_bp', __name__)
CORS(drawings_bp)


@drawings_bp.route('', methods=['GET'])
@jwt_required
def get_drawings():
    """
    Whiteboard drawings of the signed-in user (soft-deleted ones excluded)
    ---
    tags:
      - Drawings
    responses:
      200:
        description: A list of drawings.
    """
    uid = current_uid()
    return jsonify(drawing_service.get_drawings_for_user(get_store(), uid, uid)), 200


@drawings_bp.route('', methods=['POST'])
@jwt_required
def create_drawing():
    """
    Save a new drawing
    ---
    tags:
      - Drawings
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            name: {type: string}
            records: {type: object, description: Opaque canvas snapshot}
    responses:
      201:
        description: The saved drawing.
    """
    data = request.get_json(silent=True) or {}
    if 'records' not in data:
        return jsonify({"error": "records is required"}), 400
    drawing = drawing_service.save_drawing(get_store(), current_uid(), data.get('name'), data['records'])
    return jsonify(drawing), 201


@drawings_bp.route('/<string:drawing_id>', methods=['GET'])
@jwt_required
def get_drawing(drawing_id):
    return jsonify(drawing_service.get_drawing(get_store(), current_uid(), drawing_id)), 200


@drawings_bp.route('/<string:drawing_id>', methods=['PUT'])
@jwt_required
def update_drawing(drawing_id):
    data = request.get_json(silent=True) or {}
    if 'records' not in data:
        return jsonify({"error": "records is required"}), 400
    drawing = drawing_service.update_drawing(
        get_store(), current_uid(), drawing_id, data['records'], data.get('name')
    )
    return jsonify(drawing), 200


@drawings_bp.route('/<string:drawing_id>', methods=['DELETE'])
@jwt_required
def delete_drawing(drawing_id):
    drawing_service.delete_drawing(get_store(), current_uid(), drawing_id)
    return jsonify({"message": f"Drawing {drawing_id} deleted"}), 200
