import logging

from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_optional, jwt_required
from services import projects as project_service
from utils.app_context import current_uid, get_blobs, get_store, public_origin

logger = logging.getLogger(__name__)

projects_bp = Blueprint('projects', __name__)
CORS(projects_bp)


@projects_bp.route('/projects', methods=['GET'])
@jwt_required
def get_my_projects():
    """
    Projects owned by the signed-in user
    ---
    tags:
      - Projects
    responses:
      200:
        description: The user's projects.
    """
    uid = current_uid()
    projects = project_service.get_projects_for_user(get_store(), uid, uid)
    return jsonify({'projects': projects, 'total_projects': len(projects)}), 200


@projects_bp.route('/projects', methods=['POST'])
@jwt_required
def create_project():
    """
    Create a project
    ---
    tags:
      - Projects
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [name]
          properties:
            name: {type: string}
            description: {type: string}
            startDate: {type: string, format: date}
            endDate: {type: string, format: date}
    responses:
      201:
        description: The created project.
      400:
        description: Missing project name.
    """
    data = request.get_json(silent=True) or {}
    if not data.get('name'):
        return jsonify({"error": "Project name is required"}), 400
    project = project_service.create_project(get_store(), current_uid(), data)
    return jsonify(project), 201


@projects_bp.route('/projects/<string:project_id>', methods=['GET'])
@jwt_optional
def get_project(project_id):
    """
    A single project (owner, or anyone when the project is public)
    ---
    tags:
      - Projects
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: The project.
      403:
        description: Private project of another user.
      404:
        description: Project not found.
    """
    project = project_service.require_readable_project(get_store(), current_uid(), project_id)
    return jsonify(project), 200


@projects_bp.route('/projects/<string:project_id>', methods=['PUT', 'PATCH'])
@jwt_required
def update_project(project_id):
    data = request.get_json(silent=True) or {}
    if not data:
        return jsonify({"error": "No input data provided"}), 400
    project = project_service.update_project(get_store(), current_uid(), project_id, data)
    return jsonify(project), 200


@projects_bp.route('/projects/<string:project_id>', methods=['DELETE'])
@jwt_required
def delete_project(project_id):
    """
    Delete a project with its tasks, task notes, notes and files
    ---
    tags:
      - Projects
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: Project deleted.
      403:
        description: Not the owner.
    """
    project_service.delete_project(get_store(), get_blobs(), current_uid(), project_id)
    return jsonify({"message": f"Project {project_id} deleted"}), 200


@projects_bp.route('/projects/<string:project_id>/share', methods=['POST'])
@jwt_required
def share_project(project_id):
    """
    Make the project public and return its share link
    ---
    tags:
      - Projects
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: "{url, shareId}"
    """
    url, share_id = project_service.generate_share_link(
        get_store(), current_uid(), project_id, public_origin()
    )
    return jsonify({'url': url, 'shareId': share_id}), 200


@projects_bp.route('/projects/<string:project_id>/share', methods=['DELETE'])
@jwt_required
def unshare_project(project_id):
    project = project_service.revoke_share(get_store(), current_uid(), project_id)
    return jsonify(project), 200


@projects_bp.route('/projects/<string:project_id>/image', methods=['POST'])
@jwt_required
def upload_project_image(project_id):
    """
    Upload the project's cover image (multipart field "image")
    ---
    tags:
      - Projects
    consumes:
      - multipart/form-data
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
      - in: formData
        name: image
        type: file
        required: true
    responses:
      200:
        description: "{imageUrl}"
      413:
        description: File too large.
    """
    image = request.files.get('image')
    if image is None or not image.filename:
        return jsonify({"error": "No image provided"}), 400
    url = project_service.upload_project_image(
        get_store(), get_blobs(), current_uid(), project_id, image.filename, image.read()
    )
    return jsonify({'imageUrl': url}), 200
