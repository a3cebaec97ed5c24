import logging

from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_optional, jwt_required
from models import TaskStatus
from services import tasks as task_service
from utils.app_context import current_uid, get_store

logger = logging.getLogger(__name__)

tasks_bp = Blueprint('tasks', __name__)
CORS(tasks_bp)


@tasks_bp.route('/projects/<string:project_id>/tasks', methods=['GET'])
@jwt_optional
def get_tasks_for_project(project_id):
    """
    Tasks of a project
    ---
    tags:
      - Tasks
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: A list of tasks (empty for an unknown project).
      403:
        description: Private project of another user.
    """
    return jsonify(task_service.get_tasks_for_project(get_store(), current_uid(), project_id)), 200


@tasks_bp.route('/tasks', methods=['POST'])
@jwt_required
def create_task():
    """
    Create a task
    ---
    tags:
      - Tasks
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [projectId, title]
          properties:
            projectId: {type: string}
            title: {type: string}
            description: {type: string}
            status: {type: string, enum: [ToDo, InProgress, Done]}
    responses:
      201:
        description: The created task.
      400:
        description: Missing fields or invalid status.
      403:
        description: Not the project owner.
    """
    data = request.get_json(silent=True) or {}
    if not all([data.get('projectId'), data.get('title')]):
        return jsonify({"error": "projectId and title are required"}), 400
    if data.get('status') and TaskStatus.parse(data['status']) is None:
        return jsonify({"error": f"Invalid status '{data['status']}'"}), 400
    return jsonify(task_service.create_task(get_store(), current_uid(), data)), 201


@tasks_bp.route('/tasks/<string:task_id>', methods=['GET'])
@jwt_optional
def get_task(task_id):
    return jsonify(task_service.get_task(get_store(), current_uid(), task_id)), 200


@tasks_bp.route('/tasks/<string:task_id>', methods=['PUT', 'PATCH'])
@jwt_required
def update_task(task_id):
    """
    Update a task's title, description or status
    ---
    tags:
      - Tasks
    parameters:
      - in: path
        name: task_id
        type: string
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            title: {type: string}
            description: {type: string}
            status: {type: string, enum: [ToDo, InProgress, Done]}
    responses:
      200:
        description: The updated task.
      404:
        description: Task not found.
    """
    data = request.get_json(silent=True) or {}
    if not data:
        return jsonify({"error": "No input data provided"}), 400
    return jsonify(task_service.update_task(get_store(), current_uid(), task_id, data)), 200


@tasks_bp.route('/tasks/<string:task_id>', methods=['DELETE'])
@jwt_required
def delete_task(task_id):
    task_service.delete_task(get_store(), current_uid(), task_id)
    return jsonify({"message": f"Task {task_id} deleted"}), 200
