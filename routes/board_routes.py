import logging

from flask import Blueprint, jsonify, request
from flask_cors import CORS

from auth.authhelpers import jwt_optional, jwt_required
from models import TaskStatus
from services import projects as project_service
from services import tasks as task_service
from services.board import KanbanBoard, MutationState
from utils.app_context import current_uid, get_store

logger = logging.getLogger(__name__)

board_bp = Blueprint('board', __name__)
CORS(board_bp)


def _load_board(project_id, uid):
    store = get_store()
    project_service.require_readable_project(store, uid, project_id)
    tasks = task_service.get_tasks_for_project(store, uid, project_id)

    def persist(task_id, changes):
        return task_service.update_task(store, uid, task_id, changes)

    return KanbanBoard(tasks, persist)


@board_bp.route('/projects/<string:project_id>/board', methods=['GET'])
@jwt_optional
def get_board(project_id):
    """
    Kanban columns and task statistics of a project
    ---
    tags:
      - Board
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
    responses:
      200:
        description: "{columns, stats, error}"
      403:
        description: Private project of another user.
      404:
        description: Project not found.
    """
    return jsonify(_load_board(project_id, current_uid()).to_dict()), 200


@board_bp.route('/projects/<string:project_id>/board/move', methods=['POST'])
@jwt_required
def move_task(project_id):
    """
    Move a task to another column
    ---
    tags:
      - Board
    parameters:
      - in: path
        name: project_id
        type: string
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required: [taskId, status]
          properties:
            taskId: {type: string}
            status: {type: string, enum: [ToDo, InProgress, Done]}
    responses:
      200:
        description: Move confirmed (or nothing to do). Returns the board.
      403:
        description: Not the project owner, or no such project.
      404:
        description: Task not found on this board.
      409:
        description: Move could not be saved and was rolled back. Returns the board.
    """
    data = request.get_json(silent=True) or {}
    task_id = data.get('taskId')
    status = data.get('status')
    if not all([task_id, status]):
        return jsonify({"error": "taskId and status are required"}), 400
    if TaskStatus.parse(status) is None:
        return jsonify({"error": f"Invalid status '{status}'"}), 400

    project_service.require_owned_project(get_store(), current_uid(), project_id)
    board = _load_board(project_id, current_uid())
    mutation = board.move_and_sync(task_id, status)

    body = board.to_dict()
    body['mutation'] = mutation.to_dict()
    if mutation.state is MutationState.ROLLED_BACK:
        return jsonify(body), 409
    return jsonify(body), 200
