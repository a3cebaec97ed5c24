from flask import Blueprint, jsonify
from flask_cors import CORS

from services import notes as note_service
from services import project_files as file_service
from services import projects as project_service
from services import task_notes as task_note_service
from services import tasks as task_service
from utils.app_context import get_store

share_bp = Blueprint('share', __name__)
CORS(share_bp)


@share_bp.route('/<string:share_id>', methods=['GET'])
def get_shared_project(share_id):
    """
    Read-only view of a public project
    ---
    tags:
      - Share
    parameters:
      - in: path
        name: share_id
        type: string
        required: true
    responses:
      200:
        description: "{project, tasks, notes, files, taskNotes}"
      404:
        description: Unknown share id, or the project is no longer public.
    """
    store = get_store()
    project = project_service.get_project_by_share_id(store, share_id)
    if project is None:
        return jsonify({"error": "Shared project not found"}), 404

    # anonymous reads: only public projects get this far
    tasks = task_service.get_tasks_for_project(store, None, project['id'])
    return jsonify({
        'project': project,
        'tasks': tasks,
        'notes': note_service.get_notes_for_project(store, None, project['id']),
        'files': file_service.get_files_for_project(store, None, project['id']),
        'taskNotes': {
            task['id']: task_note_service.get_notes_for_task(store, None, task['id'])
            for task in tasks
        },
    }), 200
