import logging

from api.exception import NotFoundError, ValidationError
from models import TaskStatus, utc_now_iso
from services.projects import require_owned_project, require_readable_project

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('title', 'description', 'status')


def parse_status(value):
    status = TaskStatus.parse(value)
    if status is None:
        raise ValidationError(
            f"Invalid status '{value}'. Expected one of: {', '.join(TaskStatus.values())}"
        )
    return status.value


def _owned_task(store, uid, task_id):
    task = store.get('tasks', task_id)
    if not task:
        raise NotFoundError("Task not found.")
    require_owned_project(store, uid, task['projectId'])
    return task


def create_task(store, uid, data):
    require_owned_project(store, uid, data.get('projectId'))
    if not data.get('title'):
        raise ValidationError("Task title is required")

    now = utc_now_iso()
    task = store.insert('tasks', {
        'projectId': data['projectId'],
        'title': data['title'],
        'description': data.get('description') or '',
        'status': parse_status(data.get('status') or TaskStatus.TODO.value),
        'createdAt': now,
        'updatedAt': now,
    })
    logger.info("Task %s created in project %s", task['id'], task['projectId'])
    return task


def get_tasks_for_project(store, uid, project_id):
    if not store.get('projects', project_id):
        return []
    require_readable_project(store, uid, project_id)
    return sorted(store.find('tasks', projectId=project_id), key=lambda t: t.get('createdAt') or '')


def get_task(store, uid, task_id):
    task = store.get('tasks', task_id)
    if not task:
        raise NotFoundError("Task not found.")
    require_readable_project(store, uid, task['projectId'])
    return task


def update_task(store, uid, task_id, data):
    _owned_task(store, uid, task_id)
    changes = {field: data[field] for field in EDITABLE_FIELDS if field in data}
    if 'status' in changes:
        changes['status'] = parse_status(changes['status'])
    if 'title' in changes and not changes['title']:
        raise ValidationError("Task title is required")
    changes['updatedAt'] = utc_now_iso()
    return store.update('tasks', task_id, changes)


def delete_task(store, uid, task_id):
    _owned_task(store, uid, task_id)
    with store.transaction():
        for task_note in store.find('task_notes', taskId=task_id):
            store.delete('task_notes', task_note['id'])
        store.delete('tasks', task_id)
    logger.info("Task %s deleted", task_id)
