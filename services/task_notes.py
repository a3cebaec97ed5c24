from api.exception import NotFoundError, ValidationError
from models import utc_now_iso
from services.projects import require_owned_project, require_readable_project


def _owned_task_note(store, uid, task_note_id):
    task_note = store.get('task_notes', task_note_id)
    if not task_note:
        raise NotFoundError("Task note not found.")
    task = store.get('tasks', task_note['taskId'])
    if not task:
        raise NotFoundError("Parent task not found.")
    require_owned_project(store, uid, task['projectId'])
    return task_note


def create_task_note(store, uid, data):
    task = store.get('tasks', data.get('taskId')) if data.get('taskId') else None
    if not task:
        raise NotFoundError("Task not found.")
    require_owned_project(store, uid, task['projectId'])
    content = (data.get('content') or '').strip()
    if not content:
        raise ValidationError("Note content is required")
    return store.insert('task_notes', {
        'taskId': task['id'],
        'content': content,
        'createdAt': utc_now_iso(),
    })


def get_notes_for_task(store, uid, task_id):
    task = store.get('tasks', task_id)
    if not task or not store.get('projects', task['projectId']):
        return []
    require_readable_project(store, uid, task['projectId'])
    return sorted(
        store.find('task_notes', taskId=task_id),
        key=lambda n: n.get('createdAt') or '',
        reverse=True,
    )


def update_task_note(store, uid, task_note_id, data):
    _owned_task_note(store, uid, task_note_id)
    if not (data.get('content') or '').strip():
        raise ValidationError("Note content is required")
    return store.update('task_notes', task_note_id, {'content': data['content']})


def delete_task_note(store, uid, task_note_id):
    _owned_task_note(store, uid, task_note_id)
    store.delete('task_notes', task_note_id)
