from api.exception import NotFoundError, ValidationError
from models import utc_now_iso
from services.projects import require_owned_project, require_readable_project


def _newest_first(records):
    return sorted(records, key=lambda r: r.get('createdAt') or '', reverse=True)


def _owned_note(store, uid, note_id):
    note = store.get('notes', note_id)
    if not note:
        raise NotFoundError("Note not found.")
    require_owned_project(store, uid, note['projectId'])
    return note


def create_note(store, uid, data):
    require_owned_project(store, uid, data.get('projectId'))
    content = (data.get('content') or '').strip()
    if not content:
        raise ValidationError("Note content is required")
    return store.insert('notes', {
        'projectId': data['projectId'],
        'content': content,
        'createdAt': utc_now_iso(),
    })


def get_notes_for_project(store, uid, project_id):
    if not store.get('projects', project_id):
        return []
    require_readable_project(store, uid, project_id)
    return _newest_first(store.find('notes', projectId=project_id))


def update_note(store, uid, note_id, data):
    _owned_note(store, uid, note_id)
    if not (data.get('content') or '').strip():
        raise ValidationError("Note content is required")
    return store.update('notes', note_id, {'content': data['content']})


def delete_note(store, uid, note_id):
    _owned_note(store, uid, note_id)
    store.delete('notes', note_id)
