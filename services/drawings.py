from api.exception import NotFoundError, PermissionDenied
from models import utc_now_iso


def _owned_drawing(store, uid, drawing_id):
    drawing = store.get('drawings', drawing_id)
    if not drawing:
        raise NotFoundError("Drawing not found.")
    if drawing.get('userId') != uid:
        raise PermissionDenied()
    return drawing


def save_drawing(store, uid, name, records):
    if not uid:
        raise PermissionDenied()
    now = utc_now_iso()
    return store.insert('drawings', {
        'userId': uid,
        'name': name or f"Drawing {now}",
        'records': records,
        'createdAt': now,
        'updatedAt': now,
        'deleted': False,
    })


def update_drawing(store, uid, drawing_id, records, name=None):
    _owned_drawing(store, uid, drawing_id)
    changes = {'records': records, 'updatedAt': utc_now_iso()}
    if name:
        changes['name'] = name
    return store.update('drawings', drawing_id, changes)


def get_drawings_for_user(store, acting_uid, uid):
    if acting_uid != uid:
        raise PermissionDenied()
    drawings = [d for d in store.find('drawings', userId=uid) if not d.get('deleted')]
    return sorted(drawings, key=lambda d: d.get('updatedAt') or '', reverse=True)


def get_drawing(store, uid, drawing_id):
    drawing = _owned_drawing(store, uid, drawing_id)
    if drawing.get('deleted'):
        raise NotFoundError("Drawing not found.")
    return drawing


def delete_drawing(store, uid, drawing_id):
    """Soft delete: the record stays, flagged as deleted."""
    _owned_drawing(store, uid, drawing_id)
    store.update('drawings', drawing_id, {'deleted': True, 'updatedAt': utc_now_iso()})
