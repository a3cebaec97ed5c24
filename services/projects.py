import logging
import secrets

from api.exception import NotFoundError, PermissionDenied, ValidationError
from services.blobs import project_image_path

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'description', 'startDate', 'endDate', 'imageUrl', 'isPublic')


def require_owned_project(store, uid, project_id):
    """Returns the project when uid owns it, else raises PermissionDenied."""
    project = store.get('projects', project_id) if project_id else None
    if not project or not uid or project.get('ownerUid') != uid:
        raise PermissionDenied()
    return project


def require_readable_project(store, uid, project_id):
    """Owners can always read; anyone can read a public project."""
    project = store.get('projects', project_id) if project_id else None
    if not project:
        raise NotFoundError("Project not found.")
    if not project.get('isPublic') and project.get('ownerUid') != uid:
        raise PermissionDenied()
    return project


def create_project(store, uid, data):
    if not uid:
        raise PermissionDenied()
    if not data.get('name'):
        raise ValidationError("Project name is required")

    record = {field: data.get(field) for field in EDITABLE_FIELDS if field in data}
    record.setdefault('description', '')
    record.setdefault('imageUrl', '')
    record['isPublic'] = bool(record.get('isPublic', False))
    record['ownerUid'] = uid
    project = store.insert('projects', record)
    logger.info("Project %s created by %s", project['id'], uid)
    return project


def get_projects_for_user(store, acting_uid, uid):
    if not acting_uid or acting_uid != uid:
        raise PermissionDenied()
    return store.find('projects', ownerUid=uid)


def get_project_by_id(store, project_id):
    return store.get('projects', project_id)


def get_project_by_share_id(store, share_id):
    if not share_id:
        return None
    for project in store.find('projects', shareId=share_id):
        if project.get('isPublic'):
            return project
    return None


def update_project(store, uid, project_id, data):
    require_owned_project(store, uid, project_id)
    changes = {field: data[field] for field in EDITABLE_FIELDS if field in data}
    if 'name' in changes and not changes['name']:
        raise ValidationError("Project name is required")
    return store.update('projects', project_id, changes)


def delete_project(store, blobs, uid, project_id):
    """
    Deletes the project with its tasks, task notes, notes and files.

    Metadata goes in one transaction, so either everything disappears or
    nothing does. Blobs are removed after the commit.
    """
    project = require_owned_project(store, uid, project_id)

    blob_paths = []
    with store.transaction():
        for task in store.find('tasks', projectId=project_id):
            for task_note in store.find('task_notes', taskId=task['id']):
                store.delete('task_notes', task_note['id'])
            store.delete('tasks', task['id'])

        for note in store.find('notes', projectId=project_id):
            store.delete('notes', note['id'])

        for project_file in store.find('project_files', projectId=project_id):
            if project_file.get('path'):
                blob_paths.append(project_file['path'])
            store.delete('project_files', project_file['id'])

        store.delete('projects', project_id)

    image_path = blobs.path_from_url(project.get('imageUrl'))
    if image_path:
        blob_paths.append(image_path)
    for path in blob_paths:
        blobs.delete(path)
    logger.info("Project %s deleted with %d blob(s)", project_id, len(blob_paths))


def share_url(origin, share_id):
    return f"{origin.rstrip('/')}/#/share/{share_id}"


def generate_share_link(store, uid, project_id, origin):
    project = require_owned_project(store, uid, project_id)
    share_id = project.get('shareId') or f"share_{secrets.token_urlsafe(12)}"
    store.update('projects', project_id, {'shareId': share_id, 'isPublic': True})
    return share_url(origin, share_id), share_id


def revoke_share(store, uid, project_id):
    require_owned_project(store, uid, project_id)
    return store.update('projects', project_id, {'isPublic': False})


def upload_project_image(store, blobs, uid, project_id, filename, data):
    require_owned_project(store, uid, project_id)
    if not filename:
        raise ValidationError("File name is required")
    url = blobs.upload(project_image_path(project_id, filename), data)
    store.update('projects', project_id, {'imageUrl': url})
    return url
