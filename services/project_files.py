import logging

from api.exception import NotFoundError, ValidationError
from models import utc_now_iso
from services.blobs import project_file_path
from services.projects import require_owned_project, require_readable_project

logger = logging.getLogger(__name__)


def upload_project_file(store, blobs, uid, project_id, filename, content_type, data):
    """Uploads the blob, then records its metadata."""
    require_owned_project(store, uid, project_id)
    if not filename:
        raise ValidationError("File name is required")

    path = blobs.normalize(project_file_path(project_id, filename))
    url = blobs.upload(path, data)
    try:
        return store.insert('project_files', {
            'projectId': project_id,
            'name': filename,
            'type': content_type or 'application/octet-stream',
            'size': len(data),
            'url': url,
            'path': path,
            'uploadedAt': utc_now_iso(),
        })
    except Exception:
        blobs.delete(path)
        raise


def get_files_for_project(store, uid, project_id):
    if not store.get('projects', project_id):
        return []
    require_readable_project(store, uid, project_id)
    return sorted(
        store.find('project_files', projectId=project_id),
        key=lambda f: f.get('uploadedAt') or '',
        reverse=True,
    )


def delete_project_file(store, blobs, uid, file_id):
    project_file = store.get('project_files', file_id)
    if not project_file:
        raise NotFoundError("File not found.")
    require_owned_project(store, uid, project_file['projectId'])

    path = project_file.get('path') or project_file_path(project_file['projectId'], project_file['name'])
    # record before blob, as in delete_project
    store.delete('project_files', file_id)
    blobs.delete(path)
    logger.info("File %s deleted from project %s", file_id, project_file['projectId'])
