import logging
import os

from werkzeug.utils import secure_filename

from api.exception import FileTooLargeError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def project_file_path(project_id, filename):
    return f"projectFiles/{project_id}/{filename}"


def project_image_path(project_id, filename):
    return f"projectImages/{project_id}/{filename}"


class LocalBlobStore:
    """Blob storage on the local upload folder. URLs point at the blob route."""

    def __init__(self, root, base_url="/api/blobs", max_size=None):
        self.root = root
        self.base_url = base_url.rstrip('/')
        self.max_size = max_size
        os.makedirs(self.root, exist_ok=True)

    def normalize(self, path):
        """Sanitizes every segment of a blob path."""
        segments = [secure_filename(part) for part in str(path).split('/')]
        segments = [part for part in segments if part]
        if not segments:
            raise ValidationError(f"Invalid blob path '{path}'")
        return '/'.join(segments)

    def _disk_path(self, path):
        return os.path.join(self.root, *self.normalize(path).split('/'))

    def url_for(self, path):
        return f"{self.base_url}/{self.normalize(path)}"

    def path_from_url(self, url):
        """Inverse of url_for; None for URLs this store did not issue."""
        prefix = f"{self.base_url}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def upload(self, path, data):
        """Writes the bytes and returns the downloadable URL."""
        if self.max_size is not None and len(data) > self.max_size:
            raise FileTooLargeError(path.rsplit('/', 1)[-1], self.max_size)

        disk_path = self._disk_path(path)
        os.makedirs(os.path.dirname(disk_path), exist_ok=True)
        with open(disk_path, 'wb') as fh:
            fh.write(data)
        logger.info("Stored blob %s (%d bytes)", disk_path, len(data))
        return self.url_for(path)

    def delete(self, path):
        disk_path = self._disk_path(path)
        try:
            os.remove(disk_path)
            logger.info("Deleted blob from disk: %s", disk_path)
        except FileNotFoundError:
            logger.info("Blob already gone: %s", disk_path)

    def open(self, path):
        disk_path = self._disk_path(path)
        if not os.path.isfile(disk_path):
            raise NotFoundError(f"Blob '{path}' not found.")
        return open(disk_path, 'rb')

    def exists(self, path):
        return os.path.isfile(self._disk_path(path))
