from contextlib import contextmanager
import copy
import json
import logging
import os
import uuid

from api.exception import NotFoundError
from services.store import COLLECTION_NAMES, EntityStore

logger = logging.getLogger(__name__)

ID_PREFIXES = {
    'users': 'user',
    'projects': 'proj',
    'tasks': 'task',
    'notes': 'note',
    'task_notes': 'tnote',
    'project_files': 'file',
    'drawings': 'drawing',
    'summaries': 'summary',
}

PRIMARY_KEYS = {'users': 'uid', 'summaries': 'uid'}


def generate_id(collection):
    return f"{ID_PREFIXES[collection]}_{uuid.uuid4().hex[:13]}"


class MockEntityStore(EntityStore):
    """
    Local mock backend for offline/demo use.

    Collections are in-memory maps owned by this object and written to a JSON
    file after every committed write. Pass storage_path=None to keep
    everything in memory.
    """

    def __init__(self, storage_path=None):
        super().__init__()
        self.storage_path = storage_path
        self._depth = 0
        self._data = self._load()

    def _load(self):
        data = {name: {} for name in COLLECTION_NAMES}
        if not self.storage_path or not os.path.exists(self.storage_path):
            return data
        try:
            with open(self.storage_path, encoding='utf-8') as fh:
                stored = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable mock storage %s: %s", self.storage_path, e)
            return data
        for name in COLLECTION_NAMES:
            if isinstance(stored.get(name), dict):
                data[name] = stored[name]
        return data

    def _save(self):
        if self._depth or not self.storage_path:
            return
        folder = os.path.dirname(os.path.abspath(self.storage_path))
        os.makedirs(folder, exist_ok=True)
        tmp_path = f"{self.storage_path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as fh:
            json.dump(self._data, fh)
        os.replace(tmp_path, self.storage_path)

    def _table(self, collection):
        self._check_collection(collection)
        return self._data[collection]

    def insert(self, collection, record):
        table = self._table(collection)
        pk = PRIMARY_KEYS.get(collection, 'id')
        stored = dict(record)
        stored.setdefault(pk, generate_id(collection))
        table[stored[pk]] = stored
        self._save()
        return copy.deepcopy(stored)

    def get(self, collection, record_id):
        record = self._table(collection).get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def find(self, collection, **equals):
        return [
            copy.deepcopy(record)
            for record in self._table(collection).values()
            if all(record.get(key) == value for key, value in equals.items())
        ]

    def update(self, collection, record_id, changes):
        table = self._table(collection)
        if record_id not in table:
            raise NotFoundError(f"{collection} record '{record_id}' not found.")
        pk = PRIMARY_KEYS.get(collection, 'id')
        merged = {**table[record_id], **changes, pk: record_id}
        table[record_id] = merged
        self._save()
        return copy.deepcopy(merged)

    def put(self, collection, record_id, record):
        table = self._table(collection)
        pk = PRIMARY_KEYS.get(collection, 'id')
        merged = {**table.get(record_id, {}), **record, pk: record_id}
        table[record_id] = merged
        self._save()
        return copy.deepcopy(merged)

    def delete(self, collection, record_id):
        table = self._table(collection)
        if table.pop(record_id, None) is not None:
            self._save()

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self._data) if not self._depth else None
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if snapshot is not None:
                self._data = snapshot
                logger.warning("Mock transaction rolled back")
            raise
        self._depth -= 1
        self._save()
