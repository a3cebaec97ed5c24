"""
Entity store capability shared by the real database backend and the local mock.

Both implementations expose the same CRUD-shaped operations over named
collections. The access modules (projects, tasks, notes, ...) only talk to this
interface, so ownership checks and cascades behave the same in both modes.
"""
import abc
import logging

logger = logging.getLogger(__name__)

COLLECTION_NAMES = (
    'users',
    'projects',
    'tasks',
    'notes',
    'task_notes',
    'project_files',
    'drawings',
    'summaries',
)


class AuthEventRegistry:
    """Observer registry for auth-state transitions, owned by a store."""

    def __init__(self):
        self._subscribers = []

    def subscribe(self, callback):
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self, user):
        for callback in list(self._subscribers):
            try:
                callback(user)
            except Exception:
                logger.error("Auth subscriber %r failed", callback, exc_info=True)

    def __len__(self):
        return len(self._subscribers)


class EntityStore(abc.ABC):
    """CRUD over named collections. Records are plain dicts keyed in camelCase."""

    def __init__(self):
        self.auth_events = AuthEventRegistry()

    @staticmethod
    def _check_collection(collection):
        if collection not in COLLECTION_NAMES:
            raise KeyError(f"Unknown collection '{collection}'")

    @abc.abstractmethod
    def insert(self, collection, record):
        """Stores a new record and returns it with its assigned id."""

    @abc.abstractmethod
    def get(self, collection, record_id):
        """Returns the record or None."""

    @abc.abstractmethod
    def find(self, collection, **equals):
        """Returns every record whose fields equal the given values."""

    @abc.abstractmethod
    def update(self, collection, record_id, changes):
        """Merges changes into the record and returns it. Raises NotFoundError."""

    @abc.abstractmethod
    def put(self, collection, record_id, record):
        """Creates or overwrites the record stored under record_id."""

    @abc.abstractmethod
    def delete(self, collection, record_id):
        """Removes the record. A missing id is not an error."""

    @abc.abstractmethod
    def transaction(self):
        """Context manager: writes inside it are committed together or not at all."""


def build_store(config):
    """Selects the backend once, from configuration."""
    if config.get('USE_MOCK_BACKEND'):
        from services.mock_store import MockEntityStore
        logger.info("Using local mock backend at %s", config.get('MOCK_STORAGE_PATH'))
        return MockEntityStore(config.get('MOCK_STORAGE_PATH'))

    from services.sql_store import SqlEntityStore
    logger.info("Using SQL backend")
    return SqlEntityStore()
