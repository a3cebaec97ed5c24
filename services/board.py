"""
Kanban board with optimistic task-status moves.

A move is a small command: it captures the task's status at call time, applies
the new status to the board at once, then asks the persistence gateway to store
it. If the gateway fails, the command puts the captured status back and the
board records a user-visible error. Failed moves are not retried.

Moves of different tasks never interact. Two overlapping moves of the same
task are not ordered: whichever finishes last decides the final status.
"""
import enum
import logging

from api.exception import NotFoundError, PermissionDenied, ValidationError
from models import TaskStatus

logger = logging.getLogger(__name__)

MOVE_FAILED_MESSAGE = "Could not move the task. Please try again."


class MutationState(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"
    NOOP = "noop"


class StatusMutation:
    def __init__(self, board, task_id, previous, target):
        self.board = board
        self.task_id = task_id
        self.previous = previous
        self.target = target
        self.state = MutationState.PENDING if previous != target else MutationState.NOOP
        self.error = None

    def apply(self):
        if self.state is MutationState.PENDING:
            self.board._set_status(self.task_id, self.target)
        return self

    def sync(self):
        """
        Persists the move; on failure, compensates back to the captured status.

        Permission, not-found and validation errors are the caller's to handle:
        the status is restored and the error is raised again. Anything else is a
        backend failure and ends in ROLLED_BACK with the board's error set.
        """
        if self.state is not MutationState.PENDING:
            return self
        try:
            saved = self.board.persist(self.task_id, {'status': self.target.value})
        except (PermissionDenied, NotFoundError, ValidationError):
            self.board._set_status(self.task_id, self.previous)
            self.state = MutationState.ROLLED_BACK
            raise
        except Exception as e:
            self.board._set_status(self.task_id, self.previous)
            self.state = MutationState.ROLLED_BACK
            self.error = e
            self.board.error = MOVE_FAILED_MESSAGE
            logger.warning("Move of task %s to %s rolled back: %s", self.task_id, self.target.value, e)
            return self

        self.state = MutationState.CONFIRMED
        if isinstance(saved, dict) and saved.get('updatedAt'):
            self.board._touch(self.task_id, saved['updatedAt'])
        return self

    @property
    def settled(self):
        return self.state is not MutationState.PENDING

    def to_dict(self):
        return {
            'taskId': self.task_id,
            'previous': self.previous.value,
            'target': self.target.value,
            'state': self.state.value,
        }


class KanbanBoard:
    """
    In-memory task list for one board, owned by whoever built it.

    persist(task_id, changes) is the gateway to the backend; it is called once
    per non-trivial move and may raise.
    """

    def __init__(self, tasks, persist):
        self._tasks = {task['id']: dict(task) for task in tasks}
        self._order = [task['id'] for task in tasks]
        self.persist = persist
        self.error = None

    def _task(self, task_id):
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        return task

    def _set_status(self, task_id, status):
        self._task(task_id)['status'] = status.value

    def _touch(self, task_id, updated_at):
        self._task(task_id)['updatedAt'] = updated_at

    def status_of(self, task_id):
        return TaskStatus(self._task(task_id)['status'])

    def get(self, task_id):
        return dict(self._task(task_id))

    @property
    def tasks(self):
        return [dict(self._tasks[task_id]) for task_id in self._order]

    def move(self, task_id, target):
        """Applies the move locally and returns the command, not yet synced."""
        status = TaskStatus.parse(target)
        if status is None:
            raise ValidationError(f"Invalid status '{target}'")
        mutation = StatusMutation(self, task_id, self.status_of(task_id), status)
        return mutation.apply()

    def move_and_sync(self, task_id, target):
        return self.move(task_id, target).sync()

    def columns(self):
        columns = {status.value: [] for status in TaskStatus}
        for task in self.tasks:
            columns.setdefault(task['status'], []).append(task)
        return columns

    def stats(self):
        tasks = self.tasks
        done = sum(1 for t in tasks if t['status'] == TaskStatus.DONE.value)
        distribution = []
        for status in TaskStatus:
            count = sum(1 for t in tasks if t['status'] == status.value)
            if count:
                distribution.append({'name': status.value, 'value': count})
        return {
            'total': len(tasks),
            'done': done,
            'pending': len(tasks) - done,
            'distribution': distribution,
        }

    def to_dict(self):
        return {'columns': self.columns(), 'stats': self.stats(), 'error': self.error}
