from datetime import datetime, timezone
import enum
import uuid

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def generate_uuid():
    return str(uuid.uuid4())


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat()


class TaskStatus(str, enum.Enum):
    TODO = "ToDo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"

    @classmethod
    def values(cls):
        return [status.value for status in cls]

    @classmethod
    def parse(cls, value):
        """Returns the matching status or None when the value is not one of the three."""
        if isinstance(value, cls):
            return value
        for status in cls:
            if status.value == value or status.name == value:
                return status
        return None


class User(db.Model):
    __tablename__ = 'users'
    uid = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)


class Project(db.Model):
    __tablename__ = 'projects'
    id = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    startDate = db.Column('start_date', db.String(40), nullable=True)
    endDate = db.Column('end_date', db.String(40), nullable=True)
    ownerUid = db.Column('owner_uid', db.String(64), db.ForeignKey('users.uid'), nullable=False, index=True)
    shareId = db.Column('share_id', db.String(64), unique=True, nullable=True)
    isPublic = db.Column('is_public', db.Boolean, default=False, nullable=False)
    imageUrl = db.Column('image_url', db.String(500), nullable=True)


class Task(db.Model):
    __tablename__ = 'tasks'
    id = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    projectId = db.Column('project_id', db.String(64), db.ForeignKey('projects.id'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=TaskStatus.TODO.value)
    createdAt = db.Column('created_at', db.String(40), default=utc_now_iso)
    updatedAt = db.Column('updated_at', db.String(40), default=utc_now_iso)


class Note(db.Model):
    __tablename__ = 'notes'
    id = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    projectId = db.Column('project_id', db.String(64), db.ForeignKey('projects.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    createdAt = db.Column('created_at', db.String(40), default=utc_now_iso)


class TaskNote(db.Model):
    __tablename__ = 'task_notes'
    id = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    taskId = db.Column('task_id', db.String(64), db.ForeignKey('tasks.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    createdAt = db.Column('created_at', db.String(40), default=utc_now_iso)


class ProjectFile(db.Model):
    __tablename__ = 'project_files'
    id = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    projectId = db.Column('project_id', db.String(64), db.ForeignKey('projects.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(255), nullable=True)
    size = db.Column(db.Integer, nullable=True)
    url = db.Column(db.String(500), nullable=True)
    path = db.Column(db.String(500), nullable=True)
    uploadedAt = db.Column('uploaded_at', db.String(40), default=utc_now_iso)


class Drawing(db.Model):
    __tablename__ = 'drawings'
    id = db.Column(db.String(64), primary_key=True, default=generate_uuid)
    userId = db.Column('user_id', db.String(64), db.ForeignKey('users.uid'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    # opaque canvas snapshot
    records = db.Column(db.JSON, nullable=True)
    createdAt = db.Column('created_at', db.String(40), default=utc_now_iso)
    updatedAt = db.Column('updated_at', db.String(40), default=utc_now_iso)
    deleted = db.Column(db.Boolean, default=False, nullable=False)


class Summary(db.Model):
    __tablename__ = 'summaries'
    uid = db.Column(db.String(64), db.ForeignKey('users.uid'), primary_key=True)
    summary = db.Column(db.Text, nullable=True)
    updatedAt = db.Column('updated_at', db.String(40), default=utc_now_iso)


# collection name -> (model, primary key attribute)
COLLECTIONS = {
    'users': (User, 'uid'),
    'projects': (Project, 'id'),
    'tasks': (Task, 'id'),
    'notes': (Note, 'id'),
    'task_notes': (TaskNote, 'id'),
    'project_files': (ProjectFile, 'id'),
    'drawings': (Drawing, 'id'),
    'summaries': (Summary, 'uid'),
}


def to_dict(instance):
    """Serializes a model row into the camelCase record shape the API returns."""
    return {
        column.key: getattr(instance, column.key)
        for column in instance.__mapper__.column_attrs
    }
