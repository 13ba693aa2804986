from .task import Task, TaskCounter, TaskStatus, Priority, TaskOrigin
from .comment import Comment
from .subtask import Subtask
from .attachment import Attachment, AttachmentType
from .activity import Activity
from .status_history import StatusHistory


