# quack_companion/schemas/diagnostics.py
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    timestamp: datetime


class EnvInfo(BaseModel):
    version: str
    python_version: str
    platform: str
    session_id: str
    endpoint_url: str | None
