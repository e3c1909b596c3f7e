# quack_companion/schemas/guideline.py
from datetime import datetime

from pydantic import BaseModel


class GuidelineContent(BaseModel):
    content: str


class Guideline(GuidelineContent):
    id: int
    creator_id: int
    created_at: datetime
    updated_at: datetime
