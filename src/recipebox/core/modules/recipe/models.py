from datetime import datetime

from pydantic import Field

from recipebox.core.db import MongoModel
from recipebox.utils import now


class Recipe(MongoModel):
    """Recipe shown on the public list and managed by the admin."""

    title: str
    description: str
    ingredients: str
    instructions: str
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
