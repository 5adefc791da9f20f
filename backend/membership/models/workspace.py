from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from membership.models.types import PyObjectId


class Workspace(BaseModel):
    """Read model of a workspace; owned by the workspace service."""

    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(alias="_id")
    public_id: str
    name: str
    slug: str
    deleted_at: Optional[datetime] = None
