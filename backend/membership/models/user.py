from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from membership.models.types import PyObjectId


class User(BaseModel):
    """Account as known to the identity provider."""

    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(alias="_id")
    email: EmailStr
    name: Optional[str] = None
