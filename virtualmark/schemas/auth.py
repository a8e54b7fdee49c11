from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=256)
    remember_me: bool = False
