"""
Request bodies for the small JSON endpoints.

Contact and labor-claim bodies are free-form camelCase documents and are read
through Contact.from_json / LaborClaim.from_json instead.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VocabularyValueBody(CamelModel):
    name: str


class RenameBody(CamelModel):
    type: str
    old_name: str
    new_name: str


class LoginBody(CamelModel):
    username: str = ''
    password: str = ''


class UserCreateBody(CamelModel):
    id: Optional[str] = None
    name: str = ''
    username: str = ''
    password: str = ''


class UserUpdateBody(CamelModel):
    name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    current_password: Optional[str] = None


class UploadBody(CamelModel):
    data: str = ''
    name: str = ''
    mime_type: Optional[str] = None


class ClaimStatusBody(CamelModel):
    status: str
    approved_by: Optional[str] = None
