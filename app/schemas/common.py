"""Shared schema building blocks."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialised with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatTurn(CamelModel):
    """One message of a discussion history."""

    role: str
    content: str


class Material(CamelModel):
    """A style or source as sent by the client for prompting."""

    name: str
    content: str = ""
    selected: bool = False
