from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MessageResponse(ApiModel):
    message: str
