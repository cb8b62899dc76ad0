from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

class BaseSchema(BaseModel):

    
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

class TimestampSchema(BaseSchema):

    
    created_at: datetime
    updated_at: datetime

class IDSchema(BaseSchema):

    
    id: UUID

class IDTimestampSchema(IDSchema, TimestampSchema):

    
    pass

class PaginationMeta(BaseModel):

    
    limit: int
    offset: int
    total_items: int
    has_next: bool

    @classmethod
    def build(cls, limit: int, offset: int, total_items: int) -> "PaginationMeta":

        return cls(
            limit=limit,
            offset=offset,
            total_items=total_items,
            has_next=offset + limit < total_items,
        )
