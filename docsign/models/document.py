"""Document metadata returned by the Document Store."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DocumentStatus(str, Enum):
    """Lifecycle status of a stored document."""

    PENDING = "pending"
    SIGNED = "signed"
    ARCHIVED = "archived"
    REVIEWED = "reviewed"


class DocumentMetadata(BaseModel):
    """Document metadata model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id")
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    original_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(default=None, ge=0)
    upload_date: Optional[datetime] = None
    status: DocumentStatus = Field(default=DocumentStatus.PENDING)
    last_signed_at: Optional[datetime] = None
    user: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
