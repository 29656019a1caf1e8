"""
Schemas

Pydantic models for the two kinds of content this service handles:
- Message -> "messages" collection in MongoDB (contact form submissions)
- Post    -> markdown files in the posts directory, one <slug>.md per post
"""

import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """
    Contact messages collection schema
    Collection name: "messages"
    """
    model_config = ConfigDict(populate_by_name=True)

    email: str
    name: str
    message: str
    id: Optional[str] = Field(None, alias="_id", description="Assigned by MongoDB on insert")

    def to_document(self) -> dict:
        """Fields to insert; never carries an _id"""
        return self.model_dump(exclude={"id"})


class ContactResponse(BaseModel):
    message: str
    outgoingMessage: Message


class ErrorResponse(BaseModel):
    message: str


class Post(BaseModel):
    """
    A blog post loaded from <slug>.md
    Front-matter keys: title, image, excerpt, date, isFeatured
    """
    model_config = ConfigDict(populate_by_name=True)

    title: str
    image: str = ""
    excerpt: str = ""
    slug: str = Field(..., description="Filename stem, URL-friendly unique id")
    date: datetime.date
    content: str = ""
    is_featured: bool = Field(False, alias="isFeatured")

    @property
    def image_path(self) -> str:
        return f"/images/posts/{self.image}"


class PostList(BaseModel):
    items: List[Post]


class SlugList(BaseModel):
    items: List[str]
