"""
Request Schemas for Portfolio CMS

Each entity has a Create model (required fields enforced) and an Update model
(every field optional, only the fields sent are written; fields a record
cannot be without are refused when sent as null). Documents live in the
MongoDB collection named after the entity in lowercase.
"""

from datetime import datetime
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field, model_validator

# Auth
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class LoginRequest(BaseModel):
    email: str
    password: str

class Session(BaseModel):
    email: str
    role: str = "admin"

# Partial updates
class UpdateModel(BaseModel):
    # fields a stored record cannot be without; they may be left out but not sent as null
    required: ClassVar[tuple] = ()

    @model_validator(mode="after")
    def _reject_null_required(self):
        nulls = [name for name in self.required if name in self.model_fields_set and getattr(self, name) is None]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self

# Projects
class ProjectCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    long_description: Optional[str] = None
    image: Optional[str] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    technologies: List[str] = []
    featured: bool = False
    order: int = 0

class ProjectUpdate(UpdateModel):
    required: ClassVar[tuple] = ("title", "description", "technologies", "featured", "order")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    long_description: Optional[str] = None
    image: Optional[str] = None
    github_url: Optional[str] = None
    live_url: Optional[str] = None
    technologies: Optional[List[str]] = None
    featured: Optional[bool] = None
    order: Optional[int] = None

# Skills
class SkillCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    level: int = Field(default=50, ge=0, le=100)
    icon: Optional[str] = None
    color: Optional[str] = None
    order: int = 0

class SkillUpdate(UpdateModel):
    required: ClassVar[tuple] = ("name", "category", "level", "order")

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    level: Optional[int] = Field(default=None, ge=0, le=100)
    icon: Optional[str] = None
    color: Optional[str] = None
    order: Optional[int] = None

# Technologies
class TechnologyCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    website: Optional[str] = None
    featured: bool = False
    order: int = 0

class TechnologyUpdate(UpdateModel):
    required: ClassVar[tuple] = ("name", "category", "featured", "order")

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    website: Optional[str] = None
    featured: Optional[bool] = None
    order: Optional[int] = None

# Certifications
class CertificationCreate(BaseModel):
    name: str = Field(min_length=1)
    issuer: str = Field(min_length=1)
    description: Optional[str] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    issue_date: datetime
    expiry_date: Optional[datetime] = None
    image: Optional[str] = None
    featured: bool = False
    order: int = 0

class CertificationUpdate(UpdateModel):
    required: ClassVar[tuple] = ("name", "issuer", "issue_date", "featured", "order")

    name: Optional[str] = Field(default=None, min_length=1)
    issuer: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    image: Optional[str] = None
    featured: Optional[bool] = None
    order: Optional[int] = None

# Blog
class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1)
    slug: Optional[str] = None  # derived from title when missing
    excerpt: str = Field(min_length=1)
    content: str = Field(min_length=1)
    tags: List[str] = []
    published: bool = False
    featured: bool = False
    image: Optional[str] = None

class BlogPostUpdate(UpdateModel):
    required: ClassVar[tuple] = ("title", "slug", "excerpt", "content", "tags", "published", "featured")

    title: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    excerpt: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[str]] = None
    published: Optional[bool] = None
    featured: Optional[bool] = None
    image: Optional[str] = None

# Contact
class ContactCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    subject: Optional[str] = ""
    message: str = Field(min_length=1)

class ContactRead(BaseModel):
    read: bool = True

# Settings singleton
class SettingsUpdate(UpdateModel):
    required: ClassVar[tuple] = ("site_name", "enable_analytics", "maintenance_mode")

    site_name: Optional[str] = None
    site_description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    enable_analytics: Optional[bool] = None
    maintenance_mode: Optional[bool] = None
