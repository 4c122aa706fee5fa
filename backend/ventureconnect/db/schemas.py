"""
Database Schemas Module

This module defines Pydantic models for request/response validation and serialization.
These schemas are the contract shared by both storage backends and the API layer.

Key Features:
- Input validation
- Response serialization (passwords never leave the server)
- Optional and required field definitions
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Dict
from datetime import datetime

USER_TYPES = ["entrepreneur", "investor"]
PROJECT_STATUSES = ["active", "planning", "completed"]
POST_TYPES = ["update", "project", "opportunity"]
CONNECTION_STATUSES = ["pending", "accepted", "rejected"]

# Resource grid categories
RESOURCE_CATEGORIES = [
    "money",
    "tech_skills",
    "financial_skills",
    "social_network",
    "business_skills",
    "marketing_skills",
    "legal_expertise",
]


def _check_choice(value: Optional[str], choices: List[str], field: str) -> Optional[str]:
    if value is not None and value not in choices:
        raise ValueError(f"{field} must be one of {choices}")
    return value


def _not_null(value, field: str):
    # Explicit null on a column that cannot hold one
    if value is None:
        raise ValueError(f"{field} cannot be null")
    return value


def _none_to_list(value):
    # Nullable JSON list columns come back as None
    return [] if value is None else value


# User schemas
class UserProfile(BaseModel):
    """Editable profile fields shared by several user schemas."""
    bio: Optional[str] = None
    location: Optional[str] = None
    headline: Optional[str] = None
    company: Optional[str] = None
    avatar_url: Optional[str] = None


class UserBase(UserProfile):
    """Base schema for user data."""
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    user_type: str

    @field_validator('user_type')
    @classmethod
    def validate_user_type(cls, v):
        """Validate that user type is one of the allowed values."""
        return _check_choice(v, USER_TYPES, "user_type")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class UserCreate(UserBase):
    """Schema for registering a new user with a password."""
    password: str = Field(..., min_length=1)


class UserUpdate(UserProfile):
    """Schema for updating a profile. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1)
    user_type: Optional[str] = None

    @field_validator('name', 'user_type', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        return _not_null(v, info.field_name)

    @field_validator('user_type')
    @classmethod
    def validate_user_type(cls, v):
        return _check_choice(v, USER_TYPES, "user_type")


class PublicUser(UserProfile):
    """User as returned by the API."""
    id: int
    username: str
    email: str
    name: str
    user_type: str
    profile_completion: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class User(PublicUser):
    """User as held by storage, including credentials."""
    password: Optional[str] = None
    oidc_subject: Optional[str] = None

    def public(self) -> PublicUser:
        return PublicUser.model_validate(self.model_dump(exclude={"password", "oidc_subject"}))


class LoginRequest(BaseModel):
    """Credentials; presence is checked by the route so it can answer 400."""
    username: Optional[str] = None
    password: Optional[str] = None


class OIDCUserData(BaseModel):
    """User fields derived from OpenID Connect claims."""
    oidc_subject: str
    username: str
    email: str
    name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    user_type: str = "entrepreneur"


# Project schemas
class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str
    status: str
    looking_for: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _check_choice(v, PROJECT_STATUSES, "status")

    @field_validator('tags', mode='before')
    @classmethod
    def default_tags(cls, v):
        return _none_to_list(v)


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    """Schema for updating a project. All fields are optional."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[str] = None
    looking_for: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator('title', 'description', 'status', 'tags', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        return _not_null(v, info.field_name)

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        return _check_choice(v, PROJECT_STATUSES, "status")


class Project(ProjectBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Resource schemas
class ResourceBase(BaseModel):
    category: str
    have: List[str] = Field(default_factory=list)
    need: List[str] = Field(default_factory=list)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _check_choice(v, RESOURCE_CATEGORIES, "category")

    @field_validator('have', 'need', mode='before')
    @classmethod
    def default_lists(cls, v):
        return _none_to_list(v)


class ResourceCreate(ResourceBase):
    pass


class ResourceUpdate(BaseModel):
    category: Optional[str] = None
    have: Optional[List[str]] = None
    need: Optional[List[str]] = None

    @field_validator('category', 'have', 'need', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        return _not_null(v, info.field_name)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _check_choice(v, RESOURCE_CATEGORIES, "category")


class Resource(ResourceBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResourceGridCell(BaseModel):
    """What a user has and needs within one resource category."""
    have: List[str] = Field(default_factory=list)
    need: List[str] = Field(default_factory=list)


ResourceGrid = Dict[str, ResourceGridCell]


# Skill schemas
class SkillBase(BaseModel):
    name: str = Field(..., min_length=1)
    rating: int = Field(..., ge=0, le=100)


class SkillCreate(SkillBase):
    pass


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    rating: Optional[int] = Field(None, ge=0, le=100)

    @field_validator('name', 'rating', mode='before')
    @classmethod
    def reject_null(cls, v, info):
        return _not_null(v, info.field_name)


class Skill(SkillBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Post schemas
class PostBase(BaseModel):
    content: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    type: str

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        return _check_choice(v, POST_TYPES, "type")

    @field_validator('tags', mode='before')
    @classmethod
    def default_tags(cls, v):
        return _none_to_list(v)


class PostCreate(PostBase):
    pass


class Post(PostBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeedPost(Post):
    """Post paired with its author for the feed."""
    user: PublicUser


# Connection schemas
class ConnectionCreate(BaseModel):
    recipient_id: int


class ConnectionStatusUpdate(BaseModel):
    status: Optional[str] = None


class Connection(BaseModel):
    id: int
    requester_id: int
    recipient_id: int
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConnectionWithUser(BaseModel):
    """A connection plus the other party's public profile."""
    connection: Connection
    user: PublicUser


class ConnectionAccepted(BaseModel):
    message: str
    connection: Connection


# Message schemas
class MessageCreate(BaseModel):
    recipient_id: int
    content: str = Field(..., min_length=1)


class Message(BaseModel):
    id: int
    sender_id: int
    recipient_id: int
    content: str
    is_read: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Conversation(BaseModel):
    """Messages with one counterpart, summarised for the inbox."""
    user: PublicUser
    last_message: Message
    unread_count: int = 0


# Dashboard schemas
class DashboardStats(BaseModel):
    connection_count: int
    pending_count: int
    project_count: int
    unread_message_count: int


class DashboardResponse(BaseModel):
    user: PublicUser
    stats: DashboardStats
    skills: List[Skill]
    resources: List[Resource]
    projects: List[Project]


# Token schemas
class Token(BaseModel):
    """Schema for authentication tokens."""
    access_token: str
    token_type: str


# Simple response schema for messages
class StatusMessage(BaseModel):
    """Schema for API response messages."""
    message: str
