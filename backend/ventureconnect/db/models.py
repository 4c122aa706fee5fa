"""
Database Models Module

This module defines SQLAlchemy ORM models for the application's database schema.
Models cover users, their projects, resources and skills, feed posts,
connections, direct messages and server-side login sessions.

List-valued columns use JSON so the schema works on PostgreSQL and SQLite.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class User(Base):
    """
    User model for entrepreneurs and investors.
    Password is nullable because OIDC-provisioned accounts have none.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    bio = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    headline = Column(String, nullable=True)
    company = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    user_type = Column(String, nullable=False)
    oidc_subject = Column(String, nullable=True, unique=True, index=True)
    profile_completion = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)


class Project(Base):
    """Project or side gig showcased on a user's profile."""
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String, nullable=False)
    looking_for = Column(String, nullable=True)
    tags = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Resource(Base):
    """One row of a user's resource grid: what they have and need in a category."""
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String, nullable=False)
    have = Column(JSON, nullable=True)
    need = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    tags = Column(JSON, nullable=True)
    type = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class Connection(Base):
    """
    Connection request between two users.
    Status moves from "pending" to "accepted" or "rejected".
    """
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class Session(Base):
    """Server-side login session shared by the password and OIDC flows."""
    __tablename__ = "sessions"

    sid = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
