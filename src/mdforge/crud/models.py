"""Database table definitions for the author registry"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel


class AuthorRow(SQLModel, table=True):
    """A registered author, keyed by the handle used in front-matter `author:`"""
    __tablename__ = "authors"
    key: str = Field(..., primary_key=True)
    name: str = Field(default="", nullable=False)
    avatar: str = Field(default="", nullable=False, description="Image URL or path shown in the author block")
    bio: str = Field(default="", sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
