from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class DocumentFile(BaseModel):
    """A documentation file as returned by the bulk repository fetch."""

    path: str
    content: str
    name: str  # Last path segment


class DocumentEntry(BaseModel):
    """A documentation file held by the in-memory index."""

    path: str
    content: str
    name: str
    title: str
    last_indexed: datetime


class WorkflowExample(BaseModel):
    name: str
    path: str
    content: str  # Raw YAML
    description: str


class SearchResult(BaseModel):
    title: str
    path: str
    excerpt: str
    score: float
    content: str
