from __future__ import annotations

"""Persistence for uploaded resumes and their share slugs."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import (
    Column,
    DateTime,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import SQLAlchemyError

SUMMARY_MAX_CHARS = 400


class ResumeStoreError(RuntimeError):
    """Raised when resume persistence fails."""
    pass


@dataclass(frozen=True)
class ResumeRecord:
    """Uploaded resume with its extracted text."""
    id: str
    raw_text: str
    file_name: str
    share_slug: str
    owner_name: str | None = None
    summary: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def build_summary(text: str, max_chars: int = SUMMARY_MAX_CHARS) -> str:
    """Return the leading part of a resume without cutting words."""
    cleaned = " ".join(text.split())
    if len(cleaned) <= max_chars:
        return cleaned
    return cleaned[:max_chars].rsplit(" ", 1)[0] + "..."


def new_resume(
    raw_text: str,
    file_name: str,
    share_slug: str,
    owner_name: str | None = None,
) -> ResumeRecord:
    """Build a resume record with a fresh ID and a default summary."""
    return ResumeRecord(
        id=str(uuid.uuid4()),
        raw_text=raw_text,
        file_name=file_name,
        share_slug=share_slug,
        owner_name=owner_name,
        summary=build_summary(raw_text),
    )


@dataclass(frozen=True)
class ChatRecord:
    """Recruiter question asked against a resume."""
    resume_id: str
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ResumeStore(Protocol):
    """Protocol for resume persistence backends."""

    def create(self, record: ResumeRecord) -> ResumeRecord:
        raise NotImplementedError

    def get(self, resume_id: str) -> ResumeRecord | None:
        raise NotImplementedError

    def get_by_slug(self, slug: str) -> ResumeRecord | None:
        raise NotImplementedError

    def delete(self, resume_id: str) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def record_chat(self, resume_id: str, message: str) -> ChatRecord:
        raise NotImplementedError

    def chat_count(self, resume_id: str) -> int:
        raise NotImplementedError


@dataclass
class InMemoryResumeStore:
    """Dictionary-backed resume store for tests and local runs."""
    resumes: dict[str, ResumeRecord] = field(default_factory=dict)
    chats: list[ChatRecord] = field(default_factory=list)

    def create(self, record: ResumeRecord) -> ResumeRecord:
        if record.id in self.resumes:
            raise ResumeStoreError(f"Resume {record.id} already exists")
        if self.get_by_slug(record.share_slug) is not None:
            raise ResumeStoreError("Share slug already in use")
        self.resumes[record.id] = record
        return record

    def get(self, resume_id: str) -> ResumeRecord | None:
        return self.resumes.get(resume_id)

    def get_by_slug(self, slug: str) -> ResumeRecord | None:
        return next(
            (record for record in self.resumes.values() if record.share_slug == slug),
            None,
        )

    def delete(self, resume_id: str) -> bool:
        """Delete a resume along with its chat log."""
        self.chats = [chat for chat in self.chats if chat.resume_id != resume_id]
        return self.resumes.pop(resume_id, None) is not None

    def count(self) -> int:
        return len(self.resumes)

    def record_chat(self, resume_id: str, message: str) -> ChatRecord:
        chat = ChatRecord(resume_id=resume_id, message=message)
        self.chats.append(chat)
        return chat

    def chat_count(self, resume_id: str) -> int:
        return sum(1 for chat in self.chats if chat.resume_id == resume_id)


class SQLResumeStore:
    """Store resumes and their chat log in a SQL database."""
    def __init__(self, connection_uri: str) -> None:
        """Initialize the resume store and ensure tables exist."""
        self._engine = create_engine(connection_uri)
        self._metadata = MetaData()
        self._table = Table(
            "resumes",
            self._metadata,
            Column("id", String(36), primary_key=True),
            Column("raw_text", Text, nullable=False),
            Column("file_name", String(255), nullable=False),
            Column("share_slug", String(64), nullable=False, unique=True),
            Column("owner_name", String(255), nullable=True),
            Column("summary", Text, nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
        )
        self._chats = Table(
            "chats",
            self._metadata,
            Column("id", String(36), primary_key=True),
            Column("resume_id", String(36), nullable=False, index=True),
            Column("message", Text, nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
        )
        self._metadata.create_all(self._engine)

    def create(self, record: ResumeRecord) -> ResumeRecord:
        """Insert a resume record."""
        try:
            with self._engine.begin() as conn:
                conn.execute(self._table.insert().values(**self._serialize(record)))
        except SQLAlchemyError as exc:
            raise ResumeStoreError("Failed to save resume") from exc
        return record

    def get(self, resume_id: str) -> ResumeRecord | None:
        """Fetch a resume by ID."""
        return self._fetch_one(self._table.c.id == resume_id)

    def get_by_slug(self, slug: str) -> ResumeRecord | None:
        """Fetch a resume by its share slug."""
        return self._fetch_one(self._table.c.share_slug == slug)

    def delete(self, resume_id: str) -> bool:
        """Delete a resume and its chat log in one transaction."""
        try:
            with self._engine.begin() as conn:
                conn.execute(delete(self._chats).where(self._chats.c.resume_id == resume_id))
                result = conn.execute(delete(self._table).where(self._table.c.id == resume_id))
        except SQLAlchemyError as exc:
            raise ResumeStoreError("Failed to delete resume") from exc
        return bool(result.rowcount)

    def count(self) -> int:
        """Return the number of stored resumes."""
        return self._scalar_count(select(func.count()).select_from(self._table))

    def record_chat(self, resume_id: str, message: str) -> ChatRecord:
        """Append a recruiter question to the resume's chat log."""
        chat = ChatRecord(resume_id=resume_id, message=message)
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    self._chats.insert().values(
                        id=str(uuid.uuid4()),
                        resume_id=chat.resume_id,
                        message=chat.message,
                        created_at=chat.created_at,
                    )
                )
        except SQLAlchemyError as exc:
            raise ResumeStoreError("Failed to save chat") from exc
        return chat

    def chat_count(self, resume_id: str) -> int:
        """Return how many questions were asked against a resume."""
        return self._scalar_count(
            select(func.count())
            .select_from(self._chats)
            .where(self._chats.c.resume_id == resume_id)
        )

    def _scalar_count(self, query) -> int:
        try:
            with self._engine.connect() as conn:
                return int(conn.execute(query).scalar_one())
        except SQLAlchemyError as exc:
            raise ResumeStoreError("Failed to count rows") from exc

    def _fetch_one(self, condition) -> ResumeRecord | None:
        """Fetch a single resume matching a condition."""
        try:
            with self._engine.connect() as conn:
                row = conn.execute(select(self._table).where(condition)).mappings().first()
        except SQLAlchemyError as exc:
            raise ResumeStoreError("Failed to load resume") from exc
        if row is None:
            return None
        record = ResumeRecord(
            id=row["id"],
            raw_text=row["raw_text"],
            file_name=row["file_name"],
            share_slug=row["share_slug"],
            owner_name=row["owner_name"],
            summary=row["summary"],
            created_at=row["created_at"],
        )
        if record.created_at.tzinfo is None:
            # SQLite drops tzinfo on read.
            record = replace(record, created_at=record.created_at.replace(tzinfo=timezone.utc))
        return record

    def _serialize(self, record: ResumeRecord) -> dict[str, object]:
        """Prepare a resume row for insertion."""
        return {
            "id": record.id,
            "raw_text": record.raw_text,
            "file_name": record.file_name,
            "share_slug": record.share_slug,
            "owner_name": record.owner_name,
            "summary": record.summary,
            "created_at": record.created_at,
        }
