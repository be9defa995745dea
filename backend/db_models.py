from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, LargeBinary, String, Text
from sqlalchemy.orm import deferred
from sqlalchemy.types import JSON

from backend.db import Base

JSONType = JSON


class DocumentORM(Base):
    __tablename__ = "documents"

    # seq keeps upload order for "first document of a type" lookups.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, unique=True, index=True, nullable=False)
    owner_id = Column(String, index=True, nullable=False)
    declared_type = Column(String, nullable=True)
    mime_type = Column(String, nullable=False)
    byte_size = Column(Integer, nullable=False, default=0)
    original_file_name = Column(String, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(String, nullable=False, default="pending")
    extracted = Column(JSONType, nullable=True)
    error = Column(Text, nullable=True)
    content = deferred(Column(LargeBinary, nullable=True))


class ItrFormORM(Base):
    __tablename__ = "itr_forms"

    id = Column(String, primary_key=True)
    owner_id = Column(String, index=True, nullable=False)
    income = Column(JSONType, nullable=False)
    deductions = Column(JSONType, nullable=False)
    investments = Column(JSONType, nullable=False)
    taxes_paid = Column(JSONType, nullable=False)
    notes = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="draft")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
