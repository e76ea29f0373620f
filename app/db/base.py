"""Declarative base for the judging schema.

The models only describe table shapes for Alembic and the sqlite-backed
model tests; request handlers read and write through Supabase.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


__all__ = ["Base"]
