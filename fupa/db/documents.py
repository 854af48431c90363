"""
Document-style writes on top of the ORM.

Every collection the app exposes (attendance, users, ...) is a table keyed by
a string document id.  ``merge_document`` gives those tables the upsert
behaviour a document store offers natively: read the current row (or none),
apply the payload field by field, write it back.  Fields missing from the
payload keep their stored values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@dataclass
class MergeOutcome(Generic[ModelT]):
    record: ModelT
    created: bool
    # Values the payload's fields held before the write; None on create.
    previous: dict[str, Any] | None


def _apply(record: Base, payload: dict[str, Any]) -> None:
    for field, value in payload.items():
        setattr(record, field, value)


def _check_fields(model: type[Base], payload: dict[str, Any]) -> str:
    mapper = inspect(model)
    unknown = set(payload) - set(mapper.columns.keys())
    if unknown:
        raise ValueError(f"Unknown field(s) for {model.__name__}: {sorted(unknown)}")
    return mapper.primary_key[0].key


async def _commit_or_rollback(session: AsyncSession) -> None:
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise


async def merge_document(
    session: AsyncSession,
    model: type[ModelT],
    doc_id: str,
    payload: dict[str, Any],
) -> MergeOutcome[ModelT]:
    """Create ``doc_id`` from ``payload`` or merge ``payload`` into it, then commit.

    A concurrent insert of the same id is resolved by re-reading the winner and
    merging over it, so the later write still wins.  Any other store error rolls
    the session back and propagates.
    """
    pk = _check_fields(model, payload)

    current = await session.get(model, doc_id, populate_existing=True)
    if current is None:
        record = model(**{pk: doc_id}, **payload)
        session.add(record)
        previous = None
    else:
        record = current
        previous = {field: getattr(current, field) for field in payload}
        _apply(record, payload)

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        if current is not None:
            raise
        logger.info("Insert race on %s %s, merging over the stored row", model.__name__, doc_id)
        record = await session.get(model, doc_id, populate_existing=True)
        if record is None:
            raise
        previous = {field: getattr(record, field) for field in payload}
        _apply(record, payload)
        await _commit_or_rollback(session)
    except SQLAlchemyError:
        await session.rollback()
        raise

    await session.refresh(record)
    return MergeOutcome(record=record, created=previous is None, previous=previous)
