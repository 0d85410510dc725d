"""
Review business logic.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status

from . import repository, schemas

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _respondent_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Respondent not found",
    )


def _parse_respondent_id(raw: str) -> UUID:
    # Anything that is not a UUID cannot reference a respondent row.
    try:
        return UUID(raw.strip())
    except ValueError as exc:
        raise _respondent_not_found() from exc


async def _require_respondent(respondent_id: UUID, *, failure_message: str) -> None:
    try:
        exists = await repository.respondent_exists(respondent_id)
    except Exception as exc:
        logger.exception("respondent_lookup_failed respondent_id=%s", respondent_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_message,
        ) from exc
    if not exists:
        raise _respondent_not_found()


async def submit_review(payload: schemas.SubmitReviewRequest) -> dict[str, Any]:
    respondent_raw = (payload.respondent_id or "").strip()
    if not respondent_raw or payload.rating is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: respondentId and rating",
        )

    if not (MIN_RATING <= payload.rating <= MAX_RATING):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Rating must be between {MIN_RATING} and {MAX_RATING}",
        )

    respondent_id = _parse_respondent_id(respondent_raw)
    await _require_respondent(respondent_id, failure_message="Failed to submit review")

    try:
        review = await repository.insert_review(
            respondent_id=respondent_id,
            rating=payload.rating,
            reaction=_blank_to_none(payload.reaction),
            feedback=_blank_to_none(payload.feedback),
        )
    except Exception as exc:
        logger.exception("review_submit_failed respondent_id=%s", respondent_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit review",
        ) from exc

    logger.info(
        "review_submitted review_id=%s respondent_id=%s rating=%s",
        review["id"],
        respondent_id,
        payload.rating,
    )
    return review


def format_review_row(row: dict[str, Any]) -> dict[str, Any]:
    respondent_id = row.get("respondent_id")
    return {
        "id": str(row["id"]),
        "rating": row["rating"],
        "reaction": row.get("reaction"),
        "feedback": row.get("feedback"),
        "createdAt": row.get("created_at"),
        "respondent": {
            "id": str(respondent_id) if respondent_id is not None else None,
            "name": row.get("name"),
            "email": row.get("email"),
            "companyName": row.get("company_name"),
        },
    }


async def list_reviews() -> list[dict[str, Any]]:
    try:
        rows = await repository.list_reviews()
    except Exception as exc:
        logger.exception("reviews_fetch_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch reviews",
        ) from exc
    return [format_review_row(row) for row in rows]


async def list_respondent_reviews(respondent_id: str) -> list[dict[str, Any]]:
    raw = (respondent_id or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing respondent ID",
        )

    respondent_uuid = _parse_respondent_id(raw)
    await _require_respondent(respondent_uuid, failure_message="Failed to fetch respondent reviews")

    try:
        return await repository.list_reviews_for_respondent(respondent_uuid)
    except Exception as exc:
        logger.exception("respondent_reviews_fetch_failed respondent_id=%s", respondent_uuid)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch respondent reviews",
        ) from exc
