"""
Review persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from core import db

# Row keys match the column accessors clients already consume.
_REVIEW_COLUMNS = """
  id,
  respondent_id AS "respondentId",
  rating,
  reaction,
  feedback,
  created_at,
  updated_at
"""


async def respondent_exists(respondent_id: UUID) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM respondents
        WHERE id = $1
        LIMIT 1
        """,
        respondent_id,
    )
    return row is not None


async def insert_review(
    *,
    respondent_id: UUID,
    rating: int,
    reaction: str | None = None,
    feedback: str | None = None,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO reviews (respondent_id, rating, reaction, feedback)
        VALUES ($1, $2, $3, $4)
        RETURNING {_REVIEW_COLUMNS}
        """,
        respondent_id,
        rating,
        reaction,
        feedback,
    )
    if row is None:
        raise RuntimeError("Failed to insert review.")
    return row


async def list_reviews() -> list[dict[str, Any]]:
    """
    All reviews with respondent summary fields, newest first.
    """
    return await db.fetch_all(
        """
        SELECT
          r.id,
          r.rating,
          r.reaction,
          r.feedback,
          r.created_at,
          resp.id AS respondent_id,
          resp.name,
          resp.email,
          resp.company_name
        FROM reviews r
        LEFT JOIN respondents resp ON resp.id = r.respondent_id
        ORDER BY r.created_at DESC, r.id DESC
        """
    )


async def list_reviews_for_respondent(respondent_id: UUID) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_REVIEW_COLUMNS}
        FROM reviews
        WHERE respondent_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        respondent_id,
    )
