"""
Form persistence (raw SQL).

Tables: respondents, form_submissions, financial_insights (and reviews for the
aggregate insight read). Schema comes from `db/migrations/`.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

from .insights import InsightDraft


def normalize_email(email: str) -> str:
    return (email or "").strip()


async def find_respondent_by_email(conn: asyncpg.Connection, email: str) -> dict[str, Any] | None:
    """
    Oldest respondent with this email (case-insensitive), or None.
    """
    row = await conn.fetchrow(
        """
        SELECT id, name, email, company_name, created_at, updated_at
        FROM respondents
        WHERE lower(email) = lower($1)
        ORDER BY created_at ASC, id ASC
        LIMIT 1
        """,
        normalize_email(email),
    )
    return dict(row) if row is not None else None


async def insert_respondent(
    conn: asyncpg.Connection,
    *,
    name: str,
    email: str,
    company_name: str | None,
) -> dict[str, Any]:
    row = await conn.fetchrow(
        """
        INSERT INTO respondents (name, email, company_name)
        VALUES ($1, $2, $3)
        RETURNING id, name, email, company_name, created_at, updated_at
        """,
        name,
        normalize_email(email),
        company_name,
    )
    if row is None:
        raise RuntimeError("Failed to insert respondent.")
    return dict(row)


async def insert_submission(
    conn: asyncpg.Connection,
    *,
    respondent_id: Any,
    form_type: str,
    responses: Any,
    is_complete: bool = True,
) -> dict[str, Any]:
    row = await conn.fetchrow(
        """
        INSERT INTO form_submissions (respondent_id, form_type, responses, is_complete)
        VALUES ($1, $2, $3::jsonb, $4)
        RETURNING id, respondent_id, form_type, responses, is_complete, submission_date, updated_at
        """,
        respondent_id,
        form_type,
        db.json_arg(responses),
        is_complete,
    )
    if row is None:
        raise RuntimeError("Failed to insert form submission.")
    submission = dict(row)
    submission["responses"] = db.json_value(submission["responses"])
    return submission


async def insert_insights(
    conn: asyncpg.Connection,
    *,
    submission_id: Any,
    respondent_id: Any,
    drafts: list[InsightDraft],
) -> None:
    if not drafts:
        return

    records = [
        (
            submission_id,
            respondent_id,
            d.title,
            d.content,
            d.category,
            d.priority,
            db.json_arg(d.data),
        )
        for d in drafts
    ]
    await conn.executemany(
        """
        INSERT INTO financial_insights
          (submission_id, respondent_id, title, content, category, priority, data)
        VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb)
        """,
        records,
    )


async def create_submission(
    *,
    name: str,
    email: str,
    company_name: str | None,
    form_type: str,
    responses: Any,
    drafts: list[InsightDraft],
) -> tuple[dict[str, Any], dict[str, Any], bool]:
    """
    Find-or-create the respondent, insert the submission and its insights in a
    single transaction.

    A transaction-scoped advisory lock on the lower-cased email serializes
    concurrent first submissions, so one email maps to one respondent.

    Returns (respondent, submission, respondent_created).
    """
    async with db.transaction() as conn:
        await conn.execute(
            "SELECT pg_advisory_xact_lock(hashtext(lower($1)))",
            normalize_email(email),
        )

        respondent = await find_respondent_by_email(conn, email)
        created = respondent is None
        if respondent is None:
            respondent = await insert_respondent(
                conn,
                name=name,
                email=email,
                company_name=company_name,
            )

        submission = await insert_submission(
            conn,
            respondent_id=respondent["id"],
            form_type=form_type,
            responses=responses,
        )
        await insert_insights(
            conn,
            submission_id=submission["id"],
            respondent_id=respondent["id"],
            drafts=drafts,
        )
        return respondent, submission, created


async def list_insights(
    *,
    respondent_id: Any | None = None,
    category: str | None = None,
) -> list[dict[str, Any]]:
    """
    Every insight joined with its submission, respondent, and the respondent's
    reviews (aggregated into a json array, newest first).

    Optional filters narrow the set; NULL means "no filter".
    """
    rows = await db.fetch_all(
        """
        WITH insight_data AS (
          SELECT
            fi.id,
            fi.title,
            fi.content,
            fi.category,
            fi.priority,
            fi.data AS insight_data,
            fi.created_at,
            fi.respondent_id AS fi_respondent_id,
            fs.id AS submission_id,
            fs.form_type,
            fs.responses,
            fs.is_complete,
            fs.submission_date,
            fs.updated_at AS submission_updated_at,
            r.id AS respondent_id,
            r.name,
            r.email,
            r.company_name,
            r.created_at AS respondent_created_at
          FROM financial_insights fi
          LEFT JOIN form_submissions fs ON fs.id = fi.submission_id
          LEFT JOIN respondents r ON r.id = fi.respondent_id
          WHERE ($1::uuid IS NULL OR fi.respondent_id = $1::uuid)
            AND ($2::text IS NULL OR fi.category = $2::text)
        )
        SELECT
          i.*,
          COALESCE(rv.reviews, '[]'::json) AS reviews
        FROM insight_data i
        LEFT JOIN LATERAL (
          SELECT json_agg(
                   json_build_object(
                     'id', rev.id,
                     'rating', rev.rating,
                     'reaction', rev.reaction,
                     'feedback', rev.feedback,
                     'created_at', rev.created_at
                   )
                   ORDER BY rev.created_at DESC, rev.id DESC
                 ) AS reviews
          FROM reviews rev
          WHERE rev.respondent_id = i.respondent_id
        ) rv ON true
        ORDER BY i.respondent_created_at DESC NULLS LAST, i.priority DESC, i.created_at DESC, i.id
        """,
        respondent_id,
        category,
    )
    for row in rows:
        row["insight_data"] = db.json_value(row.get("insight_data"))
        row["responses"] = db.json_value(row.get("responses"))
        row["reviews"] = db.json_value(row.get("reviews")) or []
    return rows
