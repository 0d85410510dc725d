"""
Form submission and insight business logic.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status

from . import insights, repository, schemas

logger = logging.getLogger(__name__)


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


async def submit_form(
    payload: schemas.SubmitFormRequest,
    *,
    generator: insights.InsightGenerator,
) -> schemas.SubmitFormResponse:
    try:
        drafts = insights.generate(generator, payload.form_type, payload.responses)
    except insights.InvalidInsightError as exc:
        logger.error("insight_generation_invalid form_type=%s error=%s", payload.form_type, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit form",
        ) from exc

    try:
        respondent, submission, created = await repository.create_submission(
            name=payload.name,
            email=payload.email,
            company_name=payload.company_name,
            form_type=payload.form_type,
            responses=payload.responses,
            drafts=drafts,
        )
    except Exception as exc:
        logger.exception("form_submit_failed form_type=%s", payload.form_type)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit form",
        ) from exc

    logger.info(
        "form_submitted submission_id=%s respondent_id=%s respondent_created=%s insights=%s",
        submission["id"],
        respondent["id"],
        created,
        len(drafts),
    )
    return schemas.SubmitFormResponse(
        submission_id=str(submission["id"]),
        respondent_id=str(respondent["id"]),
        insights=[schemas.InsightDraftResponse(**d.as_dict()) for d in drafts],
    )


def format_insight_row(row: dict[str, Any]) -> dict[str, Any]:
    """
    Reshape one flat aggregate row into the nested insight object.
    """
    return {
        "id": _str_or_none(row["id"]),
        "title": row["title"],
        "content": row["content"],
        "category": row["category"],
        "priority": row["priority"],
        "insightData": row.get("insight_data"),
        "createdAt": row.get("created_at"),
        "financialInsightRespondentId": _str_or_none(row.get("fi_respondent_id")),
        "submission": {
            "id": _str_or_none(row.get("submission_id")),
            "formType": row.get("form_type"),
            "responses": row.get("responses"),
            "isComplete": row.get("is_complete"),
            "submissionDate": row.get("submission_date"),
            "updatedAt": row.get("submission_updated_at"),
        },
        "respondent": {
            "id": _str_or_none(row.get("respondent_id")),
            "name": row.get("name"),
            "email": row.get("email"),
            "companyName": row.get("company_name"),
            "createdAt": row.get("respondent_created_at"),
        },
        "reviews": list(row.get("reviews") or []),
    }


def _parse_uuid(value: str | None) -> UUID | None:
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="respondentId must be a valid UUID",
        ) from exc


async def list_insights(
    *,
    respondent_id: str | None = None,
    category: str | None = None,
) -> list[dict[str, Any]]:
    respondent_uuid = _parse_uuid(respondent_id)
    category = (category or "").strip() or None

    try:
        rows = await repository.list_insights(respondent_id=respondent_uuid, category=category)
    except Exception as exc:
        logger.exception("insights_fetch_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch insights",
        ) from exc

    return [format_insight_row(row) for row in rows]
