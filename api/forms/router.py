"""
Form submission and insight endpoints (mounted under `/form`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from core.envelope import send_success

from . import dependencies, insights, schemas, service

router = APIRouter()


@router.post("/submissions")
async def submit_form(
    request: schemas.SubmitFormRequest,
    generator: insights.InsightGenerator = Depends(dependencies.get_insight_generator),
) -> JSONResponse:
    result = await service.submit_form(request, generator=generator)
    return send_success(
        "Form submitted successfully",
        data=[result.model_dump(by_alias=True)],
        code=status.HTTP_201_CREATED,
    )


@router.get("/insights")
async def get_insights(
    respondent_id: str | None = Query(default=None, alias="respondentId"),
    category: str | None = Query(default=None, max_length=100),
) -> JSONResponse:
    """
    All insights with submission, respondent and the respondent's reviews.
    """
    rows = await service.list_insights(respondent_id=respondent_id, category=category)
    return send_success(
        "All insights with complete data and reviews retrieved successfully",
        data=rows,
    )
