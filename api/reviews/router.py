"""
Review endpoints (mounted under `/form`).
"""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from core.envelope import send_success

from . import schemas, service

router = APIRouter()


@router.post("/reviews")
async def submit_review(request: schemas.SubmitReviewRequest) -> JSONResponse:
    review = await service.submit_review(request)
    return send_success(
        "Review submitted successfully",
        data=[review],
        code=status.HTTP_201_CREATED,
    )


@router.get("/reviews")
async def get_all_reviews() -> JSONResponse:
    rows = await service.list_reviews()
    return send_success("All reviews retrieved successfully", data=rows)


@router.get("/reviews/{respondent_id}")
async def get_respondent_reviews(respondent_id: str) -> JSONResponse:
    rows = await service.list_respondent_reviews(respondent_id)
    return send_success(
        f"Successfully retrieved reviews for respondent {respondent_id}",
        data=rows,
    )
