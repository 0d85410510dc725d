"""
Form submission request/response models.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator


class SubmitFormRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    company_name: str | None = Field(default=None, alias="companyName", max_length=255)
    form_type: str = Field(..., alias="formType", min_length=1, max_length=50)
    # Any JSON document (object, array or scalar), stored verbatim as jsonb.
    responses: JsonValue

    @field_validator("responses")
    @classmethod
    def _responses_storable(cls, value: JsonValue) -> JsonValue:
        if value is None:
            raise ValueError("responses must not be null")
        # jsonb has no NaN/Infinity.
        try:
            json.dumps(value, allow_nan=False)
        except ValueError as exc:
            raise ValueError("responses must not contain NaN or Infinity") from exc
        return value


class InsightDraftResponse(BaseModel):
    title: str
    content: str
    category: str
    priority: int
    data: Any = None


class SubmitFormResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submission_id: str = Field(..., alias="submissionId")
    respondent_id: str = Field(..., alias="respondentId")
    insights: list[InsightDraftResponse]
