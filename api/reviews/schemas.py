"""
Review request models.

Required-field and range checks happen in `service.py` so failures carry
specific messages.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class SubmitReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    respondent_id: str | None = Field(default=None, alias="respondentId")
    # JSON `true` must not become 1.
    rating: StrictInt | None = None
    # Quick reaction label, e.g. "Great", "Loved it".
    reaction: str | None = Field(default=None, max_length=50)
    feedback: str | None = Field(default=None, max_length=2000)
