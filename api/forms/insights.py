"""
Insight generation.

An insight generator is a plain callable `(form_type, responses) -> drafts`,
where `responses` is the submitted JSON document as-is.
The route receives one through a FastAPI dependency (see `dependencies.py`),
so real analysis can replace the sample template without touching the
submission flow.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

MIN_PRIORITY = 1
MAX_PRIORITY = 5
MAX_TITLE_CHARS = 255
MAX_CONTENT_CHARS = 5000
MAX_CATEGORY_CHARS = 100


class InvalidInsightError(ValueError):
    pass


@dataclass(frozen=True)
class InsightDraft:
    title: str
    content: str
    category: str
    priority: int  # 1 = highest, 5 = lowest
    data: Any = field(default=None)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


InsightGenerator = Callable[[str, Any], list[InsightDraft]]


def sample_insights(form_type: str, responses: Any) -> list[InsightDraft]:
    """
    Placeholder generator: one fixed insight regardless of input.
    """
    return [
        InsightDraft(
            title="Sample Financial Insight",
            content="This is a sample financial insight based on the submitted form.",
            category="Finance",
            priority=1,
            data={"sample": "data"},
        )
    ]


def validate_draft(draft: InsightDraft) -> InsightDraft:
    title = (draft.title or "").strip()
    category = (draft.category or "").strip()
    if not title:
        raise InvalidInsightError("Insight title is empty.")
    if not category:
        raise InvalidInsightError("Insight category is empty.")
    if len(title) > MAX_TITLE_CHARS:
        raise InvalidInsightError(f"Insight title exceeds {MAX_TITLE_CHARS} characters.")
    if len(category) > MAX_CATEGORY_CHARS:
        raise InvalidInsightError(f"Insight category exceeds {MAX_CATEGORY_CHARS} characters.")
    if len(draft.content or "") > MAX_CONTENT_CHARS:
        raise InvalidInsightError(f"Insight content exceeds {MAX_CONTENT_CHARS} characters.")
    if isinstance(draft.priority, bool) or not isinstance(draft.priority, int):
        raise InvalidInsightError("Insight priority must be an integer.")
    if not (MIN_PRIORITY <= draft.priority <= MAX_PRIORITY):
        raise InvalidInsightError(
            f"Insight priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}."
        )
    return draft


def generate(generator: InsightGenerator, form_type: str, responses: Any) -> list[InsightDraft]:
    """
    Run a generator and validate what it produced.
    """
    drafts = list(generator(form_type, responses) or [])
    return [validate_draft(d) for d in drafts]
