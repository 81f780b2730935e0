"""Read access to published prompts."""

from data_models.prompt import PromptSummary
from db.database import SessionLocal
from db.models import PromptModel

PROMPT_SORTS = {
    "viral": (PromptModel.trend_score.desc(), PromptModel.first_seen_at.desc()),
    "recent": (PromptModel.first_seen_at.desc(),),
}


class PromptNotFoundError(LookupError):
    """No published prompt with the requested id."""


def prompt_to_dict(prompt: PromptModel) -> dict:
    """Serialize a prompt row through the API schema."""
    return PromptSummary(
        id=prompt.id,
        text=prompt.text,
        type=prompt.type,
        preview_url=prompt.preview_url,
        preview_type=prompt.preview_type or prompt.type,
        platforms=prompt.platforms or [],
        ai_tools=prompt.ai_tools or [],
        tags=prompt.tags or [],
        style=prompt.style,
        emotion=prompt.emotion,
        trend_score=prompt.trend_score,
        first_seen_at=prompt.first_seen_at,
        cross_platform_count=prompt.cross_platform_count,
        creator_count=prompt.creator_count,
        engagement_velocity=prompt.engagement_velocity,
        cluster_id=prompt.cluster_id,
        is_approved=prompt.is_approved,
        created_at=prompt.created_at,
    ).model_dump(mode="json")


class PromptCatalog:
    """List and fetch published prompts."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    def list_prompts(self, media_type: str | None = None, sort: str = "viral", page: int = 1, limit: int = 20) -> dict:
        """Paginated prompt list.

        Args:
            media_type: Filter by prompt type ("image" or "video")
            sort: "viral" (score, then newest) or "recent"
            page: 1-based page number
            limit: Page size

        Returns:
            Dict with prompts, total, page and total_pages
        """
        db = self.session_factory()
        try:
            query = db.query(PromptModel)
            if media_type:
                query = query.filter(PromptModel.type == media_type)

            total = query.count()
            order = PROMPT_SORTS.get(sort, PROMPT_SORTS["viral"])
            rows = query.order_by(*order, PromptModel.created_at.desc()).offset((page - 1) * limit).limit(limit).all()

            return {
                "prompts": [prompt_to_dict(p) for p in rows],
                "total": total,
                "page": page,
                "total_pages": -(-total // limit) if limit else 0,
            }
        finally:
            db.close()

    def trending(self, limit: int = 10) -> list[dict]:
        """Approved prompts, highest score first."""
        db = self.session_factory()
        try:
            rows = (
                db.query(PromptModel)
                .filter(PromptModel.is_approved.is_(True))
                .order_by(PromptModel.trend_score.desc(), PromptModel.created_at.desc())
                .limit(limit)
                .all()
            )
            return [prompt_to_dict(p) for p in rows]
        finally:
            db.close()

    def get_prompt(self, prompt_id: str) -> dict:
        """Single published prompt.

        Raises:
            PromptNotFoundError: If the prompt does not exist
        """
        db = self.session_factory()
        try:
            prompt = db.get(PromptModel, prompt_id)
            if prompt is None:
                raise PromptNotFoundError(prompt_id)
            return prompt_to_dict(prompt)
        finally:
            db.close()
