from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.models import QuizAnswer


async def recompute_submission_score(submission_id: UUID, db: AsyncSession) -> float:
    """
    Re-derive a submission's total from every stored answer row.

    Ungraded rows (NULL points) count as zero. Always read from the table so
    that grades applied in earlier sessions are included exactly once.
    """
    result = await db.execute(
        select(func.coalesce(func.sum(QuizAnswer.points_awarded), 0))
        .where(QuizAnswer.submission_id == submission_id)
    )
    return float(result.scalar() or 0)


def calculate_percentage(score: Optional[float], total_points: Optional[int]) -> Optional[float]:
    if score is None or not total_points:
        return None
    return round((score / total_points) * 100, 2)
