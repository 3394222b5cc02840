"""
Posting flow: embed a new idea, store it, and look for a related idea from someone else.
"""

from dataclasses import dataclass
from typing import List, Optional

from . import config, dao
from .errors import InvalidIdeaError
from .schema import IdeaRecord, SimilarityMatch
from ..util.logging import logger


@dataclass
class SimilarityAlert:
    """One-shot notice to the posting author about a related idea."""
    idea_id: int
    author: str
    content: str
    similarity: float
    reason: str


@dataclass
class PostResult:
    idea: IdeaRecord
    match_status: str  # found|not_found|failed
    alert: Optional[SimilarityAlert] = None
    error: Optional[str] = None


def alert_for(match: SimilarityMatch) -> SimilarityAlert:
    """Build the user-facing alert for a real match."""
    return SimilarityAlert(
        idea_id=match.id,
        author=match.author,
        content=match.content,
        similarity=match.similarity,
        reason=f"Semantic similarity: {match.similarity * 100:.0f}% - consider connecting these ideas"
    )


def post_idea(author: str, content: str, title: Optional[str] = None, is_public: bool = True,
              embedding_provider=None, threshold: Optional[float] = None,
              limit: Optional[int] = None) -> PostResult:
    """
    Post an idea and check it against existing ideas from other authors.

    Raises:
        InvalidIdeaError: empty author or content
        EmbeddingServiceError: the idea could not be embedded; nothing is stored
        StoreError: the idea could not be stored
    """
    author = (author or "").strip()
    content = (content or "").strip()
    if not author:
        raise InvalidIdeaError("author cannot be empty")
    if not content:
        raise InvalidIdeaError("content cannot be empty")

    provider = embedding_provider or config.get_embedding_provider()
    embedding = provider.embed_text(content)

    idea = dao.insert_idea(author, content, embedding, title=title or None, is_public=is_public)

    # The idea is stored at this point; a matching failure is reported, not raised
    try:
        result = dao.match_ideas(embedding, exclude_author=author, threshold=threshold, limit=limit)
    except Exception as e:
        logger.log_operation("post.match", "failed", {"idea_id": idea.id, "error": str(e)})
        return PostResult(idea=idea, match_status="failed", error=str(e))

    if not result.found:
        return PostResult(idea=idea, match_status="not_found")

    alert = alert_for(result.best)
    logger.log_operation("post.match", "found", {
        "idea_id": idea.id,
        "matched_id": alert.idea_id,
        "similarity": round(alert.similarity, 4)
    })
    return PostResult(idea=idea, match_status="found", alert=alert)


# Demo population for an empty deployment
SEED_IDEAS = [
    ("Dr. Chen (CV group)",
     "Attention in transformers can be optimized with sparse matrices, bringing the cost "
     "down from O(n^2) to O(n log n)."),
    ("Alex (NLP group)",
     "Exploring quantization for Llama 3. 4-bit quantization seems to halve memory use "
     "while keeping 95% of the performance."),
    ("Charlie (robotics)",
     "The inverse kinematics solver for the robot arm keeps failing near singularities; "
     "trying damped least squares to fix the control problem."),
    ("Diana (biology)",
     "Clustering gene sequences with contrastive learning. Results look promising but "
     "training is unstable."),
    ("Zhou (FinTech)",
     "Looking into financial time series forecasting. Do transformers actually work for "
     "stock prediction with this much noise in the data?"),
]


def seed_ideas(embedding_provider=None) -> List[IdeaRecord]:
    """Store the demo ideas with real embeddings; returns the inserted records."""
    provider = embedding_provider or config.get_embedding_provider()
    inserted = []
    for author, content in SEED_IDEAS:
        embedding = provider.embed_text(content)
        inserted.append(dao.insert_idea(author, content, embedding))
    logger.log_operation("seed.ideas", "success", {"count": len(inserted)})
    return inserted
