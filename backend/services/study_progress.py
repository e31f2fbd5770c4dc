from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, UTC
from typing import List, Optional
import logging

from models.flashcard import Flashcard
from models.study import StudyProgress, StudySession
from models.enums import AccessLevel, DifficultyRating
from services.access_control import AccessControlService
from services.study_session import StudySessionService, round_half_up
from database import commit_with_retry
from api.errors import InternalError
from api.models.responses.study_session import (
    StudyProgressResponse,
    CardProgressResponse,
    SetStatisticsResponse,
    StudySessionResponse
)

logger = logging.getLogger(__name__)

# A card needs review until it has this many attempts...
MIN_ATTEMPTS = 3
# ...and while its accuracy stays below this percentage
TARGET_ACCURACY_PERCENT = 70

class StudyProgressService:
    def __init__(self, db: Session):
        self.db = db
        self.access = AccessControlService(db)

    def _increment(self, user_id: str, flashcard_id: int, is_correct: bool,
                   difficulty: Optional[DifficultyRating], now: datetime) -> int:
        """Bump the counters in place; returns the number of rows touched."""
        values = {
            "correct_count": StudyProgress.correct_count + (1 if is_correct else 0),
            "incorrect_count": StudyProgress.incorrect_count + (0 if is_correct else 1),
            "last_studied": now,
        }
        if difficulty is not None:
            values["difficulty_rating"] = difficulty.value

        result = self.db.execute(
            update(StudyProgress)
            .where(
                StudyProgress.user_id == user_id,
                StudyProgress.flashcard_id == flashcard_id
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def record_attempt(
        self,
        user_id: str,
        flashcard_id: int,
        is_correct: bool,
        difficulty: Optional[DifficultyRating] = None
    ) -> StudyProgressResponse:
        """Fold one attempt into the caller's progress on a card.

        Counters are incremented by the database, never read and rewritten
        here, so concurrent attempts on the same card all count. When no row
        exists yet one is inserted; if a concurrent first attempt wins that
        insert, the increment is applied to its row instead.
        """
        self.access.get_flashcard_for(user_id, flashcard_id, AccessLevel.VIEWER)
        now = datetime.now(UTC)

        def upsert():
            if self._increment(user_id, flashcard_id, is_correct, difficulty, now):
                return
            self.db.add(StudyProgress(
                user_id=user_id,
                flashcard_id=flashcard_id,
                correct_count=1 if is_correct else 0,
                incorrect_count=0 if is_correct else 1,
                last_studied=now,
                difficulty_rating=(difficulty or DifficultyRating.MEDIUM).value
            ))
            self.db.flush()

        def increment_existing():
            if not self._increment(user_id, flashcard_id, is_correct, difficulty, now):
                raise InternalError("Failed to record progress")

        try:
            try:
                commit_with_retry(self.db, upsert)
            except IntegrityError:
                self.db.rollback()
                logger.debug(f"Progress row for user {user_id} card {flashcard_id} created concurrently, incrementing")
                commit_with_retry(self.db, increment_existing)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to record progress for card {flashcard_id}: {str(e)}")
            raise InternalError("Failed to record progress")

        progress = self.db.query(StudyProgress).filter(
            StudyProgress.user_id == user_id,
            StudyProgress.flashcard_id == flashcard_id
        ).one()
        self.db.refresh(progress)
        return StudyProgressResponse.model_validate(progress)

    def _card_progress_query(self, user_id: str, set_id: int):
        return self.db.query(Flashcard, StudyProgress).outerjoin(
            StudyProgress,
            and_(
                StudyProgress.flashcard_id == Flashcard.id,
                StudyProgress.user_id == user_id
            )
        ).filter(Flashcard.set_id == set_id)

    def recommend_for_review(self, user_id: str, set_id: int, limit: Optional[int] = None) -> List[CardProgressResponse]:
        """Cards of a set the caller should practise next.

        A card qualifies when it was never studied, has fewer than three
        attempts, is below 70% accuracy or was rated hard. Never-studied cards
        come first, then the least recently studied.
        """
        self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)

        total = StudyProgress.correct_count + StudyProgress.incorrect_count
        query = self._card_progress_query(user_id, set_id).filter(
            or_(
                StudyProgress.id.is_(None),
                total < MIN_ATTEMPTS,
                StudyProgress.correct_count * 100 < total * TARGET_ACCURACY_PERCENT,
                StudyProgress.difficulty_rating == DifficultyRating.HARD.value
            )
        ).order_by(
            StudyProgress.last_studied.is_(None).desc(),
            StudyProgress.last_studied.asc(),
            Flashcard.id
        )
        if limit is not None:
            query = query.limit(limit)

        return [_card_progress(card, progress) for card, progress in query.all()]

    def set_statistics(self, user_id: str, set_id: int) -> SetStatisticsResponse:
        """Session totals plus per-card progress and the ten latest sessions."""
        sessions = StudySessionService(self.db)
        summary = sessions.session_summary(user_id, set_id)

        # Average of per-session accuracy, skipping sessions that studied nothing
        session_accuracies = [
            correct * 100 / studied
            for correct, studied in self.db.query(
                StudySession.correct_answers,
                StudySession.cards_studied
            ).filter(
                StudySession.user_id == user_id,
                StudySession.set_id == set_id,
                StudySession.cards_studied > 0
            ).all()
        ]
        avg_accuracy = sum(session_accuracies) / len(session_accuracies) if session_accuracies else 0

        card_rows = self._card_progress_query(user_id, set_id).order_by(
            StudyProgress.last_studied.is_(None).asc(),
            StudyProgress.last_studied.desc(),
            Flashcard.id
        ).all()

        return SetStatisticsResponse(
            **summary.model_dump(),
            total_time_minutes=round_half_up(summary.total_time_seconds / 60),
            avg_accuracy=round_half_up(avg_accuracy),
            card_progress=[_card_progress(card, progress) for card, progress in card_rows],
            recent_sessions=[
                StudySessionResponse.model_validate(s)
                for s in sessions.recent_sessions(user_id, set_id)
            ]
        )

def _card_progress(card: Flashcard, progress: Optional[StudyProgress]) -> CardProgressResponse:
    return CardProgressResponse(
        id=card.id,
        term=card.term,
        description=card.description,
        correct_count=progress.correct_count if progress else None,
        incorrect_count=progress.incorrect_count if progress else None,
        difficulty_rating=progress.difficulty_rating if progress else None,
        last_studied=progress.last_studied if progress else None
    )
