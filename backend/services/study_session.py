from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, UTC
import logging

from models.study import StudySession
from models.enums import AccessLevel, StudyMode
from services.access_control import AccessControlService
from database import commit_with_retry
from api.errors import InternalError, NotFound
from api.models.requests.study_session import StudySessionEnd
from api.models.responses.study_session import StudySessionResponse, SessionSummaryResponse

logger = logging.getLogger(__name__)

def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, as the web client expects."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)

class StudySessionService:
    def __init__(self, db: Session):
        self.db = db
        self.access = AccessControlService(db)

    def start_session(self, user_id: str, set_id: int, mode: StudyMode) -> StudySessionResponse:
        """Open a study session on a set the caller can view."""
        self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)

        session = StudySession(
            user_id=user_id,
            set_id=set_id,
            mode=mode.value,
            cards_studied=0,
            correct_answers=0,
            total_time_seconds=0,
            started_at=datetime.now(UTC)
        )

        def apply():
            self.db.add(session)
            return session

        try:
            commit_with_retry(self.db, apply)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to start study session: {str(e)}")
            raise InternalError("Failed to start study session")

        self.db.refresh(session)
        logger.info(f"User {user_id} started {mode.value} session {session.id} on set {set_id}")
        return StudySessionResponse.model_validate(session)

    def end_session(self, user_id: str, session_id: int, outcome: StudySessionEnd) -> StudySessionResponse:
        """Record a session's outcome.

        Ending the same session again overwrites the earlier outcome. Sessions
        belonging to someone else are reported as missing.
        """
        session = self.db.get(StudySession, session_id)
        if not session or session.user_id != user_id:
            raise NotFound("Study session not found")

        def apply():
            session.cards_studied = outcome.cards_studied
            session.correct_answers = outcome.correct_answers
            session.total_time_seconds = outcome.total_time_seconds
            session.completed_at = datetime.now(UTC)
            return session

        try:
            commit_with_retry(self.db, apply)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to end study session {session_id}: {str(e)}")
            raise InternalError("Failed to end study session")

        self.db.refresh(session)
        return StudySessionResponse.model_validate(session)

    def session_summary(self, user_id: str, set_id: int) -> SessionSummaryResponse:
        """Totals over the caller's sessions on one set."""
        self.access.get_set_for(user_id, set_id, AccessLevel.VIEWER)

        total_sessions, total_cards, total_correct, total_time = self.db.query(
            func.count(StudySession.id),
            func.coalesce(func.sum(StudySession.cards_studied), 0),
            func.coalesce(func.sum(StudySession.correct_answers), 0),
            func.coalesce(func.sum(StudySession.total_time_seconds), 0)
        ).filter(
            StudySession.user_id == user_id,
            StudySession.set_id == set_id
        ).one()

        return SessionSummaryResponse(
            set_id=set_id,
            total_sessions=total_sessions,
            total_cards_studied=total_cards,
            total_correct=total_correct,
            total_time_seconds=total_time,
            accuracy=total_correct / total_cards if total_cards else 0.0
        )

    def recent_sessions(self, user_id: str, set_id: int, limit: int = 10) -> list[StudySession]:
        return self.db.query(StudySession).filter(
            StudySession.user_id == user_id,
            StudySession.set_id == set_id
        ).order_by(StudySession.started_at.desc(), StudySession.id.desc()).limit(limit).all()
