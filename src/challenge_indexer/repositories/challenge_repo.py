"""Data access for projected challenges and participants."""
from __future__ import annotations

from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from challenge_indexer.core.errors import PersistenceError
from challenge_indexer.models import Challenge, ChallengeParticipant

__all__ = ["ChallengeRepository", "SqlAlchemyChallengeRepository"]


class ChallengeRepository(Protocol):
    """Persistence boundary used by the projector.

    Every write is staged until :meth:`commit`; the projector commits once per
    handled transaction and rolls back when a handler fails.
    """

    def find_challenge(self, challenge_id: str) -> Challenge | None: ...

    def find_active_challenge(self) -> Challenge | None: ...

    def find_challenge_closed_by(self, tx_hash: str) -> Challenge | None: ...

    def find_participant(self, challenge_id: str, address: str) -> ChallengeParticipant | None: ...

    def save_challenge(self, challenge: Challenge) -> None: ...

    def save_participant(self, participant: ChallengeParticipant) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlAlchemyChallengeRepository:
    """Thin wrapper around a SQLAlchemy session for challenge entities.

    SQLAlchemy failures are re-raised as :class:`PersistenceError` so callers
    only need to handle the indexer's own error taxonomy.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a synchronous SQLAlchemy session."""
        self.session = session

    def find_challenge(self, challenge_id: str) -> Challenge | None:
        """Return a challenge by its creation transaction hash."""
        try:
            return self.session.get(Challenge, challenge_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load challenge {challenge_id}: {exc}") from exc

    def find_active_challenge(self) -> Challenge | None:
        """Return the currently active challenge, if any.

        Should the table ever hold several active rows, the most recently
        opened one wins.
        """
        stmt = (
            select(Challenge)
            .where(Challenge.active.is_(True))
            .order_by(Challenge.opened_at.desc(), Challenge.created_at.desc())
            .limit(1)
        )
        try:
            return self.session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load active challenge: {exc}") from exc

    def find_challenge_closed_by(self, tx_hash: str) -> Challenge | None:
        """Return the challenge whose closing transaction is ``tx_hash``."""
        stmt = select(Challenge).where(Challenge.closed_tx_hash == tx_hash).limit(1)
        try:
            return self.session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to look up closing tx {tx_hash}: {exc}") from exc

    def find_participant(self, challenge_id: str, address: str) -> ChallengeParticipant | None:
        """Return the participant row for ``(challenge_id, address)``."""
        try:
            return self.session.get(ChallengeParticipant, (challenge_id, address))
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to load participant {address} of {challenge_id}: {exc}"
            ) from exc

    def list_participants(
        self, challenge_id: str, limit: int | None = None
    ) -> list[ChallengeParticipant]:
        """Return participants of a challenge ordered by descending score."""
        # Scores are decimal strings; order by length first so "10" sorts above "9".
        stmt = (
            select(ChallengeParticipant)
            .where(ChallengeParticipant.challenge_id == challenge_id)
            .order_by(
                func.length(ChallengeParticipant.score).desc(),
                ChallengeParticipant.score.desc(),
                ChallengeParticipant.address,
            )
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to list participants of {challenge_id}: {exc}") from exc

    def save_challenge(self, challenge: Challenge) -> None:
        """Stage an insert or update of ``challenge``."""
        self._save(challenge)

    def save_participant(self, participant: ChallengeParticipant) -> None:
        """Stage an insert or update of ``participant``."""
        self._save(participant)

    def commit(self) -> None:
        """Commit staged writes."""
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        """Discard staged writes."""
        try:
            self.session.rollback()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Rollback failed: {exc}") from exc

    def _save(self, entity: Challenge | ChallengeParticipant) -> None:
        try:
            self.session.add(entity)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to save {type(entity).__name__}: {exc}") from exc
