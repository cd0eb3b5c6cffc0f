"""Projection of contract calls into challenge and participant state.

The projector walks a chronologically ordered batch, lets the dedup window
decide which transactions are new, decodes each new one and hands it to the
effect handler registered for its :class:`CallKind`.

Every handler is idempotent against replay of the same transaction hash. The
dedup window is memory-only, so after a restart the same transactions arrive
again and the handlers' own guards are what keep the state stable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from datetime import datetime

from challenge_indexer.core.errors import PersistenceError
from challenge_indexer.db.time import from_epoch_ms, utcnow
from challenge_indexer.models import Challenge, ChallengeParticipant
from challenge_indexer.repositories.challenge_repo import ChallengeRepository
from challenge_indexer.services.decoder import (
    MAX_SAFE_INTEGER,
    CallKind,
    DecodedCall,
    decode_call_data,
    parse_hex_int,
    saturate_safe_int,
)
from challenge_indexer.services.dedup import DedupWindow
from challenge_indexer.services.normalizer import NormalizedTransaction

# Configure logger for this module
logger = logging.getLogger(__name__)

Handler = Callable[[NormalizedTransaction, DecodedCall, ChallengeRepository], bool]

# Errors scoped to a single transaction; anything else is a programming error.
HANDLER_ERRORS = (PersistenceError, ValueError, TypeError, KeyError, AttributeError)


@dataclass
class ProjectionReport:
    """Outcome counters for one projected batch."""

    received: int = 0
    applied: int = 0
    skipped: int = 0
    duplicates: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class ChallengeProjector:
    """Applies decoded contract calls to the challenge repository.

    The projector owns its :class:`DedupWindow`; two projectors never share
    dedup state.
    """

    def __init__(
        self,
        window: DedupWindow | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.window = window if window is not None else DedupWindow()
        self._clock = clock
        self._handlers: dict[CallKind, Handler] = {
            CallKind.CREATE_CHALLENGE: self._create_challenge,
            CallKind.JOIN_CHALLENGE: self._join_challenge,
            CallKind.SUBMIT_WORKOUT: self._submit_workout,
            CallKind.CLOSE_CHALLENGE: self._close_challenge,
        }
        missing = set(CallKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler registered for {sorted(k.value for k in missing)}")

    def apply(
        self,
        transactions: Iterable[NormalizedTransaction],
        repository: ChallengeRepository,
    ) -> ProjectionReport:
        """Project an ordered batch and return what happened to it.

        A failing handler is rolled back and logged; the batch continues and
        the failed transaction is still marked processed, so it is not
        retried until the window forgets it (normally: until a restart).
        """
        report = ProjectionReport()
        for tx in transactions:
            report.received += 1
            if not self.window.is_novel(tx):
                report.duplicates += 1
                continue

            try:
                applied = self._project(tx, repository)
            except HANDLER_ERRORS as exc:
                report.failed += 1
                logger.error(
                    "Failed to project transaction %s: %s", tx.tx_hash, exc, exc_info=True
                )
                self._discard(tx, repository)
            else:
                if applied:
                    report.applied += 1
                else:
                    report.skipped += 1
            finally:
                self.window.mark_processed(tx)
        return report

    def _project(self, tx: NormalizedTransaction, repository: ChallengeRepository) -> bool:
        call = decode_call_data(tx.data)
        if call is None:
            return False
        kind = call.kind
        if kind is None:
            return False

        applied = self._handlers[kind](tx, call, repository)
        if applied:
            repository.commit()
        else:
            repository.rollback()
        return applied

    @staticmethod
    def _discard(tx: NormalizedTransaction, repository: ChallengeRepository) -> None:
        try:
            repository.rollback()
        except PersistenceError as exc:
            logger.error("Rollback after failed transaction %s also failed: %s", tx.tx_hash, exc)

    def _tx_time(self, tx: NormalizedTransaction) -> datetime:
        if tx.timestamp_ms is None:
            return self._clock()
        when = from_epoch_ms(tx.timestamp_ms)
        if when is None:
            logger.warning(
                "Transaction %s has an unrepresentable timestamp %d; using the clock",
                tx.tx_hash,
                tx.timestamp_ms,
            )
            return self._clock()
        return when

    @staticmethod
    def _predates(tx: NormalizedTransaction, challenge: Challenge) -> bool:
        """Return True if ``tx`` was mined before ``challenge`` was created."""
        if tx.timestamp_ms is None or challenge.opened_timestamp_ms is None:
            return False
        return tx.timestamp_ms < challenge.opened_timestamp_ms

    # --- Effect handlers ------------------------------------------------------------
    def _create_challenge(
        self, tx: NormalizedTransaction, call: DecodedCall, repository: ChallengeRepository
    ) -> bool:
        start = parse_hex_int(call.arg(0))
        end = parse_hex_int(call.arg(1))
        if start is None or end is None:
            logger.warning(
                "Skipping createChallenge %s: unparseable start/end arguments %r",
                tx.tx_hash,
                call.args[:2],
            )
            return False

        if repository.find_challenge(tx.tx_hash) is not None:
            logger.debug("Challenge %s already projected", tx.tx_hash)
            return False

        when = self._tx_time(tx)
        # Loop rather than a single lookup so a table that somehow holds several
        # active rows is repaired here as well.
        while (active := repository.find_active_challenge()) is not None:
            logger.info("Challenge %s superseded by %s", active.id, tx.tx_hash)
            active.active = False
            active.last_updated_tx_hash = tx.tx_hash
            repository.save_challenge(active)

        challenge = Challenge(
            id=tx.tx_hash,
            creator=tx.sender or "",
            start_timestamp=saturate_safe_int(start),
            end_timestamp=saturate_safe_int(end),
            reward_budget=str(self._reward_arg(tx, call, 2)),
            reward_per_point=str(self._reward_arg(tx, call, 3)),
            active=True,
            created_tx_hash=tx.tx_hash,
            last_updated_tx_hash=tx.tx_hash,
            opened_at=when,
            opened_timestamp_ms=_storable_ms(tx.timestamp_ms),
        )
        repository.save_challenge(challenge)
        logger.info(
            "Opened challenge %s (start=%d, end=%d)",
            challenge.id,
            challenge.start_timestamp,
            challenge.end_timestamp,
        )
        return True

    def _reward_arg(self, tx: NormalizedTransaction, call: DecodedCall, index: int) -> int:
        raw = call.arg(index)
        if raw is None:
            return 0
        value = parse_hex_int(raw)
        if value is None:
            logger.warning(
                "createChallenge %s: reward argument %d is not hex (%r), using 0",
                tx.tx_hash,
                index,
                raw,
            )
            return 0
        return value

    def _close_challenge(
        self, tx: NormalizedTransaction, call: DecodedCall, repository: ChallengeRepository
    ) -> bool:
        if repository.find_challenge_closed_by(tx.tx_hash) is not None:
            logger.debug("Close %s already projected", tx.tx_hash)
            return False

        active = repository.find_active_challenge()
        if active is None:
            logger.warning("Skipping closeChallenge %s: no active challenge", tx.tx_hash)
            return False
        if active.last_updated_tx_hash == tx.tx_hash:
            return False

        active.active = False
        active.closed_tx_hash = tx.tx_hash
        active.last_updated_tx_hash = tx.tx_hash
        active.closed_at = self._tx_time(tx)
        repository.save_challenge(active)
        logger.info("Closed challenge %s by %s", active.id, tx.tx_hash)
        return True

    def _join_challenge(
        self, tx: NormalizedTransaction, call: DecodedCall, repository: ChallengeRepository
    ) -> bool:
        if not tx.sender:
            logger.warning("Skipping joinChallenge %s: no sender", tx.tx_hash)
            return False
        active = repository.find_active_challenge()
        if active is None:
            logger.warning("Skipping joinChallenge %s: no active challenge", tx.tx_hash)
            return False
        if self._predates(tx, active):
            logger.debug("joinChallenge %s predates active challenge %s", tx.tx_hash, active.id)
            return False

        participant = repository.find_participant(active.id, tx.sender)
        if participant is not None and participant.join_tx_hash == tx.tx_hash:
            return False

        when = self._tx_time(tx)
        if participant is None:
            participant = ChallengeParticipant(
                challenge_id=active.id,
                address=tx.sender,
                score="0",
                join_tx_hash=tx.tx_hash,
                joined_at=when,
            )
        else:
            # Score and update tracking survive a (re-)join.
            participant.join_tx_hash = tx.tx_hash
            participant.joined_at = when
        repository.save_participant(participant)
        logger.info("%s joined challenge %s", tx.sender, active.id)
        return True

    def _submit_workout(
        self, tx: NormalizedTransaction, call: DecodedCall, repository: ChallengeRepository
    ) -> bool:
        if not tx.sender:
            logger.warning("Skipping submitWorkout %s: no sender", tx.tx_hash)
            return False
        active = repository.find_active_challenge()
        if active is None:
            logger.warning("Skipping submitWorkout %s: no active challenge", tx.tx_hash)
            return False
        if self._predates(tx, active):
            logger.debug("submitWorkout %s predates active challenge %s", tx.tx_hash, active.id)
            return False
        points = parse_hex_int(call.arg(0))
        if points is None:
            logger.warning(
                "Skipping submitWorkout %s: unparseable points %r", tx.tx_hash, call.arg(0)
            )
            return False

        participant = repository.find_participant(active.id, tx.sender)
        if participant is not None and participant.last_update_tx_hash == tx.tx_hash:
            return False

        when = self._tx_time(tx)
        if participant is None:
            # A workout without a prior join enrols the sender implicitly.
            participant = ChallengeParticipant(
                challenge_id=active.id,
                address=tx.sender,
                score="0",
                join_tx_hash=tx.tx_hash,
                joined_at=when,
            )

        participant.score = str(int(participant.score or "0") + points)
        participant.last_update_tx_hash = tx.tx_hash
        participant.last_score_change_at = when
        repository.save_participant(participant)
        logger.info(
            "%s scored %d in challenge %s (total %s)",
            tx.sender,
            points,
            active.id,
            participant.score,
        )
        return True


def _storable_ms(timestamp_ms: int | None) -> int | None:
    if timestamp_ms is None or not 0 <= timestamp_ms <= MAX_SAFE_INTEGER:
        return None
    return timestamp_ms
