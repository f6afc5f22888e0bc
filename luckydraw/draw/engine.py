"""Draw engine: turns a contest's validated participants into persisted winners."""

from __future__ import annotations

import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager, selectinload

from ..exceptions import (
    EmptyPoolError,
    InvalidSelectionError,
    NotFoundError,
    OverselectionError,
    PersistenceError,
)
from ..models import Admin, Contest, Draw, Participant, Prize, Winner
from ..models.enums import DrawMode, PrizeStatus
from .selection import select_winners

logger = logging.getLogger(__name__)


class DrawEngine:
    """Engine that validates draw requests, selects winners and persists the outcome."""

    def __init__(self, session: Session, *, rng: Optional[random.Random] = None) -> None:
        """Create a draw engine bound to a SQLAlchemy session.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session used for lookups and persistence.
        rng : Optional[random.Random], default: None
            Random source used by random draws. When omitted a
            :class:`random.SystemRandom` is used.
        """

        self._session = session
        self._rng = rng

    def execute_random_draw(
        self,
        contest_id: int,
        executed_by: Optional[int],
        number_of_winners: int,
        prize_ids: Optional[Sequence[Optional[int]]] = None,
    ) -> Draw:
        """Select ``number_of_winners`` validated participants at random.

        Parameters
        ----------
        contest_id : int
            Contest whose validated participants form the pool.
        executed_by : Optional[int]
            Admin running the draw.
        number_of_winners : int
            How many distinct winners to select. Must be at least one and at
            most the size of the validated pool.
        prize_ids : Optional[Sequence[Optional[int]]], default: None
            Prize paired with each selected participant, by position. Missing
            or ``None`` entries leave the winner without a prize. A prize is
            only paired when it belongs to ``contest_id`` and still has an
            unawarded unit for every position that names it; otherwise the
            whole request is rejected instead of over-awarding stock.

        Returns
        -------
        Draw
            The persisted draw with its winners (participant and prize loaded).

        Notes
        -----
        Every precondition is checked before anything is written, so a failed
        request never leaves a Draw row behind. The Draw and its Winners are
        then written in a single savepoint: either all of them are stored or
        none is.

        Raises
        ------
        EmptyPoolError
            If the contest has no validated participants.
        OverselectionError
            If more winners are requested than validated participants exist.
        InvalidSelectionError
            If ``number_of_winners`` is below one or a prize cannot be assigned.
        PersistenceError
            If the database rejects the draw; nothing is stored in that case.
        """
        if number_of_winners < 1:
            raise InvalidSelectionError(
                "Number of winners must be at least 1",
                details={"requested": number_of_winners},
            )
        self._require_contest(contest_id)
        self._require_admin(executed_by)

        pool = Participant.validated_for_contest(self._session, contest_id)
        if not pool:
            raise EmptyPoolError(contest_id)
        if number_of_winners > len(pool):
            raise OverselectionError(number_of_winners, len(pool))

        prizes = self._resolve_prizes(contest_id, prize_ids, number_of_winners)
        selected = select_winners(pool, number_of_winners, self._rng)
        logger.debug(
            "Selected %d of %d validated participants for contest %s",
            len(selected),
            len(pool),
            contest_id,
        )
        return self._persist_draw(contest_id, executed_by, DrawMode.RANDOM, selected, prizes)

    def execute_manual_draw(
        self,
        contest_id: int,
        executed_by: Optional[int],
        participant_ids: Sequence[int],
        prize_ids: Optional[Sequence[Optional[int]]] = None,
    ) -> Draw:
        """Record a draw whose winners were chosen by the caller.

        Winners are stored in the order of ``participant_ids``. Every id must
        reference a distinct validated participant of ``contest_id``.

        Raises
        ------
        InvalidSelectionError
            If the selection is empty, repeats an id, or references a
            participant that is missing, belongs to another contest, or is not
            validated; also when a prize cannot be assigned.
        PersistenceError
            If the database rejects the draw.
        """
        ids = list(participant_ids)
        if not ids:
            raise InvalidSelectionError("At least one participant must be selected")
        if len(set(ids)) != len(ids):
            raise InvalidSelectionError(
                "A participant can only be selected once per draw",
                details={"participant_ids": ids},
            )
        self._require_contest(contest_id)
        self._require_admin(executed_by)

        rows = self._session.scalars(
            select(Participant).where(
                Participant.id.in_(ids),
                Participant.contest_id == contest_id,
                Participant.validated.is_(True),
            )
        ).all()
        if len(rows) != len(ids):
            found = {row.id for row in rows}
            raise InvalidSelectionError(
                "Some participants are invalid or not validated",
                details={"invalid_ids": [pid for pid in ids if pid not in found]},
            )

        by_id = {row.id: row for row in rows}
        selected = [by_id[pid] for pid in ids]
        prizes = self._resolve_prizes(contest_id, prize_ids, len(selected))
        return self._persist_draw(contest_id, executed_by, DrawMode.MANUAL, selected, prizes)

    def get_draw(self, draw_id: int) -> Draw:
        """Return a draw with its winners, participants and prizes loaded."""
        draw = self._session.scalar(
            select(Draw)
            .where(Draw.id == draw_id)
            .options(
                selectinload(Draw.winners).selectinload(Winner.participant),
                selectinload(Draw.winners).selectinload(Winner.prize),
            )
        )
        if draw is None:
            raise NotFoundError("Draw", draw_id)
        return draw

    def get_draws_by_contest(self, contest_id: int) -> list[Draw]:
        """Return every draw of ``contest_id``, newest first."""
        stmt = (
            select(Draw)
            .where(Draw.contest_id == contest_id)
            .options(
                selectinload(Draw.winners).selectinload(Winner.participant),
                selectinload(Draw.winners).selectinload(Winner.prize),
            )
            .order_by(Draw.executed_at.desc(), Draw.id.desc())
        )
        return list(self._session.scalars(stmt).all())

    def get_winners_by_contest(self, contest_id: int) -> list[Winner]:
        """Return all winners across all draws of ``contest_id``, newest draw first.

        Each winner comes with its participant, prize and draw loaded so the
        result can be rendered or exported without further queries.
        """
        stmt = (
            select(Winner)
            .join(Winner.draw)
            .where(Draw.contest_id == contest_id)
            .options(
                contains_eager(Winner.draw),
                selectinload(Winner.participant),
                selectinload(Winner.prize),
            )
            .order_by(Draw.executed_at.desc(), Draw.id.desc(), Winner.id.asc())
        )
        return list(self._session.scalars(stmt).unique().all())

    def update_winner_notification(self, winner_id: int, notified: bool) -> Winner:
        """Set the notification flag of a winner.

        ``notified_at`` is stamped when ``notified`` is true and cleared
        otherwise. The prize status is left untouched.
        """
        winner = self._require_winner(winner_id)
        winner.notified = notified
        winner.notified_at = datetime.now(timezone.utc) if notified else None
        self._session.flush()
        return winner

    def update_prize_status(
        self,
        winner_id: int,
        status: PrizeStatus | str,
        *,
        notes: Optional[str] = None,
    ) -> Winner:
        """Move a winner's prize-fulfillment status forward.

        Raises
        ------
        InvalidTransitionError
            If ``status`` is not after the current status.
        """
        winner = self._require_winner(winner_id)
        winner.advance_status(PrizeStatus(status))
        if notes is not None:
            winner.notes = notes
        self._session.flush()
        return winner

    def available_prizes(self, contest_id: int) -> list[Prize]:
        """Return prizes of ``contest_id`` that still have unawarded units."""
        return [prize for prize in self._prizes_with_winners(contest_id) if prize.is_available]

    def prize_stats(self, contest_id: int) -> dict[str, Any]:
        """Summarize prize stock and value for ``contest_id``."""
        prizes = self._prizes_with_winners(contest_id)
        total_units = sum(prize.quantity for prize in prizes)
        units_won = sum(prize.units_won for prize in prizes)
        return {
            "prize_count": len(prizes),
            "total_units": total_units,
            "units_won": units_won,
            "units_available": total_units - units_won,
            "total_value": sum((prize.value or 0.0) * prize.quantity for prize in prizes),
        }

    def _prizes_with_winners(self, contest_id: int) -> list[Prize]:
        stmt = (
            select(Prize)
            .where(Prize.contest_id == contest_id)
            .options(selectinload(Prize.winners))
            .order_by(Prize.value.desc(), Prize.id.asc())
        )
        return list(self._session.scalars(stmt).all())

    def _resolve_prizes(
        self,
        contest_id: int,
        prize_ids: Optional[Sequence[Optional[int]]],
        count: int,
    ) -> list[Optional[Prize]]:
        """Map winner positions to prizes, checking ownership and remaining stock."""
        wanted: list[Optional[int]] = [
            prize_ids[i] if prize_ids is not None and i < len(prize_ids) else None
            for i in range(count)
        ]
        requested = Counter(pid for pid in wanted if pid is not None)
        if not requested:
            return [None] * count

        prizes = {
            prize.id: prize
            for prize in self._session.scalars(
                select(Prize)
                .where(Prize.id.in_(list(requested)))
                .options(selectinload(Prize.winners))
            ).all()
        }
        for prize_id, times in requested.items():
            prize = prizes.get(prize_id)
            if prize is None or prize.contest_id != contest_id:
                raise InvalidSelectionError(
                    f"Prize {prize_id} does not belong to contest {contest_id}",
                    details={"prize_id": prize_id, "contest_id": contest_id},
                )
            if times > prize.units_remaining:
                raise InvalidSelectionError(
                    f"Prize {prize_id} has only {prize.units_remaining} unit(s) left",
                    details={
                        "prize_id": prize_id,
                        "requested": times,
                        "remaining": prize.units_remaining,
                    },
                )
        return [prizes[pid] if pid is not None else None for pid in wanted]

    def _persist_draw(
        self,
        contest_id: int,
        executed_by: Optional[int],
        mode: DrawMode,
        selected: Sequence[Participant],
        prizes: Sequence[Optional[Prize]],
    ) -> Draw:
        """Write the Draw and all its Winners in one savepoint."""
        try:
            with self._session.begin_nested():
                draw = Draw(
                    contest_id=contest_id,
                    executed_by=executed_by,
                    draw_mode=mode.value,
                    total_winners=len(selected),
                )
                self._session.add(draw)
                for participant, prize in zip(selected, prizes):
                    draw.winners.append(Winner(participant=participant, prize=prize))
                self._session.flush()
        except SQLAlchemyError as exc:
            logger.error("Draw for contest %s rolled back: %s", contest_id, exc)
            raise PersistenceError(
                f"Could not store draw for contest {contest_id}",
                details={"contest_id": contest_id},
            ) from exc

        logger.info(
            "%s draw %s stored for contest %s with %d winner(s)",
            mode.value,
            draw.id,
            contest_id,
            len(selected),
        )
        return draw

    def _require_contest(self, contest_id: int) -> Contest:
        contest = self._session.get(Contest, contest_id)
        if contest is None:
            raise NotFoundError("Contest", contest_id)
        return contest

    def _require_admin(self, admin_id: Optional[int]) -> None:
        if admin_id is not None and self._session.get(Admin, admin_id) is None:
            raise NotFoundError("Admin", admin_id)

    def _require_winner(self, winner_id: int) -> Winner:
        winner = self._session.get(Winner, winner_id)
        if winner is None:
            raise NotFoundError("Winner", winner_id)
        return winner


__all__ = ["DrawEngine"]
