"""High-level draw workflows that also write the admin activity log."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from .exceptions import LuckyDrawError
from .models import Draw, Winner
from .models.enums import ActivityStatus, PrizeStatus
from .draw.engine import DrawEngine
from .services.admins import AdminService


def run_random_draw(
    session: Session,
    contest_id: int,
    executed_by: Optional[int],
    number_of_winners: int,
    prize_ids: Optional[Sequence[Optional[int]]] = None,
    *,
    rng: Optional[random.Random] = None,
) -> Draw:
    """Run a random draw and record it in the activity log.

    This function wraps :meth:`DrawEngine.execute_random_draw`. A failed draw
    is logged with ``FAILURE`` status and the error is re-raised; a failure
    to write the log itself never affects the draw.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    contest_id : int
        Contest to draw from.
    executed_by : Optional[int]
        Admin running the draw.
    number_of_winners : int
        Number of distinct winners to select.
    prize_ids : Optional[Sequence[Optional[int]]], default: None
        Prize for each winner position.
    rng : Optional[random.Random], default: None
        Random source override, mainly for tests.

    Returns
    -------
    Draw
        The stored draw with its winners.
    """
    engine = DrawEngine(session, rng=rng)
    admins = AdminService(session)
    try:
        draw = engine.execute_random_draw(contest_id, executed_by, number_of_winners, prize_ids)
    except LuckyDrawError:
        admins.log_activity(
            executed_by, "EXECUTE_DRAW", "draws", None, status=ActivityStatus.FAILURE
        )
        raise
    admins.log_activity(executed_by, "EXECUTE_DRAW", "draws", draw.id)
    return draw


def run_manual_draw(
    session: Session,
    contest_id: int,
    executed_by: Optional[int],
    participant_ids: Sequence[int],
    prize_ids: Optional[Sequence[Optional[int]]] = None,
) -> Draw:
    """Record a manual draw and log it, mirroring :func:`run_random_draw`."""
    engine = DrawEngine(session)
    admins = AdminService(session)
    try:
        draw = engine.execute_manual_draw(contest_id, executed_by, participant_ids, prize_ids)
    except LuckyDrawError:
        admins.log_activity(
            executed_by, "EXECUTE_MANUAL_DRAW", "draws", None, status=ActivityStatus.FAILURE
        )
        raise
    admins.log_activity(executed_by, "EXECUTE_MANUAL_DRAW", "draws", draw.id)
    return draw


def notify_winner(
    session: Session,
    winner_id: int,
    admin_id: Optional[int],
    *,
    notified: bool = True,
) -> Winner:
    """Flag a winner as notified.

    When the winner is still ``PENDING`` the prize status moves to
    ``NOTIFIED`` as well.
    """
    engine = DrawEngine(session)
    winner = engine.update_winner_notification(winner_id, notified)
    if notified and winner.prize_status == PrizeStatus.PENDING.value:
        engine.update_prize_status(winner_id, PrizeStatus.NOTIFIED)
    AdminService(session).log_activity(admin_id, "NOTIFY_WINNER", "winners", winner_id)
    return winner


def advance_prize_status(
    session: Session,
    winner_id: int,
    admin_id: Optional[int],
    status: PrizeStatus | str,
    *,
    notes: Optional[str] = None,
) -> Winner:
    """Move a winner's prize status forward and log the change."""
    admins = AdminService(session)
    try:
        winner = DrawEngine(session).update_prize_status(winner_id, status, notes=notes)
    except LuckyDrawError:
        admins.log_activity(
            admin_id, "UPDATE_PRIZE_STATUS", "winners", winner_id, status=ActivityStatus.FAILURE
        )
        raise
    admins.log_activity(admin_id, "UPDATE_PRIZE_STATUS", "winners", winner_id)
    return winner
