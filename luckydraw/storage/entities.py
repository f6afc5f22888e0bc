"""Entities persisted through the dual-storage accessor."""

from ..models import Contest, Participant, Prize
from .base import EntitySpec

CONTESTS = EntitySpec(
    name="contests",
    model=Contest,
    storage_key="lucky_draw_contests",
    timestamp_fields=("created_at", "updated_at"),
)
PRIZES = EntitySpec(
    name="prizes",
    model=Prize,
    storage_key="lucky_draw_prizes",
    timestamp_fields=("created_at",),
)
PARTICIPANTS = EntitySpec(
    name="participants",
    model=Participant,
    storage_key="lucky_draw_participants",
    timestamp_fields=("entry_timestamp",),
)

ALL_ENTITIES = (CONTESTS, PRIZES, PARTICIPANTS)
