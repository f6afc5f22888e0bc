from .admins import AdminService
from .contests import ContestService
from .participants import ParticipantService
from .prizes import PrizeService

__all__ = ["AdminService", "ContestService", "ParticipantService", "PrizeService"]
