# Database Models
from tracker_api.models.base import Base, TimestampMixin
from tracker_api.models.code_attempt import CodeAttempt
from tracker_api.models.invite_code import InviteCode, InviteRole
from tracker_api.models.pairing_request import PairingRequest, PairingStatus
from tracker_api.models.pregnancy import (
    PartnerStatus,
    Permission,
    Pregnancy,
    PregnancyOutcome,
)
from tracker_api.models.supporter import Supporter
from tracker_api.models.user import User

__all__ = [
    "Base",
    "CodeAttempt",
    "InviteCode",
    "InviteRole",
    "PairingRequest",
    "PairingStatus",
    "PartnerStatus",
    "Permission",
    "Pregnancy",
    "PregnancyOutcome",
    "Supporter",
    "TimestampMixin",
    "User",
]
