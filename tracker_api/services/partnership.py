"""The single place that writes the partner slot of a pregnancy.

Both the invite-code flow (father role) and the legacy pairing flow go
through these helpers, so the one-approved-partner rule lives here and
nowhere else. The helpers mutate the ORM object only; the caller owns the
transaction.
"""

from dataclasses import dataclass
from datetime import datetime

from tracker_api.core.errors import ConflictError, InvalidRequestError
from tracker_api.models.base import utcnow
from tracker_api.models.pregnancy import PartnerStatus, Permission, Pregnancy


@dataclass(frozen=True)
class PartnerInfo:
    """Who sits on the other side of a pairing, as shown to either party."""

    id: str
    permission: str
    paired_at: datetime
    name: str | None = None
    display_partner_card: bool = True


def assign_partner(
    pregnancy: Pregnancy,
    partner_id: str,
    permission: Permission | str,
    display_name: str | None = None,
    display_partner_card: bool = True,
) -> Pregnancy:
    """Fill the partner slot with an approved partner.

    Re-assigning the identity already in the slot refreshes its permission
    and display fields.

    Raises:
        InvalidRequestError: If the owner or co-owner tries to partner their
            own record.
        ConflictError: If a different identity already holds the slot.
    """
    if partner_id in (pregnancy.owner_id, pregnancy.coowner_id):
        raise InvalidRequestError("Cannot pair with your own pregnancy")

    if pregnancy.has_approved_partner and pregnancy.partner_id != partner_id:
        raise ConflictError("Already has a partner")

    pregnancy.partner_id = partner_id
    pregnancy.partner_status = PartnerStatus.APPROVED.value
    pregnancy.partner_permission = Permission(permission).value
    pregnancy.partner_name = display_name
    pregnancy.display_partner_card = display_partner_card
    pregnancy.updated_at = utcnow()
    return pregnancy


def update_partner_permission(
    pregnancy: Pregnancy,
    permission: Permission | str,
) -> Pregnancy:
    pregnancy.partner_permission = Permission(permission).value
    pregnancy.updated_at = utcnow()
    return pregnancy


def clear_partner(pregnancy: Pregnancy) -> Pregnancy:
    """Empty the partner slot."""
    pregnancy.partner_id = None
    pregnancy.partner_status = None
    pregnancy.partner_permission = None
    pregnancy.partner_name = None
    pregnancy.updated_at = utcnow()
    return pregnancy


def partner_info(pregnancy: Pregnancy, counterpart_id: str) -> PartnerInfo:
    """Describe the pairing from one side; ``counterpart_id`` is the other side."""
    return PartnerInfo(
        id=counterpart_id,
        permission=pregnancy.partner_permission or Permission.READ.value,
        paired_at=pregnancy.updated_at,
        name=pregnancy.partner_name,
        display_partner_card=pregnancy.display_partner_card,
    )
