"""
Reseller Identification Dependencies
======================================
Resolve the calling reseller from the X-Reseller-Id header.
Authentication itself happens upstream; these only map the id to a row.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import AuthenticationError, AuthorizationError
from common.helpers import safe_int
from modules.reseller.models import Reseller, ResellerStatus


def get_optional_reseller_id(
    x_reseller_id: Optional[str] = Header(None, alias="X-Reseller-Id"),
) -> Optional[int]:
    """Reseller id when the header is present and numeric, else None (generic pricing)."""
    return safe_int(x_reseller_id)


def get_current_reseller(
    x_reseller_id: str = Header(..., alias="X-Reseller-Id"),
    db: Session = Depends(get_db),
) -> Reseller:
    """Approved reseller for the X-Reseller-Id header."""
    reseller_id = safe_int(x_reseller_id)
    reseller = None
    if reseller_id is not None:
        reseller = db.query(Reseller).filter(Reseller.id == reseller_id).first()
    if not reseller:
        raise AuthenticationError("Unknown reseller")
    if reseller.status != ResellerStatus.APPROVED.value:
        raise AuthorizationError("Reseller account is not approved")
    return reseller
