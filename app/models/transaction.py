"""
Unlock transaction models
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UnlockGrant(BaseModel):
    """A completed unlock of one property for one tenant"""
    property_id: str
    transaction_id: str
    unlocked_at: Optional[datetime] = None
