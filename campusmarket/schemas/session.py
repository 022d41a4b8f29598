from datetime import datetime

from pydantic import BaseModel

DEFAULT_SELLER_NAME = 'DUT Student'


class SellerSession(BaseModel):
    device_id: str | None = None
    seller_phone: str
    seller_name: str | None = None
    last_active: datetime | None = None
    fallback: bool = False


class SaveSessionResult(BaseModel):
    success: bool = True
    fallback: bool = False
    session: SellerSession | None = None


class SellerInfo(BaseModel):
    phone: str
    name: str = DEFAULT_SELLER_NAME
    device_id: str | None = None
