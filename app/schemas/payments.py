from pydantic import BaseModel, ConfigDict
from typing import Optional


class NetopiaOrderIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    orderID: Optional[str] = None


class NetopiaPaymentIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Optional[int | str] = None  # numeric Netopia status
    code: Optional[str] = None
    message: Optional[str] = None
    ntpID: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    instrument: Optional[dict] = None
    data: Optional[dict] = None


class NetopiaNotification(BaseModel):
    model_config = ConfigDict(extra="allow")

    order: Optional[NetopiaOrderIn] = None
    payment: Optional[NetopiaPaymentIn] = None
