from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Trade(BaseModel):
    """One row of ``GET /api/v3/trades``. ``pair`` is filled in by the client."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    price: float
    qty: float
    quote_qty: Optional[float] = Field(None, alias="quoteQty")
    time: int
    is_buyer_maker: bool = Field(False, alias="isBuyerMaker")
    pair: Optional[str] = None
