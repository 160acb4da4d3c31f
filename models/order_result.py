# --------------------------------------------------------------------
# models/order_result.py
# Outcome of a single order submission. Exactly one variant per call.
# --------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class OrderResultKind(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"


@dataclass(frozen=True)
class Accepted:
    order_id: int
    status: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)
    kind: OrderResultKind = field(default=OrderResultKind.ACCEPTED, init=False)


@dataclass(frozen=True)
class Rejected:
    code: int
    message: str
    http_status: int = 0
    kind: OrderResultKind = field(default=OrderResultKind.REJECTED, init=False)


@dataclass(frozen=True)
class TransportFailure:
    message: str
    cause: Optional[BaseException] = None
    kind: OrderResultKind = field(default=OrderResultKind.TRANSPORT_FAILURE, init=False)


OrderResult = Union[Accepted, Rejected, TransportFailure]
