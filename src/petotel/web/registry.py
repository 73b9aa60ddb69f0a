"""In-process registry of live checkout and confirmation flows."""
from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Optional, Protocol, TypeVar


class _KeyedFlow(Protocol):
    checkout_id: str


FlowT = TypeVar("FlowT", bound=_KeyedFlow)


class FlowRegistry(Generic[FlowT]):
    """Holds live flows keyed by checkout-attempt id, oldest evicted first."""

    def __init__(self, max_flows: int = 1024) -> None:
        if max_flows <= 0:
            raise ValueError("max_flows must be positive")
        self._flows: "OrderedDict[str, FlowT]" = OrderedDict()
        self._max_flows = max_flows

    def add(self, flow: FlowT) -> FlowT:
        self._flows[flow.checkout_id] = flow
        self._flows.move_to_end(flow.checkout_id)
        while len(self._flows) > self._max_flows:
            self._flows.popitem(last=False)
        return flow

    def get(self, checkout_id: str) -> Optional[FlowT]:
        return self._flows.get(checkout_id)

    def discard(self, checkout_id: str) -> None:
        self._flows.pop(checkout_id, None)

    def __len__(self) -> int:
        return len(self._flows)
