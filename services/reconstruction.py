"""
Historical balance reconstruction from the current balance and transfer flows.
"""
from dataclasses import dataclass
from typing import List, Sequence

from services.networks.etherscan import TokenTransfer
from services.networks.evm import to_token_units


@dataclass(frozen=True)
class SignedFlow:
    timestamp: int
    flow_tokens: float


def to_signed_flows(transfers: Sequence[TokenTransfer], address: str, decimals: int) -> List[SignedFlow]:
    """
    Inflows are positive, outflows negative. A transfer the address both sent
    and received nets to zero, as does one it is not party to.
    """
    tracked = address.lower()
    flows = []
    for tx in transfers:
        tokens = to_token_units(tx.value_raw, decimals)
        signed = 0.0
        if tx.to_address.lower() == tracked:
            signed += tokens
        if tx.from_address.lower() == tracked:
            signed -= tokens
        flows.append(SignedFlow(timestamp=tx.timestamp, flow_tokens=signed))
    return flows


def reconstruct_balances(timestamps: Sequence[int], current_balance: float, flows: Sequence[SignedFlow]) -> List[float]:
    """
    Walk backward from now: the balance at `t` is the current balance minus
    every flow that happened strictly after `t`, clamped at zero.

    `timestamps` must be ascending. One descending sweep over both sequences.
    """
    ordered = sorted(flows, key=lambda f: f.timestamp)
    balances = [0.0] * len(timestamps)

    cursor = len(ordered) - 1
    future_flow = 0.0
    for i in range(len(timestamps) - 1, -1, -1):
        timestamp = timestamps[i]
        while cursor >= 0 and ordered[cursor].timestamp > timestamp:
            future_flow += ordered[cursor].flow_tokens
            cursor -= 1
        balances[i] = max(current_balance - future_flow, 0.0)

    return balances
