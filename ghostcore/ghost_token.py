"""GHOST token supply: genesis allocation and uptime-based node rewards."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field

TOTAL_SUPPLY = 21_000_000
GENESIS_SHARE = 0.10
ADDRESS_CAP = 0.001
BASE_REWARD_PER_HOUR = 10
HALVENING_INTERVAL = 4.0 * 365.0 * 24.0 * 3600.0
STREAK_BREAK_SECONDS = 2.0 * 3600.0

UPTIME_TIERS: tuple[tuple[float, float], ...] = (
    (24.0 * 3600.0, 1.00),
    (72.0 * 3600.0, 0.50),
    (168.0 * 3600.0, 0.25),
    (math.inf, 0.10),
)


def uptime_multiplier(continuous_seconds: float) -> float:
    """Reward multiplier for a node's current continuous uptime."""
    for threshold, multiplier in UPTIME_TIERS:
        if continuous_seconds <= threshold:
            return multiplier
    return UPTIME_TIERS[-1][1]


def halvening_multiplier(network_start: float, now: float) -> float:
    """Halve the reward once for every full halvening interval since network start."""
    elapsed = now - network_start
    halvings = max(0, int(elapsed / HALVENING_INTERVAL))
    return 1.0 / (2**halvings)


@dataclass
class NodeUptime:
    """Uptime record of a node; ``continuous_since`` resets after a long silence."""

    address: str
    first_seen: float
    last_seen: float | None = None
    continuous_since: float | None = None
    total_earned: int = 0

    def __post_init__(self) -> None:
        if self.last_seen is None:
            self.last_seen = self.first_seen
        if self.continuous_since is None:
            self.continuous_since = self.first_seen

    def ping(self, now: float) -> None:
        if now - self.last_seen > STREAK_BREAK_SECONDS:
            self.continuous_since = now
        self.last_seen = now

    def continuous_uptime(self, now: float) -> float:
        return now - self.continuous_since


@dataclass
class GhostToken:
    """Token ledger tracking minted supply, balances and node uptime."""

    network_start: float = field(default_factory=time.time)
    balances: dict[str, int] = field(default_factory=dict)
    total_minted: int = 0
    nodes: dict[str, NodeUptime] = field(default_factory=dict)
    address_cap: int = int(TOTAL_SUPPLY * ADDRESS_CAP)
    genesis_supply: int = int(TOTAL_SUPPLY * GENESIS_SHARE)

    def genesis(self, founder_address: str) -> int:
        """Mint the founder allocation once; later calls return 0."""
        if self.total_minted > 0:
            return 0
        amount = min(self.genesis_supply, self.address_cap)
        self.balances[founder_address] = self.balances.get(founder_address, 0) + amount
        self.total_minted += amount
        return amount

    def register_node(self, address: str, now: float) -> None:
        self.nodes.setdefault(address, NodeUptime(address, now))

    def ping_node(self, address: str, now: float) -> None:
        self.register_node(address, now)
        self.nodes[address].ping(now)

    def claim_reward(self, address: str, now: float) -> int:
        """Mint an hourly reward for a registered node, bounded by caps; return the amount."""
        if self.total_minted >= TOTAL_SUPPLY:
            return 0
        node = self.nodes.get(address)
        if node is None:
            return 0
        multiplier = uptime_multiplier(node.continuous_uptime(now))
        halvening = halvening_multiplier(self.network_start, now)
        reward = int(BASE_REWARD_PER_HOUR * multiplier * halvening)
        if reward == 0:
            return 0
        current = self.balances.get(address, 0)
        available_cap = max(0, self.address_cap - current)
        if available_cap == 0:
            return 0
        remaining = TOTAL_SUPPLY - self.total_minted
        actual = min(reward, available_cap, remaining)
        if actual == 0:
            return 0
        self.balances[address] = current + actual
        self.total_minted += actual
        node.total_earned += actual
        return actual

    def get_balance(self, address: str) -> int:
        return self.balances.get(address, 0)