"""Node staking: deposits, slashing for misbehaviour, withdrawal and eligibility."""

from __future__ import annotations

import time
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from enum import Enum

MIN_STAKE = 1_000
SLASH_PERCENT = 0.10
SLASH_BURN_RATIO = 0.50
MAX_VIOLATIONS = 3

MIN_VALIDATOR_STAKE = MIN_STAKE
MIN_REWARD_STAKE = MIN_STAKE // 2


class StakeStatus(Enum):
    ACTIVE = "active"
    SLASHED = "slashed"
    EJECTED = "ejected"
    WITHDRAWN = "withdrawn"


class ViolationType(Enum):
    """Kind of misbehaviour that leads to a slash; the value is its name in records."""

    DOUBLE_VOTE = "double_vote"
    CONFLICTING_TX = "conflicting_tx"
    REPUTATION_PENALTY = "reputation_penalty"
    INVALID_STATE = "invalid_state"

    def as_str(self) -> str:
        return self.value


class EligibilityStatus(Enum):
    VALIDATOR = "validator"
    REWARD_ONLY = "reward_only"
    RELAY_ONLY = "relay_only"
    EJECTED = "ejected"


class StakingError(Exception):
    """Raised when a stake or withdrawal request cannot be honoured."""


@dataclass
class StakeRecord:
    """Stake held by one address."""

    address: str
    amount: int
    original_amount: int
    staked_at: float = field(default_factory=time.time)
    status: StakeStatus = StakeStatus.ACTIVE
    violations: list[str] = field(default_factory=list)
    total_slashed: int = 0

    def is_active(self) -> bool:
        return self.status is StakeStatus.ACTIVE

    def violation_count(self) -> int:
        return len(self.violations)

    def stake_ratio(self) -> float:
        """Fraction of the original stake that is left."""
        if self.original_amount == 0:
            return 0.0
        return self.amount / self.original_amount

    def is_validator(self) -> bool:
        return self.is_active() and self.amount >= MIN_VALIDATOR_STAKE

    def is_reward_eligible(self) -> bool:
        return self.is_active() and self.amount >= MIN_REWARD_STAKE


@dataclass(frozen=True)
class SlashResult:
    slashed_amount: int
    burned: int
    to_pool: int
    ejected: bool
    reason: str


@dataclass
class StakingManager:
    """Holds every stake, the pool of slashed funds and the running burn total."""

    stakes: dict[str, StakeRecord] = field(default_factory=dict)
    slash_pool: int = 0
    total_burned: int = 0

    def stake(self, address: str, amount: int, balances: MutableMapping[str, int]) -> None:
        """Move ``amount`` from the address's balance into a new active stake."""
        if amount < MIN_STAKE:
            raise StakingError(f"minimum stake is {MIN_STAKE} GHOST")
        existing = self.stakes.get(address)
        if existing is not None and existing.is_active():
            raise StakingError("already staking")
        balance = balances.get(address, 0)
        if balance < amount:
            raise StakingError("insufficient balance")
        balances[address] = balance - amount
        self.stakes[address] = StakeRecord(address=address, amount=amount, original_amount=amount)

    def slash(self, address: str, violation: ViolationType, evidence: str) -> SlashResult | None:
        """Penalise a stake; eject it after too many violations. None if nothing to slash."""
        record = self.stakes.get(address)
        if record is None or record.status in (StakeStatus.EJECTED, StakeStatus.WITHDRAWN):
            return None

        record.violations.append(f"{violation.as_str()}:{evidence}")
        record.status = StakeStatus.SLASHED

        slash_amount = min(int(record.amount * SLASH_PERCENT), record.amount)
        burned = int(slash_amount * SLASH_BURN_RATIO)
        to_pool = slash_amount - burned

        record.amount -= slash_amount
        record.total_slashed += slash_amount
        self.total_burned += burned
        self.slash_pool += to_pool

        ejected = False
        if record.violation_count() >= MAX_VIOLATIONS:
            remaining = record.amount
            burned_remaining = int(remaining * SLASH_BURN_RATIO)
            self.total_burned += burned_remaining
            self.slash_pool += remaining - burned_remaining
            record.amount = 0
            record.status = StakeStatus.EJECTED
            ejected = True
        elif record.amount >= MIN_STAKE:
            record.status = StakeStatus.ACTIVE

        return SlashResult(
            slashed_amount=slash_amount,
            burned=burned,
            to_pool=to_pool,
            ejected=ejected,
            reason=violation.as_str(),
        )

    def withdraw(self, address: str, balances: MutableMapping[str, int]) -> int:
        """Return the remaining stake to the address's balance; return the amount."""
        record = self.stakes.get(address)
        if record is None:
            raise StakingError("not staking")
        if record.status is StakeStatus.EJECTED:
            raise StakingError("ejected nodes cannot withdraw")
        if record.status is StakeStatus.WITHDRAWN:
            raise StakingError("already withdrawn")
        amount = record.amount
        balances[address] = balances.get(address, 0) + amount
        record.amount = 0
        record.status = StakeStatus.WITHDRAWN
        return amount

    def eligibility(self, address: str) -> EligibilityStatus:
        record = self.stakes.get(address)
        if record is None:
            return EligibilityStatus.RELAY_ONLY
        if record.status is StakeStatus.EJECTED:
            return EligibilityStatus.EJECTED
        if record.status is StakeStatus.WITHDRAWN:
            return EligibilityStatus.RELAY_ONLY
        if record.is_active() and record.amount >= MIN_VALIDATOR_STAKE:
            return EligibilityStatus.VALIDATOR
        if record.is_active() and record.amount >= MIN_REWARD_STAKE:
            return EligibilityStatus.REWARD_ONLY
        return EligibilityStatus.RELAY_ONLY

    def is_eligible(self, address: str) -> bool:
        return self.eligibility(address) is EligibilityStatus.VALIDATOR

    def is_reward_eligible(self, address: str) -> bool:
        return self.eligibility(address) in (
            EligibilityStatus.VALIDATOR,
            EligibilityStatus.REWARD_ONLY,
        )

    def get_stake_amount(self, address: str) -> float:
        record = self.stakes.get(address)
        if record is None or not record.is_active():
            return 0.0
        return float(record.amount)

    def total_stake(self) -> float:
        return float(sum(r.amount for r in self.stakes.values() if r.is_active()))

    def active_validators(self) -> dict[str, float]:
        return {r.address: float(r.amount) for r in self.stakes.values() if r.is_validator()}

    def distribute_slash_pool(self, balances: MutableMapping[str, int]) -> int:
        """Share the slash pool equally among active stakes without violations."""
        if self.slash_pool == 0:
            return 0
        clean_nodes = [
            r.address
            for r in self.stakes.values()
            if r.is_active() and r.violation_count() == 0
        ]
        if not clean_nodes:
            return 0
        per_node = self.slash_pool // len(clean_nodes)
        if per_node == 0:
            return 0
        for address in clean_nodes:
            balances[address] = balances.get(address, 0) + per_node
        distributed = per_node * len(clean_nodes)
        self.slash_pool -= distributed
        return distributed