import pytest

from ghostcore.staking import (
    MAX_VIOLATIONS,
    MIN_STAKE,
    MIN_VALIDATOR_STAKE,
    EligibilityStatus,
    StakeStatus,
    StakingError,
    StakingManager,
    ViolationType,
)


def make_balances(address, amount):
    return {address: amount}


def eject(manager, address):
    result = None
    for _ in range(MAX_VIOLATIONS):
        result = manager.slash(address, ViolationType.DOUBLE_VOTE, "")
    return result


def test_stake_success():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    assert balances["node1"] == 5000 - MIN_STAKE
    assert manager.stakes["node1"].amount == MIN_STAKE


def test_stake_below_minimum():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    with pytest.raises(StakingError, match="minimum stake"):
        manager.stake("node1", MIN_STAKE - 1, balances)


def test_stake_insufficient_balance():
    manager = StakingManager()
    balances = make_balances("node1", 500)
    with pytest.raises(StakingError, match="insufficient balance"):
        manager.stake("node1", MIN_STAKE, balances)
    assert balances["node1"] == 500


def test_stake_twice_rejected():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    with pytest.raises(StakingError, match="already staking"):
        manager.stake("node1", MIN_STAKE, balances)


def test_slash_reduces_stake():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    result = manager.slash("node1", ViolationType.DOUBLE_VOTE, "")
    assert result.slashed_amount == 100
    assert result.burned == 50
    assert result.to_pool == 50
    assert result.reason == "double_vote"
    assert not result.ejected
    assert manager.stakes["node1"].amount == 900
    assert manager.stakes["node1"].status is StakeStatus.SLASHED
    assert manager.stakes["node1"].violations == ["double_vote:"]


def test_slash_unknown_returns_none():
    manager = StakingManager()
    assert manager.slash("ghost", ViolationType.INVALID_STATE, "x") is None


def test_slash_keeps_active_when_above_minimum():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", 2000, balances)
    manager.slash("node1", ViolationType.CONFLICTING_TX, "evidence")
    record = manager.stakes["node1"]
    assert record.status is StakeStatus.ACTIVE
    assert record.amount == 1800
    assert record.violations == ["conflicting_tx:evidence"]
    assert record.stake_ratio() == pytest.approx(0.9)


def test_slash_ejection_after_max_violations():
    manager = StakingManager()
    balances = make_balances("node1", 10000)
    manager.stake("node1", MIN_STAKE, balances)
    result = eject(manager, "node1")
    assert result.ejected
    assert manager.stakes["node1"].amount == 0
    assert manager.slash("node1", ViolationType.DOUBLE_VOTE, "") is None


def test_slashed_funds_are_conserved():
    manager = StakingManager()
    balances = make_balances("node1", 10000)
    manager.stake("node1", MIN_STAKE, balances)
    eject(manager, "node1")
    assert manager.total_burned + manager.slash_pool == MIN_STAKE


def test_withdraw_returns_stake():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    amount = manager.withdraw("node1", balances)
    assert amount == MIN_STAKE
    assert balances["node1"] == 5000


def test_withdraw_twice_fails():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    manager.withdraw("node1", balances)
    with pytest.raises(StakingError, match="already withdrawn"):
        manager.withdraw("node1", balances)


def test_withdraw_not_staking_fails():
    manager = StakingManager()
    with pytest.raises(StakingError, match="not staking"):
        manager.withdraw("node1", {})


def test_withdraw_ejected_fails():
    manager = StakingManager()
    balances = make_balances("node1", 10000)
    manager.stake("node1", MIN_STAKE, balances)
    eject(manager, "node1")
    with pytest.raises(StakingError, match="ejected"):
        manager.withdraw("node1", balances)


def test_distribute_slash_pool():
    manager = StakingManager()
    balances = {"node1": 5000, "node2": 5000, "bad": 5000}
    manager.stake("node1", MIN_STAKE, balances)
    manager.stake("node2", MIN_STAKE, balances)
    manager.stake("bad", MIN_STAKE, balances)
    manager.slash("bad", ViolationType.DOUBLE_VOTE, "")
    b1_before = balances["node1"]
    bad_before = balances["bad"]
    distributed = manager.distribute_slash_pool(balances)
    assert distributed > 0
    assert balances["node1"] > b1_before
    assert balances["bad"] == bad_before
    assert manager.slash_pool == 0


def test_distribute_empty_pool_is_zero():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    assert manager.distribute_slash_pool(balances) == 0
    assert balances["node1"] == 5000 - MIN_STAKE


def test_is_eligible_requires_min_stake():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    assert not manager.is_eligible("node1")
    manager.stake("node1", MIN_STAKE, balances)
    assert manager.is_eligible("node1")


def test_no_stake_is_relay_only():
    manager = StakingManager()
    assert manager.eligibility("unknown") is EligibilityStatus.RELAY_ONLY


def test_full_stake_is_validator():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_VALIDATOR_STAKE, balances)
    assert manager.eligibility("node1") is EligibilityStatus.VALIDATOR


def test_withdrawn_is_relay_only():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    manager.withdraw("node1", balances)
    assert manager.eligibility("node1") is EligibilityStatus.RELAY_ONLY


def test_ejected_node_is_ejected():
    manager = StakingManager()
    balances = make_balances("node1", 10000)
    manager.stake("node1", MIN_STAKE, balances)
    eject(manager, "node1")
    assert manager.eligibility("node1") is EligibilityStatus.EJECTED


def test_is_reward_eligible_with_validator_stake():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", MIN_STAKE, balances)
    assert manager.is_reward_eligible("node1")


def test_ejected_not_reward_eligible():
    manager = StakingManager()
    balances = make_balances("node1", 10000)
    manager.stake("node1", MIN_STAKE, balances)
    eject(manager, "node1")
    assert not manager.is_reward_eligible("node1")


def test_total_stake_sums_active():
    manager = StakingManager()
    balances = {"a": 5000, "b": 5000}
    manager.stake("a", MIN_STAKE, balances)
    manager.stake("b", MIN_STAKE, balances)
    assert manager.total_stake() == float(MIN_STAKE * 2)


def test_get_stake_amount_inactive_is_zero():
    manager = StakingManager()
    assert manager.get_stake_amount("nobody") == 0.0


def test_get_stake_amount_active():
    manager = StakingManager()
    balances = make_balances("node1", 5000)
    manager.stake("node1", 3000, balances)
    assert manager.get_stake_amount("node1") == 3000.0


def test_active_validators_excludes_slashed():
    manager = StakingManager()
    balances = {"good": 5000, "bad": 10000}
    manager.stake("good", MIN_STAKE, balances)
    manager.stake("bad", MIN_STAKE, balances)
    eject(manager, "bad")
    validators = manager.active_validators()
    assert validators == {"good": float(MIN_STAKE)}


def test_violation_type_strings():
    assert ViolationType.DOUBLE_VOTE.as_str() == "double_vote"
    assert ViolationType.CONFLICTING_TX.as_str() == "conflicting_tx"
    assert ViolationType.REPUTATION_PENALTY.as_str() == "reputation_penalty"
    assert ViolationType.INVALID_STATE.as_str() == "invalid_state"