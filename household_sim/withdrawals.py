"""Withdrawal policies applied when an expense has to be paid from accounts.

Accounts are always visited in the caller-supplied order.

- skip: take the whole amount from the first account that covers it;
  if none does, nothing is withdrawn
- allow_negative: like skip, but fall back to the first account and let it go negative
- borrow: drain accounts in order, partial withdrawal allowed
"""

from household_sim.ledger import AccountState
from household_sim.models import ALLOW_NEGATIVE, BORROW, SKIP


def withdraw(states: list[AccountState], amount: float, policy: str = SKIP) -> float:
    """Withdraw amount from the accounts under policy. Returns the amount actually withdrawn."""
    if amount <= 0 or not states:
        return 0.0
    if policy == BORROW:
        return _drain(states, amount)
    for state in states:
        if state.balance >= amount:
            state.balance -= amount
            return amount
    if policy == ALLOW_NEGATIVE:
        states[0].balance -= amount
        return amount
    return 0.0


def withdraw_partial(states: list[AccountState], amount: float, policy: str = SKIP) -> float:
    """Withdraw as much of amount as possible (yearly expenses).

    Under allow_negative the full amount is always taken.
    """
    if amount <= 0 or not states:
        return 0.0
    if policy == ALLOW_NEGATIVE:
        return withdraw(states, amount, policy)
    return _drain(states, amount)


def withdraw_from(
    states: list[AccountState], target: AccountState, amount: float, policy: str = SKIP,
) -> float:
    """Withdraw from one named account (one-off withdrawal events).

    skip requires the target to cover the amount; borrow continues into the other
    accounts once the target is empty; allow_negative always debits the target.
    """
    if amount <= 0:
        return 0.0
    if target.balance >= amount or policy == ALLOW_NEGATIVE:
        target.balance -= amount
        return amount
    if policy == BORROW:
        ordered = [target] + [s for s in states if s is not target]
        return _drain(ordered, amount)
    return 0.0


def _drain(states: list[AccountState], amount: float) -> float:
    remaining = amount
    for state in states:
        if remaining <= 0:
            break
        available = min(max(state.balance, 0.0), remaining)
        if available > 0:
            state.balance -= available
            remaining -= available
    return amount - remaining
