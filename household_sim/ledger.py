"""Per-account monthly ledger step."""

from dataclasses import dataclass

from household_sim.models import Account


@dataclass
class AccountState:
    """Engine-local working balance for one account.

    Holds a copy of the account's starting balance; the source Account is never written.
    """

    account: Account
    balance: float

    @classmethod
    def from_account(cls, account: Account) -> "AccountState":
        return cls(account=account, balance=float(account.balance))

    @property
    def id(self) -> str:
        return self.account.id


@dataclass
class LedgerStep:
    deposits: float = 0.0
    returns: float = 0.0
    fees: float = 0.0


def step_account(
    state: AccountState,
    inflation: float,
    extra_deposit_share: float = 0.0,
    apply_deposit_fee: bool = False,
) -> LedgerStep:
    """Apply one month of deposits, compounding and fees (in that order).

    Returns and fees compound on the post-deposit balance.
    """
    account = state.account
    step = LedgerStep()

    deposit = (account.monthly_deposit + account.employer_deposit) * inflation
    if deposit > 0:
        if apply_deposit_fee and account.deposit_fee > 0:
            deposit_fee = deposit * account.deposit_fee / 100
            deposit -= deposit_fee
            step.fees += deposit_fee
        state.balance += deposit
        step.deposits += deposit

    if extra_deposit_share > 0:
        state.balance += extra_deposit_share
        step.deposits += extra_deposit_share

    returns = state.balance * (account.annual_return / 100 / 12)
    state.balance += returns
    step.returns = returns

    fee = state.balance * (account.management_fee / 100 / 12)
    state.balance -= fee
    step.fees += fee
    return step
