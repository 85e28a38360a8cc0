import pytest

from vestledger.blockchain.vesting_ledger import VestingLedger
from vestledger.contracts.token_account import TokenAccount

ADMIN = "0x" + "a1" * 20
START = 1_700_000_000


class FakeClock:
    """Deterministic time provider that only moves when told to."""

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token():
    return TokenAccount(name="LifeCoin", symbol="LIFC", owner=ADMIN)


@pytest.fixture
def make_ledger(token, clock):
    """Factory building a ledger wired to the token account as its minter."""

    def _make(seconds_per_day=86400, max_supply=1_000_000_000 * 10**18, token_account=None):
        target = token_account if token_account is not None else token
        ledger = VestingLedger(
            token_account=target,
            admin=ADMIN,
            seconds_per_day=seconds_per_day,
            max_supply=max_supply,
            time_provider=clock,
        )
        if isinstance(target, TokenAccount):
            target.set_vesting_address(ADMIN, ledger.address)
        return ledger

    return _make


@pytest.fixture
def ledger(make_ledger):
    return make_ledger()
