from __future__ import annotations

import pytest

from chain_lotto.chain import SimulatedChain
from chain_lotto.entropy import BlockEntropy
from chain_lotto.lotto import Lotto

ETHER = 10**18
FEE = 10**16  # 0.01 ether


@pytest.fixture
def chain() -> SimulatedChain:
    return SimulatedChain()


@pytest.fixture
def signers(chain: SimulatedChain) -> list[str]:
    # manager, player1, player2, player3
    return chain.create_accounts(4, 100 * ETHER)


@pytest.fixture
def manager(signers: list[str]) -> str:
    return signers[0]


@pytest.fixture
def players(signers: list[str]) -> list[str]:
    return signers[1:]


@pytest.fixture
def lotto(chain: SimulatedChain, manager: str) -> Lotto:
    contract = chain.create_account(f"lotto:{manager}")
    return Lotto(manager, contract, chain, BlockEntropy(chain))
