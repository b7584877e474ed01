"""
Property checks for the round state machine.

Random operation sequences are run against a fresh deployment; after every
step the invariants must hold and value must be conserved on the chain.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chain_lotto.chain import SimulatedChain
from chain_lotto.entropy import BlockEntropy
from chain_lotto.errors import LottoError
from chain_lotto.lotto import Lotto

from conftest import ETHER, FEE

N_PLAYERS = 5


def _deploy():
    chain = SimulatedChain()
    signers = chain.create_accounts(N_PLAYERS + 1, 10 * ETHER)
    manager = signers[0]
    contract = chain.create_account("prop-lotto")
    return chain, Lotto(manager, contract, chain, BlockEntropy(chain)), signers


amounts = st.integers(min_value=FEE, max_value=5 * FEE)


def _spell(address: str, shout: bool) -> str:
    return "0x" + address[2:].upper() if shout else address


@given(
    st.lists(
        st.tuples(st.integers(0, N_PLAYERS - 1), st.booleans(), amounts), max_size=20
    )
)
def test_pool_is_sum_of_distinct_entries(entries):
    chain, lotto, signers = _deploy()
    players = signers[1:]
    paid = {}
    for idx, shout, amount in entries:
        p = players[idx]
        if p in paid:
            with pytest.raises(LottoError, match="Already entered"):
                lotto.enter(_spell(p, shout), amount)
        else:
            lotto.enter(_spell(p, shout), amount)
            paid[p] = amount

    assert lotto.state.pool == sum(paid.values())
    assert lotto.get_players_count() == len(paid)
    assert lotto.get_players() == list(paid)


@given(st.integers(min_value=0, max_value=FEE - 1))
def test_below_minimum_never_enters(amount):
    chain, lotto, signers = _deploy()
    with pytest.raises(LottoError, match="Minimum entry fee required"):
        lotto.enter(signers[1], amount)
    assert lotto.state.pool == 0
    assert lotto.get_players_count() == 0


callers = st.tuples(st.integers(0, N_PLAYERS + 1), st.booleans())

ops = st.one_of(
    st.tuples(st.just("enter"), callers, amounts),
    st.tuples(st.just("draw"), callers, st.just(0)),
    st.tuples(st.just("pause"), callers, st.just(0)),
    st.tuples(st.just("withdraw"), callers, st.just(0)),
    st.tuples(st.just("mine"), st.just((0, False)), st.just(0)),
)


@settings(max_examples=200)
@given(st.lists(ops, max_size=40))
def test_random_sequences_keep_invariants(sequence):
    chain, lotto, signers = _deploy()
    total = sum(chain.balances.values())

    # index N_PLAYERS + 1 is the contract itself
    identities = signers + [lotto.address]

    for op, (who, shout), amount in sequence:
        caller = _spell(identities[who], shout)
        before = (list(lotto.get_players()), lotto.state.pool, lotto.is_paused())
        pool_before = lotto.state.pool
        balances_before = dict(chain.balances)
        try:
            if op == "enter":
                lotto.enter(caller, amount)
            elif op == "draw":
                result = lotto.start_lottery(caller)
                assert result.winner in before[0]
                assert chain.balance_of(result.winner) == balances_before[result.winner] + pool_before
                assert lotto.get_players_count() == 0
                assert lotto.state.pool == 0
            elif op == "pause":
                lotto.pause(caller)
                assert lotto.is_paused() is not before[2]
            elif op == "withdraw":
                lotto.emergency_withdraw(caller)
                assert before[2] is True
                assert chain.balance_of(lotto.manager) == balances_before[lotto.manager] + pool_before
            else:
                chain.mine()
        except LottoError:
            assert (list(lotto.get_players()), lotto.state.pool, lotto.is_paused()) == before
            assert chain.balances == balances_before

        lotto.check_invariants()
        assert lotto.manager not in lotto.get_players()
        assert chain.balance_of(lotto.address) == lotto.state.pool
        assert sum(chain.balances.values()) == total
