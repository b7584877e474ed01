"""
The lottery contract.

One live round at a time. Players pay at least the minimum fee to enter,
the manager starts the draw, the whole pool is paid to one participant and
the round resets. The manager can pause entries and, while paused, pull the
pool back out.

Every public mutator checks all its guards before touching anything, and
moves value through the ledger before committing the reset. A rejected
call (guard or transfer) leaves the round unchanged and emits no events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from . import events as ev
from .chain import normalize_address
from .draw import compute_index
from .entropy import EntropySource
from .errors import AuthorizationError, StateError, ValidationError
from .project_constants import (
    MINIMUM_ENTRY_FEE,
    REASON_ALREADY_ENTERED,
    REASON_CONTRACT_ENTRY,
    REASON_MANAGER_ENTRY,
    REASON_MIN_FEE,
    REASON_NO_PLAYERS,
    REASON_NOT_PAUSED,
    REASON_ONLY_MANAGER,
    REASON_PAUSED,
)

log = logging.getLogger(__name__)


class Ledger(Protocol):
    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def balance_of(self, address: str) -> int: ...


@dataclass
class RoundState:
    participants: List[str] = field(default_factory=list)
    entered: Set[str] = field(default_factory=set)
    pool: int = 0
    paused: bool = False

    def reset(self) -> None:
        # paused survives a reset
        self.participants = []
        self.entered = set()
        self.pool = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participants": list(self.participants),
            "pool": str(self.pool),
            "paused": self.paused,
        }

    @staticmethod
    def from_dict(obj: Dict[str, Any]) -> "RoundState":
        participants = list(obj.get("participants", []))
        return RoundState(
            participants=participants,
            entered=set(participants),
            pool=int(obj.get("pool", 0)),
            paused=bool(obj.get("paused", False)),
        )


@dataclass(frozen=True)
class LottoInfo:
    player_count: int
    prize_pool: int
    minimum_entry_fee: int
    manager: str
    players: Tuple[str, ...]


@dataclass(frozen=True)
class DrawResult:
    winner: str
    amount: int
    index: int
    seed_hash_hex: str


class Lotto:
    def __init__(
        self,
        manager: str,
        address: str,
        ledger: Ledger,
        entropy: EntropySource,
        *,
        event_log: Optional[ev.EventLog] = None,
        minimum_entry_fee: int = MINIMUM_ENTRY_FEE,
        state: Optional[RoundState] = None,
    ) -> None:
        manager = normalize_address(manager)
        address = normalize_address(address)
        if manager == address:
            raise ValidationError("Manager and contract address must differ")
        self._manager = manager
        self._address = address
        self._minimum_entry_fee = minimum_entry_fee
        self.ledger = ledger
        self.entropy = entropy
        self.events = event_log if event_log is not None else ev.EventLog()
        self._state = state if state is not None else RoundState()
        s = self._state
        s.participants = [normalize_address(p) for p in s.participants]
        s.entered = {normalize_address(p) for p in s.entered}
        self.check_invariants()

    @property
    def manager(self) -> str:
        return self._manager

    @property
    def address(self) -> str:
        return self._address

    @property
    def minimum_entry_fee(self) -> int:
        return self._minimum_entry_fee

    @property
    def state(self) -> RoundState:
        return self._state

    def _only_manager(self, caller: str) -> None:
        if normalize_address(caller) != self._manager:
            raise AuthorizationError(REASON_ONLY_MANAGER)

    # ---- Mutators ----

    def enter(self, caller: str, amount: int) -> None:
        caller = normalize_address(caller)
        s = self._state
        if s.paused:
            raise StateError(REASON_PAUSED)
        if amount < self._minimum_entry_fee:
            raise ValidationError(REASON_MIN_FEE)
        if caller == self._manager:
            raise AuthorizationError(REASON_MANAGER_ENTRY)
        if caller == self._address:
            raise AuthorizationError(REASON_CONTRACT_ENTRY)
        if caller in s.entered:
            raise ValidationError(REASON_ALREADY_ENTERED)

        self.ledger.transfer(caller, self._address, amount)

        s.participants.append(caller)
        s.entered.add(caller)
        s.pool += amount
        log.info("Player %s entered with %d (pool %d)", caller, amount, s.pool)
        self.events.emit(ev.PLAYER_ENTERED, player=caller, amount=amount)

    def start_lottery(self, caller: str) -> DrawResult:
        """Pick a winner, pay out the whole pool and reset the round."""
        self._only_manager(caller)
        s = self._state
        if not s.participants:
            raise StateError(REASON_NO_PLAYERS)

        seed = self.entropy.seed(tuple(s.participants))
        index, seed_hash_hex, _ = compute_index(seed, len(s.participants))
        winner = s.participants[index]
        amount = s.pool
        log.debug(
            "Draw seed sha256 %s -> index %d of %d",
            seed_hash_hex,
            index,
            len(s.participants),
        )

        self.ledger.transfer(self._address, winner, amount)

        s.reset()
        log.info("Winner %s received %d", winner, amount)
        self.events.emit(ev.WINNER_SELECTED, winner=winner, amount=amount)
        self.events.emit(ev.LOTTO_RESET)
        return DrawResult(
            winner=winner, amount=amount, index=index, seed_hash_hex=seed_hash_hex
        )

    def pause(self, caller: str) -> bool:
        """Toggle the paused flag. Returns the new value."""
        self._only_manager(caller)
        self._state.paused = not self._state.paused
        log.info("Lottery %s", "paused" if self._state.paused else "unpaused")
        return self._state.paused

    def emergency_withdraw(self, caller: str) -> int:
        """Send the whole pool to the manager and reset. Only while paused."""
        self._only_manager(caller)
        s = self._state
        if not s.paused:
            raise StateError(REASON_NOT_PAUSED)

        amount = s.pool
        if amount > 0:
            self.ledger.transfer(self._address, self._manager, amount)

        s.reset()
        log.warning("Emergency withdrawal of %d to manager %s", amount, self._manager)
        self.events.emit(ev.LOTTO_RESET)
        return amount

    # ---- Queries ----

    def get_players_count(self) -> int:
        return len(self._state.participants)

    def is_paused(self) -> bool:
        return self._state.paused

    def has_player_entered(self, identity: str) -> bool:
        try:
            return normalize_address(identity) in self._state.entered
        except ValidationError:
            # not an address, so never entered
            return False

    def get_players(self) -> List[str]:
        return list(self._state.participants)

    def get_lotto_info(self) -> LottoInfo:
        s = self._state
        return LottoInfo(
            player_count=len(s.participants),
            prize_pool=s.pool,
            minimum_entry_fee=self._minimum_entry_fee,
            manager=self._manager,
            players=tuple(s.participants),
        )

    def check_invariants(self) -> None:
        s = self._state
        players = s.participants
        if self._manager in s.entered:
            raise StateError("Manager is registered as a participant")
        if self._address in s.entered:
            raise StateError("Contract is registered as a participant")
        if len(set(players)) != len(players):
            raise StateError("Duplicate participant")
        if set(players) != s.entered:
            raise StateError("Participant list and entered set disagree")
        if s.pool < 0:
            raise StateError("Negative pool")
        if not players and s.pool != 0:
            raise StateError("Pool is not empty but nobody entered")
        held = self.ledger.balance_of(self._address)
        if held < s.pool:
            raise StateError(f"Contract holds {held} but the pool is {s.pool}")
