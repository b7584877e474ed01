from __future__ import annotations

import argparse
import logging
from typing import Callable, Optional

from .chain import SimulatedChain, normalize_address
from .config import Settings
from .draw import parse_ether, to_ether
from .entropy import BlockEntropy, EntropySource, HeaderEntropy, RpcBlockEntropy
from .errors import LottoError
from .events import EventRecord
from .lotto import Lotto, RoundState
from .rpc import RpcClient, load_block_from_file
from .store import Deployment, load_deployment, save_deployment

from .project_constants import (
    DEFAULT_ACCOUNT_BALANCE,
    MINIMUM_ENTRY_FEE,
    WEI_DECIMALS,
)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(
        state_file_override=args.state_file,
        entropy_override=args.entropy,
        rpc_url_override=args.rpc_url,
    )


def _print_event(rec: EventRecord) -> None:
    args = dict(rec.args)
    if "amount" in args:
        args["amount"] = f"{to_ether(args['amount'])} ETH"
    detail = ", ".join(f"{k}={v}" for k, v in args.items())
    print(f"📣 {rec.name}({detail})")


def _resolve_account(chain: SimulatedChain, ref: str) -> str:
    """Accept an account index (as listed by `accounts`) or an address."""
    if ref.isdigit():
        accounts = chain.accounts()
        i = int(ref)
        if i >= len(accounts):
            raise SystemExit(f"No account #{i} (have {len(accounts)}).")
        return accounts[i]
    return normalize_address(ref)


def _print_info(lotto: Lotto) -> None:
    info = lotto.get_lotto_info()
    print(f"- Player count      : {info.player_count}")
    print(f"- Prize pool        : {to_ether(info.prize_pool)} ETH")
    print(f"- Minimum entry fee : {to_ether(info.minimum_entry_fee)} ETH")
    print(f"- Manager           : {info.manager}")
    print(f"- Is paused         : {lotto.is_paused()}")
    for i, p in enumerate(info.players):
        print(f"  #{i} {p}")


def _run_tx(
    args: argparse.Namespace,
    action: Callable[[Lotto, Deployment], None],
    entropy: Optional[EntropySource] = None,
) -> int:
    """Load the deployment, mine a block, run `action`, save on success."""
    settings = _settings(args)
    dep = load_deployment(settings.state_file)
    dep.chain.mine()

    rpc: Optional[RpcClient] = None
    if entropy is None:
        if settings.entropy == "rpc":
            rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
            entropy = RpcBlockEntropy(rpc)
        else:
            entropy = BlockEntropy(dep.chain)

    lotto = Lotto(
        dep.manager,
        dep.contract,
        dep.chain,
        entropy,
        minimum_entry_fee=dep.minimum_entry_fee,
        state=dep.state,
    )
    lotto.events.subscribe(_print_event)
    try:
        action(lotto, dep)
    finally:
        if rpc is not None:
            rpc.close()

    save_deployment(settings.state_file, dep)
    return 0


def cmd_deploy(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log = logging.getLogger("deploy")

    if args.accounts < 2:
        raise SystemExit("Need at least 2 accounts (manager + one player).")

    chain = SimulatedChain()
    signers = chain.create_accounts(args.accounts, parse_ether(args.balance))
    manager = signers[0]
    contract = chain.create_account(f"lotto:{manager}")

    dep = Deployment(
        chain=chain,
        contract=contract,
        manager=manager,
        minimum_entry_fee=MINIMUM_ENTRY_FEE,
        state=RoundState(),
    )
    save_deployment(settings.state_file, dep)
    log.info("Wrote deployment to %s", settings.state_file)

    lotto = Lotto(manager, contract, chain, BlockEntropy(chain), state=dep.state)
    print("Deploying Lotto contract...")
    print(f"Lotto contract deployed to: {contract}")
    print(f"Manager address: {manager}")
    print("Initial lottery info:")
    _print_info(lotto)
    print("\n🎉 Deployment complete!")
    print("📝 Next steps: `chain-lotto accounts`, then `chain-lotto enter --from 1`")
    return 0


def cmd_accounts(args: argparse.Namespace) -> int:
    dep = load_deployment(_settings(args).state_file)
    for i, addr in enumerate(dep.chain.accounts()):
        tags = []
        if addr == dep.manager:
            tags.append("manager")
        if addr == dep.contract:
            tags.append("contract")
        if addr in dep.state.entered:
            tags.append("entered")
        suffix = f"  [{', '.join(tags)}]" if tags else ""
        print(f"#{i:<3} {addr}  {to_ether(dep.chain.balance_of(addr))} ETH{suffix}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    dep = load_deployment(_settings(args).state_file)
    lotto = Lotto(
        dep.manager,
        dep.contract,
        dep.chain,
        BlockEntropy(dep.chain),
        minimum_entry_fee=dep.minimum_entry_fee,
        state=dep.state,
    )
    print(f"Lotto contract : {dep.contract}")
    print(f"Block          : {dep.chain.block.number}")
    _print_info(lotto)
    if args.player:
        player = _resolve_account(dep.chain, args.player)
        print(f"Entered ({player}): {lotto.has_player_entered(player)}")
    return 0


def cmd_enter(args: argparse.Namespace) -> int:
    amount = parse_ether(args.amount)

    def action(lotto: Lotto, dep: Deployment) -> None:
        player = _resolve_account(dep.chain, args.sender)
        lotto.enter(player, amount)
        print("✅ Successfully entered the lottery!")

    return _run_tx(args, action)


def cmd_draw(args: argparse.Namespace) -> int:
    entropy: Optional[EntropySource] = None
    if args.block_file:
        entropy = HeaderEntropy(load_block_from_file(args.block_file))

    def action(lotto: Lotto, dep: Deployment) -> None:
        caller = _resolve_account(dep.chain, args.sender) if args.sender else dep.manager
        result = lotto.start_lottery(caller)
        print("========================================")
        print("🏆 WINNER")
        print(f"Address       : {result.winner}")
        print(f"Prize         : {to_ether(result.amount)} ETH")
        print(f"Seed SHA-256  : {result.seed_hash_hex}")
        print("========================================")

    return _run_tx(args, action, entropy)


def cmd_pause(args: argparse.Namespace) -> int:
    def action(lotto: Lotto, dep: Deployment) -> None:
        caller = _resolve_account(dep.chain, args.sender) if args.sender else dep.manager
        paused = lotto.pause(caller)
        print("⏸  Lottery paused" if paused else "▶️  Lottery unpaused")

    return _run_tx(args, action)


def cmd_withdraw(args: argparse.Namespace) -> int:
    def action(lotto: Lotto, dep: Deployment) -> None:
        caller = _resolve_account(dep.chain, args.sender) if args.sender else dep.manager
        amount = lotto.emergency_withdraw(caller)
        print(f"🚨 Emergency withdrawal: {to_ether(amount)} ETH sent to manager")

    return _run_tx(args, action)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="chain-lotto",
        description="Run the lottery contract on a local simulated chain.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument(
        "--state-file", default=None, help="Deployment file (else LOTTO_STATE_FILE)."
    )
    p.add_argument(
        "--entropy",
        choices=("block", "rpc"),
        default=None,
        help="Draw seed source: simulated block or latest block of --rpc-url.",
    )
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    d = sub.add_parser("deploy", help="Create a fresh chain and deploy the lottery.")
    d.add_argument("--accounts", type=int, default=5, help="Funded accounts to create.")
    d.add_argument(
        "--balance",
        default=str(DEFAULT_ACCOUNT_BALANCE // 10**WEI_DECIMALS),
        help="Starting balance per account, in ETH.",
    )
    d.set_defaults(func=cmd_deploy)

    a = sub.add_parser("accounts", help="List accounts and balances.")
    a.set_defaults(func=cmd_accounts)

    i = sub.add_parser("info", help="Show the current round.")
    i.add_argument("--player", default=None, help="Also check whether this account entered.")
    i.set_defaults(func=cmd_info)

    e = sub.add_parser("enter", help="Enter the current round.")
    e.add_argument("--from", dest="sender", required=True, help="Account index or address.")
    e.add_argument("--amount", default="0.01", help="Entry amount in ETH.")
    e.set_defaults(func=cmd_enter)

    dr = sub.add_parser("draw", help="Pick a winner and pay out the pool (manager).")
    dr.add_argument("--from", dest="sender", default=None, help="Caller (default: manager).")
    dr.add_argument(
        "--block-file",
        default=None,
        help="JSON block header to seed the draw from instead of the chain.",
    )
    dr.set_defaults(func=cmd_draw)

    pa = sub.add_parser("pause", help="Toggle the paused flag (manager).")
    pa.add_argument("--from", dest="sender", default=None, help="Caller (default: manager).")
    pa.set_defaults(func=cmd_pause)

    w = sub.add_parser("withdraw", help="Emergency withdraw while paused (manager).")
    w.add_argument("--from", dest="sender", default=None, help="Caller (default: manager).")
    w.set_defaults(func=cmd_withdraw)

    return p


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except LottoError as e:
        raise SystemExit(f"❌ Reverted: {e.reason}")
    raise SystemExit(code)
