from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from .project_constants import DEFAULT_STATE_FILE

ENTROPY_MODES = ("block", "rpc")


@dataclass(frozen=True)
class Settings:
    state_file: str
    entropy: str = "block"
    rpc_url: str | None = None

    @staticmethod
    def from_env(
        state_file_override: str | None = None,
        entropy_override: str | None = None,
        rpc_url_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        # CLI flags win over env.
        state_file = (
            state_file_override
            or os.getenv("LOTTO_STATE_FILE", "").strip()
            or DEFAULT_STATE_FILE
        )
        entropy = (entropy_override or os.getenv("LOTTO_ENTROPY", "").strip() or "block").lower()
        if entropy not in ENTROPY_MODES:
            raise RuntimeError(
                f"Unknown entropy source {entropy!r}; expected one of {', '.join(ENTROPY_MODES)}."
            )

        rpc_url = rpc_url_override or os.getenv("LOTTO_RPC_URL", "").strip() or None
        if entropy == "rpc" and not rpc_url:
            raise RuntimeError(
                "Missing LOTTO_RPC_URL (or --rpc-url). Put it in .env or export it."
            )

        return Settings(state_file=state_file, entropy=entropy, rpc_url=rpc_url)
