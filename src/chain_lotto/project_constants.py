"""
Fixed parameters of the lottery contract.

These values are part of the public rules of every round.
Changing them changes who can enter and MUST be publicly announced.
"""

# Native currency uses 18 decimals (wei)
WEI_DECIMALS = 18

# Minimum entry fee (raw units): 0.01 ether
MINIMUM_ENTRY_FEE = 10**16

# Default file for the deployed round when driven from the CLI
DEFAULT_STATE_FILE = "lotto_state.json"

# Starting balance for accounts created by `chain-lotto deploy`
DEFAULT_ACCOUNT_BALANCE = 10_000 * (10**WEI_DECIMALS)

# Seconds between simulated blocks
BLOCK_TIME_S = 12

# Revert reasons
REASON_PAUSED = "Contract is paused"
REASON_MIN_FEE = "Minimum entry fee required"
REASON_MANAGER_ENTRY = "Manager cannot participate"
REASON_CONTRACT_ENTRY = "Contract cannot participate"
REASON_ALREADY_ENTERED = "Already entered"
REASON_ONLY_MANAGER = "Only manager can call this function"
REASON_NO_PLAYERS = "No players in the lottery"
REASON_NOT_PAUSED = "Contract must be paused"
