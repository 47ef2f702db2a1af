"""
Transaction Engine

Applies an ordered stream of deposits, withdrawals, disputes, resolves and
chargebacks to per-client accounts using exact fixed-point amounts, and
reports the final state of every account.
"""

__version__ = "1.0.0"
