"""
Token contracts used as vesting collaborators.
"""

from .token_account import TokenAccount, TokenEvent

__all__ = ["TokenAccount", "TokenEvent"]
