"""
Active-record models bound to an HttpClient.

Available models:
    - Account: accounts and delegated agents
    - Transaction: payments, escrows and streams
"""

from .account import Account
from .transaction import Transaction

__all__ = ["Account", "Transaction"]
