"""
Finn - Personal Finance Ledger

Named accounts, each with a balance and an append-only transaction log.
Deposits, withdrawals and transfers between accounts.

DESIGN PRINCIPLES:
1. The balance and the log always move together
2. A transfer changes both accounts or neither
3. Refused operations are outcomes, not exceptions
4. The ledger is a value passed in and handed back; no global state
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finn Team"
