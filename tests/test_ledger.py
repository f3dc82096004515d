"""
Tests for the ledger core: entry primitives and operations.
"""

import pytest
from datetime import date
from decimal import Decimal

from finn.ledger import (
    account_history,
    accounts_overview,
    add_account,
    check_consistency,
    create_account,
    deposit_funds,
    find_account,
    is_consistent,
    net_effect,
    record_deposit,
    record_withdrawal,
    today,
    transfer,
    transfer_funds,
    withdraw_funds,
)
from finn.models.ledger import (
    Account,
    Ledger,
    OperationStatus,
    Transaction,
    TransactionType,
)


DAY = date(2024, 3, 1)


@pytest.fixture
def ledger():
    """A ledger with alice at 150.00 (after a deposit) and bob at 0."""
    ledger = Ledger()
    add_account(ledger, "alice", Decimal("100.0"), "init", on=DAY)
    deposit_funds(ledger, "alice", Decimal("50.0"), "salary", on=DAY)
    add_account(ledger, "bob", Decimal("0.0"), "init", on=DAY)
    return ledger


def snapshot(account: Account) -> str:
    return account.model_dump_json()


class TestEntryPrimitives:
    """Tests for create/deposit/withdraw on a single account."""

    def test_create_account_records_opening_deposit(self):
        """Test that the opening balance is logged as a Deposit."""
        account = create_account("alice", Decimal("100.0"), "init", on=DAY)
        assert account.name == "alice"
        assert account.balance == Decimal("100.0")
        assert account.transactions == [
            Transaction(
                date=DAY,
                description="init",
                amount=Decimal("100.0"),
                transaction_type=TransactionType.DEPOSIT,
            )
        ]

    def test_create_account_allows_negative_opening_balance(self):
        account = create_account("loan", Decimal("-250"), "car loan", on=DAY)
        assert account.balance == Decimal("-250")
        assert is_consistent(account)

    def test_create_account_defaults_to_today(self):
        account = create_account("cash", Decimal("1"), "init")
        assert account.transactions[0].date == today()

    def test_record_deposit(self):
        account = create_account("alice", Decimal("10"), "init", on=DAY)
        result = record_deposit(account, Decimal("5.25"), "refund", on=DAY)
        assert result.success
        assert account.balance == Decimal("15.25")
        assert account.transactions[-1].transaction_type == TransactionType.DEPOSIT
        assert account.transactions[-1].description == "refund"

    def test_record_deposit_accepts_zero(self):
        account = create_account("alice", Decimal("10"), "init", on=DAY)
        result = record_deposit(account, Decimal("0"), "nothing", on=DAY)
        assert result.success
        assert account.balance == Decimal("10")
        assert len(account.transactions) == 2

    def test_record_withdrawal_exact_balance(self):
        """Test that the whole balance can be withdrawn."""
        account = create_account("alice", Decimal("10"), "init", on=DAY)
        result = record_withdrawal(account, Decimal("10"), "cash", on=DAY)
        assert result.success
        assert account.balance == Decimal("0")
        assert account.transactions[-1].transaction_type == TransactionType.WITHDRAWAL

    def test_record_withdrawal_refused(self):
        """Test that an overdraw changes nothing."""
        account = create_account("alice", Decimal("10"), "init", on=DAY)
        before = snapshot(account)
        result = record_withdrawal(account, Decimal("10.01"), "too much", on=DAY)
        assert result.status == OperationStatus.INSUFFICIENT_FUNDS
        assert snapshot(account) == before

    def test_net_effect_and_consistency(self):
        account = create_account("alice", Decimal("10"), "init", on=DAY)
        record_withdrawal(account, Decimal("4"), "lunch", on=DAY)
        assert net_effect(account) == Decimal("6")
        assert is_consistent(account)

        account.balance = Decimal("7")
        assert not is_consistent(account)


class TestLookup:
    """Tests for finding accounts by name."""

    def test_find_existing(self, ledger):
        assert find_account(ledger, "bob").name == "bob"

    def test_find_missing(self, ledger):
        assert find_account(ledger, "carol") is None

    def test_duplicate_names_resolve_to_first(self):
        """Test that lookup is deterministic with legacy duplicate names."""
        first = Account(name="cash", balance=Decimal("1"))
        second = Account(name="cash", balance=Decimal("2"))
        ledger = Ledger(accounts=[first, second])

        found = [find_account(ledger, "cash") for _ in range(3)]
        assert all(account is ledger.accounts[0] for account in found)
        assert found[0].balance == Decimal("1")


class TestAddAccount:
    """Tests for adding accounts to a ledger."""

    def test_add_account(self):
        ledger = Ledger()
        result = add_account(ledger, "alice", Decimal("100"), "init", on=DAY)
        assert result.success
        assert result.message == "new account alice"
        assert ledger.names == ["alice"]

    def test_duplicate_name_rejected(self, ledger):
        """Test that names stay unique."""
        before = ledger.model_dump_json()
        result = add_account(ledger, "alice", Decimal("1"), "again", on=DAY)
        assert result.status == OperationStatus.DUPLICATE_ACCOUNT
        assert "already exists" in result.message
        assert ledger.model_dump_json() == before


class TestDepositAndWithdraw:
    """Tests for deposit_funds and withdraw_funds."""

    def test_deposit_unknown_account(self, ledger):
        before = ledger.model_dump_json()
        result = deposit_funds(ledger, "carol", Decimal("5"), "gift", on=DAY)
        assert result.status == OperationStatus.ACCOUNT_NOT_FOUND
        assert result.message == "account not found"
        assert ledger.model_dump_json() == before

    def test_withdraw_unknown_account(self, ledger):
        result = withdraw_funds(ledger, "carol", Decimal("5"), "cash", on=DAY)
        assert result.status == OperationStatus.ACCOUNT_NOT_FOUND

    @pytest.mark.parametrize("amount", ["0", "0.01", "149.99", "150.0"])
    def test_withdraw_within_balance_applies(self, ledger, amount):
        alice = find_account(ledger, "alice")
        result = withdraw_funds(ledger, "alice", Decimal(amount), "cash", on=DAY)
        assert result.success
        assert alice.balance == Decimal("150.0") - Decimal(amount)
        assert len(alice.transactions) == 3

    @pytest.mark.parametrize("amount", ["150.01", "200", "1000000"])
    def test_withdraw_beyond_balance_is_refused(self, ledger, amount):
        alice = find_account(ledger, "alice")
        before = snapshot(alice)
        result = withdraw_funds(ledger, "alice", Decimal(amount), "cash", on=DAY)
        assert result.status == OperationStatus.INSUFFICIENT_FUNDS
        assert snapshot(alice) == before


class TestTransfer:
    """Tests for the transfer protocol."""

    def test_transfer_moves_funds_and_logs_both_legs(self, ledger):
        alice = find_account(ledger, "alice")
        bob = find_account(ledger, "bob")

        result = transfer_funds(ledger, "alice", "bob", Decimal("50.0"), on=DAY)

        assert result.success
        assert alice.balance == Decimal("100.0")
        assert bob.balance == Decimal("50.0")
        assert alice.transactions[-1] == Transaction(
            date=DAY,
            description="Transfer to bob",
            amount=Decimal("50.0"),
            transaction_type=TransactionType.TRANSFER,
        )
        assert bob.transactions[-1] == Transaction(
            date=DAY,
            description="Transfer from alice",
            amount=Decimal("50.0"),
            transaction_type=TransactionType.TRANSFER,
        )

    def test_transfer_order_in_ledger_does_not_matter(self, ledger):
        """Test that the destination may come before the source."""
        result = transfer_funds(ledger, "bob", "alice", Decimal("0"), on=DAY)
        assert result.success
        assert len(find_account(ledger, "bob").transactions) == 2

    def test_rejected_transfer_changes_nothing(self, ledger):
        alice = find_account(ledger, "alice")
        bob = find_account(ledger, "bob")
        before = (snapshot(alice), snapshot(bob))

        result = transfer_funds(ledger, "alice", "bob", Decimal("150.01"), on=DAY)

        assert result.status == OperationStatus.INSUFFICIENT_FUNDS
        assert result.message == "Insufficient funds."
        assert (snapshot(alice), snapshot(bob)) == before

    def test_transfer_guard_matches_withdrawal_guard(self):
        """Test that a negative balance cannot fund a transfer."""
        source = Account(name="overdrawn", balance=Decimal("-10"))
        destination = Account(name="savings")
        result = transfer(source, destination, Decimal("5"), on=DAY)
        assert result.status == OperationStatus.INSUFFICIENT_FUNDS
        assert source.balance == Decimal("-10")
        assert destination.transactions == []

    def test_negative_transfer_rejected(self, ledger):
        """Test that a negative amount cannot pull money from the destination."""
        before = ledger.model_dump_json()
        result = transfer_funds(ledger, "bob", "alice", Decimal("-5"), on=DAY)
        assert result.status == OperationStatus.INVALID_AMOUNT
        assert result.message == "amount must not be negative"
        assert ledger.model_dump_json() == before

    def test_transfer_missing_destination(self, ledger):
        before = ledger.model_dump_json()
        result = transfer_funds(ledger, "alice", "carol", Decimal("1"), on=DAY)
        assert result.status == OperationStatus.ACCOUNT_NOT_FOUND
        assert result.message == "account(s) not found"
        assert ledger.model_dump_json() == before

    def test_transfer_missing_source(self, ledger):
        result = transfer_funds(ledger, "carol", "bob", Decimal("1"), on=DAY)
        assert result.status == OperationStatus.ACCOUNT_NOT_FOUND

    def test_transfer_to_same_account_rejected(self, ledger):
        before = ledger.model_dump_json()
        result = transfer_funds(ledger, "alice", "alice", Decimal("1"), on=DAY)
        assert result.status == OperationStatus.SAME_ACCOUNT
        assert ledger.model_dump_json() == before

    def test_transfer_with_duplicate_names_uses_first_matches(self):
        ledger = Ledger(accounts=[
            Account(name="a", balance=Decimal("10")),
            Account(name="b"),
            Account(name="a", balance=Decimal("99")),
            Account(name="b"),
        ])
        result = transfer_funds(ledger, "a", "b", Decimal("10"), on=DAY)
        assert result.success
        assert [account.balance for account in ledger.accounts] == [
            Decimal("0"), Decimal("10"), Decimal("99"), Decimal("0"),
        ]


class TestBalanceConsistency:
    """The stored balance always equals the sum of the signed log."""

    @pytest.mark.parametrize("operations", [
        [("deposit", "alice", "10")],
        [("withdraw", "alice", "150")],
        [("withdraw", "alice", "500"), ("deposit", "bob", "1.5")],
        [("transfer", "alice", "bob", "75"), ("transfer", "bob", "alice", "25")],
        [
            ("transfer", "alice", "bob", "150"),
            ("withdraw", "alice", "0.01"),
            ("transfer", "bob", "alice", "200"),
            ("deposit", "alice", "0.10"),
            ("withdraw", "bob", "149.99"),
        ],
    ])
    def test_balance_matches_log(self, ledger, operations):
        for op in operations:
            if op[0] == "deposit":
                deposit_funds(ledger, op[1], Decimal(op[2]), "d", on=DAY)
            elif op[0] == "withdraw":
                withdraw_funds(ledger, op[1], Decimal(op[2]), "w", on=DAY)
            else:
                transfer_funds(ledger, op[1], op[2], Decimal(op[3]), on=DAY)

        assert check_consistency(ledger) == []
        assert all(account.balance >= 0 for account in ledger.accounts)

    def test_check_consistency_reports_tampered_account(self, ledger):
        find_account(ledger, "bob").balance = Decimal("1000")
        assert check_consistency(ledger) == ["bob"]


class TestReadProjections:
    """Tests for history and overview."""

    def test_history_in_log_order(self, ledger):
        transfer_funds(ledger, "alice", "bob", Decimal("50.0"), on=DAY)
        history = account_history(ledger, "alice")
        assert history.name == "alice"
        assert [(e.amount, e.description) for e in history.entries] == [
            (Decimal("100.0"), "init"),
            (Decimal("50.0"), "salary"),
            (Decimal("50.0"), "Transfer to bob"),
        ]

    def test_history_unknown_account(self, ledger):
        assert account_history(ledger, "carol") is None

    def test_overview_sorted_descending_with_total(self):
        ledger = Ledger(accounts=[
            Account(name="bob", balance=Decimal("50.0")),
            Account(name="alice", balance=Decimal("100.0")),
            Account(name="loan", balance=Decimal("-20")),
        ])
        overview = accounts_overview(ledger)
        assert [a.name for a in overview.accounts] == ["alice", "bob", "loan"]
        assert overview.total == Decimal("130.0")

    def test_overview_does_not_reorder_ledger(self):
        ledger = Ledger(accounts=[
            Account(name="small", balance=Decimal("1")),
            Account(name="big", balance=Decimal("2")),
        ])
        accounts_overview(ledger)
        assert ledger.names == ["small", "big"]

    def test_overview_ties_keep_ledger_order(self):
        ledger = Ledger(accounts=[
            Account(name="first", balance=Decimal("5")),
            Account(name="second", balance=Decimal("5")),
        ])
        assert [a.name for a in accounts_overview(ledger).accounts] == ["first", "second"]

    def test_overview_of_empty_ledger(self):
        overview = accounts_overview(Ledger())
        assert overview.is_empty
        assert overview.total == Decimal("0")


class TestScenarios:
    """End-to-end walk through the basic use of the ledger."""

    def test_alice_and_bob(self):
        ledger = Ledger()

        # Create
        add_account(ledger, "alice", Decimal("100.0"), "init", on=DAY)
        alice = find_account(ledger, "alice")
        assert alice.balance == Decimal("100.0")
        assert [(t.transaction_type, t.amount, t.description) for t in alice.transactions] == [
            (TransactionType.DEPOSIT, Decimal("100.0"), "init"),
        ]

        # Deposit
        deposit_funds(ledger, "alice", Decimal("50.0"), "pay", on=DAY)
        assert alice.balance == Decimal("150.0")
        assert len(alice.transactions) == 2

        # Overdraw
        result = withdraw_funds(ledger, "alice", Decimal("200.0"), "tv", on=DAY)
        assert result.status == OperationStatus.INSUFFICIENT_FUNDS
        assert alice.balance == Decimal("150.0")
        assert len(alice.transactions) == 2

        # Transfer
        add_account(ledger, "bob", Decimal("0.0"), "init", on=DAY)
        bob = find_account(ledger, "bob")
        transfer_funds(ledger, "alice", "bob", Decimal("50.0"), on=DAY)
        assert alice.balance == Decimal("100.0")
        assert bob.balance == Decimal("50.0")
        assert alice.transactions[-1].description == "Transfer to bob"
        assert bob.transactions[-1].description == "Transfer from alice"

        # Overview
        overview = accounts_overview(ledger)
        assert [a.name for a in overview.accounts] == ["alice", "bob"]
        assert overview.total == Decimal("150.0")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
