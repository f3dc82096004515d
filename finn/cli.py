"""Command line interface for Finn.

Every invocation loads the ledger once, runs at most one operation and, for
commands that change the ledger, saves it back. Refused operations
(unknown account, insufficient funds) are printed and the command still
exits with status 0; storage failures print ``Error: ...`` on stderr and
exit with status 1 before anything is changed.

Negative numbers are only meaningful as an opening balance, so ``add``
accepts them as positional values (``finn add loan -250 "car loan"``).
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated, Optional

import typer

from finn.audit import AuditLogger, configure_log_level, create_correlation_id
from finn.config import get_settings
from finn.models.ledger import Ledger
from finn.orchestrator import LedgerFlow, create_app_components
from finn.services.storage import JsonFileLedgerStorage, StorageError


def _parse_decimal(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise typer.BadParameter(f"{value!r} is not a valid amount")
    if not amount.is_finite():
        raise typer.BadParameter(f"{value!r} is not a valid amount")
    return amount


def _parse_amount(value: str) -> Decimal:
    """Amounts of deposits, withdrawals and transfers are magnitudes."""
    amount = _parse_decimal(value)
    if amount < 0:
        raise typer.BadParameter("amount must not be negative")
    return amount


def _money(amount: Decimal) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{amount:.2f}"


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


def _load(flow: LedgerFlow) -> Ledger:
    try:
        return flow.load()
    except StorageError as e:
        raise _fail(e)


def _save(flow: LedgerFlow, ledger: Ledger) -> None:
    try:
        flow.save(ledger)
    except StorageError as e:
        raise _fail(e)


def _show_overview(flow: LedgerFlow) -> None:
    overview = flow.overview(_load(flow))
    if overview.is_empty:
        typer.echo("No accounts found.")
        return

    for account in overview.accounts:
        typer.echo(f"{_money(account.balance)} {account.name}")
    typer.echo(f"{_money(overview.total)} Total")


app = typer.Typer(
    add_completion=False,
    help=(
        "CLI personal finance management tool. "
        "With no command, lists all accounts and the total balance."
    ),
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    ledger_path: Annotated[
        Optional[Path],
        typer.Option(
            "--ledger",
            help="Ledger file to use instead of the configured storage.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Set up logging and storage, or list accounts when no command is given."""
    settings = get_settings()
    configure_log_level(settings.app.effective_log_level)

    audit_logger = AuditLogger(correlation_id=create_correlation_id())
    storage = JsonFileLedgerStorage(ledger_path.expanduser()) if ledger_path else None
    try:
        flow = create_app_components(storage=storage, audit_logger=audit_logger)
    except StorageError as e:
        raise _fail(e)
    ctx.obj = flow

    if ctx.invoked_subcommand is None:
        _show_overview(flow)


@app.command("add", context_settings={"ignore_unknown_options": True})
def add_cmd(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="account name")],
    balance: Annotated[
        Decimal, typer.Argument(help="initial balance", parser=_parse_decimal)
    ],
    description: Annotated[str, typer.Argument(help="description")],
) -> None:
    """Add a new account."""
    flow: LedgerFlow = ctx.obj
    ledger = _load(flow)
    result = flow.create_account(ledger, name, balance, description)
    _save(flow, ledger)
    typer.echo(result.message)


@app.command("deposit")
def deposit_cmd(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="account name")],
    amount: Annotated[
        Decimal, typer.Argument(help="deposit amount", parser=_parse_amount)
    ],
    description: Annotated[str, typer.Argument(help="transaction description")],
) -> None:
    """Deposit funds into an account."""
    flow: LedgerFlow = ctx.obj
    ledger = _load(flow)
    result = flow.deposit(ledger, name, amount, description)
    _save(flow, ledger)
    typer.echo(result.message)


@app.command("withdraw")
def withdraw_cmd(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Account name")],
    amount: Annotated[
        Decimal, typer.Argument(help="Withdrawal amount", parser=_parse_amount)
    ],
    description: Annotated[str, typer.Argument(help="Transaction description")],
) -> None:
    """Withdraw funds from an account."""
    flow: LedgerFlow = ctx.obj
    ledger = _load(flow)
    result = flow.withdraw(ledger, name, amount, description)
    _save(flow, ledger)
    typer.echo(result.message)


@app.command("transfer")
def transfer_cmd(
    ctx: typer.Context,
    source: Annotated[str, typer.Argument(help="Source account name")],
    destination: Annotated[str, typer.Argument(help="Destination account name")],
    amount: Annotated[
        Decimal, typer.Argument(help="Transfer amount", parser=_parse_amount)
    ],
) -> None:
    """Transfer funds between accounts."""
    flow: LedgerFlow = ctx.obj
    ledger = _load(flow)
    result = flow.transfer(ledger, source, destination, amount)
    _save(flow, ledger)
    typer.echo(result.message)


@app.command("history")
def history_cmd(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Account name")],
) -> None:
    """Display transaction history for an account."""
    flow: LedgerFlow = ctx.obj
    history = flow.history(_load(flow), name)
    if history is None:
        typer.echo(f"`{name}` not found.")
        return

    typer.echo(f"Transaction history for {history.name}")
    for entry in history.entries:
        typer.echo(
            f"{entry.date.isoformat()} - {_money(entry.amount)} - {entry.description}"
        )


@app.command("check")
def check_cmd(ctx: typer.Context) -> None:
    """Report accounts whose balance does not match their transaction log."""
    flow: LedgerFlow = ctx.obj
    inconsistent = flow.inconsistent_accounts(_load(flow))
    if not inconsistent:
        typer.echo("All accounts are consistent.")
        return

    for name in inconsistent:
        typer.echo(f"Inconsistent balance: {name}")
    raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
