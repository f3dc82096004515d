"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as an alternative backend because:
1. The ledger can be read (and charted) directly in a spreadsheet
2. No local file to back up
3. Same whole-ledger load/save contract as the JSON file

TRADEOFFS:
- Every load reads both worksheets in full (fine for a personal ledger)
- Every save rewrites both worksheets in full

A save sends both worksheets in one values batch update, so a failed
request leaves the previous ledger in place. Rows left over from a longer
previous ledger are blanked by the same request.

Layout:
- "Accounts": one row per account, keyed by its position in the ledger
- "Transactions": one row per transaction, pointing at its account by
  position. Row order within an account is log order.

Accounts are keyed by position rather than by name so a ledger that still
contains duplicate names survives a round trip.
"""

from typing import Any, Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from gspread.utils import absolute_range_name
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finn.config import GoogleSheetsSettings, get_settings
from finn.models.ledger import Account, Ledger
from finn.services.storage.interface import (
    LedgerCorruptedError,
    LedgerStorageInterface,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)

# Column mappings for Accounts sheet
ACCOUNT_COLUMNS = [
    "position",
    "name",
    "balance",
]

# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "account_position",
    "date",
    "description",
    "amount",
    "transaction_type",
]

_ACCOUNTS = TypeAdapter(list[Account])


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def spreadsheet_id(self) -> str:
        return self._settings.spreadsheet_id

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise StorageConnectionError(
                    f"Failed to connect to Google Sheets: {e}"
                ) from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self._settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound as e:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def _get_or_create_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_accounts_sheet(self) -> gspread.Worksheet:
        """Get or create the Accounts worksheet."""
        return self._get_or_create_worksheet(
            self._settings.accounts_sheet_name, ACCOUNT_COLUMNS, rows=200
        )

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_worksheet(
            self._settings.transactions_sheet_name, TRANSACTION_COLUMNS, rows=5000
        )


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    Decimals and dates are written as text (value_input_option="RAW")
    so Sheets does not reformat them.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @property
    def location(self) -> str:
        return f"Google Sheets spreadsheet {self._client.spreadsheet_id}"

    def _ledger_to_rows(self, ledger: Ledger) -> tuple[list[list], list[list]]:
        """Convert a Ledger to (account rows, transaction rows)."""
        account_rows = []
        transaction_rows = []
        for position, account in enumerate(ledger.accounts):
            account_rows.append([str(position), account.name, str(account.balance)])
            for transaction in account.transactions:
                transaction_rows.append([
                    str(position),
                    transaction.date.isoformat(),
                    transaction.description,
                    str(transaction.amount),
                    transaction.transaction_type.value,
                ])
        return account_rows, transaction_rows

    def _rows_to_ledger(
        self,
        account_rows: list[list],
        transaction_rows: list[list],
    ) -> Ledger:
        """Convert sheet rows (headers removed) back to a Ledger."""
        accounts: dict[int, dict[str, Any]] = {}
        for row in account_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            accounts[int(row[0])] = {
                "name": row[1],
                "balance": row[2],
                "transactions": [],
            }

        for row in transaction_rows:
            if not row or not row[0]:
                continue
            position = int(row[0])
            if position not in accounts:
                raise LedgerCorruptedError(
                    f"Transaction refers to unknown account position {position}"
                )
            accounts[position]["transactions"].append({
                "date": row[1],
                "description": row[2],
                "amount": row[3],
                "transaction_type": row[4],
            })

        ordered = [accounts[position] for position in sorted(accounts)]
        return Ledger(accounts=_ACCOUNTS.validate_python(ordered))

    def exists(self) -> bool:
        try:
            rows = self._client.get_accounts_sheet().get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read accounts sheet: {e}") from e
        return len(rows) > 1

    def load(self) -> Ledger:
        """Read both worksheets and rebuild the ledger."""
        try:
            account_rows = self._client.get_accounts_sheet().get_all_values()[1:]
            transaction_rows = self._client.get_transactions_sheet().get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read ledger sheets: {e}") from e

        try:
            ledger = self._rows_to_ledger(account_rows, transaction_rows)
        except LedgerCorruptedError:
            raise
        except (ValueError, IndexError) as e:
            raise LedgerCorruptedError(f"Ledger sheets are not a valid ledger: {e}") from e

        logger.debug("ledger_sheets_loaded", location=self.location, accounts=len(ledger))
        return ledger

    def save(self, ledger: Ledger) -> None:
        """Rewrite both worksheets in a single request."""
        account_rows, transaction_rows = self._ledger_to_rows(ledger)
        try:
            self._write_sheets(account_rows, transaction_rows)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save ledger: {e}") from e

        logger.debug("ledger_sheets_saved", location=self.location, accounts=len(ledger))

    def _value_range(
        self,
        sheet: gspread.Worksheet,
        columns: list[str],
        rows: list[list],
    ) -> dict[str, Any]:
        """
        Build the ValueRange that replaces a worksheet's contents.

        The values cover every row the sheet currently holds; rows past the
        new data are written as blanks. The grid is grown first if the new
        data needs more rows, which leaves existing values untouched.
        """
        values = [list(columns)] + rows
        current_height = len(sheet.get_all_values())
        blank = [""] * len(columns)
        values.extend([list(blank) for _ in range(current_height - len(values))])

        if sheet.row_count < len(values):
            sheet.add_rows(len(values) - sheet.row_count)

        return {
            "range": absolute_range_name(sheet.title, "A1"),
            "values": values,
        }

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_sheets(
        self,
        account_rows: list[list],
        transaction_rows: list[list],
    ) -> None:
        accounts_sheet = self._client.get_accounts_sheet()
        transactions_sheet = self._client.get_transactions_sheet()

        body = {
            "valueInputOption": "RAW",
            "data": [
                self._value_range(accounts_sheet, ACCOUNT_COLUMNS, account_rows),
                self._value_range(
                    transactions_sheet, TRANSACTION_COLUMNS, transaction_rows
                ),
            ],
        }
        # One request: Sheets applies both ranges or neither
        self._client.get_spreadsheet().values_batch_update(body)
