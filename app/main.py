"""
Streamlit Dashboard for Finn

A small window onto the same ledger the `finn` command line uses.

DESIGN PRINCIPLES:
1. Same flow as the command line: load -> one operation -> save
2. Refused operations are shown, not hidden
3. The ledger is re-read on every rerun; nothing is cached between actions

Run with: streamlit run app/main.py
"""

from decimal import Decimal

import streamlit as st

from finn.config import get_settings, validate_all_settings
from finn.models.ledger import OperationResult
from finn.orchestrator import LedgerFlow, create_app_components
from finn.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Finn - Personal Finance",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


def money(amount: Decimal) -> str:
    return f"{get_settings().app.currency_symbol}{amount:.2f}"


@st.cache_resource
def get_flow() -> LedgerFlow:
    """Get or create the ledger flow (cached)."""
    return create_app_components()


def show_result(result: OperationResult) -> None:
    """
    Report an outcome.

    A success reruns the script so every table and selectbox is rebuilt
    from the saved ledger; the message is shown after the rerun.
    """
    if result.success:
        st.session_state.flash = result.message
        st.rerun()
    else:
        st.warning(result.message)


def main():
    """Main application entry point."""
    try:
        flow = get_flow()
        ledger = flow.load()
    except StorageError as e:
        st.error(f"Cannot open the ledger: {e}")
        st.stop()

    # Sidebar navigation
    st.sidebar.title("💰 Finn")
    st.sidebar.caption(flow.storage.location)
    st.sidebar.markdown("---")

    if "flash" in st.session_state:
        st.success(st.session_state.pop("flash"))

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Accounts", "📜 History", "➕ New Account", "💸 Move Money", "⚙️ Settings"],
        index=0,
    )

    # Route to appropriate page
    if page == "📊 Accounts":
        render_accounts_page(flow, ledger)
    elif page == "📜 History":
        render_history_page(flow, ledger)
    elif page == "➕ New Account":
        render_new_account_page(flow)
    elif page == "💸 Move Money":
        render_move_money_page(flow, ledger)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_accounts_page(flow: LedgerFlow, ledger):
    """Render all accounts with the grand total."""
    st.title("📊 Accounts")

    overview = flow.overview(ledger)
    if overview.is_empty:
        st.info("No accounts found.")
        return

    st.metric("Total", money(overview.total))
    st.table([
        {"Account": account.name, "Balance": money(account.balance)}
        for account in overview.accounts
    ])

    inconsistent = flow.inconsistent_accounts(ledger)
    if inconsistent:
        st.error(
            "These balances do not match their transaction logs: "
            + ", ".join(inconsistent)
        )


def render_history_page(flow: LedgerFlow, ledger):
    """Render the transaction log of one account."""
    st.title("📜 History")

    if not ledger.accounts:
        st.info("No accounts found.")
        return

    name = st.selectbox("Account", ledger.names)
    history = flow.history(ledger, name)
    if history is None:
        st.warning(f"`{name}` not found.")
        return

    st.table([
        {
            "Date": entry.date.isoformat(),
            "Type": entry.transaction_type.value,
            "Amount": money(entry.amount),
            "Description": entry.description,
        }
        for entry in history.entries
    ])


def render_new_account_page(flow: LedgerFlow):
    """Render the account creation form."""
    st.title("➕ New Account")

    with st.form("new_account"):
        name = st.text_input("Name")
        balance = st.number_input("Opening balance", value=0.0, step=0.01, format="%.2f")
        description = st.text_input("Description", value="Opening balance")
        submitted = st.form_submit_button("Create", type="primary")

    if submitted:
        if not name.strip():
            st.error("Please enter an account name.")
            return
        try:
            result = flow.run(
                lambda ledger: flow.create_account(
                    ledger, name.strip(), Decimal(str(balance)), description
                )
            )
        except StorageError as e:
            st.error(f"Error saving the ledger: {e}")
            return
        show_result(result)


def render_move_money_page(flow: LedgerFlow, ledger):
    """Render deposit, withdrawal and transfer forms."""
    st.title("💸 Move Money")

    if not ledger.accounts:
        st.info("Create an account first.")
        return

    deposit_tab, withdraw_tab, transfer_tab = st.tabs(["Deposit", "Withdraw", "Transfer"])

    with deposit_tab:
        with st.form("deposit"):
            name = st.selectbox("Account", ledger.names, key="deposit_account")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="deposit_amount")
            description = st.text_input("Description", key="deposit_description")
            submitted = st.form_submit_button("Deposit", type="primary")
        if submitted:
            apply(flow, lambda current: flow.deposit(current, name, Decimal(str(amount)), description))

    with withdraw_tab:
        with st.form("withdraw"):
            name = st.selectbox("Account", ledger.names, key="withdraw_account")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="withdraw_amount")
            description = st.text_input("Description", key="withdraw_description")
            submitted = st.form_submit_button("Withdraw", type="primary")
        if submitted:
            apply(flow, lambda current: flow.withdraw(current, name, Decimal(str(amount)), description))

    with transfer_tab:
        with st.form("transfer"):
            source = st.selectbox("From", ledger.names, key="transfer_source")
            destination = st.selectbox("To", ledger.names, key="transfer_destination")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f", key="transfer_amount")
            submitted = st.form_submit_button("Transfer", type="primary")
        if submitted:
            apply(flow, lambda current: flow.transfer(current, source, destination, Decimal(str(amount))))


def apply(flow: LedgerFlow, action) -> None:
    """Run one load -> operation -> save cycle and show the outcome."""
    try:
        result = flow.run(action)
    except StorageError as e:
        st.error(f"Error saving the ledger: {e}")
        return
    show_result(result)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    groups = [
        ("Ledger storage", "ledger"),
        ("Google Sheets (optional storage)", "google_sheets"),
        ("Application", "app"),
    ]

    for label, key in groups:
        if status.get(key, False):
            st.success(f"✅ {label} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {label} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "Settings are read from environment variables or a `.env` file: "
        "`FINN_LEDGER_PATH`, `FINN_STORAGE_BACKEND` (`json` or `sheets`), "
        "`GOOGLE_SHEETS_CREDENTIALS_PATH`, `GOOGLE_SHEETS_SPREADSHEET_ID`, "
        "`LOG_LEVEL` and `CURRENCY_SYMBOL`."
    )


if __name__ == "__main__":
    main()
