"""
Streamlit Frontend for Pocketbook

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every change gives visible feedback (success or error)
3. Failures never leave half-saved data
4. Guest mode works without an account

The signed-in session lives in st.session_state and is handed to the
flows explicitly; no page reads "the current user" from storage.
"""

from datetime import date
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from pocketbook.config import validate_all_settings
from pocketbook.models.audit import AuditEventBuilder
from pocketbook.models.finance import (
    AdviceType,
    Budget,
    ExpenseCategory,
    InvestmentType,
    TransactionQuery,
    TransactionType,
    categories_for,
)
from pocketbook.orchestrator import AppComponents, SessionFlows, create_app_components
from pocketbook.services.accounts import AccountError
from pocketbook.services.helper import answer
from pocketbook.services.importer import CSVImportError, NoValidTransactionsError
from pocketbook.services.storage import NotFoundError, StorageError


# Page configuration
st.set_page_config(
    page_title="Pocketbook",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .warning-box {
        padding: 12px;
        background-color: #fde8e8;
        border-radius: 8px;
        border-left: 5px solid #dc3545;
        margin: 6px 0;
    }
    .opportunity-box {
        padding: 12px;
        background-color: #e6f6ea;
        border-radius: 8px;
        border-left: 5px solid #28a745;
        margin: 6px 0;
    }
    .insight-box {
        padding: 12px;
        background-color: #e7f0fd;
        border-radius: 8px;
        border-left: 5px solid #004085;
        margin: 6px 0;
    }
</style>
""", unsafe_allow_html=True)

ADVICE_STYLES = {
    AdviceType.WARNING: "warning-box",
    AdviceType.OPPORTUNITY: "opportunity-box",
    AdviceType.INSIGHT: "insight-box",
}


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except StorageError as e:
        st.error(f"Failed to open local storage: {e}")
        return create_app_components(use_storage=False)


def end_session():
    """Forget the signed-in session and every piece of UI state tied to it."""
    session = st.session_state.pop("session", None)
    if session is None:
        return
    suffix = f"_{session.scope}"
    for key in [k for k in st.session_state.keys() if str(k).endswith(suffix)]:
        del st.session_state[key]


def main():
    """Main application entry point."""
    components = get_components()

    if "session" not in st.session_state:
        render_auth_page(components)
        return

    flows = components.open_session(st.session_state.session)

    st.sidebar.title("💰 Pocketbook")
    if flows.session.is_guest:
        st.sidebar.caption("Guest mode")
    else:
        st.sidebar.caption(f"Signed in as {flows.session.email}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📒 My Finances", "📈 My Habits", "💹 Investments", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        end_session()
        st.rerun()

    render_finance_helper()

    try:
        if page == "📒 My Finances":
            render_finances_page(flows, components.settings.app.items_per_page)
        elif page == "📈 My Habits":
            render_habits_page(flows)
        elif page == "💹 Investments":
            render_investments_page(flows)
        elif page == "⚙️ Settings":
            render_settings_page(components)
    except StorageError as e:
        components.audit_logger.log(AuditEventBuilder.system_error(
            error_type=type(e).__name__,
            error_message=str(e),
            scope=flows.session.scope,
        ))
        st.error(f"Your data could not be read or saved: {e}")


def render_auth_page(components: AppComponents):
    """Log in, sign up or continue as guest."""
    st.title("💰 Pocketbook")

    login_tab, signup_tab = st.tabs(["Log in", "Sign up"])

    with login_tab:
        with st.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")
        if submitted:
            try:
                st.session_state.session = components.accounts.log_in(email, password)
                st.rerun()
            except AccountError as e:
                st.error(str(e))

    with signup_tab:
        with st.form("signup"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            confirm = st.text_input("Confirm password", type="password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            try:
                st.session_state.session = components.accounts.sign_up(email, password, confirm)
                st.rerun()
            except AccountError as e:
                st.error(str(e))
            except ValidationError:
                st.error("Please enter a valid email address")

    st.markdown("---")
    if st.button("Continue as guest"):
        st.session_state.session = components.accounts.guest()
        st.rerun()


def render_finances_page(flows: SessionFlows, items_per_page: int):
    """Transaction list, add form, CSV import and PDF export."""
    ledger = flows.ledger
    report_key = flows.session.state_key("report_pdf")
    page_key = flows.session.state_key("ledger_page")
    st.title("📒 My Finances")

    summary = ledger.summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Income", f"${summary.total_income:,.2f}")
    col2.metric("Total Expenses", f"${summary.total_expenses:,.2f}")
    col3.metric("Balance", f"${summary.balance:,.2f}")

    with st.expander("➕ Add Transaction"):
        transaction_type = st.radio(
            "Type",
            options=list(TransactionType),
            format_func=lambda t: t.value.title(),
            horizontal=True,
        )
        with st.form("add_transaction", clear_on_submit=True):
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
            category = st.selectbox(
                "Category",
                options=categories_for(transaction_type),
                format_func=lambda c: c.value,
            )
            transaction_date = st.date_input("Date", value=date.today())
            description = st.text_input("Description")
            is_recurring = st.checkbox("Recurring")
            submitted = st.form_submit_button("Add", type="primary")
        if submitted:
            try:
                ledger.add_transaction(
                    transaction_type=transaction_type,
                    amount=Decimal(str(amount)),
                    category=category,
                    transaction_date=transaction_date,
                    description=description,
                    is_recurring=is_recurring,
                )
                st.success("Transaction added successfully")
                st.rerun()
            except ValidationError as e:
                st.error(f"Invalid transaction: {e.errors()[0]['msg']}")

    col1, col2 = st.columns(2)
    with col1:
        uploaded = st.file_uploader("Import CSV", type=["csv"])
        if uploaded is not None and st.button("📥 Import"):
            try:
                result = ledger.import_csv(uploaded, filename=uploaded.name)
                st.success(f"Imported {result.imported_count} transactions successfully")
                st.rerun()
            except NoValidTransactionsError:
                st.error("No valid transactions found in the CSV file")
            except CSVImportError:
                st.error("Failed to import transactions. Please check your CSV format.")
    with col2:
        if st.button("📄 Export PDF"):
            st.session_state[report_key] = ledger.export_pdf()
        if report_key in st.session_state:
            st.download_button(
                "⬇️ Download report",
                data=st.session_state[report_key],
                file_name="financial-report.pdf",
                mime="application/pdf",
            )

    st.markdown("---")

    col1, col2, col3 = st.columns([3, 1, 1])
    search = col1.text_input("Search", placeholder="Description or category")
    sort_key = col2.selectbox("Sort by", ["date", "amount"])
    descending = col3.selectbox("Order", ["Descending", "Ascending"]) == "Descending"
    page_number = st.session_state.get(page_key, 1)

    result = ledger.page(TransactionQuery(
        search=search,
        sort_key=sort_key,
        descending=descending,
        page=page_number,
        per_page=items_per_page,
    ))

    if not result.items:
        st.info("No transactions yet. Add one above or import a CSV file.")
        return

    for transaction in result.items:
        sign = "+" if transaction.is_income else "-"
        col1, col2, col3, col4 = st.columns([2, 4, 2, 1])
        col1.write(transaction.date.isoformat())
        col2.write(f"**{transaction.category.value}** {transaction.description}")
        col3.write(f"{sign}${transaction.amount:,.2f}" + (" 🔁" if transaction.is_recurring else ""))
        if col4.button("🗑️", key=f"delete_{transaction.id}"):
            ledger.delete_transaction(transaction.id)
            st.success("Transaction deleted successfully")
            st.rerun()

    col1, col2, col3 = st.columns([1, 2, 1])
    if col1.button("◀ Previous", disabled=not result.has_previous):
        st.session_state[page_key] = result.page - 1
        st.rerun()
    col2.markdown(f"Page {result.page} of {result.total_pages}")
    if col3.button("Next ▶", disabled=not result.has_next):
        st.session_state[page_key] = result.page + 1
        st.rerun()


def render_habits_page(flows: SessionFlows):
    """Budget settings, goals, trends and advice."""
    habits = flows.habits
    st.title("📈 My Habits")

    budget = habits.budget()
    with st.expander("⚙️ Budget Settings"):
        with st.form("budget"):
            monthly = st.number_input(
                "Monthly Budget",
                min_value=0.0,
                value=float(budget.monthly_limit),
                step=10.0,
            )
            limits = {}
            columns = st.columns(2)
            for index, category in enumerate(ExpenseCategory):
                limits[category] = columns[index % 2].number_input(
                    f"{category.value} Budget",
                    min_value=0.0,
                    value=float(budget.limit_for(category)),
                    step=10.0,
                )
            if st.form_submit_button("Save budget", type="primary"):
                habits.update_budget(Budget(
                    monthly_limit=Decimal(str(monthly)),
                    category_limits={c: Decimal(str(v)) for c, v in limits.items()},
                ))
                st.success("Budget updated successfully")
                st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Spending Trends")
        trend = habits.spending_trend()
        if trend:
            st.line_chart(
                {
                    "Month": list(trend.keys()),
                    "Monthly Spending": [float(total) for total in trend.values()],
                },
                x="Month",
                y="Monthly Spending",
            )
        else:
            st.info("No expenses recorded yet.")

    with col2:
        st.subheader("Budget Goals")
        for item in habits.progress():
            label = "Overall" if item.category is None else item.category.value
            st.write(f"{label}: ${item.spent:,.2f} / ${item.limit:,.2f}")
            st.progress(min(item.percentage, 100.0) / 100)

    st.subheader("Smart Advice")
    advice = habits.advice()
    if not advice:
        st.write("You're doing great! Keep maintaining your current spending habits.")
    for item in advice:
        st.markdown(
            f'<div class="{ADVICE_STYLES[item.type]}">{item.message}</div>',
            unsafe_allow_html=True,
        )


def render_investments_page(flows: SessionFlows):
    """Portfolio list with add, revalue and delete."""
    investments = flows.investments
    st.title("💹 Investments")

    invested, current = investments.totals()
    col1, col2 = st.columns(2)
    col1.metric("Total Invested", f"${invested:,.2f}")
    col2.metric("Current Value", f"${current:,.2f}", delta=f"{current - invested:,.2f}")

    with st.expander("➕ Add Investment"):
        with st.form("add_investment", clear_on_submit=True):
            investment_type = st.selectbox(
                "Type",
                options=list(InvestmentType),
                format_func=lambda t: t.label,
            )
            name = st.text_input("Name")
            amount = st.number_input("Amount Invested", min_value=0.0, step=0.01)
            current_value = st.number_input("Current Value", min_value=0.0, step=0.01)
            purchase_date = st.date_input("Purchase Date", value=date.today())
            submitted = st.form_submit_button("Add", type="primary")
        if submitted:
            try:
                investments.add_investment(
                    investment_type=investment_type,
                    name=name,
                    amount=Decimal(str(amount)),
                    current_value=Decimal(str(current_value)),
                    purchase_date=purchase_date,
                )
                st.success("Investment added successfully")
                st.rerun()
            except ValidationError as e:
                st.error(f"Invalid investment: {e.errors()[0]['msg']}")

    for investment in investments.investments():
        with st.container(border=True):
            col1, col2, col3 = st.columns([3, 2, 2])
            col1.markdown(f"**{investment.name}** · {investment.type.label}")
            col1.caption(f"Purchased {investment.purchase_date.isoformat()}")
            col2.write(f"Invested ${investment.amount:,.2f}")
            col2.write(f"Now ${investment.current_value:,.2f}")
            col3.write(f"Return ${investment.return_value:,.2f} ({investment.return_percentage}%)")

            new_value = col3.number_input(
                "New value",
                min_value=0.0,
                value=float(investment.current_value),
                key=f"value_{investment.id}",
            )
            if col3.button("Update value", key=f"update_{investment.id}"):
                try:
                    investments.update_value(investment.id, Decimal(str(new_value)))
                    st.success("Investment value updated successfully")
                    st.rerun()
                except NotFoundError as e:
                    st.error(str(e))
            if col3.button("🗑️ Delete", key=f"delete_{investment.id}"):
                investments.delete_investment(investment.id)
                st.success("Investment deleted successfully")
                st.rerun()


def render_finance_helper():
    """FAQ lookup in the sidebar."""
    st.sidebar.markdown("### ❓ Finance Helper")
    question = st.sidebar.text_input("Ask a question", key="helper_question")
    if question:
        st.sidebar.info(answer(question))


def render_settings_page(components: AppComponents):
    """Configuration status and recent activity."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration")
    status = validate_all_settings()
    for key in ("storage", "budget", "report", "app"):
        if status.get(key, False):
            st.success(f"✅ {key.title()} settings loaded")
        else:
            st.error(f"❌ {key.title()} - {status.get(f'{key}_error', 'Not configured')}")

    st.markdown(f"Data directory: `{components.settings.storage.data_dir}`")

    st.markdown("### Recent Activity")
    events = components.audit_logger.recent_events(limit=20)
    if not events:
        st.info("No activity recorded yet.")
    for event in events:
        st.write(f"{event['timestamp']} · {event['description']}")


if __name__ == "__main__":
    main()
