"""
Streamlit Frontend for the Society Manager

This is the screen the committee treasurer uses day to day.

Four views, picked from the sidebar:
1. Home    - collected, spent, balance and the expense breakdown
2. Members - residents list and the "add member" form
3. Money   - record payments (with printable receipts) and log expenses
4. Notice  - print a formal demand notice for a member

The UI only renders and collects input. Every add goes through the
SocietyController, which persists first and then updates what is shown.
"""

import asyncio
from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from society.aggregation import (
    chart_color,
    members_without_payment,
    newest_first,
    payments_for_month,
    total_of,
)
from society.config import get_settings, validate_all_settings
from society.controller import SocietyController, create_app_components
from society.models import (
    ExpenseCategory,
    NewExpenseInput,
    NewMemberInput,
    NewPaymentInput,
)
from society.services.documents import (
    DocumentRenderError,
    DocumentRenderer,
    format_amount,
    format_short_date,
    notice_filename,
    receipt_filename,
)
from society.services.image import PhotoError, PhotoService
from society.services.storage import StorageError
from society.validation import RecordValidator, ValidationError


st.set_page_config(
    page_title="Tulsi Apt Manager",
    page_icon="🏢",
    layout="centered",
    initial_sidebar_state="expanded",
)

CURRENCY = get_settings().society.currency_symbol


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount) -> str:
    return f"{CURRENCY}{format_amount(amount)}"


def show_validation_error(error: ValidationError) -> None:
    st.error(RecordValidator().get_user_friendly_summary(error))


def ensure_loaded(controller: SocietyController) -> bool:
    """Load records once per process. Returns False if loading failed."""
    if controller.is_loaded:
        return True
    with st.spinner("Loading society records..."):
        try:
            run_async(controller.initialize())
        except StorageError as e:
            st.toast(f"Failed to load data: {e}", icon="⚠️")
            return False
    return True


def main():
    """Main application entry point."""
    controller, renderer, photos = get_components()

    st.sidebar.title("🏢 Tulsi Apt Manager")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Home", "👥 Members", "💰 Money", "📄 Notice"],
        index=0,
    )

    if not ensure_loaded(controller):
        st.error("Could not open the society records. Check the storage settings.")
        render_settings_status()
        if st.button("🔄 Retry"):
            st.rerun()
        return

    summary = controller.summary()
    st.sidebar.markdown("---")
    st.sidebar.metric("Balance", money(summary.balance))

    if page == "🏠 Home":
        render_dashboard_page(controller)
    elif page == "👥 Members":
        render_members_page(controller, photos)
    elif page == "💰 Money":
        render_money_page(controller, renderer)
    elif page == "📄 Notice":
        render_notice_page(controller, renderer)


def render_dashboard_page(controller: SocietyController):
    """Render the home dashboard."""
    st.title("🏠 Home")
    summary = controller.summary()

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(summary.total_collected))
    col2.metric("Expense", money(summary.total_expenses))
    col3.metric("Balance", money(summary.balance))

    st.subheader("Expense Breakdown")
    if summary.chart_slices:
        chart_data = pd.DataFrame(
            [{"category": s.name, "amount": float(s.value)} for s in summary.chart_slices]
        )
        fig = px.pie(
            chart_data,
            values="amount",
            names="category",
            hole=0.6,
            color="category",
            color_discrete_map={
                s.name: chart_color(s) for s in summary.chart_slices
            },
        )
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No expenses logged yet.")

    this_month = date.today().strftime("%Y-%m")
    collected = total_of(payments_for_month(controller.payments, this_month))
    st.metric(f"Collected for {this_month}", money(collected))

    unpaid = members_without_payment(controller.members, controller.payments, this_month)
    st.info(
        f"⚠️ **Quick Action:** {len(unpaid)} of {summary.member_count} members have "
        f"no payment recorded for {this_month}. Use the 📄 Notice page to generate "
        "maintenance notices for defaulters."
    )


def render_members_page(controller: SocietyController, photos: PhotoService):
    """Render the residents list and the add-member form."""
    st.title(f"👥 Residents ({len(controller.members)})")

    with st.expander("➕ Add New Member"):
        with st.form("add_member_form", clear_on_submit=True):
            name = st.text_input("Full Name *")
            flat_number = st.text_input("Flat Number *")
            mobile = st.text_input("Mobile Number")
            photo = st.file_uploader(
                "Photo (optional)",
                type=["jpg", "jpeg", "png", "webp"],
            )
            submitted = st.form_submit_button("Save Member", type="primary")

        if submitted:
            try:
                photo_data = photos.encode(photo.getvalue(), photo.type) if photo else None
                run_async(controller.record_member(NewMemberInput(
                    name=name,
                    flat_number=flat_number,
                    mobile=mobile,
                    photo_base64=photo_data,
                )))
                st.toast("Member Added Successfully", icon="✅")
                st.rerun()
            except PhotoError as e:
                st.error(f"📷 {e}")
            except ValidationError as e:
                show_validation_error(e)
            except StorageError as e:
                st.toast(f"Failed to save member: {e}", icon="⚠️")

    if not controller.members:
        st.info("No members found. Add one!")
        return

    for member in newest_first(controller.members):
        col1, col2 = st.columns([1, 5])
        with col1:
            if member.photo_base64:
                st.image(photos.decode(member.photo_base64), width=56)
            else:
                st.markdown("### 👤")
        with col2:
            st.markdown(f"**{member.name}**  \nFlat: {member.flat_number}")
            if member.mobile:
                st.markdown(f"📞 [{member.mobile}](tel:{member.mobile})")


def render_money_page(controller: SocietyController, renderer: DocumentRenderer):
    """Render payments and expenses."""
    st.title("💰 Money")
    tab1, tab2 = st.tabs(["Collection", "Expenses"])

    with tab1:
        render_payment_form(controller)
        st.subheader("Recent Transactions")
        if not controller.payments:
            st.info("No payments recorded yet.")
        for payment in newest_first(controller.payments):
            col1, col2, col3 = st.columns([4, 2, 2])
            with col1:
                st.markdown(
                    f"**{controller.display_name(payment)}**  \n"
                    f"{payment.month} • {format_short_date(payment.date)}"
                )
            with col2:
                st.markdown(f":green[+ {money(payment.amount)}]")
            with col3:
                try:
                    st.download_button(
                        "🖨️ Receipt",
                        data=renderer.render_receipt(payment),
                        file_name=receipt_filename(payment),
                        mime="application/pdf",
                        key=f"receipt_{payment.id}",
                    )
                except DocumentRenderError as e:
                    st.toast(str(e), icon="⚠️")

    with tab2:
        render_expense_form(controller)
        st.subheader("Expenses Log")
        if not controller.expenses:
            st.info("No expenses logged yet.")
        for expense in newest_first(controller.expenses):
            col1, col2 = st.columns([5, 2])
            with col1:
                st.markdown(f"**{expense.title}**  \n`{expense.category.value}`")
            with col2:
                st.markdown(f":red[- {money(expense.amount)}]")


def render_payment_form(controller: SocietyController):
    """Render the record-payment form."""
    with st.expander("➕ Log Payment"):
        members = list(controller.members)
        with st.form("add_payment_form", clear_on_submit=True):
            member = st.selectbox(
                "Member *",
                options=[None] + members,
                format_func=lambda m: "Select Member" if m is None else f"{m.name} - {m.flat_number}",
            )
            month = st.text_input("Month * (YYYY-MM)", value=date.today().strftime("%Y-%m"))
            amount = st.text_input(f"Amount ({CURRENCY}) *")
            note = st.text_input("Note")
            submitted = st.form_submit_button("Record Payment", type="primary")

        if submitted:
            try:
                run_async(controller.record_payment(NewPaymentInput(
                    member_id=member.id if member else None,
                    month=month,
                    amount=amount,
                    note=note,
                )))
                st.toast("Payment Recorded", icon="✅")
                st.rerun()
            except ValidationError as e:
                show_validation_error(e)
            except StorageError as e:
                st.toast(f"Failed to record payment: {e}", icon="⚠️")


def render_expense_form(controller: SocietyController):
    """Render the log-expense form."""
    with st.expander("➕ Add Expense"):
        with st.form("add_expense_form", clear_on_submit=True):
            title = st.text_input("Expense Title * (e.g. Pump Repair)")
            category = st.selectbox(
                "Category",
                options=[c.value for c in ExpenseCategory],
                index=[c for c in ExpenseCategory].index(ExpenseCategory.OTHER),
            )
            amount = st.text_input(f"Amount ({CURRENCY}) *")
            submitted = st.form_submit_button("Log Expense", type="primary")

        if submitted:
            try:
                run_async(controller.record_expense(NewExpenseInput(
                    title=title,
                    amount=amount,
                    category=category,
                )))
                st.toast("Expense Logged", icon="✅")
                st.rerun()
            except ValidationError as e:
                show_validation_error(e)
            except StorageError as e:
                st.toast(f"Failed to log expense: {e}", icon="⚠️")


def render_notice_page(controller: SocietyController, renderer: DocumentRenderer):
    """Render the legal notice generator."""
    st.title("📄 Notice")
    st.error(
        "**⚠️ Legal Section**  \n"
        "Generate formal demand notices based on the Apartment Ownership Act."
    )

    if not controller.members:
        st.info("No members available to generate notices.")
        return

    member = st.selectbox(
        "Select Defaulter Member",
        options=[None] + list(controller.members),
        format_func=lambda m: "-- Choose Member --" if m is None else f"{m.name} ({m.flat_number})",
    )
    if member is None:
        return

    try:
        history = run_async(controller.payments_for_member(member.id))
    except StorageError as e:
        st.toast(f"Failed to load payment history: {e}", icon="⚠️")
        history = None

    if history is None:
        st.caption("Payment history is unavailable right now.")
    elif history:
        last = history[0]
        st.caption(f"Last payment: {last.month}, {money(last.amount)}")
    else:
        st.caption("No payments on record for this member.")

    try:
        st.download_button(
            "📄 Generate Legal Notice",
            data=renderer.render_legal_notice(member),
            file_name=notice_filename(member),
            mime="application/pdf",
            type="primary",
        )
    except DocumentRenderError as e:
        st.toast(str(e), icon="⚠️")


def render_settings_status():
    """Show which settings groups failed to load."""
    status = validate_all_settings()
    for name in ("storage", "society"):
        if not status.get(name, False):
            error = status.get(f"{name}_error", "Not configured")
            st.error(f"❌ {name.title()} settings - {error}")


if __name__ == "__main__":
    main()
