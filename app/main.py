import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging

import pandas as pd
import plotly.express as px
import streamlit as st

from spendwise.config import settings
from spendwise.domain import Category, ConverterState
from spendwise.filters import by_category, by_date_range
from spendwise.formatting import CURRENCY_CODE, format_inr, format_percent
from spendwise.functional import validate_conversion
from spendwise.lazy import iter_expenses, ranked_categories
from spendwise.ledger import LedgerService
from spendwise.rates import ConversionService, RateFetchError, flag_url
from spendwise.store import JsonFileStore, consume_amount_to_convert
from spendwise.transforms import totals_by_month

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

st.set_page_config(page_title=settings.APP_NAME, layout="wide")

TRACKER_PAGE = "💸 Expense Tracker"
CONVERTER_PAGE = "💱 Currency Converter"

if "store" not in st.session_state:
    st.session_state.store = JsonFileStore(settings.DATA_FILE)
if "ledger" not in st.session_state:
    st.session_state.ledger = LedgerService(st.session_state.store)
if "converter" not in st.session_state:
    st.session_state.converter = ConversionService()

store = st.session_state.store
ledger: LedgerService = st.session_state.ledger
converter: ConversionService = st.session_state.converter

# navigation requested by a button on the previous run
if "goto" in st.session_state:
    st.session_state.menu = st.session_state.pop("goto")
elif "menu" not in st.session_state:
    st.session_state.menu = CONVERTER_PAGE if st.query_params.get("page") == "converter" else TRACKER_PAGE

menu = st.sidebar.radio("Menu", [TRACKER_PAGE, CONVERTER_PAGE], key="menu")


def show_notices():
    for notice in ledger.notices:
        st.toast(notice["message"], icon="✅" if notice["level"] == "success" else "⚠️")
    ledger.notices = []


@st.dialog("Reset all data?")
def confirm_reset():
    st.write("This deletes every expense and your monthly income. It can't be undone.")
    yes_col, no_col = st.columns(2)
    if yes_col.button("Yes, reset everything", type="primary", key="btn_confirm_reset"):
        ledger.reset()
        st.rerun()
    if no_col.button("Cancel", key="btn_cancel_reset"):
        st.rerun()


if menu == TRACKER_PAGE:
    st.title("💸 Expense Tracker")
    show_notices()
    summary = ledger.summary()

    if summary.budget_warning:
        st.error(summary.budget_warning)

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Spent", format_inr(summary.total))
    with k2:
        st.metric("This Month", format_inr(summary.monthly_total))
    with k3:
        if summary.highest_expense is not None:
            st.metric("Highest Expense", format_inr(summary.highest_expense.amount))
            st.caption(summary.highest_expense.category.label)
        else:
            st.metric("Highest Expense", format_inr(0))
    with k4:
        if summary.top_category is not None:
            st.metric("Top Category", summary.top_category.label)
            st.caption(f"{format_percent(summary.top_category_share)} of total")
        else:
            st.metric("Top Category", "-")

    st.subheader("💼 Monthly Income")
    i1, i2, i3 = st.columns(3)
    with i1:
        st.metric("Income", format_inr(ledger.income))
    with i2:
        st.metric("Remaining", format_inr(summary.remaining) if summary.remaining is not None else "-")
    with i3:
        st.metric("Savings Rate", format_percent(summary.savings_rate) if summary.savings_rate is not None else "-")

    with st.form("income_form", clear_on_submit=True):
        income_text = st.text_input(f"Monthly income ({CURRENCY_CODE})")
        if st.form_submit_button("Save Income"):
            result = ledger.set_income(income_text)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.rerun()

    st.divider()

    st.subheader("➕ Add Expense")
    with st.form("expense_form", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 2, 2])
        with col1:
            name = st.text_input("Expense name")
        with col2:
            amount_text = st.text_input(f"Amount ({CURRENCY_CODE})")
        with col3:
            category = st.selectbox("Category", [c.value for c in Category],
                                    format_func=lambda v: Category(v).label)
        if st.form_submit_button("Add Expense"):
            result = ledger.add_expense(name, amount_text, category)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.rerun()

    chart_col, insight_col = st.columns([3, 2])
    with chart_col:
        st.subheader("📊 Spending by Category")
        if summary.category_totals:
            ranked = list(ranked_categories(summary.category_totals))
            fig_cat = px.pie(
                names=[c.label for c, _ in ranked],
                values=[total for _, total in ranked],
                hole=0.5,
                template="plotly_dark",
            )
            fig_cat.update_layout(margin=dict(t=10, b=10, l=10, r=10), legend=dict(orientation="v"))
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("Add an expense to see the breakdown.")

        monthly = totals_by_month(ledger.expenses)
        if len(monthly) > 1:
            fig_ts = px.bar(
                x=list(monthly.keys()),
                y=list(monthly.values()),
                labels={"x": "Month", "y": f"Spent ({CURRENCY_CODE})"},
                title="Monthly Spending",
                template="plotly_dark",
            )
            st.plotly_chart(fig_ts, use_container_width=True)

    with insight_col:
        st.subheader("🔎 Spending Insights")
        if summary.insights:
            for insight in summary.insights:
                st.markdown(insight)
        else:
            st.caption("Insights appear once you add expenses.")

    st.divider()

    st.subheader("🧾 Expenses")
    f1, f2 = st.columns(2)
    with f1:
        selected = st.multiselect("Category", [c.value for c in Category], default=[],
                                  format_func=lambda v: Category(v).label)
    with f2:
        date_range = st.date_input("Date Range", value=(), key="expense_date_range")

    filters = [by_category(Category(v)) for v in selected]
    visible = ledger.expenses_newest_first()
    if filters:
        visible = tuple(iter_expenses(visible, lambda e: any(f(e) for f in filters)))
    if len(date_range) == 2:
        visible = tuple(iter_expenses(visible, by_date_range(date_range[0], date_range[1])))

    if visible:
        table = pd.DataFrame([
            {"Date": e.date, "Name": e.name, "Amount": format_inr(e.amount), "Category": e.category.label}
            for e in visible
        ])
        st.dataframe(table, use_container_width=True, hide_index=True)

        to_delete = st.selectbox(
            "Delete an expense",
            options=[e.id for e in visible],
            format_func=lambda i: next(f"{e.date} · {e.name} · {format_inr(e.amount)}" for e in visible if e.id == i),
            key="delete_choice",
        )
        if st.button("🗑️ Delete", key="btn_delete_expense"):
            ledger.delete_expense(to_delete)
            st.rerun()
    else:
        st.info("No expenses to display.")

    st.divider()
    a1, a2 = st.columns(2)
    with a1:
        if st.button("💱 Convert total to another currency", key="btn_convert_total"):
            _, currency = ledger.prepare_conversion_handoff()
            st.query_params["page"] = "converter"
            st.query_params["from"] = currency
            st.session_state.goto = CONVERTER_PAGE
            st.rerun()
    with a2:
        if st.button("♻️ Reset All Data", key="btn_reset"):
            confirm_reset()

elif menu == CONVERTER_PAGE:
    st.title("💱 Currency Converter")

    if "currencies" not in st.session_state:
        try:
            st.session_state.currencies = converter.provider.list_currencies()
        except RateFetchError as exc:
            st.error(exc.message)
            st.stop()
    currencies = st.session_state.currencies

    if "conv_from" not in st.session_state:
        st.session_state.conv_from = settings.DEFAULT_FROM_CURRENCY
        st.session_state.conv_to = settings.DEFAULT_TO_CURRENCY
        st.session_state.conv_amount = ""

    handed_over = consume_amount_to_convert(store)
    if handed_over is not None:
        st.session_state.conv_amount = f"{handed_over:.2f}"
    requested_from = st.query_params.get("from")
    if requested_from in currencies:
        st.session_state.conv_from = requested_from
        del st.query_params["from"]

    def do_swap():
        state = ConverterState(
            from_currency=st.session_state.conv_from,
            to_currency=st.session_state.conv_to,
            amount=st.session_state.conv_amount,
        )
        try:
            swapped, result = asyncio.run(converter.swap(state))
        except RateFetchError as exc:
            swapped, result = ConverterState(state.to_currency, state.from_currency, state.amount), None
            st.session_state.conv_error = exc.message
        st.session_state.conv_from = swapped.from_currency
        st.session_state.conv_to = swapped.to_currency
        if result is not None:
            st.session_state.conv_result = result
            st.session_state.pop("conv_error", None)

    c1, c2, c3 = st.columns([5, 1, 5])
    with c1:
        st.image(flag_url(st.session_state.conv_from), width=48)
        st.selectbox("From", currencies, key="conv_from")
    with c2:
        st.write("")
        st.button("⇄", key="btn_swap", on_click=do_swap, help="Swap currencies")
    with c3:
        st.image(flag_url(st.session_state.conv_to), width=48)
        st.selectbox("To", currencies, key="conv_to")

    st.text_input("Amount", key="conv_amount")

    if st.button("Get Exchange Rate", type="primary", key="btn_convert"):
        checked = validate_conversion(
            st.session_state.conv_amount, st.session_state.conv_from, st.session_state.conv_to
        )
        if checked.is_left():
            st.session_state.conv_error = checked.get_error()["message"]
            st.session_state.pop("conv_result", None)
        else:
            with st.spinner("Loading exchange rates..."):
                try:
                    result = asyncio.run(converter.convert(
                        checked.get_or_else(0.0), st.session_state.conv_from, st.session_state.conv_to
                    ))
                except RateFetchError as exc:
                    st.session_state.conv_error = exc.message
                    st.session_state.pop("conv_result", None)
                else:
                    if result is not None:
                        st.session_state.conv_result = result
                        st.session_state.pop("conv_error", None)

    if "conv_error" in st.session_state:
        st.error(st.session_state.conv_error)
    elif "conv_result" in st.session_state:
        result = st.session_state.conv_result
        with st.container(border=True):
            st.markdown("#### Exchange Rate & Conversion Result")
            st.write(result.rate_text)
            st.markdown(f"Converted Amount: **{result.converted_text} {result.to_currency}**")

    st.caption("Rates by exchangerate-api.com")
