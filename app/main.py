import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from finsync import config, month_key
from finsync.domain import CATEGORIES, TargetDraft, TransactionDraft, TxType
from finsync.errors import FinSyncError
from finsync.evaluator import classify
from finsync.money import expenses_by_category, progress
from finsync.session import SessionContext

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Finance Tracker", layout="wide")

CUR = config.CURRENCY_SYMBOL


def run(coro):
    """Run one session coroutine; failures are already recorded in session.error."""
    try:
        return asyncio.run(coro)
    except FinSyncError:
        return None


if "finance" not in st.session_state:
    user_id = os.getenv("FINSYNC_USER_ID", "demo")
    st.session_state.finance = SessionContext.from_config(user_id)
    run(st.session_state.finance.initialize())

session: SessionContext = st.session_state.finance

st.sidebar.markdown("### 📅 Month")
c_prev, c_label, c_next = st.sidebar.columns([1, 3, 1])
if c_prev.button("◀"):
    run(session.previous_month())
if c_next.button("▶", disabled=session.is_month_locked(*month_key.shift(session.current_month, session.current_year, 1))):
    run(session.next_month())
c_label.markdown(f"**{session.current_month_name} {session.current_year}**")
if st.sidebar.button("🔄 Reload"):
    run(session.reload())

unread = session.unread_count
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "🎯 Targets", f"🔔 Notifications ({unread})"],
)

if session.error:
    st.error(session.error)

if menu == "🏠 Dashboard":
    s = session.summary
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Income", f"{CUR}{s.total_income:,.2f}")
    k2.metric("Expenses", f"{CUR}{s.total_expenses:,.2f}")
    k3.metric("Available Balance", f"{CUR}{s.available_balance:,.2f}")
    k4.metric("Net Worth", f"{CUR}{s.net_worth:,.2f}")

    by_cat = expenses_by_category(session.transactions)
    if by_cat:
        df_cat = pd.DataFrame({"Category": list(by_cat), "Total": list(by_cat.values())})
        fig_cat = px.pie(df_cat, values="Total", names="Category", title="Expenses by Category")
        fig_cat.update_layout(height=350)
        st.plotly_chart(fig_cat, use_container_width=True)
    else:
        st.info("No expenses this month.")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    locked = session.is_month_locked(session.current_month, session.current_year)
    with st.expander("➕ Add transaction", expanded=False):
        if locked:
            st.caption("Future months are locked")
        else:
            kind = st.radio("Type", [TxType.INCOME.value, TxType.EXPENSE.value], horizontal=True)
            with st.form("add_tx"):
                amount = st.number_input("Amount", min_value=0.0, step=10.0)
                category = st.selectbox("Category", CATEGORIES[TxType(kind)])
                day = st.date_input("Date", value=date.today())
                note = st.text_input("Description")
                if st.form_submit_button("Save"):
                    draft = TransactionDraft(type=kind, amount=amount, category=category, date=day, description=note)
                    if run(session.add_transaction(draft)) is not None:
                        st.success("Transaction added")

    rows = [t.to_dict() for t in session.transactions]
    if rows:
        df = pd.DataFrame(rows)[["id", "date", "type", "category", "amount", "description"]]
        df = df.sort_values("date", ascending=False)
        st.dataframe(df.drop(columns=["id"]), use_container_width=True)
        to_delete = st.selectbox(
            "Delete transaction",
            options=[""] + df["id"].tolist(),
            format_func=lambda i: "" if not i else
            f"{df.loc[df['id'] == i, 'date'].iloc[0]} · {df.loc[df['id'] == i, 'category'].iloc[0]}",
        )
        if to_delete and st.button("🗑 Delete"):
            run(session.delete_transaction(to_delete))
            st.rerun()
    else:
        st.info("No transactions for this month.")

elif menu == "🎯 Targets":
    st.title("🎯 Targets")

    with st.form("add_target"):
        kind = st.selectbox("Type", [TxType.INCOME.value, TxType.EXPENSE.value])
        category = st.selectbox("Category", sorted(set(CATEGORIES[TxType.INCOME] + CATEGORIES[TxType.EXPENSE])))
        amount = st.number_input("Target amount", min_value=0.0, step=100.0)
        if st.form_submit_button("Create target"):
            run(session.add_target(TargetDraft(type=kind, category=category, target_amount=amount)))

    for target in session.targets:
        pct = progress(target)
        band = classify(target)
        st.markdown(f"**{target.category}** ({target.type.value}) · {band.value}")
        st.progress(int(pct), text=f"{CUR}{target.current_amount:,.2f} / {CUR}{target.target_amount:,.2f} ({pct:.1f}%)")
        if st.button("Delete", key=f"del_{target.id}"):
            run(session.delete_target(target.id))
            st.rerun()

else:
    st.title("🔔 Notifications")
    if st.button("Clear read notifications", disabled=not any(n.is_read for n in session.notifications)):
        run(session.clear_read_notifications())
        st.rerun()

    if not session.notifications:
        st.info("No notifications to display")
    for n in session.notifications:
        box = {"success": st.success, "warning": st.warning, "error": st.error}.get(n.type.value, st.info)
        box(f"**{n.title}**  \n{n.message}")
        if not n.is_read and st.button("Mark as read", key=f"read_{n.id}"):
            run(session.mark_notification_as_read(n.id))
            st.rerun()
