import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from dataclasses import asdict

import streamlit as st
import pandas as pd
import numpy as np
import plotly.express as px
import plotly.graph_objects as go

from savings import config
from savings.domain import DEPOSIT, WITHDRAWAL, GOAL_CONTRIBUTION
from savings.formatting import (
    format_currency,
    mask_balance,
    parse_amount,
    format_card_number,
    format_expiry,
    validate_card,
)
from savings.ledger import Ledger
from savings.lazy import iter_transactions, by_kind, lazy_top_goals
from savings.services import AccountRegistry, LedgerService, ReportService
from savings.transforms import display_progress, signed_effect

config.configure_logging()
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Savings", layout="wide")


if "registry" not in st.session_state:
    registry = AccountRegistry()
    registry.add(Ledger.from_seed())
    st.session_state.registry = registry
    st.session_state.service = LedgerService(registry)
    st.session_state.notices = []
    st.session_state.balance_visible = True

registry: AccountRegistry = st.session_state.registry
service: LedgerService = st.session_state.service
account_id = registry.ids()[0]
ledger = registry.get(account_id)


def show_result(res: dict) -> None:
    if res["ok"]:
        for msg in res["notifications"]:
            st.session_state.notices.append(("success", msg))
        for msg in res["alerts"]:
            st.session_state.notices.append(("warning", msg))
    else:
        st.session_state.notices.append(("error", res["error"]["message"]))


def tx_to_df(tx_list) -> pd.DataFrame:
    rows = [
        {**asdict(t), "date": pd.to_datetime(t.ts, errors="coerce"), "effect": signed_effect(t)}
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["id", "kind", "amount", "fee", "date", "description", "effect"])


st.sidebar.markdown(f"### 👤 {ledger.account.owner}")
st.session_state.balance_visible = st.sidebar.toggle("Show balance", value=st.session_state.balance_visible)
menu = st.sidebar.radio("Menu", ["🏠 Home", "🎯 Goals", "🧾 History", "💳 Cards"])

for kind, msg in st.session_state.notices:
    getattr(st, kind)(msg)
st.session_state.notices = []

report = ReportService().account_report(ledger)["result"]

if menu == "🏠 Home":
    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Savings", mask_balance(report["balance"], st.session_state.balance_visible))
        if report["fee_active"]:
            st.caption(f"✅ Monthly fee: {format_currency(config.MONTHLY_FEE)} (Active)")
        else:
            st.caption(f"⚠️ Below {format_currency(config.FEE_MINIMUM_BALANCE)} minimum")
        if report["pending_fees"] > 0:
            st.caption(f"Pending fees: {format_currency(report['pending_fees'])}")
    with k2:
        st.metric("Saved in Goals", format_currency(report["total_saved"]))
    with k3:
        st.metric("Fees Paid", format_currency(report["total_fees"]))

    st.header("⚡ Quick Actions")
    c_add, c_withdraw = st.columns(2)
    with c_add:
        with st.form("add_money", clear_on_submit=True):
            st.subheader("Add Money")
            st.caption(f"Minimum amount: {format_currency(config.MIN_DEPOSIT)}")
            quick = st.radio("Quick amount", ["Custom", "1,000", "5,000", "10,000", "25,000"], horizontal=True)
            text = st.text_input("Amount", placeholder="0")
            method = st.selectbox(
                "Method",
                list(config.DEPOSIT_METHODS),
                format_func=lambda m: config.DEPOSIT_METHODS[m],
            )
            if st.form_submit_button("Add Money"):
                amount = parse_amount(text if quick == "Custom" else quick)
                show_result(service.deposit(account_id, amount, method))
                st.rerun()

    with c_withdraw:
        with st.form("withdraw", clear_on_submit=True):
            st.subheader("Withdraw")
            text = st.text_input("Amount", placeholder="0", key="withdraw_amount")
            amount = parse_amount(text)
            st.caption(f"Processing fee: {format_currency(config.WITHDRAWAL_FEE)}")
            if amount:
                st.caption(f"Total deduction: {format_currency(amount + config.WITHDRAWAL_FEE)}")
            st.caption(f"Available balance: {format_currency(ledger.balance)}")
            if st.form_submit_button("Withdraw"):
                show_result(service.withdraw(account_id, amount))
                st.rerun()

    st.header("🧾 Recent Transactions")
    recent = report["recent"]
    if recent:
        for t in recent:
            sign = "+" if t["kind"] == DEPOSIT else "-"
            fee = f" · Fee: {format_currency(t['fee'])}" if t["fee"] else ""
            st.markdown(f"**{t['description']}** · {t['ts'][:10]} · {sign}{format_currency(t['amount'])}{fee}")
    else:
        st.info("No transactions yet.")

elif menu == "🎯 Goals":
    st.title("🎯 Savings Goals")
    for goal in ledger.goals:
        pct = display_progress(goal)
        with st.container(border=True):
            st.subheader(f"{goal.name} · {goal.frequency}")
            st.caption(f"{format_currency(goal.current)} of {format_currency(goal.target)}")
            st.progress(pct / 100, text=f"{pct}%")
            with st.form(f"contribute_{goal.id}", clear_on_submit=True):
                text = st.text_input("Amount", placeholder="0", key=f"goal_amount_{goal.id}")
                st.caption(f"Available balance: {format_currency(ledger.balance)}")
                if st.form_submit_button("Contribute"):
                    show_result(service.contribute(account_id, goal.id, parse_amount(text)))
                    st.rerun()

    top = list(lazy_top_goals(ledger.goals, k=len(ledger.goals)))
    if top:
        df_goals = pd.DataFrame(top, columns=["Goal", "Progress"])
        fig = px.bar(df_goals, x="Goal", y="Progress", range_y=[0, 100], title="Goal Progress (%)")
        st.plotly_chart(fig, use_container_width=True)

elif menu == "🧾 History":
    st.title("🧾 Transaction History")
    df = tx_to_df(ledger.transactions)
    if df.empty:
        st.info("No transactions to display.")
    else:
        # balance after each transaction, starting from the opening balance
        df["balance"] = ledger.state.opening_balance + np.cumsum(df["effect"].to_numpy())
        fig_bal = go.Figure()
        fig_bal.add_trace(go.Scatter(x=df["date"], y=df["balance"], mode="lines+markers", name="Balance"))
        fig_bal.update_layout(margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_bal, use_container_width=True)

        kinds = st.multiselect("Kind", [DEPOSIT, WITHDRAWAL, GOAL_CONTRIBUTION], default=[DEPOSIT, WITHDRAWAL, GOAL_CONTRIBUTION])
        selected = [t for kind in kinds for t in iter_transactions(ledger.transactions, by_kind(kind))]
        view = tx_to_df(sorted(selected, key=lambda t: int(t.id) if str(t.id).isdigit() else 0, reverse=True))
        view["amount"] = view["amount"].map(format_currency)
        st.dataframe(view.drop(columns=["effect"]), use_container_width=True)
        st.download_button("⬇ Download CSV", view.to_csv(index=False), file_name="transactions.csv")

    st.caption("Ledger consistent ✅" if ledger.verify() else "Ledger mismatch ❌")

elif menu == "💳 Cards":
    st.title("💳 Add Card")
    with st.form("add_card", clear_on_submit=True):
        number = format_card_number(st.text_input("Card number", placeholder="1234 5678 9012 3456"))
        expiry = format_expiry(st.text_input("Expiry", placeholder="MM/YY"))
        cvv = st.text_input("CVV", max_chars=3, type="password")
        name = st.text_input("Cardholder name")
        if st.form_submit_button("Add Card"):
            checked = validate_card(number, expiry, cvv, name)
            if checked.is_right():
                card = checked.get_or_else({})
                logger.info("card ending %s added", card["last_four"])
                st.session_state.notices.append(("success", f"Card ending in {card['last_four']} added successfully!"))
            else:
                st.session_state.notices.append(("error", checked.get_error()))
            st.rerun()
