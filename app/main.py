import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import date

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go
import plotly.express as px

from tracker.analytics import WindowPreset, investment_rollup, recent_investments
from tracker.budgets import budget_progress, unbudgeted_categories
from tracker.config import configure_logging, format_currency, format_signed, load_settings
from tracker.domain import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    BudgetStatus,
    TransactionKind,
)
from tracker.events import register_default_handlers
from tracker.export import export_filename, ledger_csv, summary_csv
from tracker.filters import (
    EXPORT_PRESETS,
    LIST_PRESETS,
    apply_filters,
    build_predicates,
    export_preset_cutoff,
    list_preset_cutoff,
    since,
    used_categories,
)
from tracker.functional import validate_transaction_input
from tracker.lazy import iter_transactions
from tracker.persistence import JsonFilePersistence
from tracker.services import ReportService, default_aggregators
from tracker.store import TransactionStore

settings = load_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Finance Tracker", layout="wide")


def money(amount: float) -> str:
    return format_currency(amount, settings.currency_symbol)


if "store" not in st.session_state:
    logger.info("Opening data directory %s", settings.data_dir)
    store = TransactionStore(persistence=JsonFilePersistence(settings.data_dir))
    register_default_handlers(store.bus)
    st.session_state.store = store.load()
    st.session_state.alerts = []
    st.session_state.editing_id = None

store: TransactionStore = st.session_state.store
today = date.today()


def tx_to_df(tx_list) -> pd.DataFrame:
    rows = [
        {
            "id": t.id,
            "date": pd.to_datetime(t.date),
            "type": t.kind.value,
            "category": t.category,
            "description": t.description,
            "amount": t.amount,
            "signed": t.signed_amount,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["id", "date", "type", "category", "description", "amount", "signed"])


def collect_alerts():
    for result in store.last_alerts:
        if result.get("alert"):
            st.session_state.alerts.append(result["alert"])


st.sidebar.markdown("### 💰 Finance Tracker")
menu = st.sidebar.radio(
    "Menu",
    ["🏠 Home", "🎯 Budgets", "📊 Analytics", "📈 Investments", "⬇ Export"]
)

totals_df = tx_to_df(store.list())
income_total = totals_df.loc[totals_df["type"] == "income", "amount"].sum()
expense_total = totals_df.loc[totals_df["type"] == "expense", "amount"].sum()
st.sidebar.metric("Net Worth", money(income_total - expense_total))
st.sidebar.caption(f"{len(store)} transactions")

if st.session_state.alerts:
    for alert in reversed(st.session_state.alerts[-5:]):
        st.warning(f"⚠️ {alert}")
    if st.button("Clear alerts"):
        st.session_state.alerts = []
        st.rerun()


if menu == "🏠 Home":
    st.title("🏠 Transactions")

    editing = None
    if st.session_state.editing_id:
        editing = store.find(st.session_state.editing_id).get_or_else(None)

    kind_options = [k.value for k in TransactionKind]
    default_kind = editing.kind.value if editing else "expense"
    kind = st.radio("Type", kind_options, index=kind_options.index(default_kind), horizontal=True)
    categories = list(INCOME_CATEGORIES if kind == "income" else EXPENSE_CATEGORIES)

    with st.form("tx_form", clear_on_submit=editing is None):
        c1, c2 = st.columns(2)
        with c1:
            amount = st.number_input(
                "Amount", min_value=0.0, step=0.01, format="%.2f",
                value=float(editing.amount) if editing else 0.0,
            )
            category_index = categories.index(editing.category) if editing and editing.category in categories else 0
            category = st.selectbox("Category", categories, index=category_index)
        with c2:
            description = st.text_input("Description", value=editing.description if editing else "")
            when = st.date_input("Date", value=editing.date if editing else today)
        submitted = st.form_submit_button("Update transaction" if editing else "Add transaction")

    if editing and st.button("Cancel edit"):
        st.session_state.editing_id = None
        st.rerun()

    if submitted:
        result = validate_transaction_input({
            "amount": amount,
            "type": kind,
            "category": category,
            "description": description,
            "date": when,
        })
        if result.is_left():
            for field, msg in result.get_error().errors.items():
                st.error(f"{field}: {msg}")
        else:
            data = result.get_or_else(None)
            if editing:
                outcome = store.update(editing.id, data)
                if outcome.is_left():
                    st.error(outcome.get_error().message)
                st.session_state.editing_id = None
            else:
                store.add(data)
            collect_alerts()
            st.rerun()

    st.subheader("History")
    f1, f2, f3, f4 = st.columns(4)
    with f1:
        search = st.text_input("Search", "")
    with f2:
        cat_filter = st.selectbox("Category", ["All"] + used_categories(store.list()))
    with f3:
        type_filter = st.selectbox("Type", ["all", "income", "expense"])
    with f4:
        range_filter = st.selectbox("Date range", list(LIST_PRESETS))

    preds = build_predicates(
        search=search,
        category=None if cat_filter == "All" else cat_filter,
        kind=None if type_filter == "all" else TransactionKind(type_filter),
        cutoff=list_preset_cutoff(range_filter, today),
    )
    shown = apply_filters(store.list(), *preds)

    if not shown:
        st.info("No transactions match." if store.list() else "No transactions yet. Add your first one above.")
    for t in shown:
        cols = st.columns([2, 2, 4, 2, 1, 1])
        cols[0].write(t.date.isoformat())
        cols[1].write(t.category)
        cols[2].write(t.description)
        cols[3].write(format_signed(t.signed_amount, settings.currency_symbol))
        if cols[4].button("✏️", key=f"edit_{t.id}"):
            st.session_state.editing_id = t.id
            st.rerun()
        if cols[5].button("🗑", key=f"del_{t.id}"):
            outcome = store.delete(t.id)
            if outcome.is_left():
                st.error(outcome.get_error().message)
            st.rerun()
    st.caption(f"Showing {len(shown)} of {len(store)} transactions")

elif menu == "🎯 Budgets":
    st.title("🎯 Budgets")

    with st.form("budget_form"):
        existing = [b.category for b in store.budgets()]
        options = list(unbudgeted_categories(store.budgets())) + existing
        category = st.selectbox("Category", options)
        limit = st.number_input("Monthly limit", min_value=0.0, step=10.0, format="%.2f")
        submitted = st.form_submit_button("Set budget")

    if submitted:
        result = store.set_budget(category, limit)
        if result.is_left():
            st.error(result.get_error().message)
        else:
            change = result.get_or_else(None)
            if change.warning is not None:
                st.error(f"🚨 Budget Alert! {change.warning.message}")
            verb = "set" if change.created else "updated"
            st.success(f"✅ Budget {verb} for {category}: {money(change.budget.limit)}")

    if not store.budgets():
        st.info("No budgets set yet. Start by setting a budget for your expense categories.")

    colors = {BudgetStatus.GOOD: "🟢", BudgetStatus.WARNING: "🟡", BudgetStatus.OVER: "🔴"}
    for b in store.budgets():
        p = budget_progress(b)
        st.markdown(f"**{colors[p.status]} {b.category}**")
        st.progress(float(np.clip(p.percentage / 100, 0.0, 1.0)))
        st.caption(f"Spent: {money(b.spent)} · Limit: {money(b.limit)} · Remaining: {money(p.remaining)}")
        if p.status == BudgetStatus.OVER:
            st.error(f"⚠️ Budget exceeded by {money(p.over_by)}")
        elif p.status == BudgetStatus.WARNING:
            st.warning("You're approaching your budget limit")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    presets = [p.value for p in WindowPreset]
    default = settings.default_window if settings.default_window in presets else WindowPreset.SIX_MONTHS.value
    preset = st.selectbox("Time range", presets, index=presets.index(default))

    rpt = ReportService(default_aggregators()).window_report(store.list(), preset, today)
    res = rpt["result"]
    summary = res["summary"]

    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Total Income", money(summary.total_income))
    k2.metric("Total Expenses", money(summary.total_expense))
    k3.metric("Avg Monthly Income", money(summary.avg_monthly_income))
    k4.metric("Avg Monthly Expenses", money(summary.avg_monthly_expense))

    labels = [b.label for b in res["monthly"]]
    fig_ts = go.Figure()
    fig_ts.add_trace(go.Scatter(x=labels, y=[b.income for b in res["monthly"]], mode="lines+markers", name="Income"))
    fig_ts.add_trace(go.Scatter(x=labels, y=[b.expense for b in res["monthly"]], mode="lines+markers", name="Expenses"))
    fig_ts.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    fig_net = px.bar(
        x=labels,
        y=[b.net for b in res["monthly"]],
        labels={"x": "Month", "y": "Net"},
        title="Monthly Net",
        template="plotly_dark",
    )
    st.plotly_chart(fig_net, use_container_width=True)

    if res["top_categories"]:
        df_top = pd.DataFrame(res["top_categories"], columns=["Category", "Amount"])
        fig_cat = px.pie(df_top, values="Amount", names="Category", title="Top Expense Categories")
        st.plotly_chart(fig_cat, use_container_width=True)

    inv = res["investments"]
    if inv.has_activity:
        st.subheader("Investments in range")
        i1, i2, i3, i4 = st.columns(4)
        i1.metric("Invested", money(inv.invested))
        i2.metric("Returns", money(inv.returns))
        i3.metric("Net", money(inv.net))
        i4.metric("ROI", f"{inv.roi:.1f}%")

elif menu == "📈 Investments":
    st.title("📈 Investment Tracker")
    rpt = ReportService(default_aggregators()).window_report(store.list(), "all", today)
    inv = rpt["result"]["investments"]
    if not inv.has_activity:
        st.info("No investments yet. Record an expense in the Investment category to start tracking.")
    else:
        i1, i2, i3, i4 = st.columns(4)
        i1.metric("Total Invested", money(inv.invested))
        i2.metric("Total Returns", money(inv.returns))
        i3.metric("Net", money(inv.net))
        i4.metric("ROI", f"{inv.roi:.1f}%")

        buckets = investment_rollup(store.list(), today)
        df_inv = pd.DataFrame(
            {
                "month": [b.label for b in buckets],
                "Invested": [b.invested for b in buckets],
                "Returns": [b.returns for b in buckets],
            }
        )
        fig_inv = px.bar(df_inv, x="month", y=["Invested", "Returns"], barmode="group", template="plotly_dark")
        st.plotly_chart(fig_inv, use_container_width=True)

        st.subheader("Recent investment activity")
        st.table(tx_to_df(recent_investments(store.list()))[["date", "type", "description", "amount"]])

elif menu == "⬇ Export":
    st.title("⬇ Export")
    export_type = st.radio("Export type", ["all", "summary"], format_func=lambda v: "All transactions" if v == "all" else "Summary report")
    range_choice = st.selectbox("Date range", list(EXPORT_PRESETS))
    cutoff = export_preset_cutoff(range_choice, today)
    chosen = store.list() if cutoff is None else tuple(iter_transactions(store.list(), since(cutoff)))

    st.caption(f"{len(chosen)} transaction{'s' if len(chosen) != 1 else ''} will be exported")
    if not store.list():
        st.info("No data to export. Add some transactions first to export your data.")
    elif export_type == "all":
        st.download_button("⬇ Download CSV", ledger_csv(chosen), file_name=export_filename("expenses", today), mime="text/csv")
    else:
        st.download_button(
            "⬇ Download CSV",
            summary_csv(chosen),
            file_name=export_filename(f"summary_{range_choice}", today),
            mime="text/csv",
        )
