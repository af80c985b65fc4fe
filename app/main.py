"""
Streamlit Frontend for Expense Splitter

A five-step wizard:
1. Add participants
2. Add expenses
3. View balances
4. View settlements
5. Finish

The UI holds no settlement logic. It feeds raw form input into the
SplitSession kept in st.session_state and renders what comes back.
Rejected input is shown as an error, never silently corrected.
"""

import streamlit as st

from expense_splitter.models.ledger import SettlementReport
from expense_splitter.registry import NotFoundError
from expense_splitter.session import SplitSession
from expense_splitter.validation import ValidationError


STEP_TITLES = {
    1: "Add Participants",
    2: "Add Expenses",
    3: "Balance",
    4: "Settlements",
    5: "Finish",
}


# Page configuration
st.set_page_config(
    page_title="Expense Splitter",
    page_icon="💸",
    layout="centered",
)


def get_session() -> SplitSession:
    """Get or create the caller-owned session for this browser tab."""
    if "split_session" not in st.session_state:
        st.session_state.split_session = SplitSession()
    if "step" not in st.session_state:
        st.session_state.step = 1
    return st.session_state.split_session


def go_to(step: int) -> None:
    st.session_state.step = max(1, min(step, len(STEP_TITLES)))
    st.rerun()


def main():
    """Main application entry point."""
    session = get_session()
    step = st.session_state.step

    st.title("💸 Expense Splitter")
    st.caption(f"Step {step} of {len(STEP_TITLES)}: {STEP_TITLES[step]}")

    try:
        if step == 1:
            render_people_step(session)
        elif step == 2:
            render_expenses_step(session)
        elif step == 3:
            render_balance_step(session)
        elif step == 4:
            render_settlements_step(session)
        else:
            render_finish_step(session)
    except Exception as e:
        session.record_error(e, step=STEP_TITLES[step])
        st.error(f"Something went wrong: {e}")


def render_people_step(session: SplitSession):
    """Who takes part in the expenses?"""
    st.subheader("Who is sharing expenses?")

    with st.form("add_person", clear_on_submit=True):
        name = st.text_input("Name", placeholder="Person's name")
        submitted = st.form_submit_button("➕ Add")

    if submitted:
        try:
            session.add_person(name)
        except ValidationError as e:
            st.error(session.validator.get_user_friendly_summary(e.result))

    if session.people:
        st.markdown("**Participants** (click to remove)")
        cols = st.columns(min(len(session.people), 4))
        for index, person in enumerate(session.people):
            with cols[index % len(cols)]:
                if st.button(f"🗑️ {person.name}", key=f"remove_person_{person.id}"):
                    _, removed = session.remove_person(person.id)
                    if removed:
                        st.toast(f"Also removed {len(removed)} expense(s) involving {person.name}")
                    st.rerun()

    st.markdown("---")
    if st.button("Next ➡️", type="primary", disabled=len(session.people) < 2):
        go_to(2)


def render_expenses_step(session: SplitSession):
    """Record who paid what for whom."""
    st.subheader("Add an expense")

    people = session.people
    names = {person.id: person.name for person in people}

    with st.form("add_expense", clear_on_submit=True):
        description = st.text_input("Description", placeholder="e.g. Dinner")
        amount = st.text_input("Amount", placeholder="0.00")
        paid_by = st.selectbox(
            "Paid by",
            options=list(names),
            format_func=lambda pid: names[pid],
        )
        for_whom = st.multiselect(
            "For whom",
            options=list(names),
            default=list(names),
            format_func=lambda pid: names[pid],
        )
        submitted = st.form_submit_button("➕ Add expense")

    if submitted:
        try:
            session.add_expense(description, amount, paid_by, for_whom)
        except ValidationError as e:
            st.error(session.validator.get_user_friendly_summary(e.result))
        else:
            result = session.last_expense_result
            if result is not None and result.warnings:
                st.warning(session.validator.get_user_friendly_summary(result))

    if session.expenses:
        st.markdown("**Expenses**")
        for expense in session.expenses:
            col1, col2 = st.columns([5, 1])
            with col1:
                beneficiaries = ", ".join(names[pid] for pid in expense.for_whom)
                st.markdown(
                    f"{expense.description}: **${expense.amount:,.2f}** "
                    f"paid by {names[expense.paid_by]} for {beneficiaries}"
                )
            with col2:
                if st.button("🗑️", key=f"remove_expense_{expense.id}"):
                    try:
                        session.remove_expense(expense.id)
                    except NotFoundError as e:
                        st.error(str(e))
                    st.rerun()

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Back"):
            go_to(1)
    with col2:
        if st.button("View balance ➡️", type="primary"):
            go_to(3)


def render_balance_step(session: SplitSession):
    """Net position of every participant."""
    report: SettlementReport = session.report()

    st.subheader("Final balance")
    st.metric("Total spent", f"${report.total_spent:,.2f}")

    rows = [
        {"Person": entry.person.name, "Balance": f"${entry.rounded:,.2f}"}
        for entry in report.balances
    ]
    st.table(rows)

    chart = [
        {"Person": entry.person.name, "Balance": float(entry.rounded)}
        for entry in report.balances
    ]
    if chart:
        st.bar_chart(chart, x="Person", y="Balance")

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Back"):
            go_to(2)
    with col2:
        if st.button("Settlements ➡️", type="primary"):
            go_to(4)


def render_settlements_step(session: SplitSession):
    """Who pays whom."""
    settlements = session.settlements()

    st.subheader("Settlements")
    if settlements:
        st.table([
            {
                "From": s.from_person.name,
                "To": s.to_person.name,
                "Amount": f"${s.amount:,.2f}",
            }
            for s in settlements
        ])
    else:
        st.success("✅ Everyone is even. No payments needed.")

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Back"):
            go_to(3)
    with col2:
        if st.button("Finish", type="primary"):
            go_to(5)


def render_finish_step(session: SplitSession):
    st.subheader("Thanks for using Expense Splitter!")
    st.markdown(
        "We hope it helped you split expenses with your friends. "
        "To split another set of expenses, start over."
    )
    if st.button("🔄 Start over"):
        session.reset()
        go_to(1)


if __name__ == "__main__":
    main()
