"""
Streamlit Frontend for Finance Planner

Two tools in one app:
1. Budget Planner - split monthly income across the category
   catalogue and get insights on the allocation
2. Investment Calculator - project savings until retirement and
   see what small extra contributions would do

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Insights always appear, with or without the AI advisor
4. Nothing is saved without an explicit "Save" action

Figures are rounded here, for display only.
"""

import asyncio

import streamlit as st

from finplanner.audit import create_correlation_id
from finplanner.engine.scenarios import LUMP_SUM_DISCLAIMER
from finplanner.models.budget import Budget
from finplanner.models.insight import AdviceResponse, InsightKind
from finplanner.models.investment import ScenarioMethod
from finplanner.orchestrator import (
    BudgetPlannerFlow,
    InvestmentPlannerFlow,
    create_app_components,
)
from finplanner.services.storage import StorageError
from finplanner.validation import InvalidParametersError, summarize_issues, validate_budget


# Page configuration
st.set_page_config(
    page_title="Finance Planner",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 16px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 8px 0;
    }
    .warning-box {
        padding: 16px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 8px 0;
    }
    .info-box {
        padding: 16px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 8px 0;
    }
    .tip-box {
        padding: 16px;
        background-color: #f3e8ff;
        border-radius: 10px;
        border-left: 5px solid #7c3aed;
        margin: 8px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

BOX_CLASSES = {
    InsightKind.WARNING: "warning-box",
    InsightKind.INFO: "info-box",
    InsightKind.SUCCESS: "success-box",
    InsightKind.TIP: "tip-box",
}


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
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def money(value: float) -> str:
    return f"${value:,.0f}"


def render_advice(response: AdviceResponse):
    """Render insights as coloured boxes, with a note when the advisor was bypassed."""
    if response.used_fallback:
        st.caption(f"Showing local insights ({response.fallback_reason}).")

    for insight in response.insights:
        box = BOX_CLASSES.get(insight.kind, "info-box")
        st.markdown(insight.to_html(box), unsafe_allow_html=True)


def main():
    """Main application entry point."""
    # Initialize components
    budget_flow, investment_flow, _ = get_components()

    # Sidebar navigation
    st.sidebar.title("💰 Finance Planner")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Budget Planner", "📈 Investment Calculator", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Enter your monthly income
        2. Allocate it across the categories
        3. Read the insights and adjust
        4. Save your budget

        **Then try the calculator** to see how your
        savings grow until retirement.
        """
    )

    # Route to appropriate page
    if page == "📊 Budget Planner":
        render_budget_page(budget_flow)
    elif page == "📈 Investment Calculator":
        render_investment_page(investment_flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def reset_budget_inputs(budget: Budget):
    """Replace the budget and drop widget state so the inputs show its amounts."""
    st.session_state.budget = budget
    st.session_state.budget_advice = None
    for key in [k for k in st.session_state.keys() if str(k).startswith("amount_")]:
        del st.session_state[key]
    st.session_state.pop("monthly_income", None)


def render_budget_page(budget_flow: BudgetPlannerFlow):
    """Render the budget planner page."""
    st.title("📊 Budget Planner")
    st.markdown("Give every dollar of your monthly income a job.")

    # Initialize session state
    if "budget" not in st.session_state:
        st.session_state.budget = Budget.default()
    if "budget_advice" not in st.session_state:
        st.session_state.budget_advice = None

    user_id = st.text_input(
        "Your name or email",
        help="Used to save and load your budget",
    ).strip()

    col_load, col_recommend = st.columns(2)
    with col_load:
        if st.button("📂 Load my budget", disabled=not user_id):
            try:
                reset_budget_inputs(run_async(budget_flow.load_budget(user_id)))
                st.rerun()
            except StorageError as e:
                st.error(f"❌ Could not load your budget: {e}")
    with col_recommend:
        if st.button("🎯 Use recommended amounts"):
            reset_budget_inputs(st.session_state.budget.apply_recommendations())
            st.rerun()

    current: Budget = st.session_state.budget

    # Allocation form
    monthly_income = st.number_input(
        "💵 Monthly income",
        min_value=0.0,
        value=float(current.monthly_income),
        step=100.0,
        key="monthly_income",
    )

    amounts = {}
    columns = st.columns(2)
    for idx, category in enumerate(current.categories):
        with columns[idx % 2]:
            amounts[category.name] = st.number_input(
                f"{category.icon} {category.name} (recommended {category.recommended_percentage:g}%)",
                min_value=0.0,
                value=float(category.amount),
                step=10.0,
                help=category.description,
                key=f"amount_{category.name}",
            )

    try:
        budget = validate_budget(monthly_income, amounts)
    except InvalidParametersError as e:
        st.error(summarize_issues(e))
        return
    st.session_state.budget = budget

    summary, report = run_async(budget_flow.evaluate(budget))

    # Overview
    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    col1.metric("Total budgeted", money(report.total_budgeted))
    col2.metric("Remaining", money(report.remaining_income))
    col3.metric("Income used", f"{report.budget_utilization:.1f}%")

    if summary.categories:
        st.markdown(f"### Breakdown (largest: {summary.top_category})")
        st.bar_chart({"Amount": {row.category: row.amount for row in summary.categories}})

        st.table([
            {
                "Category": item.category,
                "Amount": money(item.amount),
                "Actual %": f"{item.actual_percentage:.1f}%",
                "Recommended %": f"{item.recommended_percentage:g}%",
                "Variance": f"{item.variance:+.1f}",
            }
            for item in report.variances
            if item.amount > 0 or item.recommended_percentage > 0
        ])

    # Insights
    st.markdown("---")
    st.markdown("### 💡 Insights")

    use_ai = st.checkbox(
        "Use AI advisor",
        value=budget_flow.has_advisor,
        disabled=not budget_flow.has_advisor,
    )
    if st.button("🔄 Refresh insights", type="primary"):
        with st.spinner("Analyzing your budget..."):
            st.session_state.budget_advice = run_async(
                budget_flow.refresh_insights(
                    budget,
                    use_ai=use_ai,
                    correlation_id=create_correlation_id(),
                )
            )

    if st.session_state.budget_advice is not None:
        render_advice(st.session_state.budget_advice)
    else:
        for insight in budget_flow.heuristic_insights(budget):
            st.markdown(insight.to_html(BOX_CLASSES[insight.kind]), unsafe_allow_html=True)

    # Save
    st.markdown("---")
    if st.button("💾 Save budget", disabled=not user_id):
        try:
            run_async(budget_flow.save_budget(user_id, budget))
            st.success("✅ Budget saved!")
        except StorageError as e:
            st.error(f"❌ Could not save your budget: {e}")


def render_investment_page(investment_flow: InvestmentPlannerFlow):
    """Render the investment calculator page."""
    st.title("📈 Investment Calculator")
    st.markdown("See how your savings could grow until retirement.")

    if "projection" not in st.session_state:
        st.session_state.projection = None
    if "tips" not in st.session_state:
        st.session_state.tips = None

    with st.form("investment_form"):
        col1, col2 = st.columns(2)
        with col1:
            current_age = st.number_input("Current age", min_value=0, value=30, step=1)
            current_investment = st.number_input(
                "Current investment ($)", min_value=0.0, value=10000.0, step=500.0,
            )
            annual_return = st.number_input(
                "Expected annual return (%)", min_value=0.0, value=7.0, step=0.5,
            )
        with col2:
            retirement_age = st.number_input("Retirement age", min_value=0, value=65, step=1)
            monthly_contribution = st.number_input(
                "Monthly contribution ($)", min_value=0.0, value=500.0, step=50.0,
            )

        submitted = st.form_submit_button("🧮 Calculate", type="primary")

    if submitted:
        correlation_id = create_correlation_id()
        try:
            params, result = run_async(investment_flow.calculate(
                {
                    "current_age": int(current_age),
                    "retirement_age": int(retirement_age),
                    "current_investment": current_investment,
                    "monthly_contribution": monthly_contribution,
                    "annual_return_percent": annual_return,
                },
                correlation_id=correlation_id,
            ))
        except InvalidParametersError as e:
            st.session_state.projection = None
            st.error(summarize_issues(e))
            return

        scenarios = run_async(investment_flow.what_if(params, result, correlation_id=correlation_id))
        st.session_state.projection = (params, result, scenarios)
        st.session_state.tips = None

    if st.session_state.projection is None:
        return

    params, result, scenarios = st.session_state.projection

    # Results
    st.markdown("---")
    st.markdown(f"""
    <div class="success-box">
        <p>At age {params.retirement_age} you could have</p>
        <p class="big-number">{money(result.final_amount)}</p>
    </div>
    """, unsafe_allow_html=True)

    col1, col2, col3 = st.columns(3)
    col1.metric("Starting balance", money(result.initial_balance))
    col2.metric("Your contributions", money(result.total_contributions))
    col3.metric("Investment growth", money(result.total_growth))

    st.markdown("### Growth over time")
    st.line_chart({"Balance": {snapshot.age: snapshot.balance for snapshot in result.yearly}})

    # What-if
    st.markdown("### 🔮 What if you...")
    for scenario in scenarios:
        st.markdown(f"""
        <div class="info-box">
            <strong>{scenario.title}</strong>
            (+{money(scenario.additional_contribution)}/month)<br>
            You'd have <strong>{money(scenario.final_amount)}</strong>,
            {money(scenario.additional_growth)} more.
        </div>
        """, unsafe_allow_html=True)
    if investment_flow.scenario_method == ScenarioMethod.LUMP_SUM:
        st.caption(LUMP_SUM_DISCLAIMER)

    # Saving tips
    st.markdown("### 💰 Ways to save more")
    use_ai = st.checkbox(
        "Use AI advisor",
        value=investment_flow.has_advisor,
        disabled=not investment_flow.has_advisor,
        key="tips_use_ai",
    )
    if st.button("✨ Get saving tips"):
        with st.spinner("Finding ways to save..."):
            st.session_state.tips = run_async(
                investment_flow.saving_tips(params, result, use_ai=use_ai)
            )

    if st.session_state.tips is not None:
        render_advice(st.session_state.tips)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    # Check services
    from finplanner.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Gemini (AI advisor)", "advisor"),
        ("Google Sheets (Storage)", "google_sheets"),
        ("Application settings", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the required variables. Without the AI advisor "
        "the app shows local insights; without Google Sheets budgets are kept "
        "in memory only."
    )


if __name__ == "__main__":
    main()
