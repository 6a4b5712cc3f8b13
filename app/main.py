"""
Streamlit Frontend for Rivela

The screens a user walks through:
1. Question   - what is on your mind about money?
2. Mapping    - income, expenses, debts, assets and how you feel
3. Revelation - ranked insights, projection, what-if simulator
4. Journal    - saved explorations, reopened or deleted

The UI is thin glue: every number shown comes from the engine via
ExplorationFlow, and nothing is saved without an explicit click.
"""

import asyncio

import streamlit as st

from rivela.audit import create_correlation_id
from rivela.config import get_settings, validate_all_settings
from rivela.engine import (
    PREDEFINED_SCENARIOS,
    detect_hidden_fees,
    simulate_scenario,
    simulate_what_if,
)
from rivela.models import (
    EMOTIONAL_TAGS,
    Asset,
    AssetType,
    EmotionalContext,
    FinancialData,
    FinancialItem,
    InsightType,
    RiskLevel,
    Scenario,
)
from rivela.orchestrator import ExplorationFlow, InvalidInputError, create_app_components
from rivela.reporting import build_text_summary, summary_filename
from rivela.services.storage import DuplicateError, NotFoundError, StorageError


st.set_page_config(
    page_title="Rivela",
    page_icon="🔎",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .warning-box {
        padding: 16px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .opportunity-box {
        padding: 16px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .recommendation-box {
        padding: 16px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


ITEM_SECTIONS = [
    ("income", "💶 Revenus", "Salaire"),
    ("fixed_expenses", "🏠 Dépenses fixes", "Loyer, Netflix..."),
    ("variable_expenses", "🛒 Dépenses variables", "Courses, sorties..."),
    ("debts", "💳 Dettes", "Crédit auto..."),
    ("goals", "🎯 Objectifs", "Voyage..."),
]

BOX_CLASSES = {
    InsightType.WARNING: "warning-box",
    InsightType.OPPORTUNITY: "opportunity-box",
    InsightType.RECOMMENDATION: "recommendation-box",
}

RISK_LABELS = {
    RiskLevel.LOW: "🟢 Faible",
    RiskLevel.MEDIUM: "🟡 Modéré",
    RiskLevel.HIGH: "🔴 Élevé",
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
def get_flow() -> ExplorationFlow:
    """Get or create the exploration flow (cached)."""
    return create_app_components()


def init_state():
    defaults = {
        "screen": "question",
        "question": "",
        "financial_data": FinancialData(),
        "emotional_context": EmotionalContext(),
        "result": None,
        "saved": False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def go_to(screen: str):
    st.session_state.screen = screen
    st.rerun()


def reset_exploration():
    st.session_state.question = ""
    st.session_state.financial_data = FinancialData()
    st.session_state.emotional_context = EmotionalContext()
    st.session_state.result = None
    st.session_state.saved = False
    go_to("question")


def main():
    """Main application entry point."""
    init_state()
    flow = get_flow()

    st.sidebar.title("🔎 Rivela")
    st.sidebar.markdown("---")
    pages = {
        "question": "❓ Question",
        "mapping": "🗺️ Cartographie",
        "revelation": "✨ Révélation",
        "journal": "📓 Journal",
        "settings": "⚙️ Paramètres",
    }
    for screen, label in pages.items():
        if st.sidebar.button(label, key=f"nav_{screen}"):
            go_to(screen)

    screen = st.session_state.screen
    if screen == "question":
        render_question_page(flow)
    elif screen == "mapping":
        render_mapping_page(flow)
    elif screen == "revelation":
        render_revelation_page(flow)
    elif screen == "journal":
        render_journal_page(flow)
    elif screen == "settings":
        render_settings_page()


def render_question_page(flow: ExplorationFlow):
    st.title("❓ Quelle question vous posez-vous ?")

    question = st.text_area(
        "Votre question",
        value=st.session_state.question,
        placeholder="Ex. : Puis-je me permettre de changer de voiture cette année ?",
    )
    if st.button("Continuer", type="primary"):
        if not question.strip():
            st.error("Formulez votre question pour continuer.")
        else:
            st.session_state.question = question.strip()
            st.session_state.result = None
            st.session_state.saved = False
            go_to("mapping")

    recent = run_async(flow.list_journal())[:3]
    if recent:
        st.markdown("### Explorations récentes")
        for entry in recent:
            if st.button(f"{entry.question} · {entry.saved_at}", key=f"recent_{entry.id}"):
                open_journal_entry(flow, entry.id)


def _items_editor(key: str, label: str, placeholder: str, items: list[FinancialItem]):
    st.markdown(f"#### {label}")
    rows = [{"name": item.name, "amount": item.amount} for item in items]
    edited = st.data_editor(
        rows or [{"name": "", "amount": 0.0}],
        key=f"editor_{key}",
        num_rows="dynamic",
        column_config={
            "name": st.column_config.TextColumn("Libellé", help=placeholder),
            "amount": st.column_config.NumberColumn("Montant mensuel (€)", min_value=0.0),
        },
    )
    return [
        FinancialItem(name=row.get("name") or "", amount=float(row.get("amount") or 0.0))
        for row in edited
        if (row.get("name") or row.get("amount"))
    ]


def render_mapping_page(flow: ExplorationFlow):
    st.title("🗺️ Cartographie de votre situation")
    st.markdown(f"*{st.session_state.question}*")

    data: FinancialData = st.session_state.financial_data
    collected = {}

    col1, col2 = st.columns(2)
    for index, (key, label, placeholder) in enumerate(ITEM_SECTIONS):
        with (col1 if index % 2 == 0 else col2):
            collected[key] = _items_editor(key, label, placeholder, getattr(data, key))

    st.markdown("#### 🏦 Patrimoine")
    asset_rows = [
        {"name": asset.name, "type": asset.type.value, "value": asset.value}
        for asset in data.assets
    ]
    edited_assets = st.data_editor(
        asset_rows or [{"name": "", "type": AssetType.SAVINGS.value, "value": 0.0}],
        key="editor_assets",
        num_rows="dynamic",
        column_config={
            "name": st.column_config.TextColumn("Libellé"),
            "type": st.column_config.SelectboxColumn(
                "Type", options=[t.value for t in AssetType]
            ),
            "value": st.column_config.NumberColumn("Valeur (€)", min_value=0.0),
        },
    )
    assets = [
        Asset(
            name=row.get("name") or "",
            type=AssetType(row.get("type") or AssetType.SAVINGS.value),
            value=float(row.get("value") or 0.0),
        )
        for row in edited_assets
        if (row.get("name") or row.get("value"))
    ]

    st.markdown("#### 💭 Comment vous sentez-vous ?")
    emotional: EmotionalContext = st.session_state.emotional_context
    mood = st.slider("Humeur", min_value=1, max_value=10, value=emotional.mood)
    tags = st.multiselect(
        "Ce que vous ressentez",
        options=list(EMOTIONAL_TAGS),
        default=[tag for tag in emotional.tags if tag in EMOTIONAL_TAGS],
    )
    notes = st.text_area("Notes", value=emotional.notes)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("⬅️ Retour"):
            go_to("question")
    with col2:
        if st.button("✨ Révéler", type="primary"):
            financial_data = FinancialData(assets=assets, **collected)
            emotional_context = EmotionalContext(mood=mood, tags=tags, notes=notes)
            st.session_state.financial_data = financial_data
            st.session_state.emotional_context = emotional_context
            try:
                st.session_state.result = run_async(
                    flow.explore(
                        question=st.session_state.question,
                        financial_data=financial_data,
                        emotional_context=emotional_context,
                        correlation_id=create_correlation_id(),
                    )
                )
                st.session_state.saved = False
                go_to("revelation")
            except InvalidInputError as e:
                st.error(flow.validator.get_user_friendly_summary(e.result))


def render_revelation_page(flow: ExplorationFlow):
    result = st.session_state.result
    if result is None:
        st.info("Commencez par poser une question et cartographier votre situation.")
        return

    currency = get_settings().app.currency_symbol
    st.title("✨ Révélation")
    st.markdown(f"*{result.question}*")

    for issue in result.validation.issues:
        if issue.severity == "error":
            st.error(issue.message)
    for warning in result.validation.warnings:
        st.warning(warning)

    col1, col2, col3 = st.columns(3)
    col1.metric("Solde mensuel", f"{result.projection.current:,.0f} {currency}")
    col2.metric(
        "Solde optimisé",
        f"{result.projection.optimized:,.0f} {currency}",
        delta=f"{result.projection.total_savings:,.0f} {currency}",
    )
    col3.metric("Taux d'épargne", f"{result.metrics.savings_rate:.1f}%")

    st.markdown("### Vos insights")
    if not result.insights:
        st.success("Aucun point d'attention particulier. Bravo !")
    for insight in result.insights:
        impact = f"<p><strong>Impact :</strong> {insight.impact:,.0f} {currency}/mois</p>" if insight.impact else ""
        st.markdown(f"""
        <div class="{BOX_CLASSES[insight.type]}">
            <h4>{insight.title}</h4>
            <p>{insight.description}</p>
            {impact}
        </div>
        """, unsafe_allow_html=True)

    st.markdown("### 🧮 Et si...")
    income_change = st.slider("Changement de revenus mensuel", -500, 1000, 0, step=50)
    expense_reduction = st.slider("Réduction des dépenses mensuelles", 0, 1000, 0, step=50)
    what_if = simulate_what_if(result.projection.current, income_change, expense_reduction)
    col1, col2 = st.columns(2)
    col1.metric("Nouveau solde", f"{what_if.simulated_balance:,.0f} {currency}")
    col2.metric("Impact annuel", f"{what_if.yearly_impact:,.0f} {currency}")

    financial_data = st.session_state.financial_data
    render_hidden_fees(financial_data, currency)
    render_scenarios(financial_data, currency)

    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    with col1:
        if st.session_state.saved:
            st.success("Exploration sauvegardée dans le journal.")
        elif st.button("💾 Sauvegarder dans le journal", type="primary"):
            try:
                run_async(flow.save_result(
                    result,
                    st.session_state.financial_data,
                    st.session_state.emotional_context,
                ))
                st.session_state.saved = True
                st.rerun()
            except DuplicateError:
                st.session_state.saved = True
                st.rerun()
            except StorageError as e:
                st.error(f"Sauvegarde impossible : {e}")
    with col2:
        st.download_button(
            "📄 Télécharger le résumé",
            data=build_text_summary(
                result.question,
                st.session_state.financial_data,
                result.insights,
                currency_symbol=currency,
            ),
            file_name=summary_filename(),
            mime="text/plain",
        )
    with col3:
        if st.button("🔄 Nouvelle exploration"):
            reset_exploration()


def render_hidden_fees(financial_data: FinancialData, currency: str):
    st.markdown("### 🔍 Détecteur d'optimisations")
    detections = detect_hidden_fees(financial_data)
    if not detections:
        st.info("Aucune optimisation majeure détectée dans vos finances actuelles.")
        return

    for detection in detections:
        st.markdown(f"""
        <div class="{BOX_CLASSES[detection.type]}">
            <h4>{detection.title}</h4>
            <p>{detection.description}</p>
            <p><strong>Montant concerné :</strong> {detection.amount:,.0f} {currency}/mois</p>
        </div>
        """, unsafe_allow_html=True)


def render_scenarios(financial_data: FinancialData, currency: str):
    st.markdown("### 📊 Simulateur de scénarios")

    options = {scenario.id: scenario for scenario in PREDEFINED_SCENARIOS}
    options["custom"] = Scenario()
    choice = st.selectbox(
        "Scénario",
        options=list(options),
        format_func=lambda key: options[key].name,
    )
    scenario = options[choice]

    if choice == "custom":
        col1, col2 = st.columns(2)
        with col1:
            income_multiplier = st.slider("Revenus (x)", 0.0, 2.0, 1.0, step=0.05)
            extra_income = st.number_input("Revenus supplémentaires (€/mois)", value=0.0, step=50.0)
        with col2:
            expense_multiplier = st.slider("Dépenses (x)", 0.0, 2.0, 1.0, step=0.05)
            extra_expenses = st.number_input("Dépenses supplémentaires (€/mois)", value=0.0, step=50.0)
        duration = st.slider("Durée (mois)", 1, 60, 12)
        scenario = Scenario(
            income_multiplier=income_multiplier,
            expense_multiplier=expense_multiplier,
            extra_income=extra_income,
            extra_expenses=extra_expenses,
            duration_months=duration,
        )
    elif scenario.description:
        st.caption(scenario.description)

    outcome = simulate_scenario(financial_data, scenario)
    col1, col2, col3 = st.columns(3)
    col1.metric("Impact mensuel", f"{outcome.monthly_impact:,.0f} {currency}")
    col2.metric("Impact annuel", f"{outcome.yearly_impact:,.0f} {currency}")
    col3.metric(
        f"Impact sur {scenario.duration_months} mois",
        f"{outcome.cumulative_impact:,.0f} {currency}",
    )
    st.line_chart(outcome.balance_projection)
    st.markdown(f"**Niveau de risque :** {RISK_LABELS[outcome.risk_level]}")
    for recommendation in outcome.recommendations:
        st.markdown(f"- {recommendation}")


def open_journal_entry(flow: ExplorationFlow, entry_id: str):
    try:
        entry, result = run_async(flow.reopen_from_journal(entry_id))
    except NotFoundError:
        st.error("Cette exploration n'existe plus.")
        return

    st.session_state.question = entry.question
    st.session_state.financial_data = entry.financial_data
    st.session_state.emotional_context = entry.emotional_context
    st.session_state.result = result
    st.session_state.saved = True
    go_to("revelation")


def render_journal_page(flow: ExplorationFlow):
    st.title("📓 Journal")

    col1, col2 = st.columns([3, 1])
    with col1:
        search = st.text_input("Rechercher", placeholder="Question ou insight...")
    with col2:
        sort_by = st.selectbox(
            "Trier par",
            options=["date", "insights"],
            format_func=lambda x: "Date" if x == "date" else "Nombre d'insights",
        )

    entries = run_async(flow.list_journal(search=search or None, sort_by=sort_by))
    if not entries:
        st.info("Aucune exploration sauvegardée pour le moment.")
        return

    for entry in entries:
        with st.expander(f"{entry.question} · {entry.saved_at}"):
            st.markdown(f"**{len(entry.insights)} insight(s)**")
            for insight in entry.insights[:2]:
                st.markdown(f"- {insight.title}")
            if len(entry.insights) > 2:
                st.markdown(f"*+{len(entry.insights) - 2} autre(s)*")

            col1, col2 = st.columns(2)
            with col1:
                if st.button("Ouvrir", key=f"open_{entry.id}"):
                    open_journal_entry(flow, entry.id)
            with col2:
                if st.button("🗑️ Supprimer", key=f"delete_{entry.id}"):
                    run_async(flow.delete_from_journal(entry.id))
                    st.rerun()


def render_settings_page():
    st.title("⚙️ Paramètres")

    st.markdown("### État de la configuration")
    status = validate_all_settings()
    for key, label in [("app", "Application"), ("google_sheets", "Google Sheets (journal distant)")]:
        if key not in status:
            continue
        if status[key]:
            st.success(f"✅ {label}")
        else:
            st.error(f"❌ {label} - {status.get(f'{key}_error', 'Non configuré')}")

    app_settings = get_settings().app
    st.markdown(f"**Stockage du journal :** `{app_settings.journal_backend}`")
    if app_settings.journal_backend == "json":
        st.markdown(f"**Fichier :** `{app_settings.journal_path}`")


if __name__ == "__main__":
    main()
