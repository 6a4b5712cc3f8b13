"""
Tests for the insight engine.

The engine is pure, so these are plain unit tests: build a
FinancialData, run the engine, check the insights and numbers.
"""

import math

import pytest

from rivela.engine import (
    PREDEFINED_SCENARIOS,
    RULES,
    aggregate,
    calculate_insights,
    calculate_metrics,
    calculate_projection,
    detect_hidden_fees,
    evaluate_rules,
    realizable_savings,
    simulate_scenario,
    simulate_what_if,
    sort_insights,
    sum_items,
)
from rivela.engine.rules import is_subscription
from rivela.models import (
    Asset,
    EmotionalContext,
    FinancialData,
    FinancialItem,
    Insight,
    InsightPriority,
    InsightType,
    RiskLevel,
    Scenario,
)


def items(*amounts: float, name: str = "Ligne") -> list[FinancialItem]:
    return [FinancialItem(name=name, amount=amount) for amount in amounts]


def ids(insights: list[Insight]) -> list[str]:
    return [insight.id for insight in insights]


def by_id(insights: list[Insight], insight_id: str) -> Insight:
    return next(insight for insight in insights if insight.id == insight_id)


@pytest.fixture
def calm():
    return EmotionalContext(mood=7)


class TestAggregator:
    """Tests for category sums."""

    def test_sum_empty(self):
        """An empty collection sums to zero."""
        assert sum_items([]) == 0

    def test_total_expenses_includes_debts(self):
        """Debts count as expenses."""
        totals = aggregate(FinancialData(
            fixed_expenses=items(800),
            variable_expenses=items(300),
            debts=items(200),
        ))
        assert totals.total_expenses == 1300

    def test_nan_propagates(self):
        """The aggregator does not validate: NaN in, NaN out."""
        totals = aggregate(FinancialData(income=items(float("nan"))))
        assert math.isnan(totals.total_income)


class TestMetrics:
    """Tests for derived metrics."""

    def test_zero_income_ratios_are_zero(self):
        """With no income every ratio is exactly 0."""
        metrics = calculate_metrics(FinancialData(
            fixed_expenses=items(500),
            variable_expenses=items(200),
            debts=items(100),
        ))
        assert metrics.savings_rate == 0
        assert metrics.variable_expenses_ratio == 0
        assert metrics.debt_to_income_ratio == 0
        assert metrics.monthly_balance == -800

    def test_ratios(self):
        """Ratios are percentages of total income."""
        metrics = calculate_metrics(FinancialData(
            income=items(2000),
            variable_expenses=items(500),
            debts=items(300),
        ))
        assert metrics.savings_rate == pytest.approx(60.0)
        assert metrics.variable_expenses_ratio == pytest.approx(25.0)
        assert metrics.debt_to_income_ratio == pytest.approx(15.0)

    def test_emergency_fund(self):
        """The target is three months of expenses."""
        metrics = calculate_metrics(FinancialData(
            income=items(3000),
            fixed_expenses=items(1000),
            assets=[Asset(name="Livret", value=1500)],
        ))
        assert metrics.emergency_fund_target == 3000
        assert metrics.emergency_fund_months == pytest.approx(1.5)

    def test_emergency_fund_months_without_expenses(self):
        """No expenses means no months to count."""
        metrics = calculate_metrics(FinancialData(assets=[Asset(name="Livret", value=100)]))
        assert metrics.emergency_fund_months == 0


class TestScenarios:
    """Reference scenarios for the rule set."""

    def test_deficit(self, calm):
        """Expenses above income produce a high-priority deficit first."""
        insights = calculate_insights(
            FinancialData(income=items(2000), fixed_expenses=items(2500)),
            calm,
        )
        assert insights[0].id == "negative-balance"
        assert insights[0].impact == pytest.approx(500)
        assert insights[0].priority == InsightPriority.HIGH

    def test_low_savings(self, calm):
        """A 5% savings margin is flagged, the deficit is not."""
        insights = calculate_insights(
            FinancialData(income=items(3000), fixed_expenses=items(2000, 850)),
            calm,
        )
        assert "negative-balance" not in ids(insights)
        low = by_id(insights, "low-savings")
        assert low.impact == pytest.approx(150)
        assert low.values["savings_target"] == pytest.approx(300)

    def test_high_variable_expenses(self, calm):
        """Variable expenses above 30% of income can be trimmed by 15%."""
        insights = calculate_insights(
            FinancialData(income=items(3000), variable_expenses=items(600, 400)),
            calm,
        )
        insight = by_id(insights, "high-variable-expenses")
        assert insight.type == InsightType.OPPORTUNITY
        assert insight.impact == pytest.approx(150)

    def test_emergency_fund(self, calm):
        """No assets against 2000 of monthly expenses needs 6000 saved."""
        insights = calculate_insights(
            FinancialData(income=items(5000), fixed_expenses=items(2000)),
            calm,
        )
        assert by_id(insights, "emergency-fund").impact == pytest.approx(6000)

    def test_emotional_stress(self):
        """Low mood with anxiety triggers a high-priority recommendation."""
        insights = calculate_insights(
            FinancialData(),
            EmotionalContext(mood=2, tags=["Anxieux"]),
        )
        assert ids(insights) == ["emotional-stress"]
        assert insights[0].impact == 0
        assert insights[0].priority == InsightPriority.HIGH

    def test_stress_needs_both_mood_and_tag(self):
        """Mood alone or the tag alone is not enough."""
        assert calculate_insights(FinancialData(), EmotionalContext(mood=2)) == []
        assert calculate_insights(
            FinancialData(), EmotionalContext(mood=6, tags=["Anxieux"])
        ) == []

    def test_high_debt_ratio(self, calm):
        """Debts above 30% of income are a warning sized by the excess."""
        insights = calculate_insights(
            FinancialData(income=items(2000), debts=items(700)),
            calm,
        )
        insight = by_id(insights, "high-debt-ratio")
        assert insight.impact == pytest.approx(100)
        assert insight.values["debt_to_income_ratio"] == pytest.approx(35.0)

    def test_zero_balance_with_income_is_low_savings(self, calm):
        """A balance of exactly zero is still below the savings floor."""
        insights = calculate_insights(
            FinancialData(income=items(1000), fixed_expenses=items(1000)),
            calm,
        )
        assert "low-savings" in ids(insights)
        assert "negative-balance" not in ids(insights)

    def test_healthy_situation(self, calm):
        """Nothing to report for a comfortable budget."""
        insights = calculate_insights(
            FinancialData(
                income=items(4000),
                fixed_expenses=items(1000),
                variable_expenses=items(500),
                assets=[Asset(name="Livret", value=10000)],
            ),
            calm,
        )
        assert insights == []


class TestSubscriptions:
    """Tests for the subscription rule."""

    def test_keyword_matching(self):
        """Keywords match case-insensitively inside the name."""
        assert is_subscription("NETFLIX Premium")
        assert is_subscription("Abonnement salle de sport")
        assert is_subscription("Amazon Prime")
        assert not is_subscription("Loyer")

    def test_subscription_savings(self, calm):
        """40% of the fixed subscriptions can be saved."""
        data = FinancialData(
            income=items(3000),
            fixed_expenses=[
                FinancialItem(name="Loyer", amount=800),
                FinancialItem(name="Netflix", amount=15),
                FinancialItem(name="Spotify", amount=10),
            ],
        )
        insight = by_id(calculate_insights(data, calm), "subscription-optimization")
        assert insight.impact == pytest.approx(10)
        assert insight.values["subscription_count"] == 2

    def test_variable_subscriptions_ignored(self, calm):
        """Only fixed expenses are scanned."""
        data = FinancialData(
            income=items(3000),
            variable_expenses=[FinancialItem(name="Netflix", amount=15)],
        )
        assert "subscription-optimization" not in ids(calculate_insights(data, calm))


class TestRanking:
    """Tests for insight ordering."""

    def _stressed_deficit(self) -> list[Insight]:
        return calculate_insights(
            FinancialData(
                income=items(2000),
                fixed_expenses=[
                    FinancialItem(name="Loyer", amount=1200),
                    FinancialItem(name="Netflix", amount=20),
                ],
                variable_expenses=items(900),
                debts=items(700),
            ),
            EmotionalContext(mood=1, tags=["Anxieux"]),
        )

    def test_sorted_by_priority_then_impact(self):
        """Priority never increases, impact never increases within a priority."""
        insights = self._stressed_deficit()
        for current, following in zip(insights, insights[1:]):
            assert current.priority.rank >= following.priority.rank
            if current.priority == following.priority:
                assert current.impact >= following.impact

    def test_balance_insights_are_exclusive(self):
        """A deficit never also reports low savings."""
        found = ids(self._stressed_deficit())
        assert "negative-balance" in found
        assert "low-savings" not in found

    def test_ties_keep_rule_order(self):
        """Equal priority and impact keep the emission order."""
        first = Insight(id="a", type=InsightType.WARNING, title="", description="",
                        impact=5, priority=InsightPriority.LOW)
        second = Insight(id="b", type=InsightType.WARNING, title="", description="",
                         impact=5, priority=InsightPriority.LOW)
        assert ids(sort_insights([first, second])) == ["a", "b"]
        assert ids(sort_insights([second, first])) == ["b", "a"]

    def test_idempotent(self):
        """Two runs on the same input give equal lists in the same order."""
        assert self._stressed_deficit() == self._stressed_deficit()

    def test_rules_run_in_declared_order(self, calm):
        """evaluate_rules emits in RULES order before ranking."""
        data = FinancialData(income=items(2000), fixed_expenses=items(2500))
        raw = evaluate_rules(calculate_metrics(data), data, calm, RULES)
        assert ids(raw) == ["negative-balance", "emergency-fund"]


class TestPurity:
    """The engine must not touch its inputs."""

    def test_input_not_mutated(self, calm):
        """Inputs compare equal before and after a run."""
        data = FinancialData(income=items(2000), fixed_expenses=items(2500))
        before = data.model_dump()
        calculate_insights(data, calm)
        calculate_projection(data, calculate_insights(data, calm))
        assert data.model_dump() == before

    def test_nan_does_not_raise(self, calm):
        """Malformed amounts degrade to NaN metrics instead of errors."""
        data = FinancialData(income=items(1000), fixed_expenses=items(float("nan")))
        calculate_insights(data, calm)
        assert math.isnan(calculate_metrics(data).savings_rate)


class TestProjection:
    """Tests for the current vs. optimized projection."""

    def test_only_realizable_insights_count(self, calm):
        """Warnings are excluded from the savings."""
        data = FinancialData(
            income=items(3000),
            variable_expenses=items(1000),
            debts=items(1000),
            assets=[Asset(name="Livret", value=10000)],
        )
        insights = calculate_insights(data, calm)
        assert set(ids(insights)) == {"high-debt-ratio", "high-variable-expenses"}

        projection = calculate_projection(data, insights)
        assert projection.current == pytest.approx(1000)
        assert projection.total_savings == pytest.approx(150)
        assert projection.optimized == pytest.approx(1150)

    def test_optimized_is_current_plus_savings(self, calm):
        """optimized - current always equals total_savings."""
        data = FinancialData(
            income=items(2000),
            fixed_expenses=[FinancialItem(name="Netflix", amount=30)],
            variable_expenses=items(800),
        )
        insights = calculate_insights(data, calm)
        projection = calculate_projection(data, insights)
        assert projection.optimized - projection.current == pytest.approx(projection.total_savings)
        assert projection.total_savings == pytest.approx(realizable_savings(insights))

    def test_no_insights(self):
        """Without insights the projection is flat."""
        projection = calculate_projection(FinancialData(income=items(100)), [])
        assert projection.current == projection.optimized == 100
        assert projection.total_savings == 0


class TestWhatIf:
    """Tests for the manual what-if simulator."""

    def test_income_and_expense_changes_add_up(self):
        """Extra income and lower spending both raise the balance."""
        result = simulate_what_if(500, income_change=200, expense_reduction=100)
        assert result.monthly_impact == 300
        assert result.simulated_balance == 800
        assert result.yearly_impact == 3600

    def test_income_loss(self):
        """A negative income change lowers the balance."""
        result = simulate_what_if(500, income_change=-700)
        assert result.simulated_balance == -200
        assert result.yearly_impact == -8400

    def test_no_change(self):
        """Defaults leave the balance unchanged."""
        result = simulate_what_if(42.5)
        assert result.simulated_balance == 42.5
        assert result.monthly_impact == 0


RULE_ORDER = {
    "negative-balance": 0,
    "low-savings": 0,
    "high-variable-expenses": 1,
    "high-debt-ratio": 2,
    "subscription-optimization": 3,
    "emergency-fund": 4,
    "emotional-stress": 5,
}

STRESSED = EmotionalContext(mood=2, tags=["Anxieux"])
CALM = EmotionalContext(mood=7)

RANKING_CASES = [
    pytest.param(
        FinancialData(
            fixed_expenses=[FinancialItem(name="Netflix", amount=20)],
            variable_expenses=items(300),
            debts=items(100),
        ),
        STRESSED,
        id="zero-income-stressed",
    ),
    pytest.param(
        FinancialData(
            income=items(1000),
            fixed_expenses=items(1000),
            assets=[Asset(name="Livret", value=2900)],
        ),
        CALM,
        id="equal-impact-tie",
    ),
    pytest.param(
        FinancialData(
            income=items(3000),
            fixed_expenses=[
                FinancialItem(name="Netflix", amount=15),
                FinancialItem(name="Spotify", amount=10),
            ],
            variable_expenses=items(1200),
        ),
        CALM,
        id="opportunities-only",
    ),
    pytest.param(
        FinancialData(
            income=items(2000),
            fixed_expenses=items(2000),
            variable_expenses=items(700),
            debts=items(1000),
        ),
        STRESSED,
        id="deficit-with-debts",
    ),
    pytest.param(FinancialData(), CALM, id="empty"),
]


class TestRankingInvariant:
    """Ordering holds across a variety of inputs."""

    @pytest.mark.parametrize("data, emotional", RANKING_CASES)
    def test_priority_impact_then_rule_order(self, data, emotional):
        """Priority descends, then impact, then the order the rules run in."""
        insights = calculate_insights(data, emotional)
        keys = [
            (-insight.priority.rank, -insight.impact, RULE_ORDER[insight.id])
            for insight in insights
        ]
        assert keys == sorted(keys)

    @pytest.mark.parametrize("data, emotional", RANKING_CASES)
    def test_same_insights_as_rules_emit(self, data, emotional):
        """Ranking reorders but never adds or drops insights."""
        raw = evaluate_rules(calculate_metrics(data), data, emotional)
        assert sorted(ids(raw)) == sorted(ids(calculate_insights(data, emotional)))

    def test_equal_impact_keeps_rule_order(self):
        """Two medium insights worth 100 each stay in rule order."""
        insights = calculate_insights(
            FinancialData(
                income=items(1000),
                fixed_expenses=items(1000),
                assets=[Asset(name="Livret", value=2900)],
            ),
            CALM,
        )
        assert ids(insights) == ["low-savings", "emergency-fund"]
        assert insights[0].impact == pytest.approx(insights[1].impact)

    def test_deficit_before_smaller_debt_excess(self):
        """Both high: the larger deficit comes first."""
        insights = calculate_insights(
            FinancialData(income=items(2000), fixed_expenses=items(2000), debts=items(1000)),
            CALM,
        )
        assert ids(insights)[:2] == ["negative-balance", "high-debt-ratio"]
        assert insights[0].impact == pytest.approx(1000)
        assert insights[1].impact == pytest.approx(400)

    def test_debt_excess_before_smaller_deficit(self):
        """Both high: a larger debt excess outranks a small deficit."""
        insights = calculate_insights(
            FinancialData(income=items(1000), debts=items(1100)),
            CALM,
        )
        assert ids(insights)[:2] == ["high-debt-ratio", "negative-balance"]
        assert insights[0].impact == pytest.approx(800)
        assert insights[1].impact == pytest.approx(100)


class TestHiddenFees:
    """Tests for the hidden fee detector."""

    def test_nothing_to_report(self):
        """An empty budget has no detections."""
        assert detect_hidden_fees(FinancialData()) == []

    def test_multiple_bank_fees(self):
        """More than one bank, card or account fee is flagged with their total."""
        data = FinancialData(
            income=items(3000),
            fixed_expenses=[
                FinancialItem(name="Frais carte Visa", amount=5),
                FinancialItem(name="Compte joint", amount=3),
                FinancialItem(name="Loyer", amount=800),
            ],
        )
        detections = detect_hidden_fees(data)
        assert [d.id for d in detections] == ["multiple-bank-fees"]
        assert detections[0].amount == pytest.approx(8)
        assert detections[0].type == InsightType.WARNING

    def test_single_bank_fee_ignored(self):
        """One bank fee is normal."""
        data = FinancialData(
            income=items(3000),
            fixed_expenses=[FinancialItem(name="Banque en ligne", amount=2)],
        )
        assert detect_hidden_fees(data) == []

    def test_many_subscriptions(self):
        """Four subscriptions or more are an opportunity."""
        data = FinancialData(
            income=items(3000),
            fixed_expenses=[
                FinancialItem(name="Netflix", amount=15),
                FinancialItem(name="Spotify", amount=10),
                FinancialItem(name="Amazon Prime", amount=7),
                FinancialItem(name="Abonnement gym", amount=30),
            ],
        )
        detection = detect_hidden_fees(data)[0]
        assert detection.id == "many-subscriptions"
        assert detection.type == InsightType.OPPORTUNITY
        assert detection.amount == pytest.approx(62)
        assert "4 abonnements" in detection.description

    def test_three_subscriptions_ignored(self):
        """Three subscriptions stay under the threshold."""
        data = FinancialData(
            income=items(3000),
            fixed_expenses=[
                FinancialItem(name="Netflix", amount=15),
                FinancialItem(name="Spotify", amount=10),
                FinancialItem(name="Amazon Prime", amount=7),
            ],
        )
        assert detect_hidden_fees(data) == []

    def test_variable_overrun_amount(self):
        """The amount is what exceeds 30% of income."""
        data = FinancialData(income=items(2000), variable_expenses=items(800))
        detection = detect_hidden_fees(data)[0]
        assert detection.id == "variable-expenses-overrun"
        assert detection.amount == pytest.approx(200)

    def test_variable_without_income(self):
        """With no income, all variable spending is over the line."""
        detection = detect_hidden_fees(FinancialData(variable_expenses=items(100)))[0]
        assert detection.amount == pytest.approx(100)


class TestScenarioSimulator:
    """Tests for the scenario simulator."""

    @pytest.fixture
    def budget(self):
        return FinancialData(
            income=items(3000),
            fixed_expenses=items(1500),
            variable_expenses=items(500),
        )

    def _scenario(self, scenario_id: str) -> Scenario:
        return next(s for s in PREDEFINED_SCENARIOS if s.id == scenario_id)

    def test_predefined_scenarios(self):
        """Four ready-made scenarios are offered."""
        assert [s.id for s in PREDEFINED_SCENARIOS] == [
            "promotion", "expense-reduction", "side-income", "emergency",
        ]

    def test_promotion(self, budget):
        """+20% income raises the balance by 600 a month."""
        result = simulate_scenario(budget, self._scenario("promotion"))
        assert result.projected_income == pytest.approx(3600)
        assert result.monthly_impact == pytest.approx(600)
        assert result.yearly_impact == pytest.approx(7200)
        assert result.cumulative_impact == pytest.approx(7200)
        assert result.risk_level == RiskLevel.LOW
        assert len(result.balance_projection) == 12
        assert result.balance_projection[0] == pytest.approx(1600)
        assert result.balance_projection[-1] == pytest.approx(8200)
        assert any("fonds d'urgence" in r for r in result.recommendations)

    def test_expense_reduction(self, budget):
        """-15% expenses frees 300 a month."""
        result = simulate_scenario(budget, self._scenario("expense-reduction"))
        assert result.projected_expenses == pytest.approx(1700)
        assert result.monthly_impact == pytest.approx(300)

    def test_side_income(self, budget):
        """Extra income is added on top of the current income."""
        result = simulate_scenario(budget, self._scenario("side-income"))
        assert result.monthly_impact == pytest.approx(500)

    def test_emergency_uses_its_duration(self, budget):
        """Losing 30% of income for 6 months costs 5400."""
        result = simulate_scenario(budget, self._scenario("emergency"))
        assert result.monthly_impact == pytest.approx(-900)
        assert result.yearly_impact == pytest.approx(-10800)
        assert result.cumulative_impact == pytest.approx(-5400)
        assert len(result.balance_projection) == 6
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.recommendations == []

    def test_deficit_is_high_risk(self, budget):
        """A scenario ending in a deficit warns about it."""
        result = simulate_scenario(budget, Scenario(extra_expenses=1500))
        assert result.projected_balance == pytest.approx(-500)
        assert result.risk_level == RiskLevel.HIGH
        assert "déficit" in result.recommendations[0]

    def test_no_change(self, budget):
        """The default scenario changes nothing."""
        result = simulate_scenario(budget, Scenario())
        assert result.monthly_impact == 0
        assert result.balance_projection == [1000.0] * 12

    def test_zero_income(self):
        """No income reads as medium risk, not an error."""
        result = simulate_scenario(FinancialData(), Scenario(income_multiplier=2))
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.monthly_impact == 0
