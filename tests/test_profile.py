"""Tests for profile scoring, telemetry counters and reports."""

from tesouro.state.schema import (
    Bars,
    ChoiceType,
    CouncilStance,
    EduMetrics,
    GameState,
    ProfileAxis,
    ProfileScores,
    TurnPhase,
)
from tesouro.systems import profile


class TestScoreCardPlay:
    """Category and balanced increments."""

    def test_balanced_nature_card(self, catalog):
        delta = profile.score_card_play(catalog.card("plant_tree"))
        assert delta == {ProfileAxis.EXPLORER: 3, ProfileAxis.SCIENTIST: 2}

    def test_card_with_negative_pillar(self, catalog):
        delta = profile.score_card_play(catalog.card("build_house"))
        assert delta == {ProfileAxis.BUILDER: 3}

    def test_governance_card(self, catalog):
        delta = profile.score_card_play(catalog.card("town_meeting"))
        assert delta.get(ProfileAxis.GUARDIAN) == 3


class TestScores:
    def test_add_ignores_non_positive(self):
        scores = profile.add_scores(
            ProfileScores(builder=4),
            {ProfileAxis.BUILDER: -3, ProfileAxis.EXPLORER: 2, ProfileAxis.GUARDIAN: 0},
        )
        assert scores.builder == 4
        assert scores.explorer == 2
        assert scores.guardian == 0

    def test_tie_goes_to_first_axis(self):
        assert profile.dominant_profile(ProfileScores(), 40) == ProfileAxis.EXPLORER
        tied = ProfileScores(builder=5, guardian=5)
        assert profile.dominant_profile(tied, 40) == ProfileAxis.BUILDER

    def test_scientist_bonus_from_equilibrium(self):
        """Equilibrium 55 adds round(5.5) = 6 to scientist."""
        adjusted = profile.adjusted_scores(ProfileScores(explorer=5), 55)
        assert adjusted[ProfileAxis.SCIENTIST] == 6
        assert profile.dominant_profile(ProfileScores(explorer=5), 55) == ProfileAxis.SCIENTIST

    def test_no_bonus_below_floor(self):
        adjusted = profile.adjusted_scores(ProfileScores(), 49.9)
        assert adjusted[ProfileAxis.SCIENTIST] == 0


class TestTelemetry:
    """EduMetrics counters."""

    def test_card_play_counters(self, catalog):
        state = GameState(bars=Bars(nature=50, infrastructure=30, governance=30))
        metrics = profile.record_card_play(EduMetrics(), catalog.card("build_house"), state)
        assert metrics.pro_infra_decisions == 1
        assert metrics.total_buildings == 1
        assert metrics.excessive_building == 0

    def test_overdevelopment_counted(self, catalog):
        state = GameState(bars=Bars(nature=10, infrastructure=60, governance=30))
        metrics = profile.record_card_play(EduMetrics(), catalog.card("dirty_transport"), state)
        assert metrics.excessive_building == 1

    def test_event_choice_counters(self):
        metrics = EduMetrics()
        for choice_type in (ChoiceType.SMART, ChoiceType.SMART, ChoiceType.RISKY, ChoiceType.QUICK):
            metrics = profile.record_event_choice(metrics, choice_type)
        assert metrics.smart_choices == 2
        assert metrics.risky_choices == 1
        assert metrics.quick_choices == 1
        assert metrics.total_events_resolved == 4

    def test_council_stance_counters(self):
        metrics = profile.record_council_stance(EduMetrics(), CouncilStance.SUSTAINABLE)
        metrics = profile.record_council_stance(metrics, CouncilStance.NEUTRAL)
        assert metrics.sustainable_councils == 1
        assert metrics.neutral_councils == 1
        assert metrics.total_events_resolved == 2

    def test_turn_health(self):
        metrics = profile.record_turn_health(EduMetrics(), 60)
        metrics = profile.record_turn_health(metrics, 29.9)
        metrics = profile.record_turn_health(metrics, 45)
        assert metrics.turns_in_green == 1
        assert metrics.turns_in_red == 1


class TestTendency:
    def test_beginner(self):
        assert profile.tendency(EduMetrics()) == "beginner"

    def test_overbuilder(self):
        metrics = EduMetrics(pro_infra_decisions=8, excessive_building=6)
        assert profile.tendency(metrics) == "overbuilder"

    def test_urbanist(self):
        metrics = EduMetrics(pro_infra_decisions=6, pro_nature_decisions=2)
        assert profile.tendency(metrics) == "urbanist"

    def test_balanced(self):
        metrics = EduMetrics(pro_nature_decisions=3, pro_infra_decisions=3, pro_gov_decisions=3)
        assert profile.tendency(metrics) == "balanced"


class TestViews:
    """Alerts and the end-of-game report."""

    def test_alerts_for_low_nature(self):
        state = GameState(bars=Bars(nature=15, infrastructure=50, governance=10))
        alerts = profile.alerts(state)
        assert "Nature is almost destroyed!" in alerts
        assert "Too much pollution!" in alerts
        assert "No organization left!" in alerts

    def test_game_over_single_alert(self):
        state = GameState(phase=TurnPhase.GAME_OVER, game_over_reason="equilibrium_collapse")
        assert profile.alerts(state) == ["Game over: equilibrium_collapse"]

    def test_healthy_state_no_alerts(self):
        assert profile.alerts(GameState(bars=Bars(nature=60, infrastructure=40, governance=40))) == []

    def test_report_shape(self):
        state = GameState(
            turn=7,
            profile_scores=ProfileScores(builder=9),
            edu_metrics=EduMetrics(pro_infra_decisions=3),
            total_cards_played=3,
        )
        report = profile.edu_report(state)
        assert report["turn"] == 7
        assert report["dominant_profile"] == "builder"
        assert report["total_decisions"] == 3
        assert report["tendency"] == "urbanist"
        assert report["metrics"]["pro_infra_decisions"] == 3
