"""End-to-end tests: session wiring, effect dispatch and analytics flow."""

import pytest

from smartrest.analytics.reporter import AnalyticsReporter, SqlAnalyticsSink
from smartrest.database.db import get_session
from smartrest.database.models import RestAnalyticsRecord
from smartrest.effects import EffectDispatcher
from smartrest.feedback.haptics import FeedbackSink, NullFeedbackSink, RecordingFeedbackSink
from smartrest.preferences.gateway import PreferenceGateway
from smartrest.session import RestSession
from smartrest.suggestions.engine import SuggestionEngine
from smartrest.timer.engine import RestTimer, TimerMode, TimerPhase

from helpers import (
    FailingAnalyticsSink,
    MemoryPreferenceStore,
    SignalCollector,
    make_context,
    run_now,
)


class ExplodingSink(FeedbackSink):
    def _deliver(self, tag):
        raise RuntimeError("haptic engine crashed")


@pytest.fixture
def feedback():
    return RecordingFeedbackSink()


@pytest.fixture
def make_session(qapp, clock, gateway, reporter, feedback):
    def factory(baseline=None, **kwargs):
        kwargs.setdefault("gateway", gateway)
        kwargs.setdefault("reporter", reporter)
        kwargs.setdefault("sink", feedback)
        return RestSession(
            "u1",
            "w1",
            engine=SuggestionEngine(baseline),
            clock=clock,
            **kwargs,
        )
    return factory


# ═══════════════════════════════════════════════════════════════════════════
#  SUGGESTION → TIMER
# ═══════════════════════════════════════════════════════════════════════════


class TestSuggestionFlow:

    def test_context_seeds_timer_from_history(self, make_session):
        session = make_session(lambda u, c: 120)
        session.update_context(make_context())
        assert session.timer.current_time == 120
        assert session.timer.suggested_time == 120
        assert session.timer.mode == TimerMode.ADAPTIVE

    def test_context_uses_default_without_history(self, make_session, store):
        store.rows["u1"] = {"default_rest_time": 75}
        session = make_session()
        session.update_context(make_context())
        assert session.timer.current_time == 75

    def test_suggestions_signal(self, make_session):
        session = make_session()
        c = SignalCollector()
        session.suggestions_changed.connect(c)
        session.update_context(make_context(is_compound_movement=True))
        assert [s.reason for s in c.last] == [s.reason for s in session.suggestions]
        assert len(c.last) == 4

    def test_new_set_resets_running_timer(self, make_session, clock):
        session = make_session()
        session.update_context(make_context(set_number=1))
        session.timer.start()
        clock.advance(30)
        session.update_context(make_context(set_number=2))
        assert session.timer.current_time == 90
        assert session.timer.is_running is False

    def test_empty_exercise_name_skips_calculation(self, make_session):
        session = make_session(lambda u, c: pytest.fail("no lookup expected"))
        assert session.update_context(make_context(exercise_name="")) is None
        assert session.suggestions == []

    def test_adaptive_disabled_is_auto_mode(self, make_session, store):
        store.rows["u1"] = {"adaptive_rest_enabled": False, "default_rest_time": 60}
        session = make_session(lambda u, c: 200)
        session.update_context(make_context())
        assert session.timer.current_time == 60
        assert session.timer.mode == TimerMode.AUTO

    def test_start_with_alternative(self, make_session):
        session = make_session()
        session.update_context(make_context())
        quick = [s for s in session.suggestions if s.reason == "Quick recovery"][0]
        session.start_with(quick)
        assert session.timer.current_time == 68
        assert session.timer.is_running


class TestAutoStart:

    def test_begin_interval_auto_starts(self, make_session):
        session = make_session()
        session.begin_interval(make_context())
        assert session.timer.is_running

    def test_begin_interval_respects_preference(self, make_session, store):
        store.rows["u1"] = {"auto_start_rest": False}
        session = make_session()
        session.begin_interval(make_context())
        assert session.timer.is_running is False

    def test_empty_exercise_does_not_start(self, make_session, clock, analytics_sink):
        session = make_session()
        session.begin_interval(make_context())
        clock.advance(90)
        assert len(analytics_sink.records) == 1

        assert session.begin_interval(make_context(exercise_name="")) is None
        assert session.timer.is_running is False
        clock.advance(5)
        assert len(analytics_sink.records) == 1

    def test_pinned_restarts_from_pinned_time(self, make_session, clock):
        session = make_session(initial_time=40)
        session.begin_interval(make_context())
        clock.advance(40)
        assert session.timer.is_completed

        session.begin_interval(make_context(exercise_name=""))
        assert session.timer.is_running
        assert session.timer.current_time == 40


# ═══════════════════════════════════════════════════════════════════════════
#  PINNED INITIAL TIME
# ═══════════════════════════════════════════════════════════════════════════


class TestPinnedTime:

    def test_initial_time_survives_recalculation(self, make_session):
        session = make_session(lambda u, c: 150, initial_time=45)
        session.update_context(make_context())
        assert session.timer.current_time == 45
        assert session.timer.suggested_time == 150
        assert session.timer.mode == TimerMode.MANUAL

    def test_pinned_running_timer_keeps_counting(self, make_session, clock):
        session = make_session(lambda u, c: 150, initial_time=60)
        session.timer.start()
        clock.advance(10)
        session.update_context(make_context(set_number=2))
        assert session.timer.current_time == 50
        assert session.timer.is_running

    def test_unpin_returns_to_suggestions(self, make_session):
        session = make_session(lambda u, c: 150, initial_time=45)
        session.update_context(make_context())
        session.unpin()
        assert session.is_pinned is False
        assert session.timer.current_time == 150
        assert session.timer.mode == TimerMode.ADAPTIVE

    def test_pin_later(self, make_session):
        session = make_session()
        session.update_context(make_context())
        session.pin_initial_time(30)
        session.update_context(make_context(set_number=2))
        assert session.timer.current_time == 30


# ═══════════════════════════════════════════════════════════════════════════
#  EFFECTS
# ═══════════════════════════════════════════════════════════════════════════


class TestEffects:

    def test_feedback_tags(self, make_session, feedback, clock):
        session = make_session()
        session.update_context(make_context())
        session.timer.start(12)
        clock.advance(12)
        # 11 is above the threshold, 10..1 are not
        assert feedback.tags == ["start"] + ["low-time-tick"] * 10 + ["complete"]

    def test_all_tags(self, make_session, feedback):
        session = make_session()
        session.update_context(make_context())
        t = session.timer
        t.start()
        t.adjust(10)
        t.stop()
        t.reset()
        t.skip()
        assert feedback.tags == ["start", "adjust", "stop", "reset", "skip"]

    def test_notifications_disabled(self, make_session, feedback):
        session = make_session()
        session.update_preferences(rest_notifications_enabled=False)
        session.update_context(make_context())
        session.timer.start()
        session.timer.skip()
        assert feedback.tags == []

    def test_unsupported_sink_is_silent(self, make_session, analytics_sink):
        session = make_session(sink=NullFeedbackSink())
        session.update_context(make_context())
        session.timer.start()
        session.timer.skip()
        assert len(analytics_sink.records) == 1

    def test_failing_feedback_does_not_break_timer(self, make_session, clock, caplog):
        session = make_session(sink=ExplodingSink())
        session.update_context(make_context())
        session.timer.start(5)
        clock.advance(5)
        assert session.timer.is_completed
        assert "Feedback sink failed" in caplog.text

    def test_failing_analytics_does_not_break_timer(self, make_session, caplog):
        reporter = AnalyticsReporter(FailingAnalyticsSink(), defer=run_now)
        session = make_session(reporter=reporter)
        session.update_context(make_context())
        session.timer.start()
        session.timer.skip()
        assert session.timer.phase == TimerPhase.SKIPPED
        assert "Dropping rest analytics" in caplog.text

    def test_dispatcher_without_context_records_nothing(self, qapp, clock, reporter, analytics_sink):
        t = RestTimer(clock=clock)
        EffectDispatcher(t, reporter=reporter)
        t.start()
        t.skip()
        assert analytics_sink.records == []


# ═══════════════════════════════════════════════════════════════════════════
#  ANALYTICS
# ═══════════════════════════════════════════════════════════════════════════


class TestAnalyticsFlow:

    def test_completion_records_once(self, make_session, clock, analytics_sink):
        session = make_session()
        session.update_context(make_context())
        session.timer.start()
        clock.advance(90)
        clock.advance(10)

        assert len(analytics_sink.records) == 1
        rec = analytics_sink.records[0]
        assert rec.was_skipped is False
        assert rec.actual_time == 90
        assert rec.suggested_time == 90
        assert rec.exercise_name == "Bench Press"

    def test_skip_records_elapsed(self, make_session, clock, analytics_sink):
        session = make_session()
        session.update_context(make_context())
        session.timer.start()
        clock.advance(45)
        clock.elapse(3)
        session.timer.skip()

        rec = analytics_sink.records[0]
        assert rec.was_skipped is True
        assert rec.actual_time == 48

    def test_stop_records_nothing(self, make_session, clock, analytics_sink):
        session = make_session()
        session.update_context(make_context())
        session.timer.start()
        clock.advance(20)
        session.timer.stop()
        assert analytics_sink.records == []

    def test_no_workout_id_records_nothing(self, qapp, clock, gateway, reporter, analytics_sink):
        session = RestSession("u1", None, gateway=gateway, reporter=reporter,
                              engine=SuggestionEngine(), clock=clock)
        session.update_context(make_context())
        session.timer.start()
        session.timer.skip()
        assert analytics_sink.records == []

    def test_performance_rating_attached_once(self, make_session, analytics_sink):
        session = make_session()
        session.update_context(make_context())
        session.set_performance_rating(8)
        session.timer.start()
        session.timer.skip()
        session.timer.start(30)
        session.timer.skip()
        assert analytics_sink.records[0].performance_rating == 8
        assert analytics_sink.records[1].performance_rating is None

    def test_rating_range(self, make_session):
        with pytest.raises(ValueError):
            make_session().set_performance_rating(11)

    def test_records_feed_next_baseline(self, qapp, clock):
        from smartrest.analytics.baseline import HistoricalBaseline

        gateway = PreferenceGateway(MemoryPreferenceStore(), defer=run_now)
        session = RestSession(
            "u1", "w1",
            gateway=gateway,
            engine=SuggestionEngine(HistoricalBaseline()),
            reporter=AnalyticsReporter(SqlAnalyticsSink(), defer=run_now),
            clock=clock,
        )
        session.update_context(make_context(set_number=1))
        session.timer.start(100)
        clock.advance(100)

        with get_session() as db:
            assert db.query(RestAnalyticsRecord).count() == 1

        session.update_context(make_context(set_number=2))
        assert session.timer.current_time == 100


# ═══════════════════════════════════════════════════════════════════════════
#  PREFERENCES
# ═══════════════════════════════════════════════════════════════════════════


class TestSessionPreferences:

    def test_preferences_loaded_on_construction(self, make_session, store):
        store.rows["u1"] = {"default_rest_time": 110}
        assert make_session().preferences.default_rest_time == 110

    def test_update_preferences_is_saved(self, make_session, store):
        session = make_session()
        session.update_preferences(default_rest_time=100)
        assert session.preferences.default_rest_time == 100
        assert store.rows["u1"]["default_rest_time"] == 100

    def test_disable_adaptive_switches_mode(self, make_session):
        session = make_session()
        session.update_preferences(adaptive_enabled=False)
        assert session.timer.mode == TimerMode.AUTO
