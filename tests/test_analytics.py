import pytest

from app import calculation
from app.keyboard_layout import UNKNOWN_FINGER, finger_for
from app.report import ErrorCluster, KeyStatRecord
from app.state import ErrorEvent, ErrorKind, HesitationKind, KeystrokeEvent
from services import weakkeys
from services.timing import classify_pause, latency_series

BACKSPACE = "\b"


def _err(pos, kind=ErrorKind.SUBSTITUTION):
    return ErrorEvent(kind, pos, "a", "b", detected_at=float(pos))


def test_error_counts_cover_every_kind(make_session, keyboard):
    s = make_session("hello")
    kb = keyboard(s)
    kb.type("hl" + BACKSPACE + "ex")
    r = s.end_session()
    assert set(r.summary.error_counts) == {k.value for k in ErrorKind}
    assert r.summary.error_counts["omission"] == 1
    assert r.summary.error_counts["substitution"] == 1
    assert r.summary.total_errors == 2
    assert r.summary.uncorrected_errors == 1
    assert 0.0 <= r.summary.accuracy <= 1.0
    assert r.summary.wpm >= 0.0


@pytest.mark.parametrize(
    "ch, prev, pause, kind",
    [
        (",", "i", 0.6, HesitationKind.PUNCTUATION),
        ("a", ".", 2.0, HesitationKind.PUNCTUATION),
        ("C", "a", 0.6, HesitationKind.CASE_CHANGE),
        ("e", " ", 0.6, HesitationKind.WORD_BOUNDARY),
        ("A", " ", 0.6, HesitationKind.WORD_BOUNDARY),
        ("b", "a", 1.5, HesitationKind.LONG_PAUSE),
        ("b", "a", 0.7, HesitationKind.OTHER),
    ],
)
def test_classify_pause(ch, prev, pause, kind):
    assert classify_pause(ch, prev, pause, long_pause=1.0) is kind


def test_hesitation_detected_at_word_boundary(make_session, keyboard):
    s = make_session("ab cd")
    kb = keyboard(s, step=0.1)
    kb.type("ab ")
    kb.pause(0.7)
    kb.type("cd")
    (h,) = s.report.hesitations
    assert h.position == 3
    assert h.character == "c"
    assert h.classification is HesitationKind.WORD_BOUNDARY
    assert h.pause_duration == pytest.approx(0.8)
    assert (h.preceding, h.following) == ("ab ", "d")


def test_short_pauses_are_not_hesitations(make_session, keyboard):
    s = make_session("steady")
    keyboard(s, step=0.5).type("steady")
    assert s.report.hesitations == ()


def test_latency_series_skips_backspaces_and_rejections():
    events = [
        KeystrokeEvent("a", 0.0, correct=True),
        KeystrokeEvent(None, 0.3, is_backspace=True),
        KeystrokeEvent("b", 0.5, accepted=False),
        KeystrokeEvent("c", 0.9, correct=True, position=1),
    ]
    ((event, latency),) = latency_series(events)
    assert event.character == "c"
    assert latency == pytest.approx(0.9)


def test_digraph_stats_from_session(make_session, keyboard):
    s = make_session("abab")
    keyboard(s, step=0.25).type("abab")
    stats = {d.key: d for d in s.report.digraph_stats}
    assert stats["ab"].occurrences == 2
    assert stats["ba"].occurrences == 1
    assert stats["ab"].mean_latency == pytest.approx(0.25)
    assert stats["ab"].error_count == 0


def test_digraphs_follow_text_left_after_backspace(make_session, keyboard):
    s = make_session("ace")
    kb = keyboard(s)
    assert kb.type("ab" + BACKSPACE + "ce") == ["correct", "substitution", "corrected", "correct", "correct"]
    stats = {d.key: d for d in s.report.digraph_stats}
    assert sorted(stats) == ["ab", "ac", "ce"]
    assert stats["ab"].error_count == 1
    assert stats["ac"].error_count == 0


def test_rank_digraphs_needs_repeated_samples():
    rows = [
        KeyStatRecord("zq", 1, 2.0, 1, 1, 2.0),
        KeyStatRecord("th", 3, 0.6, 0, 3, 0.20),
    ]
    assert [r.key for r in weakkeys.rank_digraphs(rows, limit=5)] == ["th"]
    assert [r.key for r in weakkeys.rank_digraphs(rows, limit=5, min_occurrences=1)] == ["zq", "th"]


def test_worst_digraphs_in_report_skip_single_samples(make_session, keyboard):
    s = make_session("abcab")
    keyboard(s, step=0.2).type("abcab")
    worst = s.report.weakness.worst_digraphs
    assert [d.key for d in worst] == ["ab"]


def test_finger_confusions():
    errors = [
        ErrorEvent(ErrorKind.SUBSTITUTION, 0, "j", "k", 1.0),
        ErrorEvent(ErrorKind.SUBSTITUTION, 4, "j", "k", 2.0),
        ErrorEvent(ErrorKind.SUBSTITUTION, 6, "f", "g", 3.0),   # same finger
        ErrorEvent(ErrorKind.INSERTION, 9, None, "x", 4.0),
        ErrorEvent(ErrorKind.OMISSION, 12, "a", ";", 5.0),
    ]
    assert weakkeys.finger_confusions(errors) == {
        "R-Index -> R-Middle": 2,
        "L-Pinky -> R-Pinky": 1,
    }


def test_slow_transitions_use_struck_order():
    events = [
        KeystrokeEvent("t", 0.0, correct=True),
        KeystrokeEvent("h", 0.5, correct=True, position=1),
        KeystrokeEvent(None, 0.6, is_backspace=True, position=2),
        KeystrokeEvent("t", 0.7, correct=True, position=1),
        KeystrokeEvent("h", 1.1, correct=True, position=2),
        KeystrokeEvent("e", 1.2, correct=True, position=3),
        KeystrokeEvent("q", 1.3, accepted=False, position=4),
    ]
    (slow,) = weakkeys.slow_transitions(events, threshold=0.3)
    assert slow.pair == "th"
    assert slow.occurrences == 2
    assert slow.mean_latency == pytest.approx(0.45)
    assert weakkeys.slow_transitions(events, threshold=0.5) == []


def test_report_carries_confusions_and_transitions(make_session, keyboard):
    s = make_session("jjjj")
    kb = keyboard(s, step=0.5)
    kb.type("jk" + BACKSPACE + "jj")
    kb.type("j")
    w = s.report.weakness
    assert w.finger_confusions == {"R-Index -> R-Middle": 1}
    assert [t.pair for t in w.slow_transitions] == ["jj"]


def test_rank_digraphs_worst_first():
    rows = [
        KeyStatRecord("th", 10, 1.0, 0, 10, 0.10),
        KeyStatRecord("he", 4, 1.2, 0, 4, 0.30),
        KeyStatRecord("qu", 2, 0.4, 2, 2, 0.20),
        KeyStatRecord("in", 6, 1.8, 0, 6, 0.30),
    ]
    ranked = weakkeys.rank_digraphs(rows, limit=3)
    assert [r.key for r in ranked] == ["qu", "in", "he"]


def test_error_clusters_split_on_gap():
    errors = [_err(1), _err(5), _err(30)]
    assert weakkeys.error_clusters(errors, gap=10) == [
        ErrorCluster(1, 5, 2),
        ErrorCluster(30, 30, 1),
    ]
    assert weakkeys.error_clusters([], gap=10) == []


def test_rhythm_break_reported(make_session, keyboard):
    s = make_session("abcdefgh")
    kb = keyboard(s, step=0.1)
    kb.type("abcdef")
    kb.pause(0.6)
    kb.type("gh")
    assert s.report.weakness.rhythm_breaks == (6,)


def test_rhythm_break_needs_floor():
    events = [KeystrokeEvent("a", 0.0)] + [
        KeystrokeEvent("a", 0.1 * i, position=i) for i in range(1, 7)
    ]
    series = list(zip(events[1:], [0.1] * 5 + [0.3]))
    assert weakkeys.rhythm_breaks(series, floor=0.4) == []
    assert weakkeys.rhythm_breaks(series, floor=0.25) == [6]


def test_finger_load_blames_expected_key(make_session, keyboard):
    s = make_session("fj")
    kb = keyboard(s)
    assert kb.type("fk") == ["correct", "substitution"]
    load = {f.finger: f for f in s.end_session().finger_load}
    assert load["L-Index"].keystrokes == 1
    assert load["R-Middle"].keystrokes == 1
    assert load["R-Index"].errors == 1
    assert load["R-Middle"].errors == 0
    assert UNKNOWN_FINGER not in load


@pytest.mark.parametrize(
    "ch, finger",
    [("F", "L-Index"), ("!", "L-Pinky"), (" ", "Thumb"), ("\n", "R-Pinky"), ("é", UNKNOWN_FINGER), (None, UNKNOWN_FINGER)],
)
def test_finger_for(ch, finger):
    assert finger_for(ch) == finger


def test_trend_buckets_use_full_width():
    buckets = calculation.bucket_wpm([True, True, True, True], [0.0, 5.0, 12.0, 25.0], 10.0)
    assert [(b[0], b[1], b[2]) for b in buckets] == [(0.0, 10.0, 2), (10.0, 20.0, 1), (20.0, 30.0, 1)]
    assert buckets[0][3] == pytest.approx(2.4)
    assert calculation.bucket_wpm([], [], 10.0) == []


def test_report_trend_from_session(make_session, keyboard):
    s = make_session("abcdef", trend_bucket_seconds=1.0)
    keyboard(s, step=0.5).type("abcdef")
    trend = s.report.trend
    assert len(trend) == 3
    assert sum(b.correct_chars for b in trend) == 6


def test_wpm_and_accuracy_edges():
    assert calculation.wpm(10, 0.0) == 0.0
    assert calculation.wpm(50, 60.0) == pytest.approx(10.0)
    assert calculation.accuracy(0, 0) == 1.0
    assert calculation.accuracy(3, 4) == pytest.approx(0.75)
    assert calculation.median([]) is None


def test_smooth_eases_toward_new_values():
    assert calculation.smooth([]) == []
    assert calculation.smooth([0.0, 8.0], factor=0.25) == [0.0, 2.0]
