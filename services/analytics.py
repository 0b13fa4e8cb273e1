# services/analytics.py
from __future__ import annotations
from typing import Dict
import logging

from app import calculation
from app.config import SessionConfig
from app.report import ReportSummary, RhythmSample, SessionReport, TrendBucket, WeaknessAnalysis
from app.state import ErrorKind, SessionOutcome, SessionState
from services import weakkeys
from services.timing import TimingRecorder, detect_hesitations, latency_series

log = logging.getLogger(__name__)


def build_report(state: SessionState, config: SessionConfig) -> SessionReport:
    """
    Derive the session report from the keystroke and error logs.

    Aggregates are rebuilt by replaying the log, so two sessions with the same
    logs always produce equal reports.
    """
    timing = TimingRecorder()
    for event in state.input_log:
        timing.record(event)

    accepted = state.accepted_characters()
    typed = len(accepted)
    correct = timing.net_correct
    typing_time = timing.typing_time

    if state.input_log:
        end = state.ended_at if state.ended_at is not None else state.last_timestamp
        duration = end - state.input_log[0].timestamp
    else:
        duration = 0.0

    error_counts: Dict[str, int] = {k.value: 0 for k in ErrorKind}
    for e in state.error_log:
        error_counts[e.kind.value] += 1
    fix_times = [e.correction_latency for e in state.error_log if e.corrected]

    series = latency_series(state.input_log)
    t0 = timing.first_ts
    rhythm = tuple(
        RhythmSample(e.timestamp - t0, lat, e.position, e.character) for e, lat in series
    )
    trend = tuple(
        TrendBucket(*bucket)
        for bucket in calculation.bucket_wpm(
            timing.kept_correct,
            [e.timestamp for e in accepted],
            config.trend_bucket_seconds,
        )
    )

    digraphs = weakkeys.stat_records(timing.digraph_stats)
    summary = ReportSummary(
        outcome=state.outcome or SessionOutcome.IN_PROGRESS,
        target_length=len(state.target),
        final_cursor=state.cursor,
        duration=duration,
        typing_time=typing_time,
        total_keystrokes=len(state.input_log),
        typed_characters=typed,
        correct_characters=correct,
        backspaces=timing.backspaces,
        rejected_keystrokes=timing.rejected,
        wpm=calculation.wpm(correct, typing_time),
        accuracy=calculation.accuracy(correct, typed),
        average_latency=calculation.mean(timing.latencies),
        error_counts=error_counts,
        total_errors=len(state.error_log),
        uncorrected_errors=sum(1 for e in state.error_log if not e.corrected),
        mean_correction_latency=calculation.mean(fix_times) if fix_times else None,
        median_correction_latency=calculation.median(fix_times),
    )
    report = SessionReport(
        summary=summary,
        errors=tuple(state.error_log),
        key_stats=tuple(weakkeys.stat_records(timing.key_stats)),
        digraph_stats=tuple(digraphs),
        hesitations=tuple(detect_hesitations(state.input_log, state.target, config)),
        finger_load=tuple(weakkeys.finger_load(timing.key_stats, state.error_log)),
        trend=trend,
        weakness=WeaknessAnalysis(
            worst_digraphs=tuple(
                weakkeys.rank_digraphs(digraphs, config.weakness_limit, config.digraph_min_occurrences)
            ),
            error_clusters=tuple(weakkeys.error_clusters(state.error_log, config.cluster_gap)),
            rhythm_breaks=tuple(weakkeys.rhythm_breaks(series, config.rhythm_break_floor)),
            finger_confusions=weakkeys.finger_confusions(state.error_log),
            slow_transitions=tuple(
                weakkeys.slow_transitions(
                    state.input_log,
                    config.slow_transition_threshold,
                    config.digraph_min_occurrences,
                    config.weakness_limit,
                )
            ),
        ),
        rhythm=rhythm,
    )
    log.debug("Report built: %.1f wpm, %.3f accuracy", summary.wpm, summary.accuracy)
    return report
