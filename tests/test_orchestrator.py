import itertools
import math

import pytest

from liveguard.attendance.orchestrator import (
    LIVENESS_FAILED,
    RECOGNIZED,
    SPOOF_REJECTED,
    UNRECOGNIZED,
    SessionBusyError,
    SessionOrchestrator,
    SessionProgress,
)
from liveguard.inference.gallery import GalleryStore
from liveguard.inference.matcher import GalleryEntry


@pytest.fixture
def gallery(vector):
    return (
        GalleryEntry.create("alice", [vector()]),
        GalleryEntry.create("bob", [vector(1.2)]),
    )


@pytest.fixture
def make_orchestrator(gallery, vector):
    def build(query=None, entries=None, **kwargs):
        embedding = vector(0.3) if query is None else query
        kwargs.setdefault("extractor", lambda sample: embedding)
        return SessionOrchestrator(
            gallery_provider=lambda: gallery if entries is None else entries,
            **kwargs,
        )
    return build


def test_live_known_user_is_recognized(make_orchestrator, live_frames):
    outcome = make_orchestrator().run(live_frames())
    assert outcome.outcome == RECOGNIZED
    assert outcome.label == "alice"
    assert outcome.to_dict() == {"outcome": "recognized", "label": "alice", "distance": pytest.approx(0.3, abs=1e-6)}


def test_live_stranger_is_unrecognized(make_orchestrator, live_frames, equidistant_query):
    outcome = make_orchestrator(query=equidistant_query).run(live_frames())
    assert outcome.outcome == UNRECOGNIZED
    assert outcome.distance == pytest.approx(0.7, abs=1e-6)
    assert "label" not in outcome.to_dict()


def test_empty_gallery_reports_null_distance(make_orchestrator, live_frames):
    outcome = make_orchestrator(entries=()).run(live_frames())
    assert outcome.outcome == UNRECOGNIZED
    assert math.isinf(outcome.distance)
    assert outcome.to_dict() == {"outcome": "unrecognized", "distance": None}


def test_no_blinks_fails_liveness(make_orchestrator, live_frames):
    calls = []
    orchestrator = make_orchestrator(extractor=lambda sample: calls.append(sample))
    outcome = orchestrator.run(live_frames(blink_frames=()))
    assert outcome.outcome == LIVENESS_FAILED
    assert outcome.to_dict() == {
        "outcome": "liveness_failed",
        "blinks": 0,
        "headMovement": True,
        "reason": "insufficient_liveness",
    }
    assert calls == []


def test_exhausted_source_fails_even_with_signals(make_orchestrator, live_frames):
    outcome = make_orchestrator().run(live_frames(count=150))
    assert outcome.outcome == LIVENESS_FAILED
    assert outcome.blinks == 2
    assert outcome.head_movement is True
    assert outcome.reason == "source_exhausted"


def test_extractor_sees_last_detected_face(make_orchestrator, live_frames, vector):
    seen = []

    def extractor(sample):
        seen.append(sample.sequence_index)
        return vector(0.3)

    frames = live_frames()
    frames[-1] = None
    make_orchestrator(extractor=extractor).run(frames)
    assert seen == [299]


def test_missing_embedding_fails_liveness(make_orchestrator, live_frames):
    outcome = make_orchestrator(extractor=lambda sample: None).run(live_frames())
    assert outcome.outcome == LIVENESS_FAILED
    assert outcome.reason == "no_embedding"


def test_extractor_error_fails_liveness(make_orchestrator, live_frames):
    def broken(sample):
        raise RuntimeError("model unavailable")

    outcome = make_orchestrator(extractor=broken).run(live_frames())
    assert outcome.reason == "no_embedding"


def test_per_run_extractor_overrides_default(make_orchestrator, live_frames, vector):
    orchestrator = make_orchestrator()
    outcome = orchestrator.run(live_frames(), extractor=lambda sample: vector(1.2))
    assert outcome.label == "bob"


def test_static_tiny_face_is_rejected_as_spoof(make_orchestrator, make_sample):
    frames = [make_sample(i, x=300.0, y=200.0, width=10.0, height=10.0, blink=i % 5 == 0) for i in range(1, 301)]
    outcome = make_orchestrator().run(frames)
    assert outcome.outcome == SPOOF_REJECTED
    assert outcome.spoof_confidence > 0.5
    assert set(outcome.to_dict()) == {"outcome", "spoofConfidence"}


def test_progress_is_yielded_per_frame(make_orchestrator, live_frames):
    session = make_orchestrator().iter_session(live_frames())
    progress = [next(session) for _ in range(10)]
    assert all(isinstance(p, SessionProgress) for p in progress)
    assert [p.frames for p in progress] == list(range(1, 11))
    assert progress[4].blink_detected is True
    assert progress[9].blinks == 2
    session.close()


def test_stop_cancels_running_session(make_orchestrator, live_frames):
    orchestrator = make_orchestrator()
    session = orchestrator.iter_session(live_frames())
    next(session)
    assert orchestrator.is_active()
    orchestrator.stop()
    with pytest.raises(StopIteration) as done:
        next(session)
    outcome = done.value.value
    assert outcome.outcome == LIVENESS_FAILED
    assert outcome.reason == "cancelled"
    assert not orchestrator.is_active()


def test_stop_resolves_from_counters(make_orchestrator, live_frames):
    orchestrator = make_orchestrator()
    session = orchestrator.iter_session(live_frames())
    for _ in range(101):
        next(session)
    orchestrator.stop()
    with pytest.raises(StopIteration) as done:
        next(session)
    assert done.value.value.outcome == RECOGNIZED


def test_second_session_is_refused_while_first_runs(make_orchestrator, live_frames):
    orchestrator = make_orchestrator()
    first = orchestrator.iter_session(live_frames())
    next(first)
    with pytest.raises(SessionBusyError):
        orchestrator.run(live_frames())
    first.close()
    assert not orchestrator.is_active()
    assert orchestrator.run(live_frames()).outcome == RECOGNIZED


def test_sessions_do_not_share_counters(make_orchestrator, live_frames):
    orchestrator = make_orchestrator()
    assert orchestrator.run(live_frames(blink_frames=())).outcome == LIVENESS_FAILED
    second = orchestrator.run(live_frames(blink_frames=range(10, 11), jump_at=None))
    assert second.blinks == 1
    assert second.head_movement is False


def test_wall_clock_limit_ends_session(make_orchestrator, live_frames):
    ticks = itertools.count()
    orchestrator = make_orchestrator(max_seconds=5, clock=lambda: float(next(ticks)))
    outcome = orchestrator.run(live_frames())
    assert outcome.outcome == LIVENESS_FAILED
    assert outcome.reason == "timeout"
    assert outcome.blinks == 1


def test_consumer_receives_outcome_and_errors_are_contained(make_orchestrator, live_frames):
    received = []

    def consumer(outcome):
        received.append(outcome)
        raise RuntimeError("storage down")

    outcome = make_orchestrator(consumer=consumer).run(live_frames())
    assert received == [outcome]


def test_gallery_is_snapshotted_at_session_start(live_frames, vector):
    store = GalleryStore()
    store.enroll("alice", vector(1.0))
    orchestrator = SessionOrchestrator(
        gallery_provider=store.load_gallery,
        extractor=lambda sample: vector(0.1),
    )
    session = orchestrator.iter_session(live_frames())
    next(session)
    store.enroll("carol", vector(0.1))
    with pytest.raises(StopIteration) as done:
        while True:
            next(session)
    assert done.value.value.outcome == UNRECOGNIZED
