"""Tests for the background worker and link triggers."""

import threading

from echolog.linking import BackgroundTaskWorker, LinkTriggers, SimilarityLinker
from echolog.memo_stores.local import LocalMemoStore
from tests.fakes import FailingMemoStore


def test_submitted_tasks_run_in_order(link_worker: BackgroundTaskWorker) -> None:
    results = []

    for i in range(5):
        link_worker.submit(f"task:{i}", results.append, i)
    link_worker.join()

    assert results == [0, 1, 2, 3, 4]
    assert link_worker.stats.submitted == 5
    assert link_worker.stats.completed == 5
    assert link_worker.stats.failed == 0


def test_submit_returns_before_task_runs(link_worker: BackgroundTaskWorker) -> None:
    release = threading.Event()
    done = []

    def slow_task() -> None:
        release.wait(timeout=5)
        done.append(True)

    link_worker.submit("slow", slow_task)
    assert done == []

    release.set()
    link_worker.join()
    assert done == [True]


def test_failing_task_is_counted_and_not_retried(link_worker: BackgroundTaskWorker) -> None:
    attempts = []

    def broken() -> None:
        attempts.append(1)
        raise RuntimeError("boom")

    link_worker.submit("broken", broken)
    link_worker.submit("after", attempts.append, 2)
    link_worker.join()

    assert attempts == [1, 2]
    assert link_worker.stats.failed == 1
    assert link_worker.stats.completed == 1
    assert link_worker.stats.last_error == "broken: boom"
    assert link_worker.is_running


def test_stop_finishes_queued_tasks() -> None:
    worker = BackgroundTaskWorker(name="stopping-worker")
    results = []
    worker.submit("one", results.append, 1)
    worker.submit("two", results.append, 2)

    worker.stop()

    assert results == [1, 2]
    assert not worker.is_running


def test_stop_without_start_is_a_noop() -> None:
    worker = BackgroundTaskWorker()
    worker.stop()
    assert not worker.is_running


def test_trigger_links_created_memo(make_memo, link_worker: BackgroundTaskWorker) -> None:
    a = make_memo("a", [1.0, 0.0])
    b = make_memo("b", [1.0, 0.001])
    store = LocalMemoStore.from_memos([a, b])
    triggers = LinkTriggers(SimilarityLinker(store), link_worker)

    triggers.on_memo_created_or_reembedded(a)
    link_worker.join()

    assert store.get_memo("a").related_memo_ids == ["b"]
    assert store.get_memo("b").related_memo_ids == ["a"]


def test_trigger_skips_memo_without_embedding(
    make_memo, link_worker: BackgroundTaskWorker
) -> None:
    a = make_memo("a")
    triggers = LinkTriggers(SimilarityLinker(LocalMemoStore.from_memos([a])), link_worker)

    triggers.on_memo_created_or_reembedded(a)

    assert link_worker.stats.submitted == 0


def test_trigger_cleans_up_deleted_memo(make_memo, link_worker: BackgroundTaskWorker) -> None:
    x = make_memo("x", [1.0, 0.0])
    a = make_memo("a", [1.0, 0.0], related_memo_ids=["x"])
    store = LocalMemoStore.from_memos([x, a])
    triggers = LinkTriggers(SimilarityLinker(store), link_worker)

    store.soft_delete("x", "alice")
    triggers.on_memo_deleted("x")
    link_worker.join()

    assert store.get_memo("a").related_memo_ids == []


def test_trigger_failures_are_swallowed(make_memo, link_worker: BackgroundTaskWorker) -> None:
    a = make_memo("a", [1.0, 0.0])
    b = make_memo("b", [1.0, 0.001])
    store = FailingMemoStore.from_memos([a, b])
    triggers = LinkTriggers(SimilarityLinker(store), link_worker)

    triggers.on_memo_created_or_reembedded(a)
    triggers.on_memo_deleted("b")
    link_worker.join()

    assert link_worker.stats.submitted == 2
    assert link_worker.stats.failed == 2
    assert store.get_memo("a").related_memo_ids == []
    assert store.get_memo("b").related_memo_ids == []


def test_timed_out_stop_keeps_a_single_consumer() -> None:
    worker = BackgroundTaskWorker(name="slow-stopping-worker")
    release = threading.Event()
    runs = []

    def slow() -> None:
        runs.append(threading.current_thread())
        release.wait(timeout=5)

    def late() -> None:
        runs.append(threading.current_thread())
        runs.append(runs[0].is_alive())

    worker.submit("slow", slow)
    worker.stop(timeout=0.05)
    assert worker.is_running, "A busy worker should still be tracked after stop times out"

    threading.Timer(0.1, release.set).start()
    worker.submit("late", late)
    worker.join()
    worker.stop()

    first_thread, late_thread, first_alive = runs
    assert late_thread is not first_thread
    assert first_alive is False, "The old thread must exit before a new one consumes"
    assert not worker.is_running
