"""MetricsCollector tests: counters, labelled counters, latency histograms, thread safety."""

import threading

from opsconsole.observability.metrics import LATENCY_WINDOW, MetricsCollector


def test_metrics_counter_increment():
    """Counter increments correctly."""
    m = MetricsCollector()
    m.increment("request_count")
    m.increment("request_count", 2)
    out = m.export_metrics()
    assert out["counters"]["request_count"] == 3


def test_metrics_histogram_tracks_latency():
    """Latency summary tracks count, sum, max and percentiles."""
    m = MetricsCollector()
    m.observe_latency("http_request_latency_ms", 10.5)
    m.observe_latency("http_request_latency_ms", 20.0)
    h = m.export_metrics()["histograms"]["http_request_latency_ms"]
    assert h == {"count": 2, "sum": 30.5, "max": 20.0, "p50": 10.5, "p95": 20.0}


def test_metrics_latency_keyed_by_route():
    m = MetricsCollector()
    m.observe_latency("http_request_latency_ms", 5.0, route="/assets/")
    m.observe_latency("http_request_latency_ms", 7.0, route="/users/")
    histograms = m.export_metrics()["histograms"]
    assert histograms["http_request_latency_ms:route=/assets/"]["count"] == 1
    assert histograms["http_request_latency_ms:route=/users/"]["sum"] == 7.0


def test_metrics_access_decisions_separated_by_outcome():
    m = MetricsCollector()
    m.increment("access_decisions_total", labels={"resource": "assets", "action": "read", "outcome": "allowed"})
    m.increment("access_decisions_total", labels={"resource": "assets", "action": "read", "outcome": "allowed"})
    m.increment("access_decisions_total", labels={"resource": "assets", "action": "read", "outcome": "out_of_scope"})
    series = m.export_metrics()["counters_by_labels"]["access_decisions_total"]
    assert series["access_decisions_total:action=read,outcome=allowed,resource=assets"] == 2
    assert series["access_decisions_total:action=read,outcome=out_of_scope,resource=assets"] == 1


def test_metrics_label_order_does_not_matter():
    m = MetricsCollector()
    m.increment("x", labels={"b": "2", "a": "1"})
    m.increment("x", labels={"a": "1", "b": "2"})
    assert m.export_metrics()["counters_by_labels"]["x"] == {"x:a=1,b=2": 2}


def test_metrics_reset():
    m = MetricsCollector()
    m.increment("request_count")
    m.observe_latency("lat", 1.0)
    m.reset()
    assert m.export_metrics() == {"counters": {}, "counters_by_labels": {}, "histograms": {}}


def test_metrics_thread_safe_increments():
    m = MetricsCollector()

    def worker():
        for _ in range(1000):
            m.increment("hits")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert m.export_metrics()["counters"]["hits"] == 8000


def test_metrics_percentiles_use_recent_window_but_totals_do_not():
    m = MetricsCollector()
    for _ in range(LATENCY_WINDOW):
        m.observe_latency("lat", 500.0)
    for _ in range(LATENCY_WINDOW):
        m.observe_latency("lat", 1.0)
    h = m.export_metrics()["histograms"]["lat"]
    assert h["count"] == 2 * LATENCY_WINDOW
    assert h["max"] == 500.0
    assert h["p95"] == 1.0


def test_metrics_unlabelled_and_labelled_counters_are_separate():
    m = MetricsCollector()
    m.increment("access_decisions_total")
    m.increment("access_decisions_total", labels={"outcome": "allowed"})
    out = m.export_metrics()
    assert out["counters"] == {"access_decisions_total": 1}
    assert out["counters_by_labels"] == {"access_decisions_total": {"access_decisions_total:outcome=allowed": 1}}
