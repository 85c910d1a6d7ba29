"""Tests for the bounded-concurrency aggregation pipeline."""

import threading
import time

import pytest

from helpers import make_pr

from prcost.models import PRCostReport
from prcost.pipeline import run_pipeline, sort_reports


def _report(number: int, total_cost: float) -> PRCostReport:
    return PRCostReport(
        organization="openshift",
        repository="installer",
        number=number,
        lifespan_days=1.0,
        retest_count=0,
        total_cost=total_cost,
    )


def test_run_pipeline_returns_one_report_per_pr_sorted():
    """Verify N pull requests produce N reports ordered by descending cost."""
    prs = [make_pr(number) for number in range(1, 26)]
    costs = {number: float((number * 37) % 11) for number in range(1, 26)}

    reports = run_pipeline(prs, lambda pr: _report(pr.number, costs[pr.number]), max_workers=10)

    assert sorted(report.number for report in reports) == list(range(1, 26))
    for current, following in zip(reports, reports[1:]):
        assert current.total_cost >= following.total_cost


def test_run_pipeline_orders_by_cost_regardless_of_completion():
    """Verify the cheaper PR finishing first does not change the final order."""
    expensive_may_finish = threading.Event()

    def build(pr):
        if pr.number == 1:
            assert expensive_may_finish.wait(timeout=5)
            return _report(1, 120.00)
        report = _report(2, 45.50)
        expensive_may_finish.set()
        return report

    reports = run_pipeline([make_pr(1), make_pr(2)], build, max_workers=10)

    assert [report.total_cost for report in reports] == [120.00, 45.50]


def test_run_pipeline_bounds_in_flight_workers():
    """Verify no more than max_workers reports are built at the same time."""
    lock = threading.Lock()
    in_flight = 0
    peak = 0

    def build(pr):
        nonlocal in_flight, peak
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
        time.sleep(0.01)
        with lock:
            in_flight -= 1
        return _report(pr.number, 1.0)

    reports = run_pipeline([make_pr(number) for number in range(40)], build, max_workers=10)

    assert len(reports) == 40
    assert 1 <= peak <= 10


def test_run_pipeline_failed_worker_does_not_abort_siblings():
    """Verify an unexpected worker exception is replaced by an empty report."""

    def build(pr):
        if pr.number == 2:
            raise RuntimeError("unexpected")
        return _report(pr.number, 10.0)

    reports = run_pipeline([make_pr(1), make_pr(2), make_pr(3)], build)

    assert len(reports) == 3
    assert [report.number for report in reports][-1] == 2
    assert reports[-1].total_cost == 0.0


def test_run_pipeline_empty_input():
    """Verify an empty candidate set yields an empty collection."""
    assert run_pipeline([], lambda pr: _report(pr.number, 0.0)) == []


def test_run_pipeline_rejects_non_positive_bound():
    """Verify the concurrency bound must be positive."""
    with pytest.raises(ValueError):
        run_pipeline([make_pr(1)], lambda pr: _report(pr.number, 0.0), max_workers=0)


def test_sort_reports_is_stable_for_ties():
    """Verify equal-cost reports keep their collection order."""
    reports = [_report(1, 5.0), _report(2, 9.0), _report(3, 5.0)]

    assert [report.number for report in sort_reports(reports)] == [2, 1, 3]


def test_run_pipeline_admits_in_listing_order():
    """Verify pull requests start in the order they were listed."""
    started = []

    def build(pr):
        started.append(pr.number)
        return _report(pr.number, 0.0)

    run_pipeline([make_pr(number) for number in (5, 3, 9, 1, 7)], build, max_workers=1)

    assert started == [5, 3, 9, 1, 7]
