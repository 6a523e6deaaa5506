from datetime import datetime, timedelta, timezone

import pytest

from factories import make_feedback
from ridematch.services.metrics_service import MetricsService

NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(memory_repo):
    return MetricsService(memory_repo, clock=lambda: NOW)


def _add(repo, ride_id, days_ago=0.5, **overrides):
    repo.append_feedback(make_feedback(ride_id, created_at=NOW - timedelta(days=days_ago), **overrides))


def test_empty_window_is_zeroed(service):
    metrics = service.metrics("week")
    assert metrics.is_empty
    assert metrics.sample_size == 0
    assert metrics.satisfaction_rate == 0
    assert metrics.most_common_context_factors == []
    assert metrics.improvement_areas == []
    assert service.improvement_suggestions("week") == []


def test_rates(memory_repo, service):
    _add(memory_repo, "r1", satisfaction="very_satisfied", price_acceptance="fair", time_acceptance="very_fast")
    _add(memory_repo, "r2", satisfaction="satisfied", price_acceptance="good_value", time_acceptance="acceptable")
    _add(memory_repo, "r3", satisfaction="neutral", price_acceptance="too_expensive", time_acceptance="too_long",
         was_recommended=False, selected_position=4)
    _add(memory_repo, "r4", satisfaction="dissatisfied", price_acceptance="fair", time_acceptance="acceptable",
         selected_position=3)

    metrics = service.metrics("week")

    assert metrics.sample_size == 4
    assert metrics.satisfaction_rate == 0.5
    assert metrics.recommendation_usage_rate == 0.75
    assert metrics.average_selected_position == 2.25
    assert metrics.price_acceptance_rate == 0.75
    assert metrics.time_acceptance_rate == 0.75


def test_window_bounds(memory_repo, service):
    _add(memory_repo, "today", days_ago=0.2)
    _add(memory_repo, "this-week", days_ago=3)
    _add(memory_repo, "this-month", days_ago=20)
    _add(memory_repo, "old", days_ago=45)

    assert service.metrics("day").sample_size == 1
    assert service.metrics("week").sample_size == 2
    assert service.metrics("month").sample_size == 3


def test_top_context_factors(memory_repo, service):
    _add(memory_repo, "r1", context_factors=["Rush hour - high demand", "Rainy weather - increased demand"])
    _add(memory_repo, "r2", context_factors=["Rush hour - high demand"])
    _add(memory_repo, "r3", context_factors=["a", "b", "c", "d", "Rainy weather - increased demand"])

    factors = service.metrics("day").most_common_context_factors

    assert len(factors) == 5
    assert factors[:2] == ["Rush hour - high demand", "Rainy weather - increased demand"]


def test_improvement_areas(memory_repo, service):
    _add(memory_repo, "r1", satisfaction="dissatisfied", price_acceptance="too_expensive",
         time_acceptance="too_long", selected_position=3)
    _add(memory_repo, "r2", satisfaction="satisfied", price_acceptance="fair",
         time_acceptance="acceptable", selected_position=2)

    metrics = service.metrics("week")

    assert metrics.improvement_areas == [
        "User satisfaction needs improvement",
        "Top recommendations not being selected",
        "Price predictions need adjustment",
        "Time estimates need refinement",
    ]


def test_healthy_window_has_no_improvement_areas(memory_repo, service):
    for i in range(5):
        _add(memory_repo, f"r{i}")
    metrics = service.metrics("week")
    assert metrics.improvement_areas == []
    assert metrics.ai_accuracy == pytest.approx(100.0)
    assert metrics.mean_accuracy_score == pytest.approx(67.0)


def test_perfect_rides_need_no_improvement(memory_repo, service):
    for i in range(10):
        _add(memory_repo, f"r{i}", satisfaction="very_satisfied", selected_position=1, ai_score=100,
             user_rating=5, price_acceptance="good_value", time_acceptance="very_fast")

    metrics = service.metrics("week")

    assert metrics.ai_accuracy == 100.0
    assert metrics.mean_accuracy_score == pytest.approx(70.0)
    assert service.improvement_suggestions("week") == []


def test_improvement_suggestions(memory_repo, service):
    _add(memory_repo, "r1", satisfaction="dissatisfied", price_acceptance="too_expensive",
         selected_position=3, ai_score=95, user_rating=2)
    _add(memory_repo, "r2", satisfaction="neutral", price_acceptance="too_expensive", selected_position=4)

    assert service.improvement_suggestions("week") == [
        "Consider adjusting weight distribution in recommendation algorithm",
        "Improve ranking algorithm to surface better top choices",
        "Refine dynamic pricing model based on user feedback",
        "Enhance personalization features and user preference learning",
    ]


def test_metrics_do_not_mutate_the_store(memory_repo, service):
    _add(memory_repo, "r1")
    service.metrics("week")
    service.improvement_suggestions("week")
    assert memory_repo.get_feature_weights() == []
    assert memory_repo.get_profile("rider-1").feedback_count == 0


def test_unknown_window_is_rejected(service):
    with pytest.raises(ValueError):
        service.metrics("year")
