from datetime import date

import pydantic
import pytest

from feedback_hub.core.exceptions import NotFoundError
from feedback_hub.models.feedback import Feedback, GoalStatus, ReviewType
from feedback_hub.schemas.feedback import GoalInput, RatingInput
from feedback_hub.services.goal_service import GoalService
from feedback_hub.services.rating_service import RatingService


@pytest.fixture
def feedback(db_session, cycle, manager, employee):
    fb = Feedback(
        cycle_id=cycle.id, from_user_id=manager.id, to_user_id=employee.id, review_type=ReviewType.MANAGER_REVIEW,
    )
    db_session.add(fb)
    db_session.commit()
    return fb


def _goal(title, **extra):
    data = {"title": title, "category": "performance", "priority": "high", "targetDate": "2026-12-31"}
    data.update(extra)
    return GoalInput.model_validate(data)


def test_target_date_accepts_browser_timestamp():
    assert _goal("Ship it", targetDate="2026-12-31T15:00:00.000Z").target_date == date(2026, 12, 31)
    assert _goal("Ship it", targetDate="2026-11-30").target_date == date(2026, 11, 30)
    with pytest.raises(pydantic.ValidationError):
        _goal("Ship it", targetDate="next tuesday")


def test_goal_defaults(db_session, feedback):
    goal = GoalService(db_session).create(feedback.id, _goal("Mentor a junior"))
    assert goal.status == GoalStatus.NOT_STARTED
    assert goal.progress == 0
    assert goal.description == ""


def test_goal_merge_updates_creates_and_drops(db_session, feedback):
    service = GoalService(db_session)
    keep = service.create(feedback.id, _goal("Keep"))
    service.create(feedback.id, _goal("Drop"))

    service.update_for_feedback(feedback.id, [
        _goal("Keep", id=keep.id, status="in_progress", progress=40),
        _goal("New one"),
    ])

    goals = {g.title: g for g in service.find_by_feedback_id(feedback.id)}
    assert set(goals) == {"Keep", "New one"}
    assert goals["Keep"].progress == 40
    assert goals["Keep"].status == GoalStatus.IN_PROGRESS


def test_goal_merge_rejects_foreign_id(db_session, feedback):
    with pytest.raises(NotFoundError):
        GoalService(db_session).update_for_feedback(feedback.id, [_goal("Ghost", id="missing")])


def test_rating_weight_defaults_to_one(db_session, feedback):
    service = RatingService(db_session)
    rating = service.create(feedback.id, RatingInput(category="communication", score=3, max_score=5))
    assert rating.weight == 1.0

    weighted = service.create(feedback.id, RatingInput(category="leadership", score=2, max_score=4, weight=2))
    assert weighted.weight == 2.0
    assert len(service.find_by_feedback_id(feedback.id)) == 2


def test_rating_merge_replaces_list(db_session, feedback):
    service = RatingService(db_session)
    old = service.create(feedback.id, RatingInput(category="communication", score=3, max_score=5))

    service.update_for_feedback(feedback.id, [RatingInput(category="leadership", score=4, max_score=5)])

    ratings = service.find_by_feedback_id(feedback.id)
    assert [r.category for r in ratings] == ["leadership"]
    assert old.id not in {r.id for r in ratings}


def test_delete_by_feedback_id(db_session, feedback):
    service = RatingService(db_session)
    service.create(feedback.id, RatingInput(category="a", score=1, max_score=5))
    service.create(feedback.id, RatingInput(category="b", score=2, max_score=5))
    assert service.delete_by_feedback_id(feedback.id) == 2
    assert service.find_by_feedback_id(feedback.id) == []
