from datetime import date, timedelta
from unittest.mock import patch

import pytest

from feedback_hub.core.exceptions import AccessDeniedError, ValidationError
from feedback_hub.models.cycle import CycleStatus
from feedback_hub.models.feedback import Feedback, FeedbackStatus
from feedback_hub.models.hierarchy import OrganizationalHierarchy
from feedback_hub.schemas.feedback import CreateFeedbackRequest
from feedback_hub.services.feedback_service import FeedbackService
from feedback_hub.services.goal_service import GoalService


def _request(cycle, to_user, review_type="peer_review", score=4, strengths=None, goal_status=None):
    goal = {
        "title": "Improve onboarding docs",
        "category": "communication",
        "priority": "medium",
        "targetDate": (date.today() + timedelta(days=30)).isoformat(),
    }
    if goal_status:
        goal["status"] = goal_status
    return CreateFeedbackRequest.model_validate({
        "cycleId": cycle.id,
        "toUserId": to_user.id,
        "reviewType": review_type,
        "content": {
            "overallComment": "Keep going",
            "strengths": strengths or [],
            "areasForImprovement": ["Estimation"],
        },
        "ratings": [{"category": "performance", "score": score, "maxScore": 5}],
        "goals": [goal],
    })


def _complete(service, feedback, author):
    service.submit_feedback(feedback.id, author.id)
    return service.complete_feedback(feedback.id, author.id)


def test_summary_aggregates_completed_feedback(db_session, cycle, manager, peer, employee):
    service = FeedbackService(db_session)
    first = service.create_feedback(
        manager.id, _request(cycle, employee, "manager_review", 4, ["Ownership", "Testing"], "completed")
    )
    second = service.create_feedback(peer.id, _request(cycle, employee, "peer_review", 3, [" ownership "]))
    _complete(service, first, manager)
    _complete(service, second, peer)
    # A draft never counts towards the averages
    service.create_feedback(manager.id, _request(cycle, employee, "project_review", 1, ["Ignored"]))

    summary = service.get_feedback_summary(employee.id, requesting_user=employee)

    assert summary.total_feedback == 3
    assert summary.completed_feedback == 2
    assert summary.pending_feedback == 0
    assert summary.average_rating == 70.0
    assert summary.top_strengths[0] == "ownership"
    assert "ignored" not in summary.top_strengths
    assert summary.top_areas_for_improvement == ["estimation"]
    assert summary.goal_completion_rate == 50.0


def test_summary_of_empty_history(db_session, employee):
    summary = FeedbackService(db_session).get_feedback_summary(employee.id)
    assert summary.total_feedback == 0
    assert summary.average_rating == 0.0
    assert summary.goal_completion_rate == 0.0
    assert summary.top_strengths == []


def test_summary_access_rules(db_session, org, manager, peer, employee, hr_user):
    service = FeedbackService(db_session)
    with pytest.raises(AccessDeniedError):
        service.get_feedback_summary(employee.id, requesting_user=peer)
    with pytest.raises(AccessDeniedError):
        service.get_feedback_summary(employee.id, requesting_user=manager)

    db_session.add(OrganizationalHierarchy(
        organization_id=org.id, manager_id=manager.id, employee_id=employee.id, level=1, is_active=True,
    ))
    db_session.commit()

    assert service.get_feedback_summary(employee.id, requesting_user=manager).total_feedback == 0
    assert service.get_feedback_summary(employee.id, requesting_user=hr_user).total_feedback == 0


def test_feedback_only_in_active_cycle(db_session, cycle, manager, employee):
    cycle.status = CycleStatus.CLOSED
    db_session.commit()
    with pytest.raises(ValidationError):
        FeedbackService(db_session).create_feedback(manager.id, _request(cycle, employee))


def test_failed_create_leaves_nothing_behind(db_session, cycle, manager, employee):
    with patch.object(GoalService, "create", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            FeedbackService(db_session).create_feedback(manager.id, _request(cycle, employee))

    assert db_session.query(Feedback).count() == 0


def test_acknowledged_status_cannot_be_set_by_author(db_session, cycle, manager, employee):
    from feedback_hub.schemas.feedback import UpdateFeedbackRequest

    service = FeedbackService(db_session)
    created = service.create_feedback(manager.id, _request(cycle, employee))
    with pytest.raises(ValidationError):
        service.update_feedback(created.id, UpdateFeedbackRequest(status=FeedbackStatus.ACKNOWLEDGED), manager.id)


def test_cycle_summary_counts_whole_cycle(db_session, cycle, manager, peer, employee):
    service = FeedbackService(db_session)
    fb = service.create_feedback(manager.id, _request(cycle, employee, "manager_review"))
    service.create_feedback(employee.id, _request(cycle, peer, "peer_review"))
    service.submit_feedback(fb.id, manager.id)

    summary = service.get_feedback_summary(employee.id, cycle_id=cycle.id)
    assert summary.total_feedback == 2
    assert summary.pending_feedback == 1
    assert summary.completed_feedback == 0
