import pytest

from feedback_hub.database import UnitOfWork
from feedback_hub.models.feedback import Feedback, FeedbackContent, ReviewType
from feedback_hub.stores.children import FeedbackContentStore
from feedback_hub.stores.feedback import FeedbackStore


def _feedback_data(cycle, manager, employee):
    return {
        "cycle_id": cycle.id,
        "from_user_id": manager.id,
        "to_user_id": employee.id,
        "review_type": ReviewType.PEER_REVIEW,
    }


def test_unit_commits_all_writes_together(db_session, cycle, manager, employee):
    feedbacks, contents = FeedbackStore(db_session), FeedbackContentStore(db_session)
    with UnitOfWork(db_session) as uow:
        fb = feedbacks.create(_feedback_data(cycle, manager, employee), uow=uow)
        contents.create({"feedback_id": fb.id, "overall_comment": "Together"}, uow=uow)
        feedback_id = fb.id

    assert feedbacks.find_by_id(feedback_id).content.overall_comment == "Together"


def test_unit_rolls_back_on_error(db_session, cycle, manager, employee):
    feedbacks = FeedbackStore(db_session)
    with pytest.raises(RuntimeError):
        with UnitOfWork(db_session) as uow:
            feedbacks.create(_feedback_data(cycle, manager, employee), uow=uow)
            raise RuntimeError("half way")

    assert db_session.query(Feedback).count() == 0
    assert db_session.query(FeedbackContent).count() == 0


def test_nested_use_commits_once_at_the_outer_level(db_session, cycle, manager, employee):
    feedbacks = FeedbackStore(db_session)
    with pytest.raises(RuntimeError):
        with UnitOfWork(db_session) as uow:
            with uow:
                feedbacks.create(_feedback_data(cycle, manager, employee), uow=uow)
            # The inner block exited cleanly but must not have committed
            raise RuntimeError("outer failure")

    assert db_session.query(Feedback).count() == 0


def test_store_without_unit_commits_immediately(db_session, cycle, manager, employee):
    fb = FeedbackStore(db_session).create(_feedback_data(cycle, manager, employee))
    db_session.rollback()
    assert db_session.get(Feedback, fb.id) is not None
