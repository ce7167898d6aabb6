import pytest
from fastapi import HTTPException

from conftest import FakeReviewsRepo, User
from quickcare.application.services.reviews_service import ReviewsService
from quickcare.exceptions import HospitalNotFound


def test_submit_copies_user_name_and_trims_comment(directory):
    svc = ReviewsService(repo=FakeReviewsRepo(), directory=directory)
    review = svc.submit(User(name="Asha"), "hospa", 5, "  Great  ")
    assert review.user_name == "Asha"
    assert review.comment == "Great"
    assert review.rating == 5


def test_second_review_by_same_user_conflicts(directory):
    svc = ReviewsService(repo=FakeReviewsRepo(), directory=directory)
    svc.submit(User(), "hospa", 5, "Great")
    with pytest.raises(HTTPException) as exc:
        svc.submit(User(), "hospa", 5, "Great")
    assert exc.value.status_code == 409


def test_same_user_may_review_another_hospital(directory):
    repo = FakeReviewsRepo()
    svc = ReviewsService(repo=repo, directory=directory)
    svc.submit(User(), "hospa", 4)
    svc.submit(User(), "hospb", 3)
    assert len(repo.reviews) == 2


@pytest.mark.parametrize("rating", [0, 6, 4.5, "5", True, None])
def test_bad_ratings_rejected_before_persistence(directory, rating):
    repo = FakeReviewsRepo()
    svc = ReviewsService(repo=repo, directory=directory)
    with pytest.raises(HTTPException) as exc:
        svc.submit(User(), "hospa", rating)
    assert exc.value.status_code == 400
    assert repo.create_calls == 0


def test_long_comment_rejected(directory):
    repo = FakeReviewsRepo()
    svc = ReviewsService(repo=repo, directory=directory)
    with pytest.raises(HTTPException) as exc:
        svc.submit(User(), "hospa", 4, "x" * 501)
    assert exc.value.status_code == 400
    assert repo.create_calls == 0


def test_unknown_hospital_and_anonymous_user(directory):
    svc = ReviewsService(repo=FakeReviewsRepo(), directory=directory)
    with pytest.raises(HospitalNotFound):
        svc.submit(User(), "nowhere", 4)
    with pytest.raises(HTTPException) as exc:
        svc.submit(None, "hospa", 4)
    assert exc.value.status_code == 401


def test_list_is_newest_first(directory):
    svc = ReviewsService(repo=FakeReviewsRepo(), directory=directory)
    svc.submit(User(id="u1"), "hospa", 3, "first")
    svc.submit(User(id="u2"), "hospa", 4, "second")
    svc.submit(User(id="u3"), "hospb", 5, "elsewhere")
    assert [r.comment for r in svc.list("hospa")] == ["second", "first"]
    assert [r.hospital_id for r in svc.list_for_user("u3")] == ["hospb"]
