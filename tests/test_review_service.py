# tests/test_review_service.py
"""Unit tests for reviews and the denormalised car rating."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, timedelta
from app.config import settings
from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.rental import RENTAL_COMPLETED, RENTAL_PENDING
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services import review_service


@pytest.fixture
def rented(make_agent, make_car, make_user, make_rental):
    """A user with a completed rental of a car."""
    car = make_car(make_agent())
    user = make_user()
    past = date.today() - timedelta(days=10)
    rental = make_rental(user, car, past, past + timedelta(days=2), status=RENTAL_COMPLETED)
    return user, car, rental


class TestReviews:
    def test_create_updates_average(self, db, rented, make_user, make_rental):
        user, car, rental = rented
        review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                               rating=4, comment="Clean car"))
        second_user = make_user()
        past = date.today() - timedelta(days=20)
        other = make_rental(second_user, car, past, past + timedelta(days=1), status=RENTAL_COMPLETED)
        review_service.create_review(db, second_user.id, ReviewCreate(car_id=car.id, rental_id=other.id,
                                                                      rating=5, comment="Great"))
        db.refresh(car)
        assert float(car.average_rating) == 4.5
        assert review_service.car_rating_summary(db, car.id) == {"average_rating": 4.5, "total_reviews": 2}

    def test_requires_rental_of_car(self, db, make_agent, make_car, make_user, make_rental):
        car = make_car(make_agent())
        user = make_user()
        rental = make_rental(user, car, date.today() + timedelta(days=3), date.today() + timedelta(days=5),
                             status=RENTAL_PENDING)
        with pytest.raises(BadRequestError, match="rented"):
            review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                                   rating=5, comment="?"))

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, db, rented, rating):
        user, car, rental = rented
        with pytest.raises(BadRequestError):
            review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                                   rating=rating, comment="x"))

    def test_update_and_delete_by_owner_only(self, db, rented, make_user):
        user, car, rental = rented
        review = review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                                        rating=2, comment="meh"))
        with pytest.raises(ForbiddenError):
            review_service.update_review(db, review.id, make_user().id, ReviewUpdate(rating=5))

        review_service.update_review(db, review.id, user.id, ReviewUpdate(rating=5))
        db.refresh(car)
        assert float(car.average_rating) == 5.0

        review_service.delete_review(db, review.id, user.id)
        db.refresh(car)
        assert float(car.average_rating) == 0.0
        assert review_service.list_car_reviews(db, car.id) == []


class TestModeration:
    def test_reviews_published_immediately_by_default(self, db, rented):
        user, car, rental = rented
        review = review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                                        rating=4, comment="Fine"))
        assert review.is_approved is True
        assert review_service.list_pending_reviews(db) == []

    def test_held_reviews_wait_for_approval(self, db, rented, monkeypatch):
        monkeypatch.setattr(settings, "REVIEW_AUTO_APPROVE", False)
        user, car, rental = rented
        review = review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                                        rating=3, comment="Held"))
        db.refresh(car)
        assert review.is_approved is False
        assert float(car.average_rating) == 0.0
        assert review_service.list_car_reviews(db, car.id) == []
        assert [r.id for r in review_service.list_pending_reviews(db)] == [review.id]

        review_service.set_review_approval(db, review.id, True)
        db.refresh(car)
        assert float(car.average_rating) == 3.0
        assert [r.id for r in review_service.list_car_reviews(db, car.id)] == [review.id]
        assert review_service.list_pending_reviews(db) == []

    def test_hiding_removes_review_from_rating(self, db, rented):
        user, car, rental = rented
        review = review_service.create_review(db, user.id, ReviewCreate(car_id=car.id, rental_id=rental.id,
                                                                        rating=1, comment="Spam"))
        review_service.set_review_approval(db, review.id, False)
        db.refresh(car)
        assert float(car.average_rating) == 0.0
        assert review_service.car_rating_summary(db, car.id)["total_reviews"] == 0
        assert [r.id for r in review_service.list_all_reviews(db)] == [review.id]

    def test_moderating_unknown_review(self, db):
        with pytest.raises(NotFoundError):
            review_service.set_review_approval(db, 99, True)
