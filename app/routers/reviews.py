# app/routers/reviews.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require_user
from app.schemas.review import RatingSummaryOut, ReviewCreate, ReviewOut, ReviewUpdate
from app.services import review_service
from app.services.auth_service import Principal

router = APIRouter()


@router.post("/reviews", response_model=ReviewOut, summary="Review a rented car")
def create_review(body: ReviewCreate, principal: Principal = Depends(require_user),
                  db: Session = Depends(get_db)):
    return review_service.create_review(db, principal.id, body)


@router.get("/reviews/me", response_model=list[ReviewOut])
def my_reviews(principal: Principal = Depends(require_user), db: Session = Depends(get_db)):
    return review_service.list_user_reviews(db, principal.id)


@router.get("/reviews/car/{car_id}", response_model=list[ReviewOut])
def car_reviews(car_id: int, db: Session = Depends(get_db)):
    return review_service.list_car_reviews(db, car_id)


@router.get("/reviews/car/{car_id}/rating", response_model=RatingSummaryOut)
def car_rating(car_id: int, db: Session = Depends(get_db)):
    return review_service.car_rating_summary(db, car_id)


@router.put("/reviews/{review_id}", response_model=ReviewOut)
def update_review(review_id: int, body: ReviewUpdate, principal: Principal = Depends(require_user),
                  db: Session = Depends(get_db)):
    return review_service.update_review(db, review_id, principal.id, body)


@router.delete("/reviews/{review_id}")
def delete_review(review_id: int, principal: Principal = Depends(require_user), db: Session = Depends(get_db)):
    review_service.delete_review(db, review_id, principal.id)
    return {"id": review_id, "status": "deleted"}
