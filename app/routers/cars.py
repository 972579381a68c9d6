# app/routers/cars.py
"""Car catalog: public browsing, agent-side listing management."""

from datetime import date
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import Optional
from app.config import settings
from app.database import get_db
from app.dependencies import require_agent
from app.errors import BadRequestError, ForbiddenError
from app.schemas.car import CarAvailabilityOut, CarAvailabilityUpdate, CarCreate, CarOut, CarUpdate
from app.services import car_service
from app.services.auth_service import Principal
from app.services.storage_service import save_upload

router = APIRouter()

IMAGE_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png"}


@router.get("/cars", response_model=list[CarOut], summary="Browse available cars")
def list_cars(
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    transmission: Optional[str] = None,
    fuel_type: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return car_service.list_cars(db, category, min_price, max_price, transmission, fuel_type, search,
                                 limit=limit)


@router.get("/cars/featured", response_model=list[CarOut], summary="Top-rated available cars")
def featured_cars(db: Session = Depends(get_db)):
    return car_service.featured_cars(db)


@router.get("/cars/mine", response_model=list[CarOut], summary="Cars listed by the current agent")
def my_cars(principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    return car_service.list_agent_cars(db, principal.id)


@router.post("/cars", response_model=CarOut, summary="List a new car (approved agents only)")
def create_car(body: CarCreate, principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    return car_service.create_car(db, principal.id, body)


@router.get("/cars/{car_id}", response_model=CarOut)
def get_car(car_id: int, db: Session = Depends(get_db)):
    return car_service.get_car(db, car_id)


@router.get("/cars/{car_id}/availability", response_model=CarAvailabilityOut)
def car_availability(car_id: int, start_date: date, end_date: date, db: Session = Depends(get_db)):
    return car_service.check_availability(db, car_id, start_date, end_date)


@router.put("/cars/{car_id}", response_model=CarOut)
def update_car(car_id: int, body: CarUpdate, principal: Principal = Depends(require_agent),
               db: Session = Depends(get_db)):
    return car_service.update_car(db, car_id, principal.id, body)


@router.put("/cars/{car_id}/availability", response_model=CarOut, summary="List or unlist a car")
def set_availability(car_id: int, body: CarAvailabilityUpdate, principal: Principal = Depends(require_agent),
                     db: Session = Depends(get_db)):
    return car_service.set_availability(db, car_id, principal.id, body.is_available)


@router.post("/cars/{car_id}/images", response_model=CarOut, summary="Attach photos to a car")
async def upload_images(car_id: int, files: list[UploadFile] = File(...),
                        principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    car = car_service.get_car(db, car_id)
    if car.agent_id != principal.id:
        raise ForbiddenError("You can only update your own cars")

    payloads = []
    for upload in files:
        content = await upload.read()
        if (upload.content_type or "").lower() not in IMAGE_MIME_TYPES:
            raise BadRequestError(f"Unsupported image type: {upload.content_type}")
        if len(content) > settings.DOCUMENT_MAX_BYTES:
            raise BadRequestError("Image exceeds the maximum upload size")
        payloads.append((upload.filename, content))

    paths = [save_upload("cars", car_id, name, content) for name, content in payloads]
    return car_service.add_images(db, car_id, principal.id, paths)


@router.delete("/cars/{car_id}", summary="Remove a car without rental history")
def delete_car(car_id: int, principal: Principal = Depends(require_agent), db: Session = Depends(get_db)):
    car_service.delete_car(db, car_id, principal.id)
    return {"id": car_id, "status": "deleted"}
