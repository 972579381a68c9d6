# app/routers/admin.py
"""
Superadmin console: agent governance, user management, review moderation,
platform statistics.
Every route here requires role=superadmin.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.dependencies import require_superadmin
from app.schemas.auth import AgentOut, UserOut
from app.schemas.document import DocumentRequest
from app.schemas.review import ReviewOut
from app.services import account_service, admin_service, car_service, review_service
from app.services.auth_service import Principal

router = APIRouter()


class UserActiveUpdate(BaseModel):
    is_active: bool


@router.get("/admin/agents", response_model=list[AgentOut])
def list_agents(status: Optional[str] = None, city: Optional[str] = None,
                principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return admin_service.list_agents(db, status, city)


@router.put("/admin/agents/{agent_id}/approve", response_model=AgentOut)
async def approve_agent(agent_id: int, principal: Principal = Depends(require_superadmin),
                        db: Session = Depends(get_db)):
    return await admin_service.approve_agent(db, agent_id)


@router.put("/admin/agents/{agent_id}/reject", response_model=AgentOut)
def reject_agent(agent_id: int, principal: Principal = Depends(require_superadmin),
                 db: Session = Depends(get_db)):
    return admin_service.reject_agent(db, agent_id)


@router.put("/admin/agents/{agent_id}/suspend", response_model=AgentOut)
def suspend_agent(agent_id: int, principal: Principal = Depends(require_superadmin),
                  db: Session = Depends(get_db)):
    return admin_service.suspend_agent(db, agent_id)


@router.put("/admin/agents/{agent_id}/activate", response_model=AgentOut)
def activate_agent(agent_id: int, principal: Principal = Depends(require_superadmin),
                   db: Session = Depends(get_db)):
    return admin_service.activate_agent(db, agent_id)


@router.post("/admin/agents/{agent_id}/request-documents", response_model=AgentOut)
async def request_documents(agent_id: int, body: DocumentRequest,
                            principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return await admin_service.request_documents(db, agent_id, body.required_documents, body.message)


@router.get("/admin/agents/{agent_id}/revenue")
def agent_revenue(agent_id: int, principal: Principal = Depends(require_superadmin),
                  db: Session = Depends(get_db)):
    return admin_service.agent_revenue(db, agent_id)


@router.get("/admin/users", response_model=list[UserOut])
def list_users(role: Optional[str] = None, principal: Principal = Depends(require_superadmin),
               db: Session = Depends(get_db)):
    return admin_service.list_users(db, role)


@router.put("/admin/users/{user_id}/active", response_model=UserOut)
def set_user_active(user_id: int, body: UserActiveUpdate, principal: Principal = Depends(require_superadmin),
                    db: Session = Depends(get_db)):
    return admin_service.set_user_active(db, user_id, body.is_active)


@router.delete("/admin/users/{user_id}", summary="Delete a renter account without rental history")
def delete_user(user_id: int, principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    account_service.delete_user(db, user_id)
    return {"id": user_id, "status": "deleted"}


@router.get("/admin/reviews", response_model=list[ReviewOut])
def list_reviews(limit: int = 100, principal: Principal = Depends(require_superadmin),
                 db: Session = Depends(get_db)):
    return review_service.list_all_reviews(db, limit)


@router.get("/admin/reviews/pending", response_model=list[ReviewOut], summary="Reviews awaiting moderation")
def pending_reviews(principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return review_service.list_pending_reviews(db)


@router.put("/admin/reviews/{review_id}/approve", response_model=ReviewOut)
def approve_review(review_id: int, principal: Principal = Depends(require_superadmin),
                   db: Session = Depends(get_db)):
    return review_service.set_review_approval(db, review_id, True)


@router.put("/admin/reviews/{review_id}/hide", response_model=ReviewOut)
def hide_review(review_id: int, principal: Principal = Depends(require_superadmin),
                db: Session = Depends(get_db)):
    return review_service.set_review_approval(db, review_id, False)


@router.get("/admin/stats", summary="Platform-wide counters and revenue")
def platform_stats(principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    return admin_service.platform_stats(db)


@router.delete("/admin/cars/{car_id}")
def delete_car(car_id: int, principal: Principal = Depends(require_superadmin), db: Session = Depends(get_db)):
    car_service.delete_car_as_admin(db, car_id)
    return {"id": car_id, "status": "deleted"}
