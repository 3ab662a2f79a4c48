from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from physiohome.auth.dependencies import get_current_actor
from physiohome.auth.policy import Actor
from physiohome.database import get_db
from physiohome.models.user import User

router = APIRouter(tags=['auth'])


@router.get("/me")
def me(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    user = db.get(User, actor.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": actor.role,
    }
