from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.role import RoleCreate, RoleOut
from taskflow.services.directory import RoleDirectory
from taskflow.utils.auth import admin_required, get_current_user

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.get("", response_model=List[RoleOut])
def list_roles(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return RoleDirectory(db).list_roles()


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(payload: RoleCreate, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return RoleDirectory(db).create_role(payload.name)


@router.put("/{role_id}", response_model=RoleOut)
def rename_role(
    role_id: int,
    payload: RoleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return RoleDirectory(db).rename_role(role_id, payload.name)


@router.delete("/{role_id}")
def delete_role(role_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    """Only roles without active members or task types can be deleted"""
    RoleDirectory(db).delete_role(role_id)
    return {"message": "Role deleted"}
