"""
Auth API endpoints: login and user administration.
"""
from fastapi import APIRouter, status

from partnerdb.api.schemas import LoginBody, UserCreateBody, UserUpdateBody
from partnerdb.engine import auth as auth_gate

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
def login_endpoint(body: LoginBody):
    user = auth_gate.login(body.username, body.password)
    return {"success": True, "data": user.to_json()}


@router.get("/users")
def list_users_endpoint():
    return {"success": True, "data": [u.to_json() for u in auth_gate.list_users()]}


@router.post("/users", status_code=status.HTTP_201_CREATED)
def add_user_endpoint(body: UserCreateBody):
    user = auth_gate.add_user(body.name, body.username, body.password, user_id=body.id)
    return {"success": True, "data": user.to_json()}


@router.put("/users/{user_id}")
def update_user_endpoint(user_id: str, body: UserUpdateBody):
    auth_gate.update_user(
        user_id,
        name=body.name,
        username=body.username,
        password=body.password,
        current_password=body.current_password,
    )
    return {"success": True}


@router.delete("/users/{user_id}")
def delete_user_endpoint(user_id: str):
    auth_gate.delete_user(user_id)
    return {"success": True}
