"""
User routes. Passwords are accepted on write and never returned.
"""
from fastapi import APIRouter, Body, Depends, HTTPException, status
from typing import List, Optional

from garage.repositories import UserRepository
from garage.routers.deps import get_user_repository, not_found
from garage.schemas.user import User, UserCreate, UserRole, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[User])
async def get_users(
    skip: int = 0,
    limit: int = 100,
    role: Optional[UserRole] = None,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Get all users with pagination and optional role filter.
    """
    if role:
        return (await repo.find_by_role(role))[skip:skip + limit]
    return await repo.find_list(skip, limit)


@router.post("/login", response_model=User)
async def login(
    username: str = Body(...),
    password: str = Body(...),
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Check credentials and return the user.
    """
    user = await repo.authenticate(username, password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )
    return user


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Get a specific user by ID.
    """
    user = await repo.find_by_id(user_id)
    if not user:
        raise not_found("User")
    return user


@router.get("/{user_id}/permissions/{permission}")
async def check_permission(
    user_id: str,
    permission: str,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Whether the user holds ``permission``.
    """
    return {"permission": permission, "granted": await repo.has_permission(user_id, permission)}


@router.post("/", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Create a new user. Permissions default to those of the role.
    """
    return await repo.save(user)


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    user_update: UserUpdate,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Update a user. Changing the role resets permissions unless new ones are given.
    """
    user = await repo.update(user_id, user_update)
    if not user:
        raise not_found("User")
    return user


@router.post("/{user_id}/activate", response_model=User)
async def activate_user(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.activate(user_id)
    if not user:
        raise not_found("User")
    return user


@router.post("/{user_id}/deactivate", response_model=User)
async def deactivate_user(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.deactivate(user_id)
    if not user:
        raise not_found("User")
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    repo: UserRepository = Depends(get_user_repository),
):
    """
    Delete a user.
    """
    if not await repo.delete(user_id):
        raise not_found("User")
    return None
