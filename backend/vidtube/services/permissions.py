from uuid import UUID

from fastapi import HTTPException, status


def is_owner(actor_id: UUID, owner_id: UUID) -> bool:
    return actor_id == owner_id


def ensure_owner(actor_id: UUID, owner_id: UUID, detail: str = "You are not the owner of this resource") -> None:
    if not is_owner(actor_id, owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
