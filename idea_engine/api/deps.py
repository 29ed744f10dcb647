"""Request dependencies shared by the v1 routers."""

from uuid import UUID

from fastapi import Header, HTTPException, status


async def get_acting_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> UUID:
    """
    Resolve the acting principal.

    Authentication happens upstream; the gateway forwards the resolved user id
    in the X-User-Id header.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    try:
        return UUID(x_user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header",
        ) from e
