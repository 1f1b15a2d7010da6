"""Creator identity for web API. No accounts: the creator is whoever presents the id used at creation."""
from __future__ import annotations

from typing import Optional

from fastapi import Header


async def get_creator_id(
    x_creator_id: Optional[str] = Header(None, alias="X-Creator-Id"),
) -> Optional[str]:
    """Return the caller's creator id, or None if the header is missing or blank."""
    if not x_creator_id or not x_creator_id.strip():
        return None
    return x_creator_id.strip()
