# -*- coding: utf-8 -*-
"""Request identity: trusts the upstream auth gateway.

Token verification happens before requests reach this service; the gateway
forwards the authenticated user id in the ``x-user-id`` header.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Header, HTTPException

USER_HEADER = "x-user-id"


def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> Dict[str, Any]:
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return {"id": user_id}
