from __future__ import annotations

import binascii
import logging
import secrets
from base64 import b64decode
from typing import Callable, Optional, Tuple

from fastapi import Depends, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

log = logging.getLogger(__name__)

REALM = "Restricted"


def _matches(given: str, expected: str) -> bool:
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def read_basic_credentials(request: Request) -> Optional[Tuple[str, str]]:
    """
    Decode `Authorization: Basic ...` as UTF-8 `user:password`.

    Returns None when the header is absent, not Basic, or malformed.
    """
    scheme, param = get_authorization_scheme_param(request.headers.get("Authorization"))
    if not param or scheme.lower() != "basic":
        return None
    try:
        decoded = b64decode(param, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    user, sep, password = decoded.partition(":")
    if not sep:
        return None
    return user, password


def basic_auth_gate(user: str, password: str) -> Callable:
    """
    Returns a dependency that admits only the given Basic credentials.

    Missing or wrong credentials -> 401 with a Basic challenge.
    """

    def check(request: Request) -> str:
        credentials = read_basic_credentials(request)
        if credentials is not None:
            user_ok = _matches(credentials[0], user)
            password_ok = _matches(credentials[1], password)
            if user_ok and password_ok:
                return credentials[0]

        log.warning("Rejected request: %s", "bad credentials" if credentials else "no credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )

    return check


def gate_dependencies(basic_auth: Optional[Tuple[str, str]]) -> list:
    """App-level dependencies: the gate when configured, otherwise none."""
    if basic_auth is None:
        return []
    return [Depends(basic_auth_gate(*basic_auth))]
