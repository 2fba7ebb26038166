"""
Session store - persisted bearer credential with an explicit lifecycle

init() loads and validates the stored token, login() obtains and persists a
new one, logout()/teardown() forget it. Views receive the store by reference.
"""

import json
import logging
import os
import time
from pathlib import Path
from typing import Optional, Dict, Union
from jose import JWTError, jwt

from indexer_console.models.auth import UserInfo

logger = logging.getLogger(__name__)


def token_expired(token: str, now: Optional[float] = None) -> bool:
    """
    Check JWT expiry without verifying the signature
    
    Args:
        token: JWT token
        now: Optional current unix time (defaults to time.time())
        
    Returns:
        bool: True if the token is malformed, has no exp claim or is expired
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    
    exp = claims.get("exp")
    if exp is None:
        return True
    
    if now is None:
        now = time.time()
    return float(exp) < now


class SessionStore:
    """Holds the current access token and user, persisted as JSON"""
    
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self.token: Optional[str] = None
        self.user: Optional[UserInfo] = None
    
    @property
    def is_authenticated(self) -> bool:
        return self.token is not None
    
    def init(self) -> bool:
        """
        Read the persisted credential and validate its expiry
        
        Returns:
            bool: True if a valid session was restored
        """
        if not self.path.exists():
            return False
        
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            token = data["token"]
            user = UserInfo(**data["user"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable session file {self.path}: {e}")
            self.clear()
            return False
        
        if token_expired(token):
            logger.info("Stored session expired, clearing it")
            self.clear()
            return False
        
        self.token = token
        self.user = user
        logger.info(f"Session restored for {user.username}")
        return True
    
    async def login(self, client, username: str, password: str) -> UserInfo:
        """
        Log in through the API client and persist the credential
        
        Raises:
            ApiError: Rejected credentials or server failure
        """
        response = await client.login(username, password)
        self.save(response.access_token, response.user)
        logger.info(f"Logged in as {response.user.username}")
        return response.user
    
    def save(self, token: str, user: UserInfo):
        """Keep and persist a credential"""
        self.token = token
        self.user = user
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload: Dict = {"token": token, "user": user.model_dump()}
        # owner-only: the file holds a bearer token
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w') as f:
            json.dump(payload, f)
        os.chmod(self.path, 0o600)
    
    def clear(self):
        """Forget the credential in memory and on disk"""
        self.token = None
        self.user = None
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
    
    def invalidate(self):
        """Called by the API client on 401"""
        if self.token is not None:
            logger.warning("Session rejected by server, logging out")
        self.clear()
    
    def logout(self):
        self.clear()
    
    def teardown(self):
        self.clear()
