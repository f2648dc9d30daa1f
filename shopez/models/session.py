# shopez/models/session.py

"""Authenticated identity handle."""

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
    """Identity issued by the auth provider for one signed-in user."""

    uid: str
    email: str
    id_token: str
    refresh_token: str = ""
    expires_at: float = 0.0

    def expires_within(self, seconds: float) -> bool:
        """True if the id token expires in less than *seconds*."""
        if not self.expires_at:
            return False
        return self.expires_at - time.time() < seconds
