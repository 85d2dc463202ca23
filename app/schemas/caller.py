"""Identity of the actor performing an operation."""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class Caller:
    """
    Supplied by the auth gateway for every request and passed explicitly
    into each registry operation. The registry only reads role and status.
    """

    actor_id: uuid.UUID
    role: str
    account_status: str
