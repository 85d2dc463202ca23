"""
Verification state definitions.
"""

from enum import Enum


class VerificationState(str, Enum):
    """
    Verification lifecycle of a temple.
    UNVERIFIED -> VERIFIED only; there is no way back.
    """

    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"

    @classmethod
    def of(cls, is_verified: bool) -> "VerificationState":
        return cls.VERIFIED if is_verified else cls.UNVERIFIED

    @property
    def is_terminal(self) -> bool:
        return self is VerificationState.VERIFIED

    def can_transition_to(self, target: "VerificationState") -> bool:
        """Only UNVERIFIED -> VERIFIED moves; staying put is always allowed."""
        if target is self:
            return True
        return self is VerificationState.UNVERIFIED and target is VerificationState.VERIFIED


DEFAULT_VERIFICATION_REMARK = "Verified by admin"
