"""FSM package for temple verification state."""

from app.fsm.states import VerificationState, DEFAULT_VERIFICATION_REMARK
from app.fsm.verification import VerificationWorkflow

__all__ = ["VerificationState", "DEFAULT_VERIFICATION_REMARK", "VerificationWorkflow"]
