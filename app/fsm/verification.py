"""
Verification Workflow - who may register, edit and verify temples.

Strict transitions: UNVERIFIED -> VERIFIED, and only a privileged caller
(the configured admin role with an active account) can make that move.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from app.config import settings
from app.exceptions import InvalidInput, Unauthorized
from app.fsm.states import DEFAULT_VERIFICATION_REMARK, VerificationState
from app.models.temple import Temple
from app.schemas.caller import Caller
from app.schemas.temple import TemplePatch

logger = logging.getLogger(__name__)


class VerificationWorkflow:
    """Role/status gate plus the verification state machine."""

    def __init__(
        self,
        creator_roles: Optional[Iterable[str]] = None,
        privileged_role: Optional[str] = None,
        active_status: Optional[str] = None,
    ):
        self.creator_roles = set(creator_roles if creator_roles is not None else settings.temple_creator_roles)
        self.privileged_role = privileged_role or settings.privileged_role
        self.active_status = active_status or settings.active_account_status

    # --- Gates ---

    def is_active(self, caller: Optional[Caller]) -> bool:
        return caller is not None and caller.account_status == self.active_status

    def is_privileged(self, caller: Optional[Caller]) -> bool:
        return self.is_active(caller) and caller.role == self.privileged_role

    def ensure_can_register(self, caller: Optional[Caller]) -> None:
        """Only active temple admins (or privileged admins) may register temples."""
        if not self.is_active(caller) or (
            caller.role not in self.creator_roles and caller.role != self.privileged_role
        ):
            raise Unauthorized(
                "You are not authorized to create a temple. Please ensure your "
                "account is active and you are a temple admin."
            )

    def ensure_can_edit(self, caller: Optional[Caller], temple: Temple) -> None:
        """Edits are limited to the registering actor and privileged admins."""
        if not self.is_active(caller):
            raise Unauthorized("Your account must be active to modify a temple.")
        if self.is_privileged(caller):
            return
        if caller.actor_id != temple.registered_by:
            raise Unauthorized("You are not authorized to modify this temple.")

    # --- State machine ---

    def initial_fields(self, caller: Caller, remarks: Optional[str] = None) -> Dict[str, Any]:
        """Verification columns for a temple being created by `caller`."""
        if self.is_privileged(caller):
            return {
                "is_verified": True,
                "verified_by": caller.actor_id,
                "verification_remarks": remarks or DEFAULT_VERIFICATION_REMARK,
            }
        return {
            "is_verified": False,
            "verified_by": None,
            "verification_remarks": "",
        }

    def plan_patch(self, temple: Temple, caller: Caller, patch: TemplePatch) -> Dict[str, Any]:
        """
        Work out the verification changes a patch asks for, without mutating.

        Non-privileged callers get an empty plan: their verification keys
        are dropped, not rejected.
        """
        if not self.is_privileged(caller):
            if patch.is_verified is not None or patch.verification_remarks is not None:
                logger.info(
                    "Ignoring verification fields from non-privileged caller",
                    extra={"temple_id": temple.id, "actor_id": caller.actor_id},
                )
            return {}

        changes: Dict[str, Any] = {}
        current = VerificationState.of(bool(temple.is_verified))

        if patch.is_verified is not None:
            target = VerificationState.of(patch.is_verified)
            if not current.can_transition_to(target):
                raise InvalidInput(
                    "Verification cannot be revoked once granted.", field="isVerified"
                )
            if target is VerificationState.VERIFIED and not current.is_terminal:
                changes["is_verified"] = True
                changes["verified_by"] = caller.actor_id

        if patch.verification_remarks is not None:
            changes["verification_remarks"] = patch.verification_remarks
        elif changes.get("is_verified") and not temple.verification_remarks:
            changes["verification_remarks"] = DEFAULT_VERIFICATION_REMARK

        return changes

    @staticmethod
    def apply(temple: Temple, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a plan from `plan_patch`; returns the document-keyed changes."""
        reported: Dict[str, Any] = {}
        if "is_verified" in changes and changes["is_verified"] != temple.is_verified:
            temple.is_verified = changes["is_verified"]
            reported["isVerified"] = temple.is_verified
        if "verified_by" in changes and changes["verified_by"] != temple.verified_by:
            temple.verified_by = changes["verified_by"]
            reported["verifiedBy"] = str(temple.verified_by)
        if (
            "verification_remarks" in changes
            and changes["verification_remarks"] != temple.verification_remarks
        ):
            temple.verification_remarks = changes["verification_remarks"]
            reported["verificationRemarks"] = temple.verification_remarks
        return reported
