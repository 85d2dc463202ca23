"""
Tests for the verification workflow and its state definitions.
"""

import uuid

import pytest

from app.exceptions import InvalidInput, Unauthorized
from app.fsm import DEFAULT_VERIFICATION_REMARK, VerificationState, VerificationWorkflow
from app.models.temple import Temple
from app.schemas.caller import Caller
from app.schemas.temple import TemplePatch


@pytest.fixture
def workflow():
    return VerificationWorkflow(
        creator_roles=["templeAdmin"], privileged_role="admin", active_status="active"
    )


def _temple(owner: uuid.UUID, verified: bool = False) -> Temple:
    return Temple(
        id=uuid.uuid4(),
        temple_name="Shiva Mandir",
        location_city="Pune",
        is_verified=verified,
        verified_by=None,
        verification_remarks="",
        registered_by=owner,
    )


def test_state_transitions():
    assert VerificationState.UNVERIFIED.can_transition_to(VerificationState.VERIFIED)
    assert VerificationState.VERIFIED.can_transition_to(VerificationState.VERIFIED)
    assert not VerificationState.VERIFIED.can_transition_to(VerificationState.UNVERIFIED)
    assert VerificationState.VERIFIED.is_terminal
    assert VerificationState.of(False) is VerificationState.UNVERIFIED


def test_register_requires_active_creator(workflow, temple_admin, admin, devotee):
    workflow.ensure_can_register(temple_admin)
    workflow.ensure_can_register(admin)

    with pytest.raises(Unauthorized):
        workflow.ensure_can_register(devotee)

    suspended = Caller(actor_id=uuid.uuid4(), role="templeAdmin", account_status="suspended")
    with pytest.raises(Unauthorized):
        workflow.ensure_can_register(suspended)


def test_inactive_admin_is_not_privileged(workflow):
    caller = Caller(actor_id=uuid.uuid4(), role="admin", account_status="pending")

    assert not workflow.is_privileged(caller)
    assert workflow.initial_fields(caller)["is_verified"] is False


def test_initial_fields_for_privileged_creator(workflow, admin):
    fields = workflow.initial_fields(admin)

    assert fields == {
        "is_verified": True,
        "verified_by": admin.actor_id,
        "verification_remarks": DEFAULT_VERIFICATION_REMARK,
    }


def test_initial_fields_for_temple_admin(workflow, temple_admin):
    fields = workflow.initial_fields(temple_admin, "please verify")

    assert fields == {"is_verified": False, "verified_by": None, "verification_remarks": ""}


def test_ensure_can_edit(workflow, temple_admin, other_temple_admin, admin):
    temple = _temple(temple_admin.actor_id)

    workflow.ensure_can_edit(temple_admin, temple)
    workflow.ensure_can_edit(admin, temple)
    with pytest.raises(Unauthorized):
        workflow.ensure_can_edit(other_temple_admin, temple)


def test_non_privileged_verification_is_ignored(workflow, temple_admin):
    temple = _temple(temple_admin.actor_id)
    patch = TemplePatch.model_validate({"isVerified": True, "verificationRemarks": "trust me"})

    plan = workflow.plan_patch(temple, temple_admin, patch)
    reported = workflow.apply(temple, plan)

    assert plan == {}
    assert reported == {}
    assert temple.is_verified is False
    assert temple.verified_by is None


def test_privileged_verification_stamps_caller(workflow, temple_admin, admin):
    temple = _temple(temple_admin.actor_id)

    plan = workflow.plan_patch(temple, admin, TemplePatch.model_validate({"isVerified": True}))
    reported = workflow.apply(temple, plan)

    assert temple.is_verified is True
    assert temple.verified_by == admin.actor_id
    assert temple.verification_remarks == DEFAULT_VERIFICATION_REMARK
    assert reported == {
        "isVerified": True,
        "verifiedBy": str(admin.actor_id),
        "verificationRemarks": DEFAULT_VERIFICATION_REMARK,
    }


def test_privileged_remarks_are_kept(workflow, temple_admin, admin):
    temple = _temple(temple_admin.actor_id)
    patch = TemplePatch.model_validate({"isVerified": True, "verificationRemarks": "Site visited"})

    workflow.apply(temple, workflow.plan_patch(temple, admin, patch))

    assert temple.verification_remarks == "Site visited"


def test_revoking_verification_is_rejected(workflow, temple_admin, admin):
    temple = _temple(temple_admin.actor_id, verified=True)

    with pytest.raises(InvalidInput) as exc:
        workflow.plan_patch(temple, admin, TemplePatch.model_validate({"isVerified": False}))

    assert exc.value.field == "isVerified"
    assert temple.is_verified is True


def test_reverifying_keeps_original_verifier(workflow, temple_admin, admin):
    first_admin = uuid.uuid4()
    temple = _temple(temple_admin.actor_id, verified=True)
    temple.verified_by = first_admin

    plan = workflow.plan_patch(temple, admin, TemplePatch.model_validate({"isVerified": True}))

    assert plan == {}
    assert temple.verified_by == first_admin
