"""
Organizations API endpoints.

Create an organization, view it, and let its owner add or remove members.
The requester's organization is always read from their User record.
"""
from typing import List
from uuid import UUID
from ninja import Router
from django.http import HttpRequest

from apps.identity.api import require_auth
from apps.identity.services import to_user_dto
from .dtos import (
    MemberAddedOut,
    MemberIn,
    MessageOut,
    OrganizationCreatedOut,
    OrganizationDetailOut,
    OrganizationIn,
)
from apps.identity.dtos import UserSummaryOut
from .services import get_membership_manager

router = Router(tags=["Organizations"])


@router.post("", response={201: OrganizationCreatedOut}, auth=None)
def create_organization(request: HttpRequest, payload: OrganizationIn):
    """
    Create an organization owned by the requester.

    The requester must not belong to an organization yet. The response
    carries the updated user so clients can refresh their local state; the
    bearer token itself is not re-issued.
    """
    user = require_auth(request)
    manager = get_membership_manager()
    organization = manager.create_organization(user, payload.name)
    user.refresh_from_db()
    return 201, {
        "message": "Organization created successfully",
        "organization": organization,
        "user": to_user_dto(user),
    }


@router.get("/my", response=OrganizationDetailOut, auth=None)
def get_my_organization(request: HttpRequest):
    """
    Get the requester's organization with owner and members expanded.
    """
    user = require_auth(request)
    return get_membership_manager().get_my_organization(user)


@router.get("/my/members", response=List[UserSummaryOut], auth=None)
def list_my_members(request: HttpRequest):
    user = require_auth(request)
    return get_membership_manager().list_my_members(user)


@router.post("/{uuid:org_id}/members", response=MemberAddedOut, auth=None)
def add_member(request: HttpRequest, org_id: UUID, payload: MemberIn):
    """
    Add an existing, unaffiliated user to the organization by email.

    Owner only.
    """
    user = require_auth(request)
    member = get_membership_manager().add_member(user, org_id, payload.email)
    return {
        "message": "Member added successfully",
        "member": to_user_dto(member),
    }


@router.delete("/{uuid:org_id}/members/{uuid:member_id}", response=MessageOut, auth=None)
def remove_member(request: HttpRequest, org_id: UUID, member_id: UUID):
    """
    Remove a member from the organization. The owner cannot be removed.

    Owner only. Tasks assigned to the removed user keep their assignee.
    """
    user = require_auth(request)
    get_membership_manager().remove_member(user, org_id, member_id)
    return {"message": "Member removed successfully"}
