"""
团队API路由 - 团队、成员与团队项目
"""
from typing import List

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_user_id, get_membership_service
from application.dto import (
    MemberAddDTO,
    MemberDTO,
    MemberRoleDTO,
    ProjectCreateDTO,
    ProjectDTO,
    RoleUpdateDTO,
    TeamCreateDTO,
    TeamDTO,
)
from application.services.membership_service import MembershipApplicationService
from core.response import Response as ApiResponse, success_response

router = APIRouter(prefix="/teams", tags=["团队"])


@router.post(
    "",
    summary="创建团队",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[TeamDTO],
)
async def create_team(
    data: TeamCreateDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    """创建团队，创建者成为 Owner"""
    team = await service.create_team(user_id, data)
    return success_response(data=team)


@router.delete("/{team_id}", summary="删除团队", response_model=ApiResponse[None])
async def delete_team(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    """仅 Owner 可删除；成员关系一并删除"""
    await service.delete_team(team_id, user_id)
    return success_response(message="Team deleted")


@router.get("/{team_id}/members", summary="团队成员列表", response_model=ApiResponse[List[MemberDTO]])
async def list_members(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    members = await service.list_team_members(team_id, user_id)
    return success_response(data=members)


@router.post(
    "/{team_id}/members",
    summary="添加团队成员",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[MemberDTO],
)
async def add_member(
    team_id: str,
    data: MemberAddDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    """
    添加成员（Admin 及以上）

    - **role_flags**: 为 0 时默认 Viewer
    """
    member = await service.add_team_member(team_id, user_id, data)
    return success_response(data=member)


@router.put("/{team_id}/members/{member_id}", summary="修改成员角色", response_model=ApiResponse[MemberRoleDTO])
async def update_member_role(
    team_id: str,
    member_id: str,
    data: RoleUpdateDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    result = await service.update_team_member_role(team_id, user_id, member_id, data.role_flags)
    return success_response(data=result)


@router.delete("/{team_id}/members/{member_id}", summary="移除团队成员", response_model=ApiResponse[None])
async def remove_member(
    team_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    await service.remove_team_member(team_id, user_id, member_id)
    return success_response(message="Member removed")


@router.post(
    "/{team_id}/projects",
    summary="创建团队项目",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ProjectDTO],
)
async def create_team_project(
    team_id: str,
    data: ProjectCreateDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    """团队 Editor 及以上可创建"""
    project = await service.create_team_project(team_id, user_id, data)
    return success_response(data=project)
