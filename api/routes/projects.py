"""
项目API路由 - 个人项目、项目成员与白板快照
"""
from typing import List

from fastapi import APIRouter, Depends, status

from api.dependencies import (
    get_current_user_id,
    get_membership_service,
    get_whiteboard_service,
)
from application.dto import (
    MemberAddDTO,
    MemberDTO,
    MemberRoleDTO,
    ProjectArchiveDTO,
    ProjectCreateDTO,
    ProjectDTO,
    RoleUpdateDTO,
    WhiteboardDTO,
    WhiteboardSaveDTO,
    WhiteboardSavedDTO,
)
from application.services.membership_service import MembershipApplicationService
from application.services.whiteboard_service import WhiteboardApplicationService
from core.response import Response as ApiResponse, success_response

router = APIRouter(prefix="/projects", tags=["项目"])


@router.post(
    "",
    summary="创建个人项目",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ProjectDTO],
)
async def create_personal_project(
    data: ProjectCreateDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    """不属于任何团队的项目；创建者成为项目 Owner"""
    project = await service.create_personal_project(user_id, data)
    return success_response(data=project)


@router.delete("/{project_id}", summary="删除项目", response_model=ApiResponse[None])
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    await service.delete_project(project_id, user_id)
    return success_response(message="Project deleted")


@router.put("/{project_id}/archive", summary="切换项目归档状态", response_model=ApiResponse[ProjectArchiveDTO])
async def toggle_archive(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    """Admin 及以上；每次调用取反 is_archived"""
    result = await service.toggle_project_archive(project_id, user_id)
    return success_response(data=result)


@router.get("/{project_id}/members", summary="项目成员列表", response_model=ApiResponse[List[MemberDTO]])
async def list_members(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    members = await service.list_project_members(project_id, user_id)
    return success_response(data=members)


@router.post(
    "/{project_id}/members",
    summary="添加项目成员",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[MemberDTO],
)
async def add_member(
    project_id: str,
    data: MemberAddDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    member = await service.add_project_member(project_id, user_id, data)
    return success_response(data=member)


@router.put(
    "/{project_id}/members/{member_id}",
    summary="修改项目成员角色",
    response_model=ApiResponse[MemberRoleDTO],
)
async def update_member_role(
    project_id: str,
    member_id: str,
    data: RoleUpdateDTO,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    result = await service.update_project_member_role(project_id, user_id, member_id, data.role_flags)
    return success_response(data=result)


@router.delete("/{project_id}/members/{member_id}", summary="移除项目成员", response_model=ApiResponse[None])
async def remove_member(
    project_id: str,
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MembershipApplicationService = Depends(get_membership_service),
):
    await service.remove_project_member(project_id, user_id, member_id)
    return success_response(message="Member removed")


@router.get("/{project_id}/whiteboard", summary="获取白板", response_model=ApiResponse[WhiteboardDTO])
async def get_whiteboard(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    service: WhiteboardApplicationService = Depends(get_whiteboard_service),
):
    """尚未保存过的项目返回空白板（id 为 null）"""
    board = await service.get(project_id, user_id)
    return success_response(data=board)


@router.put("/{project_id}/whiteboard", summary="保存白板", response_model=ApiResponse[WhiteboardSavedDTO])
async def save_whiteboard(
    project_id: str,
    body: WhiteboardSaveDTO,
    user_id: str = Depends(get_current_user_id),
    service: WhiteboardApplicationService = Depends(get_whiteboard_service),
):
    """整体覆盖保存（last write wins），需要 Editor 及以上"""
    saved = await service.save(project_id, user_id, body.data)
    return success_response(data=saved)
