"""
Users Management API (admin-only, scoped to the admin's organization).
list (paginated), create member, retrieve, patch, delete, change role.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts import services
from accounts.models import Role
from accounts.permissions import IsAdmin
from accounts.serializers import (
    MemberCreateSerializer,
    RoleSerializer,
    UserSerializer,
    UserUpdateSerializer,
)


class UsersPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


ORDERING_FIELDS = ('display_name', 'email', 'created_at')


def _list_users(request):
    """
    Query params: page, page_size, role (admin|member), search, ordering
    """
    role_filter = request.query_params.get('role')
    if role_filter not in Role.values:
        role_filter = None
    search = (request.query_params.get('search') or '').strip()
    ordering = request.query_params.get('ordering', '-created_at')
    if ordering.lstrip('-') not in ORDERING_FIELDS:
        ordering = '-created_at'

    qs = services.list_users(request.user, role=role_filter, search=search).order_by(ordering)
    paginator = UsersPagination()
    page = paginator.paginate_queryset(qs, request)
    return paginator.get_paginated_response(UserSerializer(page, many=True).data)


def _create_member(request):
    """Body: email, uniqueId, password, displayName, position, userInterests, phone, notificationPreference"""
    serializer = MemberCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.register(
        role=Role.MEMBER,
        organization=request.user.organization_id,
        referring_admin=request.user,
        **serializer.validated_data,
    )
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def users_list_or_create_view(request):
    """GET /api/users/ = list, POST /api/users/ = create member"""
    if request.method == 'GET':
        return _list_users(request)
    return _create_member(request)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail_view(request, pk):
    """
    GET/PATCH /api/users/{id}/ : admins for anyone in their organization,
    members for their own record only.
    DELETE /api/users/{id}/ : admin-only; the last admin and self are protected.
    """
    if request.method == 'GET':
        return Response(UserSerializer(services.get_user(request.user, pk)).data)

    if request.method == 'PATCH':
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = services.update_user(request.user, pk, **serializer.validated_data)
        return Response(UserSerializer(user).data)

    services.delete_user(request.user, pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def user_role_view(request, pk):
    """POST /api/users/{id}/role/  Body: { role }"""
    serializer = RoleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = services.change_role(request.user, pk, serializer.validated_data['role'])
    return Response(UserSerializer(user).data)
