"""
Pending registrations queue (admin-only)
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts import services
from accounts.permissions import IsAdmin
from accounts.serializers import ApproveSerializer, PendingUserSerializer, UserSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def pending_list_view(request):
    """GET /api/pending-users/  pending registrations of the admin's organization"""
    pending = services.list_pending_users(request.user).order_by('-submitted_at')
    return Response(PendingUserSerializer(pending, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def pending_approve_view(request, pk):
    """
    POST /api/pending-users/{id}/approve/
    Body (optional): { role, displayName, position, userInterests, phone, notificationPreference }
    A requested admin role is granted only when the organization has no admin.
    """
    serializer = ApproveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    overrides = dict(serializer.validated_data)
    role = overrides.pop('role')
    user = services.approve_pending_user(request.user, pk, role=role, overrides=overrides)
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def pending_reject_view(request, pk):
    """DELETE /api/pending-users/{id}/  reject"""
    services.reject_pending_user(request.user, pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
