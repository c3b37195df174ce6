"""
Admin log API (admin-only, scoped to the admin's organization)
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin
from adminlogs.models import AdminLog
from adminlogs.serializers import AdminLogSerializer
from core.utils import filter_by_organization


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdmin])
def admin_logs_view(request):
    """
    GET /api/admin-logs/  newest first
    POST /api/admin-logs/  Body: logText, imagePreviewUrl?
    """
    if request.method == 'GET':
        logs = filter_by_organization(AdminLog.objects.all(), request.user).order_by('-created_at', '-id')
        return Response(AdminLogSerializer(logs, many=True).data)

    serializer = AdminLogSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    log = serializer.save(
        organization_id=request.user.organization_id,
        admin=request.user,
        admin_display_name=request.user.display_name,
    )
    return Response(AdminLogSerializer(log).data, status=status.HTTP_201_CREATED)
