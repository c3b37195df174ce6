"""
Notification inbox of the current user.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import NotFound
from notifications.models import Notification
from notifications.serializers import NotificationSerializer


def _inbox(request):
    return Notification.objects.for_tenant(request.user.organization_id).filter(recipient=request.user)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notifications_view(request):
    """
    GET /api/notifications/?unread=1
    Returns the user's notifications, newest first, and the unread count.
    """
    qs = _inbox(request)
    unread_count = qs.filter(is_read=False).count()
    if request.query_params.get('unread') in ('1', 'true'):
        qs = qs.filter(is_read=False)
    return Response({
        'notifications': NotificationSerializer(qs.order_by('-created_at')[:100], many=True).data,
        'unread_count': unread_count,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notifications_count_view(request):
    """
    GET /api/notifications/count/
    Returns unread notification count only (for header badge).
    """
    return Response({'count': _inbox(request).filter(is_read=False).count()})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read_view(request, notification_id):
    """
    POST /api/notifications/{id}/read/
    Mark notification as read.
    """
    updated = _inbox(request).filter(pk=notification_id).update(is_read=True)
    if not updated:
        raise NotFound('Notification not found')
    return Response({"detail": "Marked as read"})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notifications_mark_all_read_view(request):
    """
    POST /api/notifications/mark-all-read/
    Mark all notifications as read.
    """
    updated = _inbox(request).filter(is_read=False).update(is_read=True)
    return Response({"detail": f"Marked {updated} notifications as read"})
