"""
Assignment API views
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsTenantUser
from assignments import services
from assignments.serializers import (
    AssignmentCreateSerializer,
    AssignmentFilterSerializer,
    AssignmentSerializer,
    AssignmentUpdateSerializer,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTenantUser])
def assignments_view(request):
    """
    GET /api/assignments/  admins: organization, members: own
        Query params: status, taskId, personId (admin only)
    POST /api/assignments/ (admin)  Body: taskId, personId, justification?, deadline?
    """
    if request.method == 'GET':
        filters = AssignmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = services.list_assignments(request.user, **filters.validated_data)
        return Response(AssignmentSerializer(qs, many=True).data)

    serializer = AssignmentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    assignment = services.create_assignment(request.user, **serializer.validated_data)
    return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsTenantUser])
def assignment_detail_view(request, pk):
    """
    GET /api/assignments/{id}/
    PATCH /api/assignments/{id}/  Body: status?, submissionDate?, delayReason?, justification?, deadline?
    DELETE /api/assignments/{id}/ (admin)
    """
    if request.method == 'GET':
        return Response(AssignmentSerializer(services.get_assignment(request.user, pk)).data)

    if request.method == 'DELETE':
        services.delete_assignment(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = AssignmentUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    assignment = services.update_assignment(request.user, pk, **serializer.validated_data)
    return Response(AssignmentSerializer(assignment).data)
