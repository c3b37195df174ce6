"""
Program and Task API views.
Any member of the organization may read; only admins write.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import SAFE_METHODS, IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsTenantUser
from core.exceptions import Forbidden
from core.utils import filter_by_organization, get_in_organization
from programs import services
from programs.models import Program, Task
from programs.serializers import ProgramSerializer, TaskFilterSerializer, TaskSerializer


def _require_admin_for_write(request):
    if request.method not in SAFE_METHODS and not request.user.is_admin:
        raise Forbidden(IsAdmin.message)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTenantUser])
def programs_view(request):
    """
    GET /api/programs/
    POST /api/programs/ (admin)
    """
    _require_admin_for_write(request)
    if request.method == 'GET':
        programs = filter_by_organization(Program.objects.all(), request.user)
        return Response(ProgramSerializer(programs, many=True).data)

    serializer = ProgramSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    program = serializer.save(organization_id=request.user.organization_id)
    return Response(ProgramSerializer(program).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsTenantUser])
def program_detail_view(request, pk):
    """GET/PATCH/DELETE /api/programs/{id}/"""
    _require_admin_for_write(request)
    if request.method == 'DELETE':
        services.delete_program(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    program = get_in_organization(
        Program.objects.all(), request.user, detail='Program not found in your organization.', pk=pk,
    )
    if request.method == 'GET':
        return Response(ProgramSerializer(program).data)

    serializer = ProgramSerializer(program, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTenantUser])
def tasks_view(request):
    """
    GET /api/tasks/  newest first, optional ?programId=
    POST /api/tasks/ (admin)  Body: title, description, requiredSkills, programId?, deadline?
    """
    _require_admin_for_write(request)
    if request.method == 'GET':
        tasks = filter_by_organization(Task.objects.all(), request.user)
        filters = TaskFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        program_id = filters.validated_data.get('program_id')
        if program_id is not None:
            tasks = tasks.filter(program_id=program_id)
        return Response(TaskSerializer(tasks, many=True).data)

    serializer = TaskSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    task = services.save_task(request.user, serializer.validated_data)
    return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsTenantUser])
def task_detail_view(request, pk):
    """
    GET/PATCH/PUT /api/tasks/{id}/
    DELETE /api/tasks/{id}/ also removes the task's assignments
    """
    _require_admin_for_write(request)
    if request.method == 'DELETE':
        services.delete_task(request.user, pk)
        return Response({'success': True, 'message': 'Task and related assignments deleted successfully.'})

    task = services.get_task(request.user, pk)
    if request.method == 'GET':
        return Response(TaskSerializer(task).data)

    serializer = TaskSerializer(task, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    task = services.save_task(request.user, serializer.validated_data, task=task)
    return Response(TaskSerializer(task).data)
