"""
Authentication and self-registration views
"""
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts import services
from accounts.models import Role
from accounts.serializers import (
    ChangePasswordSerializer,
    LoginResponseSerializer,
    LoginSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    PendingUserSerializer,
    RegisterSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from accounts.tokens import access_token_lifetime
from core.exceptions import MissingTenantContext


@extend_schema(request=LoginSerializer, responses=LoginResponseSerializer)
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    POST /api/auth/login
    Login with email and password
    Returns: {accessToken, tokenType, expiresIn, user}

    Status codes:
    - 200: Success
    - 400: Invalid request format (missing fields, invalid email format)
    - 401: Invalid credentials (one message for unknown email and wrong password)
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user, token = services.authenticate_user(
        serializer.validated_data['email'],
        serializer.validated_data['password'],
        request=request,
    )
    return Response({
        'accessToken': token,
        'tokenType': 'Bearer',
        'expiresIn': int(access_token_lifetime().total_seconds()),
        'user': UserSerializer(user).data,
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """
    POST /api/auth/logout
    Tokens are stateless; the client discards its copy.
    """
    return Response({'detail': 'Successfully logged out.'}, status=status.HTTP_200_OK)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def me_view(request):
    """
    GET /api/auth/me: current user
    PATCH /api/auth/me: update own profile (role changes are admin-only)
    """
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)
    serializer = UserUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    user = services.update_user(request.user, request.user.pk, **serializer.validated_data)
    return Response(UserSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    """
    POST /api/auth/change-password
    Body: { currentPassword, newPassword }
    """
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.change_password(
        request.user,
        serializer.validated_data['current_password'],
        serializer.validated_data['new_password'],
    )
    return Response({'detail': 'Password changed successfully'}, status=status.HTTP_200_OK)


def _registration_kwargs(data):
    kwargs = dict(data)
    kwargs.pop('company_name', None)
    kwargs.pop('referring_admin_id', None)
    return kwargs


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """
    POST /api/auth/register
    role=admin creates a new organization with the caller as its admin (201, user).
    role=member requires referringAdminId and lands in the pending queue (201, pendingUser).
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    if data['role'] == Role.ADMIN:
        kwargs = _registration_kwargs(data)
        user = services.register(company_name=data.get('company_name'), **kwargs)
        return Response(
            {'success': True, 'user': UserSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )

    if not data.get('referring_admin_id'):
        raise MissingTenantContext('A member must register through an admin referral.')
    pending = services.submit_pending_registration(
        referring_admin_id=data['referring_admin_id'],
        **_registration_kwargs(data),
    )
    return Response(
        {
            'success': True,
            'message': 'Registration submitted. An administrator must approve it before you can log in.',
            'pendingUser': PendingUserSerializer(pending).data,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_request_view(request):
    """
    POST /api/auth/password-reset
    Always 200 so the endpoint does not reveal which emails have accounts.
    """
    serializer = PasswordResetRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.request_password_reset(serializer.validated_data['email'])
    return Response({'detail': 'If the account exists, a reset link has been sent.'})


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_confirm_view(request):
    """POST /api/auth/password-reset/confirm  Body: { uid, token, newPassword }"""
    serializer = PasswordResetConfirmSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    services.confirm_password_reset(**serializer.validated_data)
    return Response({'detail': 'Password has been reset.'})
