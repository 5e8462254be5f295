from django.db.models import Q
from rest_framework import status, serializers, viewsets, mixins
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from drf_spectacular.utils import extend_schema

from apps.tenants.mixins import HotelPagination
from .models import User
from .navigation import get_navigation_manifest
from .permissions import IsTenantStaff, IsManagement
from .serializers import (
    UserSerializer,
    HotelSignupSerializer,
    UserLoginSerializer,
    PasswordResetRequestSerializer,
    PasswordResetConfirmSerializer,
    ChangePasswordSerializer,
    StaffInviteSerializer,
    StaffRoleSerializer,
    StaffSuspendSerializer,
    StaffFilterSerializer,
    NavigationManifestSerializer,
)
from .services import (
    register_hotel,
    authenticate_user,
    request_password_reset as request_password_reset_service,
    confirm_password_reset as confirm_password_reset_service,
    change_password as change_password_service,
    invite_staff,
    change_role,
    suspend_staff,
    reactivate_staff,
    reset_staff_password,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
    UserNotFoundError,
    StaffManagementError,
    InsufficientPermissionsError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()
    navigation = NavigationManifestSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class LogoutRequestSerializer(serializers.Serializer):
    refresh = serializers.CharField(help_text="Refresh token to discard")


class TemporaryPasswordResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    temporary_password = serializers.CharField()


def _auth_payload(user, message):
    refresh = RefreshToken.for_user(user)
    return {
        'message': message,
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        },
        'navigation': get_navigation_manifest(user.role),
    }


@extend_schema(
    request=HotelSignupSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Sign up a hotel on a trial subscription and receive owner JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new hotel and its owner account."""
    serializer = HotelSignupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_hotel(**data)
    except UserRegistrationError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response(
        _auth_payload(user, 'Registration successful. Your trial has started.'),
        status=status.HTTP_201_CREATED,
    )


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens and the role navigation manifest.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response(_auth_payload(user, 'Login successful'))


@extend_schema(
    request=LogoutRequestSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Logout. The refresh token is validated; clients discard both tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Logout and validate the refresh token."""
    refresh_token = request.data.get('refresh')
    if refresh_token:
        try:
            RefreshToken(refresh_token)
        except TokenError:
            return Response({
                'error': 'Invalid token'
            }, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Logout successful'
    })


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=UserSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="Update the current user's profile (display_name, phone, preferences).",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = UserSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@extend_schema(
    responses={200: NavigationManifestSerializer},
    description="Navigation manifest (sidebar, landing route, badge) for the caller's role.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def navigation(request):
    """Role-based navigation manifest."""
    return Response(get_navigation_manifest(request.user.role))


@extend_schema(
    request=ChangePasswordSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    description="Change own password, clearing the temporary-password flag.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        change_password_service(user=request.user, **serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Password changed'})


@extend_schema(
    request=PasswordResetRequestSerializer,
    responses={200: MessageResponseSerializer},
    description="Request a password reset. Always returns success so emails cannot be probed.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def request_password_reset(request):
    """Request password reset token."""
    serializer = PasswordResetRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    message = 'If the account exists, password reset instructions have been sent'
    try:
        request_password_reset_service(email=serializer.validated_data['email'])
    except UserNotFoundError:
        # Don't reveal if email exists
        return Response({'message': message})

    return Response({'message': message})


@extend_schema(
    request=PasswordResetConfirmSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Confirm password reset with token and set new password.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def confirm_password_reset(request):
    """Confirm password reset with token."""
    serializer = PasswordResetConfirmSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        confirm_password_reset_service(
            token=serializer.validated_data['token'],
            new_password=serializer.validated_data['new_password'],
        )
    except InvalidTokenError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Password reset successful'
    })


# =============================================================================
# Staff management
# =============================================================================

def _staff_error_response(e):
    if isinstance(e, UserNotFoundError):
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(e, InsufficientPermissionsError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


class StaffViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Staff of the caller's hotel.

    list: GET /api/auth/staff/?role=&is_active=&search=
    create: POST /api/auth/staff/ (invite, returns temporary password once)
    retrieve: GET /api/auth/staff/{id}/
    role: POST /api/auth/staff/{id}/role/
    suspend / reactivate: POST /api/auth/staff/{id}/suspend|reactivate/
    reset_password: POST /api/auth/staff/{id}/reset_password/
    """

    queryset = User.objects.all().order_by('display_name', 'email')
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsTenantStaff, IsManagement]
    pagination_class = HotelPagination

    def get_queryset(self):
        queryset = super().get_queryset().filter(tenant_id=self.request.user.tenant_id)

        filter_serializer = StaffFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('role'):
            queryset = queryset.filter(role=params['role'])
        if params.get('is_active') is not None:
            queryset = queryset.filter(is_active=params['is_active'])
        if params.get('search'):
            term = params['search']
            queryset = queryset.filter(Q(email__icontains=term) | Q(display_name__icontains=term))
        return queryset

    @extend_schema(request=StaffInviteSerializer, responses={201: TemporaryPasswordResponseSerializer}, tags=['staff'])
    def create(self, request):
        serializer = StaffInviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user, temporary_password = invite_staff(actor=request.user, **serializer.validated_data)
        except (StaffManagementError, InsufficientPermissionsError) as e:
            return _staff_error_response(e)

        return Response({
            'user': UserSerializer(user).data,
            'temporary_password': temporary_password,
        }, status=status.HTTP_201_CREATED)

    @extend_schema(request=StaffRoleSerializer, responses={200: UserSerializer}, tags=['staff'])
    @action(detail=True, methods=['post'])
    def role(self, request, pk=None):
        serializer = StaffRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = change_role(actor=request.user, user_id=pk, role=serializer.validated_data['role'])
        except (UserNotFoundError, StaffManagementError, InsufficientPermissionsError) as e:
            return _staff_error_response(e)
        return Response(UserSerializer(user).data)

    @extend_schema(request=StaffSuspendSerializer, responses={200: UserSerializer}, tags=['staff'])
    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        serializer = StaffSuspendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = suspend_staff(actor=request.user, user_id=pk, reason=serializer.validated_data['reason'])
        except (UserNotFoundError, StaffManagementError, InsufficientPermissionsError) as e:
            return _staff_error_response(e)
        return Response(UserSerializer(user).data)

    @extend_schema(request=None, responses={200: UserSerializer}, tags=['staff'])
    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        try:
            user = reactivate_staff(actor=request.user, user_id=pk)
        except (UserNotFoundError, StaffManagementError, InsufficientPermissionsError) as e:
            return _staff_error_response(e)
        return Response(UserSerializer(user).data)

    @extend_schema(request=None, responses={200: TemporaryPasswordResponseSerializer}, tags=['staff'])
    @action(detail=True, methods=['post'])
    def reset_password(self, request, pk=None):
        try:
            temporary_password = reset_staff_password(actor=request.user, user_id=pk)
        except (UserNotFoundError, StaffManagementError, InsufficientPermissionsError) as e:
            return _staff_error_response(e)
        user = self.get_queryset().get(id=pk)
        return Response({
            'user': UserSerializer(user).data,
            'temporary_password': temporary_password,
        })
