from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password

from .models import User, Role


class UserSerializer(serializers.ModelSerializer):
    """Staff profile for display."""

    hotel_name = serializers.CharField(source='tenant.hotel_name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'phone',
            'department',
            'tenant',
            'hotel_name',
            'role',
            'is_active',
            'must_change_password',
            'created_at',
            'last_login',
            'preferences',
        ]
        read_only_fields = [
            'id',
            'email',
            'tenant',
            'hotel_name',
            'role',
            'is_active',
            'must_change_password',
            'created_at',
            'last_login',
        ]


class HotelSignupSerializer(serializers.Serializer):
    """Public trial signup: hotel plus owner account."""

    hotel_name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)


class PasswordResetConfirmSerializer(serializers.Serializer):
    """Serializer for password reset confirmation."""

    token = serializers.CharField(required=True)
    new_password = serializers.CharField(
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    new_password_confirm = serializers.CharField(
        required=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({
                'new_password_confirm': 'Passwords do not match'
            })
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(style={'input_type': 'password'})
    new_password = serializers.CharField(
        validators=[validate_password],
        style={'input_type': 'password'}
    )


# =============================================================================
# Staff management
# =============================================================================

ASSIGNABLE_ROLES = [choice for choice in Role.choices if choice[0] != Role.SUPER_ADMIN]


class StaffInviteSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=ASSIGNABLE_ROLES)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    department = serializers.CharField(max_length=50, required=False, allow_blank=True)


class StaffRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ASSIGNABLE_ROLES)


class StaffSuspendSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class StaffFilterSerializer(serializers.Serializer):
    """Validate query parameters for the staff listing."""

    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False)


class NavigationItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    href = serializers.CharField()
    module = serializers.CharField()


class NavigationManifestSerializer(serializers.Serializer):
    role = serializers.CharField()
    display_name = serializers.CharField()
    subtitle = serializers.CharField()
    navigation = NavigationItemSerializer(many=True)
    default_route = serializers.CharField()
    header_badge = serializers.CharField()
    layout = serializers.DictField()
    uses_unified_dashboard = serializers.BooleanField()
