from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.common.exceptions import Conflict
from apps.users.credentials import MIN_PASSWORD_LENGTH
from apps.users.models import Role

User = get_user_model()

ROLE_CHOICES = [c[0] for c in Role.choices]


def username_field(**kwargs):
    return serializers.CharField(
        min_length=3,
        max_length=30,
        validators=[User.username_validator],
        error_messages={
            "required": "Username is required",
            "blank": "Username is required",
            "min_length": "Username must be at least 3 characters",
            "max_length": "Username cannot exceed 30 characters",
        },
        **kwargs,
    )


def email_field(**kwargs):
    return serializers.EmailField(
        error_messages={
            "required": "Email is required",
            "blank": "Email is required",
            "invalid": "Please enter a valid email",
        },
        **kwargs,
    )


def password_field(**kwargs):
    return serializers.CharField(
        write_only=True,
        min_length=MIN_PASSWORD_LENGTH,
        trim_whitespace=False,
        style={"input_type": "password"},
        error_messages={
            "required": "Password is required",
            "blank": "Password is required",
            "min_length": f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        },
        **kwargs,
    )


def name_field(label):
    return serializers.CharField(
        max_length=50,
        required=False,
        allow_blank=True,
        error_messages={"max_length": f"{label} cannot exceed 50 characters"},
    )


class UserSummarySerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    fullName = serializers.CharField(source="full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "firstName", "lastName", "fullName"]


class AssignableUserSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "fullName", "email"]


class UserSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source="first_name", read_only=True)
    lastName = serializers.CharField(source="last_name", read_only=True)
    fullName = serializers.CharField(source="full_name", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="date_joined", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "firstName",
            "lastName",
            "fullName",
            "role",
            "isActive",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class IdentityMixin:
    """Username/email normalisation and uniqueness, excluding the record being edited."""

    conflict_message = None

    def validate_email(self, value):
        return User.objects.normalize_email(value)

    def validate(self, attrs):
        exclude_pk = self.instance.pk if self.instance is not None else None
        message = User.objects.identity_conflict(
            username=attrs.get("username"),
            email=attrs.get("email"),
            exclude_pk=exclude_pk,
        )
        if message:
            raise Conflict(self.conflict_message or message)
        return attrs


class RegisterSerializer(IdentityMixin, serializers.Serializer):
    username = username_field()
    email = email_field()
    password = password_field()
    firstName = name_field("First name")
    lastName = name_field("Last name")

    conflict_message = "User with this email or username already exists"

    def create(self, validated_data):
        return User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
            first_name=validated_data.get("firstName", ""),
            last_name=validated_data.get("lastName", ""),
            role=validated_data.get("role", Role.USER),
        )


class AdminUserCreateSerializer(RegisterSerializer):
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False)


class LoginSerializer(serializers.Serializer):
    email = email_field()
    password = serializers.CharField(
        trim_whitespace=False,
        error_messages={"required": "Password is required", "blank": "Password is required"},
    )

    def validate_email(self, value):
        return User.objects.normalize_email(value)


FIELD_SOURCES = {
    "username": "username",
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
    "role": "role",
    "isActive": "is_active",
}


class ProfileUpdateSerializer(IdentityMixin, serializers.Serializer):
    username = username_field(required=False)
    firstName = name_field("First name")
    lastName = name_field("Last name")

    def update(self, instance, validated_data):
        changed = []
        for key, value in validated_data.items():
            attr = FIELD_SOURCES[key]
            setattr(instance, attr, value)
            changed.append(attr)
        instance.save(update_fields=changed + ["updated_at"])
        return instance


class AdminUserUpdateSerializer(ProfileUpdateSerializer):
    email = email_field(required=False)
    role = serializers.ChoiceField(choices=ROLE_CHOICES, required=False)
    isActive = serializers.BooleanField(required=False)
