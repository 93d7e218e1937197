from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.core.validators import MinLengthValidator
from django.db import models


class Role(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"


class UserManager(DjangoUserManager):
    @classmethod
    def normalize_email(cls, email):
        return (email or "").strip().lower()

    def create_user(self, username, email=None, password=None, **extra_fields):
        username = (username or "").strip()
        return super().create_user(username, email, password, **extra_fields)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)

    def identity_conflict(self, username=None, email=None, exclude_pk=None):
        """Return a message when another account already holds the username or email."""
        others = self.all()
        if exclude_pk is not None:
            others = others.exclude(pk=exclude_pk)
        if username and others.filter(username=username).exists():
            return "Username is already taken"
        if email and others.filter(email=self.normalize_email(email)).exists():
            return "Email is already taken"
        return None


class User(AbstractUser):
    username = models.CharField(
        max_length=30,
        unique=True,
        validators=[MinLengthValidator(3), AbstractUser.username_validator],
        error_messages={"unique": "Username is already taken"},
    )
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=50, blank=True, default="")
    last_name = models.CharField(max_length=50, blank=True, default="")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.USER)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    REQUIRED_FIELDS = ["email"]

    class Meta:
        indexes = [
            models.Index(fields=["role"], name="user_role_idx"),
            models.Index(fields=["is_active"], name="user_is_active_idx"),
        ]

    def __str__(self):
        return self.username

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    @property
    def full_name(self):
        """First and last name when both are set, otherwise the username."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.username
