from datetime import timedelta

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.common.sessions import issue_token
from apps.tasks.models import Task, TaskStatus
from apps.users.models import Role

User = get_user_model()


class AuthenticatedAPITestCase(APITestCase):
    def setUp(self):
        self.client = APIClient()

    def authenticate(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user)}")


class RegisterAPITest(AuthenticatedAPITestCase):
    """Test cases for POST /api/auth/register/"""

    def setUp(self):
        super().setUp()
        self.url = reverse("auth-register")

    def test_register_returns_token_and_user(self):
        response = self.client.post(self.url, {
            "username": "alice",
            "email": "Alice@Example.com",
            "password": "secret123",
            "firstName": "Alice",
            "lastName": "Liddell",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn("token", response.data)
        user = response.data["user"]
        self.assertEqual(user["username"], "alice")
        self.assertEqual(user["email"], "alice@example.com")
        self.assertEqual(user["fullName"], "Alice Liddell")
        self.assertEqual(user["role"], Role.USER)
        self.assertTrue(user["isActive"])
        self.assertNotIn("password", user)

        stored = User.objects.get(username="alice")
        self.assertNotEqual(stored.password, "secret123")
        self.assertTrue(stored.check_password("secret123"))

    def test_registered_token_authenticates(self):
        response = self.client.post(self.url, {
            "username": "alice",
            "email": "alice@example.com",
            "password": "secret123",
        }, format="json")

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['token']}")
        me = self.client.get(reverse("auth-me"))

        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["username"], "alice")

    def test_role_cannot_be_self_assigned(self):
        response = self.client.post(self.url, {
            "username": "mallory",
            "email": "mallory@example.com",
            "password": "secret123",
            "role": "admin",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["user"]["role"], Role.USER)

    def test_duplicate_email_conflicts(self):
        User.objects.create_user(username="alice", email="alice@example.com", password="secret123")

        response = self.client.post(self.url, {
            "username": "alice2",
            "email": "ALICE@example.com",
            "password": "secret123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["message"], "User with this email or username already exists")

    def test_duplicate_username_conflicts(self):
        User.objects.create_user(username="alice", email="alice@example.com", password="secret123")

        response = self.client.post(self.url, {
            "username": "alice",
            "email": "other@example.com",
            "password": "secret123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_invalid_fields_are_reported_together(self):
        response = self.client.post(self.url, {
            "username": "al",
            "email": "not-an-email",
            "password": "123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Validation error")
        errors = response.data["errors"]
        self.assertEqual(errors["username"], ["Username must be at least 3 characters"])
        self.assertEqual(errors["email"], ["Please enter a valid email"])
        self.assertEqual(errors["password"], ["Password must be at least 6 characters"])
        self.assertFalse(User.objects.exists())


class LoginAPITest(AuthenticatedAPITestCase):
    """Test cases for POST /api/auth/login/"""

    def setUp(self):
        super().setUp()
        self.url = reverse("auth-login")
        self.user = User.objects.create_user(
            username="alice",
            email="alice@example.com",
            password="secret123"
        )

    def test_login_success(self):
        response = self.client.post(
            self.url, {"email": " Alice@Example.com", "password": "secret123"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("token", response.data)
        self.assertEqual(response.data["user"]["id"], self.user.pk)

    def test_failures_share_one_message(self):
        self.inactive = User.objects.create_user(
            username="bob", email="bob@example.com", password="secret123", is_active=False
        )
        attempts = [
            {"email": "nobody@example.com", "password": "secret123"},
            {"email": "alice@example.com", "password": "wrong-password"},
            {"email": "bob@example.com", "password": "secret123"},
        ]

        for payload in attempts:
            response = self.client.post(self.url, payload, format="json")
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
            self.assertEqual(response.data["message"], "Invalid email or password")
            self.assertEqual(response["WWW-Authenticate"], "Bearer")

    def test_failed_login_ignores_stale_bearer_token(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer garbage")
        response = self.client.post(
            self.url, {"email": "alice@example.com", "password": "secret123"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_missing_password(self):
        response = self.client.post(self.url, {"email": "alice@example.com"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["errors"]["password"], ["Password is required"])


class CurrentUserAPITest(AuthenticatedAPITestCase):
    """Test cases for /api/auth/me/ and /api/auth/profile/"""

    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(
            username="alice",
            email="alice@example.com",
            password="secret123",
            first_name="Alice",
        )
        self.other = User.objects.create_user(
            username="bob", email="bob@example.com", password="secret123"
        )

    def test_me_requires_authentication(self):
        response = self.client.get(reverse("auth-me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_me(self):
        self.authenticate(self.user)
        response = self.client.get(reverse("auth-me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "alice@example.com")

    def test_deactivated_user_token_is_rejected(self):
        self.authenticate(self.user)
        User.objects.filter(pk=self.user.pk).update(is_active=False)

        response = self.client.get(reverse("auth-me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "User account is deactivated")

    def test_deleted_user_token_is_rejected(self):
        self.authenticate(self.other)
        self.other.delete()

        response = self.client.get(reverse("auth-me"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Token is valid but user not found")

    def test_update_profile(self):
        self.authenticate(self.user)
        response = self.client.put(
            reverse("auth-profile"), {"lastName": "Liddell"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["firstName"], "Alice")
        self.assertEqual(response.data["lastName"], "Liddell")
        self.assertEqual(response.data["fullName"], "Alice Liddell")

    def test_profile_cannot_change_role_or_email(self):
        self.authenticate(self.user)
        self.client.put(
            reverse("auth-profile"),
            {"role": "admin", "email": "new@example.com", "isActive": False},
            format="json",
        )

        self.user.refresh_from_db()
        self.assertEqual(self.user.role, Role.USER)
        self.assertEqual(self.user.email, "alice@example.com")
        self.assertTrue(self.user.is_active)

    def test_profile_username_conflict(self):
        self.authenticate(self.user)
        response = self.client.put(reverse("auth-profile"), {"username": "bob"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["message"], "Username is already taken")

    def test_profile_keeps_own_username(self):
        self.authenticate(self.user)
        response = self.client.put(reverse("auth-profile"), {"username": "alice"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)


class UserManagementAPITest(AuthenticatedAPITestCase):
    """Test cases for the admin-only /api/users/ endpoints"""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="secret123", role=Role.ADMIN
        )
        self.user = User.objects.create_user(
            username="alice", email="alice@example.com", password="secret123", first_name="Alice"
        )
        self.inactive = User.objects.create_user(
            username="zed", email="zed@example.com", password="secret123", is_active=False
        )
        self.authenticate(self.admin)

    def make_task(self, **kwargs):
        defaults = {
            "title": "Write report",
            "description": "Quarterly report",
            "due_date": timezone.now() + timedelta(days=3),
            "created_by": self.admin,
            "assigned_to": self.user,
        }
        defaults.update(kwargs)
        return Task.objects.create(**defaults)

    def test_non_admin_is_forbidden(self):
        self.authenticate(self.user)

        for response in [
            self.client.get(reverse("users-list")),
            self.client.get(reverse("users-detail", args=[self.admin.pk])),
            self.client.delete(reverse("users-detail", args=[self.admin.pk])),
        ]:
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
            self.assertEqual(response.data["message"], "Admin access required")

    def test_list_users_paginated(self):
        response = self.client.get(reverse("users-list"), {"limit": 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["users"]), 2)
        pagination = response.data["pagination"]
        self.assertEqual(pagination["totalUsers"], 3)
        self.assertEqual(pagination["totalPages"], 2)
        self.assertTrue(pagination["hasNext"])
        self.assertFalse(pagination["hasPrev"])

    def test_list_users_filters(self):
        response = self.client.get(reverse("users-list"), {"role": "admin"})
        self.assertEqual([u["username"] for u in response.data["users"]], ["admin"])

        response = self.client.get(reverse("users-list"), {"isActive": "false"})
        self.assertEqual([u["username"] for u in response.data["users"]], ["zed"])

        response = self.client.get(reverse("users-list"), {"search": "ALI"})
        self.assertEqual([u["username"] for u in response.data["users"]], ["alice"])

    def test_retrieve_user_with_task_stats(self):
        self.make_task()
        self.make_task(status=TaskStatus.COMPLETED, completed_at=timezone.now())
        self.make_task(status=TaskStatus.IN_PROGRESS)

        response = self.client.get(reverse("users-detail", args=[self.user.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user"]["username"], "alice")
        self.assertEqual(response.data["taskStats"], {
            "total": 3,
            "pending": 1,
            "in-progress": 1,
            "completed": 1,
            "cancelled": 0,
        })

    def test_retrieve_missing_user(self):
        response = self.client.get(reverse("users-detail", args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "User not found")

    def test_create_user_with_role(self):
        response = self.client.post(reverse("users-list"), {
            "username": "carol",
            "email": "carol@example.com",
            "password": "secret123",
            "role": "admin",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["role"], Role.ADMIN)
        self.assertTrue(User.objects.get(username="carol").is_admin)

    def test_create_user_conflict(self):
        response = self.client.post(reverse("users-list"), {
            "username": "alice",
            "email": "alice2@example.com",
            "password": "secret123",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_update_user(self):
        response = self.client.put(
            reverse("users-detail", args=[self.user.pk]),
            {"role": "admin", "isActive": False, "email": "Alice@New.example.com"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, Role.ADMIN)
        self.assertFalse(self.user.is_active)
        self.assertEqual(self.user.email, "alice@new.example.com")
        self.assertEqual(self.user.first_name, "Alice")

    def test_update_email_conflict(self):
        response = self.client.patch(
            reverse("users-detail", args=[self.user.pk]),
            {"email": "admin@example.com"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["message"], "Email is already taken")

    def test_admin_cannot_deactivate_self(self):
        response = self.client.put(
            reverse("users-detail", args=[self.admin.pk]), {"isActive": False}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "You cannot deactivate your own account")
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_active)

    def test_admin_can_edit_own_name(self):
        response = self.client.put(
            reverse("users-detail", args=[self.admin.pk]), {"firstName": "Ada"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["firstName"], "Ada")

    def test_admin_cannot_delete_self(self):
        response = self.client.delete(reverse("users-detail", args=[self.admin.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "You cannot delete your own account")
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_delete_user(self):
        response = self.client.delete(reverse("users-detail", args=[self.inactive.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.inactive.pk).exists())

    def test_delete_user_with_tasks_conflicts(self):
        self.make_task()
        self.make_task(created_by=self.user, assigned_to=self.admin)

        response = self.client.delete(reverse("users-detail", args=[self.user.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(
            response.data["message"],
            "Cannot delete user. They have 2 task(s) associated with them. "
            "Please reassign or delete those tasks first.",
        )
        self.assertTrue(User.objects.filter(pk=self.user.pk).exists())

    def test_users_for_assignment(self):
        self.authenticate(self.user)
        response = self.client.get(reverse("users-for-assignment"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u["username"] for u in response.data], ["admin", "alice"])
        self.assertEqual(set(response.data[0]), {"id", "username", "fullName", "email"})
