import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.http import Http404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed, NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common.auth import BearerTokenAuthentication
from apps.common.exceptions import Conflict
from apps.common.pagination import UserPagination
from apps.common.policy import Action, can_act
from apps.common.sessions import issue_token
from apps.tasks.models import Task, TaskStatus
from apps.users.credentials import burn_hash_cycle, verify_password
from .filters import UserFilter
from .permissions import PolicyActionPermission, UserManagementPermission
from .serializers import (
    AdminUserCreateSerializer,
    AdminUserUpdateSerializer,
    AssignableUserSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()

LOGIN_FAILED = "Invalid email or password"


def session_payload(user):
    return {"token": issue_token(user), "user": UserSerializer(user).data}


class RegisterAPIView(generics.GenericAPIView):
    authentication_classes = []
    permission_classes = [PolicyActionPermission]
    policy_action = Action.REGISTER
    serializer_class = RegisterSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s registered (id=%s)", user.username, user.pk)
        return Response(session_payload(user), status=status.HTTP_201_CREATED)


class LoginAPIView(generics.GenericAPIView):
    """Exchange email and password for a bearer token.

    Unknown emails, wrong passwords and deactivated accounts all receive the
    same answer so the endpoint cannot be used to probe for accounts.
    """

    authentication_classes = []
    permission_classes = [PolicyActionPermission]
    policy_action = Action.LOGIN
    serializer_class = LoginSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]
        password = serializer.validated_data["password"]

        user = User.objects.filter(email=email).first()
        if user is None:
            burn_hash_cycle(password)
            logger.warning("Failed login for unknown email %s", email)
            raise AuthenticationFailed(LOGIN_FAILED)
        if not verify_password(password, user.password):
            logger.warning("Failed login for user %s: bad password", user.pk)
            raise AuthenticationFailed(LOGIN_FAILED)
        if not user.is_active:
            logger.warning("Failed login for user %s: account deactivated", user.pk)
            raise AuthenticationFailed(LOGIN_FAILED)

        logger.info("User %s logged in", user.pk)
        return Response(session_payload(user))

    def get_authenticate_header(self, request):
        # without a challenge DRF downgrades AuthenticationFailed to 403
        return BearerTokenAuthentication.keyword


class MeAPIView(APIView):
    permission_classes = [PolicyActionPermission]
    policy_action = Action.VIEW_SELF

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class ProfileAPIView(APIView):
    permission_classes = [PolicyActionPermission]
    policy_action = Action.UPDATE_SELF

    def put(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data)

    patch = put


def task_stats(user):
    """Counts of the tasks assigned to ``user``, overall and per status."""
    statuses = [c[0] for c in TaskStatus.choices]
    # aggregate aliases cannot carry the hyphen of "in-progress"
    aggregates = {
        value.replace("-", "_"): Count("id", filter=Q(status=value)) for value in statuses
    }
    counts = Task.objects.filter(assigned_to=user).aggregate(total=Count("id"), **aggregates)
    stats = {"total": counts["total"] or 0}
    for value in statuses:
        stats[value] = counts[value.replace("-", "_")] or 0
    return stats


class UserViewSet(viewsets.ModelViewSet):
    queryset = User.objects.all()
    permission_classes = [UserManagementPermission]
    filter_backends = [DjangoFilterBackend]
    filterset_class = UserFilter
    pagination_class = UserPagination
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        return User.objects.order_by("-date_joined", "-id")

    def get_serializer_class(self):
        if self.action == "create":
            return AdminUserCreateSerializer
        if self.action in ["update", "partial_update"]:
            return AdminUserUpdateSerializer
        if self.action == "for_assignment":
            return AssignableUserSerializer
        return UserSerializer

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("User not found")

    def retrieve(self, request, *args, **kwargs):
        user = self.get_object()
        return Response({"user": UserSerializer(user).data, "taskStats": task_stats(user)})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s created by admin %s", user.pk, request.user.pk)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        user = self.get_object()
        serializer = self.get_serializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        if serializer.validated_data.get("isActive") is False and not can_act(
            request.user, Action.USER_DEACTIVATE, owner_id=user.pk
        ):
            self.permission_denied(request, message="You cannot deactivate your own account")

        user = serializer.save()
        logger.info(
            "User %s updated by admin %s (%s)",
            user.pk, request.user.pk, ", ".join(sorted(serializer.validated_data)),
        )
        return Response(UserSerializer(user).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def perform_destroy(self, instance):
        referencing = Task.objects.filter(
            Q(assigned_to=instance) | Q(created_by=instance)
        ).count()
        if referencing:
            raise Conflict(
                f"Cannot delete user. They have {referencing} task(s) associated with them. "
                "Please reassign or delete those tasks first."
            )
        user_id = instance.pk
        instance.delete()
        logger.info("User %s deleted by admin %s", user_id, self.request.user.pk)

    @action(detail=False, methods=["get"], url_path="for-assignment")
    def for_assignment(self, request):
        users = User.objects.filter(is_active=True).order_by("username")
        return Response(self.get_serializer(users, many=True).data)
