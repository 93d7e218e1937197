import logging

from django.db.models import Prefetch
from django.http import Http404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from apps.common.pagination import TaskPagination
from apps.common.policy import is_admin
from apps.tasks.models import Note, Task, TaskPriority
from .filters import TaskFilter, TaskSortFilter
from .permissions import TaskAccessPermission
from .serializers import NoteSerializer, TaskSerializer, TaskStatusSerializer

logger = logging.getLogger(__name__)


def task_queryset():
    return Task.objects.select_related("created_by", "assigned_to").prefetch_related(
        Prefetch("notes", queryset=Note.objects.select_related("author"))
    )


def scoped_tasks(request):
    """Tasks visible in listings: everything for admins, otherwise the requester's assignments."""
    qs = task_queryset()
    if is_admin(request.user):
        return qs
    return qs.filter(assigned_to=request.user)


class TaskViewSet(viewsets.ModelViewSet):
    serializer_class = TaskSerializer
    permission_classes = [TaskAccessPermission]
    filter_backends = [DjangoFilterBackend, TaskSortFilter]
    filterset_class = TaskFilter
    pagination_class = TaskPagination
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        if self.action in ("list", "by_priority"):
            return scoped_tasks(self.request)
        # single-task routes look at every task so that foreign tasks
        # answer 403 rather than 404
        return task_queryset()

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Task not found")

    def update(self, request, *args, **kwargs):
        # PUT behaves like PATCH: absent fields keep their stored values
        kwargs["partial"] = True
        return super().update(request, *args, **kwargs)

    def perform_create(self, serializer):
        task = serializer.save()
        logger.info(
            "Task %s created by user %s, assigned to user %s",
            task.pk, task.created_by_id, task.assigned_to_id,
        )

    def perform_update(self, serializer):
        old_status = serializer.instance.status
        task = serializer.save()
        if old_status != task.status:
            logger.info(
                "Task %s status %s -> %s by user %s",
                task.pk, old_status, task.status, self.request.user.pk,
            )

    def perform_destroy(self, instance):
        task_id = instance.pk
        instance.delete()
        logger.info("Task %s deleted by user %s", task_id, self.request.user.pk)

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, pk=None):
        task = self.get_object()
        ser = TaskStatusSerializer(task, data=request.data)
        ser.is_valid(raise_exception=True)
        self.perform_update(ser)
        return Response(self.get_serializer(task).data)

    @action(detail=True, methods=["post"])
    def notes(self, request, pk=None):
        task = self.get_object()
        ser = NoteSerializer(data=request.data, context=self.get_serializer_context())
        ser.is_valid(raise_exception=True)
        ser.save(task=task, author=request.user)
        return Response(ser.data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path=r"priority/(?P<priority>[^/.]+)")
    def by_priority(self, request, priority=None):
        valid = [c[0] for c in TaskPriority.choices]
        if priority not in valid:
            raise serializers.ValidationError(
                "Invalid priority. Must be one of: " + ", ".join(valid)
            )
        qs = self.get_queryset().filter(priority=priority).order_by("due_date", "id")
        tasks = self.get_serializer(qs, many=True).data
        return Response({"priority": priority, "tasks": tasks, "count": len(tasks)})
