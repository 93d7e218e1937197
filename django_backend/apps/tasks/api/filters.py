import django_filters
from django.db.models import Q
from rest_framework import serializers
from rest_framework.filters import BaseFilterBackend

from apps.common.policy import is_admin
from apps.tasks.models import Task, TaskPriority, TaskStatus


class TaskFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=TaskStatus.choices)
    priority = django_filters.ChoiceFilter(choices=TaskPriority.choices)
    assignedTo = django_filters.CharFilter(method="filter_assigned_to")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Task
        fields = ["status", "priority"]

    def filter_assigned_to(self, queryset, name, value):
        # non-admin querysets are already pinned to the requester
        if not is_admin(getattr(self.request, "user", None)):
            return queryset
        value = value.strip()
        if not value.isdigit():
            raise serializers.ValidationError({"assignedTo": ["Enter a number."]})
        return queryset.filter(assigned_to_id=int(value))

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))


class TaskSortFilter(BaseFilterBackend):
    """Order by ``?sortBy=`` / ``?sortOrder=``, breaking ties on the primary key."""

    sort_param = "sortBy"
    order_param = "sortOrder"
    default_sort = "dueDate"
    sortable_fields = {
        "dueDate": "due_date",
        "priority": "priority",
        "status": "status",
        "title": "title",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
        "completedAt": "completed_at",
    }

    def get_ordering(self, request):
        sort_by = request.query_params.get(self.sort_param) or self.default_sort
        sort_order = (request.query_params.get(self.order_param) or "asc").lower()

        errors = {}
        if sort_by not in self.sortable_fields:
            errors[self.sort_param] = [
                "Must be one of: " + ", ".join(self.sortable_fields)
            ]
        if sort_order not in ("asc", "desc"):
            errors[self.order_param] = ["Must be one of: asc, desc"]
        if errors:
            raise serializers.ValidationError(errors)

        prefix = "-" if sort_order == "desc" else ""
        return [prefix + self.sortable_fields[sort_by], prefix + "id"]

    def filter_queryset(self, request, queryset, view):
        return queryset.order_by(*self.get_ordering(request))
