import math

from django.conf import settings
from rest_framework import serializers
from rest_framework.pagination import BasePagination
from rest_framework.response import Response


class EnvelopePagination(BasePagination):
    """
    ``?page=&limit=`` pagination that reports its position alongside results.

    Responses look like ``{<results_key>: [...], "pagination": {...}}`` where
    ``totalPages`` is ``ceil(total / limit)``. A page past the end yields an
    empty list rather than an error.
    """

    page_query_param = "page"
    limit_query_param = "limit"
    default_limit = 10
    results_key = "results"
    total_key = "total"

    @property
    def max_limit(self):
        return getattr(settings, "API_PAGE_SIZE_LIMIT", 100)

    def _positive_int(self, request, name, default):
        raw = request.query_params.get(name)
        if raw in (None, ""):
            return default
        try:
            value = int(raw)
        except (TypeError, ValueError):
            value = 0
        if value < 1:
            raise serializers.ValidationError({name: ["Must be a positive integer."]})
        return value

    def paginate_queryset(self, queryset, request, view=None):
        self.page = self._positive_int(request, self.page_query_param, 1)
        self.limit = min(
            self._positive_int(request, self.limit_query_param, self.default_limit),
            self.max_limit,
        )
        self.total = queryset.count()
        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_pagination(self):
        total_pages = math.ceil(self.total / self.limit)
        return {
            "currentPage": self.page,
            "totalPages": total_pages,
            self.total_key: self.total,
            "hasNext": self.page < total_pages,
            "hasPrev": self.page > 1,
        }

    def get_paginated_response(self, data):
        return Response({
            self.results_key: data,
            "pagination": self.get_pagination(),
        })


class TaskPagination(EnvelopePagination):
    results_key = "tasks"
    total_key = "totalTasks"


class UserPagination(EnvelopePagination):
    results_key = "users"
    total_key = "totalUsers"
