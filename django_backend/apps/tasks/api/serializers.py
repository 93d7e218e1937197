from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import serializers
from rest_framework.settings import ISO_8601

from apps.tasks.lifecycle import apply_status, derive_view, validate_due_date
from apps.tasks.models import Note, Task, TaskPriority, TaskStatus
from apps.users.api.serializers import UserSummarySerializer

User = get_user_model()

STATUS_CHOICES = [c[0] for c in TaskStatus.choices]
PRIORITY_CHOICES = [c[0] for c in TaskPriority.choices]


class NoteSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Note
        fields = ["id", "text", "author", "createdAt"]
        read_only_fields = ["id"]
        extra_kwargs = {
            "text": {
                "max_length": 500,
                "error_messages": {"max_length": "Note cannot exceed 500 characters"},
            },
        }


class TaskSerializer(serializers.ModelSerializer):
    dueDate = serializers.DateTimeField(
        source="due_date",
        input_formats=[ISO_8601, "%Y-%m-%d"],
        error_messages={"required": "Due date is required", "null": "Due date is required"},
    )
    status = serializers.ChoiceField(
        choices=STATUS_CHOICES,
        required=False,
        error_messages={"invalid_choice": '"{input}" is not a valid status'},
    )
    priority = serializers.ChoiceField(
        choices=PRIORITY_CHOICES,
        required=False,
        error_messages={"invalid_choice": '"{input}" is not a valid priority'},
    )
    assignedTo = serializers.PrimaryKeyRelatedField(
        source="assigned_to",
        queryset=User.objects.all(),
        required=False,
        error_messages={
            "does_not_exist": "Assigned user not found",
            "incorrect_type": "Assigned user not found",
        },
    )
    tags = serializers.ListField(
        child=serializers.CharField(
            max_length=20,
            error_messages={"max_length": "Tag cannot exceed 20 characters"},
        ),
        required=False,
    )
    createdBy = UserSummarySerializer(source="created_by", read_only=True)
    completedAt = serializers.DateTimeField(source="completed_at", read_only=True)
    notes = NoteSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "dueDate",
            "status",
            "priority",
            "createdBy",
            "assignedTo",
            "completedAt",
            "tags",
            "notes",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]
        extra_kwargs = {
            "title": {
                "max_length": 100,
                "error_messages": {
                    "required": "Task title is required",
                    "blank": "Task title is required",
                    "max_length": "Task title cannot exceed 100 characters",
                },
            },
            "description": {
                "max_length": 1000,
                "error_messages": {
                    "required": "Task description is required",
                    "blank": "Task description is required",
                    "max_length": "Task description cannot exceed 1000 characters",
                },
            },
        }

    def validate_dueDate(self, value):
        error = validate_due_date(value)
        if error:
            raise serializers.ValidationError(error)
        return value

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["assignedTo"] = UserSummarySerializer(instance.assigned_to).data
        data.update(derive_view(instance, self.context.get("now")))
        return data

    def create(self, validated_data):
        request = self.context["request"]
        status = validated_data.pop("status", TaskStatus.PENDING)
        validated_data.setdefault("assigned_to", request.user)
        task = Task(created_by=request.user, **validated_data)
        apply_status(task, status)
        task.save()
        return task

    def update(self, instance, validated_data):
        status = validated_data.pop("status", None)
        changed = []
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
            changed.append(attr)
        if status is not None:
            changed += apply_status(instance, status)

        # only the touched columns are written; concurrent edits to other
        # fields of the same task survive
        instance.save(update_fields=changed + ["updated_at"])
        return instance


class TaskStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=STATUS_CHOICES,
        error_messages={
            "required": "Status is required",
            "invalid_choice": "Invalid status. Must be one of: " + ", ".join(STATUS_CHOICES),
        },
    )

    def update(self, instance, validated_data):
        changed = apply_status(instance, validated_data["status"], now=timezone.now())
        instance.save(update_fields=changed + ["updated_at"])
        return instance
