from rest_framework.permissions import BasePermission

from apps.common.policy import Action, can_act

VIEW_ACTIONS = {
    "list": Action.TASK_LIST,
    "by_priority": Action.TASK_LIST,
    "create": Action.TASK_CREATE,
    "retrieve": Action.TASK_READ,
    "update": Action.TASK_UPDATE,
    "partial_update": Action.TASK_UPDATE,
    "set_status": Action.TASK_SET_STATUS,
    "notes": Action.TASK_ADD_NOTE,
    "destroy": Action.TASK_DELETE,
}


class TaskAccessPermission(BasePermission):
    message = "Access denied"

    def has_permission(self, request, view):
        action = VIEW_ACTIONS.get(view.action)
        if action is None:
            return False
        if action in (Action.TASK_LIST, Action.TASK_CREATE):
            return can_act(request.user, action)
        return request.user and request.user.is_authenticated

    def has_object_permission(self, request, view, obj):
        action = VIEW_ACTIONS.get(view.action)
        if action is None:
            return False
        if action == Action.TASK_DELETE:
            self.message = "Only task creator or admin can delete tasks"
        return can_act(
            request.user,
            action,
            owner_id=obj.created_by_id,
            assignee_id=obj.assigned_to_id,
        )
