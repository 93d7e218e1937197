from rest_framework.permissions import BasePermission

from apps.common.policy import Action, can_act

VIEW_ACTIONS = {
    "list": Action.USER_LIST,
    "retrieve": Action.USER_READ,
    "create": Action.USER_CREATE,
    "update": Action.USER_UPDATE,
    "partial_update": Action.USER_UPDATE,
    "destroy": Action.USER_DELETE,
    "for_assignment": Action.LIST_ASSIGNABLE_USERS,
}


class UserManagementPermission(BasePermission):
    message = "Admin access required"

    def has_permission(self, request, view):
        action = VIEW_ACTIONS.get(view.action)
        if action is None:
            return False
        # the target account is only known once the object is loaded
        return can_act(request.user, action)

    def has_object_permission(self, request, view, obj):
        action = VIEW_ACTIONS.get(view.action)
        if action == Action.USER_DELETE:
            self.message = "You cannot delete your own account"
        return can_act(request.user, action, owner_id=obj.pk)


class PolicyActionPermission(BasePermission):
    """Checks the view's fixed ``policy_action`` against the policy."""

    def has_permission(self, request, view):
        return can_act(request.user, view.policy_action)
