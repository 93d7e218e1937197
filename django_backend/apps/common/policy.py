"""
Authorization policy for task and user operations.

Every permission class in the API defers to ``can_act`` so the rules live in
one place. Rules are evaluated in order:

1. Anonymous or deactivated actors may only register and log in.
2. Any signed-in actor may view and edit their own profile and list the
   users tasks can be assigned to.
3. Admins may do anything, except deactivate or delete their own account.
4. Other actors may list and create tasks; read, update, change the status
   of, and annotate tasks they created or are assigned to; delete only tasks
   they created. User management is closed to them.
"""
from enum import Enum


class Action(str, Enum):
    REGISTER = "register"
    LOGIN = "login"

    VIEW_SELF = "view_self"
    UPDATE_SELF = "update_self"
    LIST_ASSIGNABLE_USERS = "list_assignable_users"

    TASK_LIST = "task_list"
    TASK_CREATE = "task_create"
    TASK_READ = "task_read"
    TASK_UPDATE = "task_update"
    TASK_SET_STATUS = "task_set_status"
    TASK_ADD_NOTE = "task_add_note"
    TASK_DELETE = "task_delete"

    USER_LIST = "user_list"
    USER_READ = "user_read"
    USER_CREATE = "user_create"
    USER_UPDATE = "user_update"
    USER_DEACTIVATE = "user_deactivate"
    USER_DELETE = "user_delete"


PUBLIC_ACTIONS = frozenset({Action.REGISTER, Action.LOGIN})

SELF_SERVICE_ACTIONS = frozenset({
    Action.VIEW_SELF,
    Action.UPDATE_SELF,
    Action.LIST_ASSIGNABLE_USERS,
})

# admins may not lock themselves out
ADMIN_SELF_PROTECTED = frozenset({Action.USER_DEACTIVATE, Action.USER_DELETE})

OPEN_TASK_ACTIONS = frozenset({Action.TASK_LIST, Action.TASK_CREATE})

PARTICIPANT_TASK_ACTIONS = frozenset({
    Action.TASK_READ,
    Action.TASK_UPDATE,
    Action.TASK_SET_STATUS,
    Action.TASK_ADD_NOTE,
})


def is_authenticated(actor) -> bool:
    return bool(actor is not None and actor.is_authenticated and actor.is_active)


def is_admin(actor) -> bool:
    return is_authenticated(actor) and getattr(actor, "is_admin", False)


def can_act(actor, action: Action, owner_id=None, assignee_id=None) -> bool:
    """Decide whether ``actor`` may perform ``action``.

    ``owner_id`` is the creator of the task, or the target account for user
    management actions. ``assignee_id`` is the task assignee.
    """
    if action in PUBLIC_ACTIONS:
        return True
    if not is_authenticated(actor):
        return False
    if action in SELF_SERVICE_ACTIONS:
        return True

    if is_admin(actor):
        if action in ADMIN_SELF_PROTECTED:
            return owner_id is None or owner_id != actor.pk
        return True

    if action in OPEN_TASK_ACTIONS:
        return True
    if action in PARTICIPANT_TASK_ACTIONS:
        return actor.pk in (owner_id, assignee_id)
    if action == Action.TASK_DELETE:
        return owner_id is not None and owner_id == actor.pk
    return False
