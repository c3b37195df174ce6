"""
Plain-text subject/body per notification kind.
"""
from django.conf import settings

from notifications.models import Notification


class _Blank(dict):
    def __missing__(self, key):
        return ""


# kind -> (subject, body, frontend fragment exposed as {link})
MESSAGES = {
    Notification.KIND_WELCOME_REGISTRATION: (
        "Welcome to the Task Assignment Assistant",
        "Hello {to_name},\n\nYour {user_role} account{company_suffix} is ready.\nLog in: {link}",
        "#LOGIN",
    ),
    Notification.KIND_PASSWORD_RESET: (
        "Password reset",
        "Hello {to_name},\n\nReset your password here: {reset_link}\n"
        "If you did not ask for this, ignore this message.",
        "#LOGIN",
    ),
    Notification.KIND_PREREG_SUBMITTED_USER: (
        "Registration received",
        "Hello {to_name},\n\nYour registration was sent to {admin_name} for approval. "
        "You will be able to log in once it is approved: {link}",
        "#LOGIN",
    ),
    Notification.KIND_PREREG_NOTIFY_ADMIN: (
        "New user pre-registration submitted",
        "Hello {admin_name},\n\n{pending_user_name} (ID: {pending_user_unique_id}) submitted a "
        "registration through your referral link. Review it here: {link}",
        "#USER_MANAGEMENT",
    ),
    Notification.KIND_ACCOUNT_ACTIVATED: (
        "Your account is active",
        "Hello {to_name},\n\n{admin_name} approved your account. Log in: {link}",
        "#LOGIN",
    ),
    Notification.KIND_TASK_PROPOSED: (
        "New task proposed: {task_title}",
        "Hello {to_name},\n\n{admin_name} proposed the task \"{task_title}\" to you "
        "(deadline: {task_deadline}). Respond here: {link}",
        "#VIEW_ASSIGNMENTS",
    ),
    Notification.KIND_TASK_STATUS_UPDATE_ADMIN: (
        "{user_name} updated \"{task_title}\"",
        "Hello {admin_name},\n\n{user_name} {user_action} the task \"{task_title}\". Details: {link}",
        "#DASHBOARD",
    ),
    Notification.KIND_TASK_COMPLETION_APPROVED: (
        "Task completed: {task_title}",
        "Hello {to_name},\n\n{admin_name} approved your work on \"{task_title}\". {link}",
        "#VIEW_ASSIGNMENTS",
    ),
}


def render(kind, context):
    """Return (subject, message) for kind filled from context."""
    subject, body, fragment = MESSAGES[kind]
    values = _Blank(context or {})
    values.setdefault("link", f"{settings.FRONTEND_URL.rstrip('/')}/{fragment}")
    return subject.format_map(values), body.format_map(values)
