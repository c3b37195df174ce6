"""
Notification dispatcher.

Delivery is best-effort and happens after the triggering transaction
commits (notify_on_commit). A failed delivery is logged and recorded on the
Notification row; it is never raised to the caller.
"""
import json
import logging
from functools import partial

from django.conf import settings
from django.core.mail import send_mail
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction
from django.utils import timezone

from accounts.models import NotificationPreference
from notifications.messages import render
from notifications.models import Notification

logger = logging.getLogger(__name__)


def preference_allows(user):
    """Assignment events reach only users who did not opt out."""
    return user.notification_preference != NotificationPreference.NONE


def _json_safe(context):
    return json.loads(json.dumps(context or {}, cls=DjangoJSONEncoder))


def dispatch(kind, recipient=None, context=None, *, email=None, organization=None,
             assignment=None, respect_preference=False):
    """
    Record and deliver one notification. Returns the Notification, or None
    when skipped or when even the record could not be written.

    recipient is a User; pending registrants have no User yet and are
    addressed by email alone. With respect_preference the recipient's
    notification_preference decides: none -> skipped, phone -> in-app record
    only, email -> in-app record plus email.
    """
    if recipient is not None:
        if respect_preference and not preference_allows(recipient):
            logger.debug('Skipping %s for user %s (preference=none)', kind, recipient.pk)
            return None
        email = email or recipient.email
        if organization is None:
            organization = recipient.organization_id
    if not email:
        logger.warning('Notification %s has no recipient address; dropped', kind)
        return None

    send_email = (
        recipient is None
        or not respect_preference
        or recipient.notification_preference == NotificationPreference.EMAIL
    )

    try:
        subject, message = render(kind, context)
        notification = Notification.objects.create(
            organization_id=getattr(organization, 'pk', organization),
            kind=kind,
            recipient=recipient,
            recipient_email=email,
            assignment=assignment,
            subject=subject,
            message=message,
            context=_json_safe(context),
        )
    except Exception:
        logger.exception('Could not record %s notification for %s', kind, email)
        return None

    if not send_email:
        return notification

    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [email], fail_silently=False)
    except Exception as exc:
        logger.exception('Failed to send %s email to %s', kind, email)
        notification.delivery_status = Notification.STATUS_FAILED
        notification.error = str(exc)[:500]
    else:
        notification.delivery_status = Notification.STATUS_SENT
        notification.sent_at = timezone.now()
    try:
        notification.save(update_fields=['delivery_status', 'error', 'sent_at'])
    except Exception:
        logger.exception('Could not update delivery status of notification %s', notification.pk)
    return notification


def notify_on_commit(kind, recipient=None, context=None, **kwargs):
    """Schedule dispatch() for after the current transaction commits."""
    transaction.on_commit(partial(dispatch, kind, recipient, context, **kwargs))


def notify_many_on_commit(kind, recipients, context_for, **kwargs):
    """
    One dispatch per recipient; context_for(user) builds each context.
    A failure for one recipient does not affect the others.
    """
    for user in recipients:
        notify_on_commit(kind, user, context_for(user), **kwargs)
