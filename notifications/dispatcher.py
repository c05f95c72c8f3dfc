"""Creates parent notifications and makes exactly one delivery attempt each.

The delivery target is always the parent linked to the student, never
caller input. A failed attempt stays on record as FAILED; retrying means
sending again, which appends a new Message.
"""
import logging

from django.utils import timezone

from accounts.models import Role
from common.errors import (
    AlreadySettled,
    Forbidden,
    GatewayError,
    InvalidContent,
    NotFound,
    UnsupportedChannel,
)
from reconciliation.guards import compare_and_set
from students.models import Student
from students.queries import linked_parent

from .gateways import SendResult, get_gateway
from .models import Channel, Message, MessageStatus

logger = logging.getLogger(__name__)


def _destination(parent, channel):
    if channel == Channel.EMAIL:
        return parent.email or None
    return parent.phone or None


def create_and_send(caller, student_id, channel, content, gateway=None) -> Message:
    if caller is None or not caller.is_admin:
        raise Forbidden("only administrators can send messages")
    if not content or not str(content).strip():
        raise InvalidContent("message content cannot be empty")
    if channel not in Channel.values:
        raise UnsupportedChannel(f"unknown channel {channel!r}")
    gateway = gateway or get_gateway(channel)

    student = Student.objects.filter(pk=student_id).first()
    if student is None:
        raise NotFound(f"student {student_id} not found")
    parent = linked_parent(student.pk)
    if parent is None:
        raise NotFound(f"student {student_id} has no linked parent")
    destination = _destination(parent, channel)
    if not destination:
        raise NotFound(f"parent {parent.pk} has no {channel} destination")

    message = Message.objects.create(
        student=student,
        parent=parent,
        channel=channel,
        content=content,
        status=MessageStatus.PENDING,
    )
    try:
        result = gateway.send(channel, destination, content)
    except GatewayError as e:
        result = SendResult(False, error=str(e))
    except Exception as e:
        # any provider fault still has to land the row as FAILED
        logger.exception("Gateway %s raised sending message %s", type(gateway).__name__, message.pk)
        result = SendResult(False, error=f"{type(e).__name__}: {e}")

    if result.success:
        compare_and_set(
            Message,
            message.pk,
            MessageStatus.PENDING,
            status=MessageStatus.SENT,
            sent_at=timezone.now(),
            provider_id=result.provider_message_id,
        )
        logger.info("Message %s sent via %s to parent %s", message.pk, channel, parent.pk)
    else:
        compare_and_set(
            Message,
            message.pk,
            MessageStatus.PENDING,
            status=MessageStatus.FAILED,
            error=(result.error or "delivery failed")[:255],
        )
        logger.warning(
            "Message %s via %s to parent %s failed: %s",
            message.pk, channel, parent.pk, result.error,
        )
    message.refresh_from_db()
    return message


def resend(caller, message_id, gateway=None) -> Message:
    if caller is None or not caller.is_admin:
        raise Forbidden("only administrators can send messages")
    original = Message.objects.filter(pk=message_id).first()
    if original is None:
        raise NotFound(f"message {message_id} not found")
    if original.status != MessageStatus.FAILED:
        raise AlreadySettled(f"message {original.pk} is {original.status}, only FAILED messages are resent")
    return create_and_send(
        caller, original.student_id, original.channel, original.content, gateway=gateway
    )


def messages_visible_to(caller):
    qs = Message.objects.select_related("student", "parent")
    if caller is None:
        return qs.none()
    if caller.is_admin:
        return qs
    if caller.role == Role.PARENT:
        return qs.filter(parent_id=caller.id)
    return qs.none()
