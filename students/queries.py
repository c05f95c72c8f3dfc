"""Named queries over the student / parent relation.

Authorization and delivery-target decisions go through these instead of
walking related managers from the caller's side.
"""
from accounts.models import Role

from .models import ParentStudentLink, Student


def active_links_for_student(student_id):
    return ParentStudentLink.objects.filter(student_id=student_id, active=True)


def linked_parent(student_id):
    """The parent user notifications for this student are delivered to, or None."""
    link = (
        active_links_for_student(student_id)
        .select_related("user")
        .order_by("-is_primary", "id")
        .first()
    )
    return link.user if link else None


def student_ids_for_parent(user_id):
    return list(
        ParentStudentLink.objects.filter(user_id=user_id, active=True)
        .values_list("student_id", flat=True)
    )


def student_id_for_user(user_id):
    return (
        Student.objects.filter(user_id=user_id)
        .values_list("id", flat=True)
        .first()
    )


def student_ids_visible_to(caller):
    """Student ids the caller may see, or None meaning every student."""
    if caller is None:
        return []
    if caller.role == Role.ADMIN:
        return None
    if caller.role == Role.PARENT:
        return student_ids_for_parent(caller.id)
    if caller.role == Role.STUDENT:
        sid = student_id_for_user(caller.id)
        return [sid] if sid is not None else []
    return []
