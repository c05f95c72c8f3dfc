import logging

from accounts.models import Role

from .models import ParentStudentLink, Student

logger = logging.getLogger(__name__)


def caller_can_act_for_student(caller, student_id) -> bool:
    """Admins, the student themself, or an actively linked parent."""
    if caller is None:
        return False
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.STUDENT:
        allowed = Student.objects.filter(id=student_id, user_id=caller.id).exists()
    elif caller.role == Role.PARENT:
        allowed = ParentStudentLink.objects.filter(
            user_id=caller.id, student_id=student_id, active=True
        ).exists()
    else:
        allowed = False
    if not allowed:
        logger.warning(
            "Permission denied: user %s (%s) has no access to student %s",
            caller.id, caller.role, student_id,
        )
    return allowed
