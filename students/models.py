from django.db import models
from django.conf import settings


class Student(models.Model):
    external_student_id = models.CharField(max_length=64, unique=True)
    first_name = models.CharField(max_length=64)
    last_name = models.CharField(max_length=64)
    # the student's own login, when they have one
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="student_profile",
    )

    def __str__(self):
        name = f"{self.first_name} {self.last_name}".strip()
        return name or f"Student {self.pk}"


class ParentStudentLink(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    student = models.ForeignKey(Student, on_delete=models.CASCADE)
    active = models.BooleanField(default=True)
    is_primary = models.BooleanField(default=False)
    source = models.CharField(max_length=32, default="admin")
    last_verified_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        unique_together = [("user", "student")]
