from django.db import models
from django.db.models import Q
from students.models import Student


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    OVERDUE = "OVERDUE", "Overdue"
    CANCELLED = "CANCELLED", "Cancelled"


# statuses a payment can still leave; PAID and CANCELLED are terminal
OPEN_STATUSES = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)
TERMINAL_STATUSES = (PaymentStatus.PAID, PaymentStatus.CANCELLED)


class Payment(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    month = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()
    status = models.CharField(
        max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    method = models.CharField(max_length=32, blank=True, null=True)
    external_reference = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    settled_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-year", "-month", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "month", "year"],
                condition=~Q(status="CANCELLED"),
                name="unique_open_payment_per_period",
            ),
        ]

    def __str__(self):
        return f"{self.student_id} {self.month}/{self.year} {self.status}"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES
