"""Payment lifecycle: creation, checkout, settlement and the overdue sweep.

This module is the only writer of ``Payment`` rows. Settlement and
cancellation are driven by the reconciliation coordinator and always go
through a conditional update so a terminal status is never overwritten.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.urls import reverse
from django.utils import timezone

from common.errors import (
    AlreadySettled,
    DuplicatePeriod,
    Forbidden,
    InvalidAmount,
    InvalidPeriod,
    NotFound,
)
from reconciliation.guards import compare_and_set
from students.models import Student
from students.permissions import caller_can_act_for_student
from students.queries import student_ids_visible_to

from .gateways import get_payment_gateway
from .models import OPEN_STATUSES, Payment, PaymentStatus

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100

# Stripe charges these in whole units (no minor unit)
ZERO_DECIMAL_CURRENCIES = frozenset({
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
})
THREE_DECIMAL_CURRENCIES = frozenset({"bhd", "jod", "kwd", "omr", "tnd"})


def currency_exponent(currency) -> int:
    currency = (currency or "").lower()
    if currency in ZERO_DECIMAL_CURRENCIES:
        return 0
    if currency in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def _clean_amount(amount, currency=None) -> Decimal:
    currency = currency or settings.PAYMENT_CURRENCY
    # the ledger column keeps two places, so that is the ceiling for any currency
    places = min(currency_exponent(currency), 2)
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"amount {amount!r} is not a number")
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("amount must be greater than zero")
    if value >= Decimal("100000000"):
        raise InvalidAmount("amount is too large")
    if value != value.quantize(Decimal(1).scaleb(-places)):
        raise InvalidAmount(
            f"amount cannot have more than {places} decimal places in {currency.upper()}"
        )
    return value


def _clean_period(month, year):
    try:
        month, year = int(month), int(year)
    except (TypeError, ValueError):
        raise InvalidPeriod("month and year must be integers")
    if not 1 <= month <= 12:
        raise InvalidPeriod("month must be between 1 and 12")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriod(f"year must be between {MIN_YEAR} and {MAX_YEAR}")
    return month, year


def to_minor_units(amount: Decimal, currency: str) -> int:
    """Amount in the provider's smallest unit for ``currency`` (cents, yen, fils)."""
    minor = Decimal(amount).scaleb(currency_exponent(currency))
    if minor != minor.to_integral_value():
        raise InvalidAmount(f"{amount} cannot be charged in {currency.upper()}")
    return int(minor)


def create_payment(caller, student_id, amount, month, year) -> Payment:
    if caller is None or not caller.is_admin:
        raise Forbidden("only administrators can create payments")
    amount = _clean_amount(amount)
    month, year = _clean_period(month, year)
    if not Student.objects.filter(pk=student_id).exists():
        raise NotFound(f"student {student_id} not found")
    try:
        # the partial unique constraint settles concurrent creations
        with transaction.atomic():
            payment = Payment.objects.create(
                student_id=student_id,
                amount=amount,
                month=month,
                year=year,
                status=PaymentStatus.PENDING,
            )
    except IntegrityError:
        # the student may have been deleted since the check above
        if not Student.objects.filter(pk=student_id).exists():
            raise NotFound(f"student {student_id} not found")
        open_for_period = Payment.objects.filter(
            student_id=student_id, month=month, year=year
        ).exclude(status=PaymentStatus.CANCELLED)
        if not open_for_period.exists():
            raise
        raise DuplicatePeriod(
            f"a payment for {month}/{year} already exists for student {student_id}"
        )
    logger.info(
        "Created payment %s for student %s period %s/%s amount %s",
        payment.pk, student_id, month, year, amount,
    )
    return payment


def _site_link(path, **query):
    base = settings.SITE_URL.rstrip("/")
    qs = "&".join(f"{k}={v}" for k, v in query.items())
    return f"{base}{path}?{qs}" if qs else f"{base}{path}"


def create_checkout_session(payment_id, caller, gateway=None):
    """Open a hosted checkout for a payment and return the provider session.

    Read-only with respect to the ledger: the payment only changes once the
    provider's webhook is reconciled.
    """
    payment = Payment.objects.select_related("student").filter(pk=payment_id).first()
    if payment is None:
        raise NotFound(f"payment {payment_id} not found")
    if not caller_can_act_for_student(caller, payment.student_id):
        raise Forbidden("not allowed to pay for this student")
    if payment.is_terminal:
        raise AlreadySettled(f"payment {payment.pk} is {payment.status}")
    currency = settings.PAYMENT_CURRENCY
    amount_minor_units = to_minor_units(payment.amount, currency)
    gateway = gateway or get_payment_gateway()
    listing = reverse("financials:payments")
    session = gateway.create_checkout_session(
        amount_minor_units=amount_minor_units,
        currency=currency,
        description=f"Tuition {payment.month}/{payment.year} - {payment.student}",
        metadata={
            "paymentId": str(payment.pk),
            "studentId": str(payment.student_id),
        },
        success_url=_site_link(listing, success="true"),
        cancel_url=_site_link(listing, canceled="true"),
    )
    logger.info(
        "Opened checkout session %s for payment %s", session.session_id, payment.pk
    )
    return session


def settle_payment(payment_id, method: str, external_reference: str) -> bool:
    return compare_and_set(
        Payment,
        payment_id,
        OPEN_STATUSES,
        status=PaymentStatus.PAID,
        method=method,
        external_reference=external_reference,
        settled_at=timezone.now(),
    )


def cancel_payment(payment_id) -> bool:
    return compare_and_set(
        Payment, payment_id, OPEN_STATUSES, status=PaymentStatus.CANCELLED
    )


def mark_overdue(today=None) -> int:
    """Move PENDING payments for periods before the current month to OVERDUE."""
    today = today or timezone.localdate()
    past_period = Q(year__lt=today.year) | Q(year=today.year, month__lt=today.month)
    count = Payment.objects.filter(past_period, status=PaymentStatus.PENDING).update(
        status=PaymentStatus.OVERDUE
    )
    if count:
        logger.info("Marked %s payments overdue as of %s", count, today.isoformat())
    return count


def payments_visible_to(caller):
    qs = Payment.objects.select_related("student")
    student_ids = student_ids_visible_to(caller)
    if student_ids is None:
        return qs
    return qs.filter(student_id__in=student_ids)
