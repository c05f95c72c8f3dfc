from django_rq import job

from financials.ledger import mark_overdue


@job("default")
def mark_overdue_payments():
    return mark_overdue()
