from django.contrib import admin
from .models import Payment

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "month", "year", "amount", "status", "method", "settled_at")
    list_filter = ("status", "method", "year")
    search_fields = ("external_reference", "student__external_student_id", "student__last_name")
    readonly_fields = ("status", "method", "external_reference", "settled_at", "created_at")
