from django.contrib import admin
from .models import Message

@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "parent", "channel", "status", "created_at", "sent_at")
    list_filter = ("channel", "status")
    search_fields = ("parent__email", "provider_id", "student__last_name")
