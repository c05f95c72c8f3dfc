from django.contrib import admin
from .models import ProcessedEvent

@admin.register(ProcessedEvent)
class ProcessedEventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_id", "received_at")
    search_fields = ("event_id",)
