from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "role", "phone", "is_active")
    list_filter = ("role", "is_active")
    search_fields = ("email", "phone")
