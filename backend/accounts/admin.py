from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "national_id", "first_name",
                    "last_name", "role", "department", "is_active")
    search_fields = ("username", "email", "national_id")
    list_filter = ("is_active", "role", "department")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Portal", {"fields": ("role", "department", "job_title")}),
        ("Citizen Profile", {"fields": ("national_id", "date_of_birth",
                                        "contact_info")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Portal", {"fields": ("email", "first_name", "last_name",
                               "role", "department", "job_title")}),
    )
