from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "recipient", "event_type", "is_read", "created_at")
    list_filter = ("event_type", "is_read")
    search_fields = ("title", "recipient__username", "recipient__email")
    readonly_fields = ("read_at", "created_at", "updated_at")
