from django.contrib import admin

from .models import RequestStatusLog, ServiceRequest


class RequestStatusLogInline(admin.TabularInline):
    model = RequestStatusLog
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by",
                       "message", "created_at")


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "service", "citizen", "status", "reviewed_by",
                    "payment_status", "payment_amount", "created_at")
    list_filter = ("status", "payment_status", "service__department")
    search_fields = ("description", "citizen__username", "citizen__email")
    # Workflow fields change only through the review services.
    readonly_fields = ("status", "reviewed_by", "payment_amount",
                       "payment_status", "paid_at")
    inlines = [RequestStatusLogInline]


@admin.register(RequestStatusLog)
class RequestStatusLogAdmin(admin.ModelAdmin):
    list_display = ("request", "from_status", "to_status",
                    "changed_by", "created_at")
    list_filter = ("to_status",)
