from django.contrib import admin

from .models import Department, Service


class ServiceInline(admin.TabularInline):
    model = Service
    extra = 0


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)
    inlines = [ServiceInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("name", "department", "fee")
    list_filter = ("department",)
    search_fields = ("name",)
