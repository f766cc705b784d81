"""
Admin configuration for staff app.
"""

from django.contrib import admin

from apps.staff.models import StaffRecord


@admin.register(StaffRecord)
class StaffRecordAdmin(admin.ModelAdmin):
    """Admin for staff records. Registration ids are read-only once issued."""

    list_display = ["registration_id", "first_name", "last_name", "cohort_year", "organization"]
    list_filter = ["cohort_year"]
    search_fields = ["registration_id", "first_name", "last_name", "identity_id"]
    readonly_fields = ["registration_id", "identity_id", "created_at", "updated_at"]
    raw_id_fields = ["organization"]
