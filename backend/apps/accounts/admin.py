"""
Admin configuration for accounts app.
"""

from django.contrib import admin

from apps.accounts.models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin for profiles."""

    list_display = ["email", "full_name", "role", "organization", "updated_at"]
    list_filter = ["role"]
    search_fields = ["email", "full_name", "identity_id"]
    readonly_fields = ["identity_id", "created_at", "updated_at"]
    raw_id_fields = ["organization"]
