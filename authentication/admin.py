from django.contrib import admin

from .models import UserIdentity


@admin.register(UserIdentity)
class UserIdentityAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("email", "name")
    readonly_fields = ("created_at",)
