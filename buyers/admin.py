from django.contrib import admin

from .models import Buyer, BuyerHistory


class BuyerHistoryInline(admin.TabularInline):
    model = BuyerHistory
    fields = ("changed_at", "changed_by", "diff")
    readonly_fields = fields
    extra = 0
    can_delete = False
    ordering = ("-changed_at", "-id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Buyer)
class BuyerAdmin(admin.ModelAdmin):
    list_display = (
        "full_name",
        "phone",
        "city",
        "property_type",
        "bhk",
        "timeline",
        "status",
        "owner",
        "updated_at",
    )
    search_fields = ("full_name", "phone", "email", "city")
    list_filter = ("status", "property_type", "timeline", "source", "city")
    ordering = ("-updated_at",)
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = [BuyerHistoryInline]


@admin.register(BuyerHistory)
class BuyerHistoryAdmin(admin.ModelAdmin):
    list_display = ("buyer_ref", "action", "changed_by", "changed_at")
    search_fields = ("changed_by__email",)
    fields = ("buyer_ref", "changed_by", "diff", "changed_at")
    readonly_fields = fields
    date_hierarchy = "changed_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Buyer")
    def buyer_ref(self, obj):
        # The buyer row may already be deleted
        return obj.buyer_id

    @admin.display(description="Action")
    def action(self, obj):
        return obj.diff.get("action", "")
