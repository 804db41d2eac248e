from django.contrib import admin
from .models import Adventurer, CoordinatorState, FeeTokenBalance, MintEvent, MintRequest


@admin.register(CoordinatorState)
class CoordinatorStateAdmin(admin.ModelAdmin):
    list_display = ("address", "total_minted", "vrf_nonce", "collected_wei", "updated_at")
    readonly_fields = ("address", "total_minted", "vrf_nonce", "collected_wei", "updated_at")


class AdventurerInline(admin.StackedInline):
    model = Adventurer
    extra = 0
    can_delete = False
    readonly_fields = (
        "token_id",
        "owner",
        "adventurer_class",
        "strength",
        "dexterity",
        "constitution",
        "intelligence",
        "wisdom",
        "charisma",
        "minted_at",
    )
    exclude = ("coordinator",)


@admin.register(MintRequest)
class MintRequestAdmin(admin.ModelAdmin):
    list_display = (
        "request_id",
        "requester",
        "status",
        "token_id",
        "created_at",
        "fulfilled_at",
        "completed_at",
    )
    list_filter = ("status", "created_at")
    search_fields = ("request_id", "requester")
    ordering = ("-created_at",)
    readonly_fields = (
        "coordinator",
        "request_id",
        "requester",
        "payment_wei",
        "status",
        "randomness",
        "token_id",
        "created_at",
        "fulfilled_at",
        "completed_at",
    )
    fieldsets = (
        ("Request", {"fields": ("coordinator", "request_id", "requester", "payment_wei")}),
        ("Oracle", {"fields": ("status", "randomness")}),
        ("Result", {"fields": ("token_id",)}),
        ("Timestamps", {"fields": ("created_at", "fulfilled_at", "completed_at")}),
    )
    inlines = [AdventurerInline]

    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False


@admin.register(Adventurer)
class AdventurerAdmin(admin.ModelAdmin):
    list_display = ("token_id", "owner", "adventurer_class", "strength", "dexterity", "minted_at")
    list_filter = ("adventurer_class",)
    search_fields = ("owner", "token_id")
    ordering = ("token_id",)
    readonly_fields = tuple(field.name for field in Adventurer._meta.fields)

    def has_delete_permission(self, request, obj=None):
        return False

    def has_add_permission(self, request):
        return False


@admin.register(FeeTokenBalance)
class FeeTokenBalanceAdmin(admin.ModelAdmin):
    # Editing a balance here stands in for sending LINK from a faucet.
    list_display = ("address", "balance", "updated_at")
    search_fields = ("address",)


@admin.register(MintEvent)
class MintEventAdmin(admin.ModelAdmin):
    list_display = ("created_at", "event_type", "status", "request_id")
    list_filter = ("event_type", "status", "created_at")
    search_fields = ("event_type", "status", "request_id")
    ordering = ("-created_at",)
    readonly_fields = ("created_at",)
