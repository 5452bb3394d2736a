from django.contrib import admin

from .models import StateBlob


@admin.register(StateBlob)
class StateBlobAdmin(admin.ModelAdmin):
    list_display = ("key", "updated_at")
    search_fields = ("key",)
    readonly_fields = ("updated_at",)
