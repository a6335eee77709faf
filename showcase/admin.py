from django.contrib import admin

from .models import About, ContactMessage, PortfolioItem, Profile, TimelineEntry


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "display_name", "updated_at")
    search_fields = ("display_name", "bio", "user__username", "user__email")
    readonly_fields = ("avatar_url", "created_at", "updated_at")


@admin.register(About)
class AboutAdmin(admin.ModelAdmin):
    list_display = ("user", "updated_at")
    search_fields = ("user__username",)


@admin.register(PortfolioItem)
class PortfolioItemAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "created_at", "image_url")
    search_fields = ("title", "description", "user__username")
    readonly_fields = ("image_url",)


@admin.register(TimelineEntry)
class TimelineEntryAdmin(admin.ModelAdmin):
    list_display = ("degree", "institution", "user", "type", "order")
    list_filter = ("type",)
    search_fields = ("institution", "degree", "user__username")
    ordering = ("user", "type", "order")


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ("sender_name", "sender_email", "user", "created_at")
    search_fields = ("sender_name", "sender_email", "message")
    readonly_fields = ("created_at",)
