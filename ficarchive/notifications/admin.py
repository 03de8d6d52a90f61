from django.contrib import admin
from django.utils.html import format_html

from .models import Notification, Subscription, QueuedSubscriptionMail


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """
    In-app copies of the emails sent by the posting hooks.
    """

    # =====================================================
    # LIST VIEW
    # =====================================================
    list_display = (
        "id",
        "recipient",
        "category",
        "colored_title",
        "work",
        "is_read",
        "created_at",
    )

    list_filter = (
        "category",
        "is_read",
        "created_at",
    )

    search_fields = (
        "title",
        "message",
        "recipient__username",
    )

    ordering = ("-created_at",)
    list_per_page = 25

    readonly_fields = ("created_at",)

    actions = (
        "mark_as_read",
        "mark_as_unread",
    )

    def colored_title(self, obj):
        """
        Color the title based on category for fast scanning.
        """
        color_map = {
            Notification.Category.COAUTHOR: "#2563eb",      # blue
            Notification.Category.GIFT: "#db2777",          # pink
            Notification.Category.PROMPT: "#7c3aed",        # purple
            Notification.Category.RELATED_WORK: "#16a34a",  # green
            Notification.Category.SUBSCRIPTION: "#6b7280",  # gray
        }

        color = color_map.get(obj.category, "#000000")

        return format_html(
            '<span style="color:{}; font-weight:600;">{}</span>',
            color,
            obj.title,
        )

    colored_title.short_description = "Title"

    @admin.action(description="Mark selected notifications as READ")
    def mark_as_read(self, request, queryset):
        queryset.update(is_read=True)

    @admin.action(description="Mark selected notifications as UNREAD")
    def mark_as_unread(self, request, queryset):
        queryset.update(is_read=False)


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("user", "content_type", "object_id", "created_at")
    list_filter = ("content_type",)
    search_fields = ("user__username",)


@admin.register(QueuedSubscriptionMail)
class QueuedSubscriptionMailAdmin(admin.ModelAdmin):
    list_display = ("subscription", "content_type", "object_id", "created_at")
    list_filter = ("content_type",)
    list_select_related = ("subscription__user", "content_type")
