from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User, Pseud, Preference


# ============================================================
# USER ADMIN
# ============================================================

class PseudInline(admin.TabularInline):
    model = Pseud
    extra = 0
    fields = ("name", "is_default")


class PreferenceInline(admin.StackedInline):
    model = Preference
    extra = 0
    max_num = 1
    can_delete = False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    ordering = ("username",)

    list_display = (
        "username",
        "email",
        "is_active",
        "is_staff",
        "date_joined",
    )

    list_filter = (
        "is_active",
        "is_staff",
    )

    search_fields = (
        "username",
        "email",
        "pseuds__name",
    )

    inlines = (PseudInline, PreferenceInline)


# ============================================================
# PSEUDS
# ============================================================

@admin.register(Pseud)
class PseudAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "user",
        "is_default",
        "created_at",
    )

    list_filter = ("is_default",)

    search_fields = (
        "name",
        "user__username",
    )

    autocomplete_fields = ("user",)
