from django.contrib import admin

from .models import (
    Work,
    Chapter,
    Series,
    Gift,
    RelatedWork,
    ChallengeClaim,
    WorkLink,
)


# ============================================================
# WORKS
# ============================================================

class ChapterInline(admin.TabularInline):
    model = Chapter
    extra = 0
    fields = ("position", "title", "posted")
    show_change_link = True


class GiftInline(admin.TabularInline):
    model = Gift
    extra = 0
    fields = ("recipient_name", "notified")


@admin.register(Work)
class WorkAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "posted",
        "in_anon_collection",
        "in_unrevealed_collection",
        "created_at",
    )

    list_filter = (
        "posted",
        "in_anon_collection",
        "in_unrevealed_collection",
    )

    search_fields = (
        "title",
        "pseuds__name",
    )

    # derived from collection memberships
    readonly_fields = ("in_anon_collection", "in_unrevealed_collection")

    filter_horizontal = ("pseuds",)
    inlines = (ChapterInline, GiftInline)


@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ("work", "position", "title", "posted")
    list_filter = ("posted",)
    search_fields = ("work__title", "title")
    filter_horizontal = ("pseuds",)


@admin.register(Series)
class SeriesAdmin(admin.ModelAdmin):
    list_display = ("title", "posted", "created_at")
    search_fields = ("title",)
    filter_horizontal = ("works", "pseuds")


# ============================================================
# RELATIONSHIPS & STATISTICS
# ============================================================

@admin.register(RelatedWork)
class RelatedWorkAdmin(admin.ModelAdmin):
    list_display = ("work", "parent", "translation", "created_at")
    list_filter = ("translation",)


@admin.register(ChallengeClaim)
class ChallengeClaimAdmin(admin.ModelAdmin):
    list_display = ("work", "collection", "requesting_pseud", "created_at")
    list_filter = ("collection",)


@admin.register(WorkLink)
class WorkLinkAdmin(admin.ModelAdmin):
    list_display = ("work", "url", "count", "created_at")
    search_fields = ("url", "work__title")
