from django.contrib import admin

from .models import (
    Collection,
    CollectionItem,
    CollectionParticipant,
    CollectionProfile,
)


class CollectionProfileInline(admin.StackedInline):
    model = CollectionProfile
    extra = 0
    max_num = 1


class CollectionParticipantInline(admin.TabularInline):
    model = CollectionParticipant
    extra = 0
    autocomplete_fields = ("pseud",)


@admin.register(Collection)
class CollectionAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "title",
        "parent",
        "is_anonymous",
        "is_unrevealed",
        "created_at",
    )

    list_filter = (
        "is_anonymous",
        "is_unrevealed",
    )

    search_fields = (
        "name",
        "title",
    )

    inlines = (CollectionProfileInline, CollectionParticipantInline)


@admin.register(CollectionItem)
class CollectionItemAdmin(admin.ModelAdmin):
    list_display = ("collection", "work", "created_at")
    list_filter = ("collection",)
    search_fields = ("work__title",)
