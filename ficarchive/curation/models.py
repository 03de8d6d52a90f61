from django.db import models

from accounts.models import Pseud


# ============================================================
#   COLLECTION
# ============================================================
class Collection(models.Model):
    """
    A curated grouping of works. Collections nest one level deep
    (a challenge with its sub-collections, for example).
    """

    name = models.SlugField(max_length=255, unique=True)
    title = models.CharField(max_length=255)

    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children"
    )

    # Anonymous: creators hidden. Unrevealed: works hidden.
    is_anonymous = models.BooleanField(default=False)
    is_unrevealed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.title


class CollectionItem(models.Model):
    collection = models.ForeignKey(
        Collection,
        on_delete=models.CASCADE,
        related_name="items"
    )
    work = models.ForeignKey(
        "works.Work",
        on_delete=models.CASCADE,
        related_name="collection_items"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["collection", "work"],
                name="unique_work_per_collection",
            ),
        ]

    def __str__(self):
        return f"{self.work} in {self.collection}"


class CollectionParticipant(models.Model):
    ROLE_CHOICES = [
        ("owner", "Owner"),
        ("moderator", "Moderator"),
        ("member", "Member"),
        ("invited", "Invited"),
    ]

    collection = models.ForeignKey(
        Collection,
        on_delete=models.CASCADE,
        related_name="participants"
    )
    pseud = models.ForeignKey(
        Pseud,
        on_delete=models.CASCADE,
        related_name="collection_participants"
    )
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default="member"
    )

    def __str__(self):
        return f"{self.pseud} ({self.role}) in {self.collection}"


class CollectionProfile(models.Model):
    collection = models.OneToOneField(
        Collection,
        on_delete=models.CASCADE,
        related_name="profile"
    )
    intro = models.TextField(blank=True)
    faq = models.TextField(blank=True)
    rules = models.TextField(blank=True)

    def __str__(self):
        return f"Profile: {self.collection}"
