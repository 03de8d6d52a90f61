from django.db import models
from django.core.exceptions import ValidationError

from accounts.models import Pseud
from accounts.services.bylines import split_bylines


# ============================================================
#   CREATION (shared by Work, Chapter, Series)
# ============================================================
class Creation(models.Model):
    """
    Anything a pseud can be credited for.

    ``authors`` and ``authors_to_remove`` are transient: the posting form
    fills them in and creatorship reconciliation turns them into rows of
    the ``pseuds`` relation when the creation is saved.
    """

    posted = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def authors(self):
        return getattr(self, "_authors", [])

    @authors.setter
    def authors(self, pseuds):
        self._authors = list(pseuds or [])

    @property
    def authors_to_remove(self):
        return getattr(self, "_authors_to_remove", [])

    @authors_to_remove.setter
    def authors_to_remove(self, pseuds):
        self._authors_to_remove = list(pseuds or [])

    @property
    def creation_type(self):
        return type(self).__name__

    def clean(self):
        super().clean()
        if self.pk and not self.authors and not self.pseuds.exists():
            raise ValidationError(
                f"{self.creation_type} must have at least one creator."
            )

    def is_valid(self):
        try:
            self.full_clean()
        except ValidationError:
            return False
        return True


class Work(Creation):
    title = models.CharField(max_length=255)
    summary = models.TextField(blank=True)

    pseuds = models.ManyToManyField(
        Pseud,
        related_name="works",
        blank=True
    )

    collections = models.ManyToManyField(
        "curation.Collection",
        through="curation.CollectionItem",
        related_name="works",
        blank=True
    )

    # Derived from the work's collections by refresh_visibility()
    in_anon_collection = models.BooleanField(default=False)
    in_unrevealed_collection = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    # -------------------------------------------------------
    # VISIBILITY
    # -------------------------------------------------------
    @property
    def anonymous(self):
        return self.in_anon_collection

    @property
    def unrevealed(self):
        return self.in_unrevealed_collection

    def refresh_visibility(self):
        """
        Set the concealment flags from the collections the work is in.
        Returns True when either flag changed. Nothing is saved.
        """
        if not self.pk:
            return False

        collections = self.collections.all()
        anonymous = collections.filter(is_anonymous=True).exists()
        unrevealed = collections.filter(is_unrevealed=True).exists()

        changed = (anonymous, unrevealed) != (
            self.in_anon_collection,
            self.in_unrevealed_collection,
        )
        self.in_anon_collection = anonymous
        self.in_unrevealed_collection = unrevealed
        return changed

    # -------------------------------------------------------
    # RELATIONS
    # -------------------------------------------------------
    def primary_collection(self):
        """The collection the work was added to first, if any."""
        item = (
            self.collection_items
            .select_related("collection")
            .order_by("id")
            .first()
        )
        return item.collection if item else None

    def first_chapter(self):
        return self.chapters.order_by("position", "id").first()

    def owner_user_ids(self):
        return list(
            self.pseuds.order_by("user_id").values_list("user_id", flat=True).distinct()
        )

    def is_owned_by(self, user):
        if not user or not user.is_authenticated:
            return False
        return self.pseuds.filter(user=user).exists()

    # -------------------------------------------------------
    # GIFT RECIPIENTS
    # -------------------------------------------------------
    @property
    def new_recipients(self):
        """Recipients who have not been told about the gift yet, as bylines."""
        if not self.pk:
            return ""
        return ", ".join(
            self.gifts
            .filter(notified=False)
            .order_by("id")
            .values_list("recipient_name", flat=True)
        )

    def add_recipients(self, text):
        for byline in split_bylines(text):
            Gift.objects.get_or_create(
                work=self,
                recipient_name__iexact=byline,
                defaults={"recipient_name": byline},
            )

    def mark_recipients_notified(self):
        return self.gifts.filter(notified=False).update(notified=True)


class Chapter(Creation):
    work = models.ForeignKey(
        Work,
        on_delete=models.CASCADE,
        related_name="chapters"
    )
    position = models.PositiveIntegerField(default=1)
    title = models.CharField(max_length=255, blank=True)
    content = models.TextField(blank=True)

    pseuds = models.ManyToManyField(
        Pseud,
        related_name="chapters",
        blank=True
    )

    class Meta:
        ordering = ["work", "position"]

    def __str__(self):
        return f"{self.work.title}, chapter {self.position}"


class Series(Creation):
    title = models.CharField(max_length=255)

    works = models.ManyToManyField(
        Work,
        related_name="series",
        blank=True
    )

    pseuds = models.ManyToManyField(
        Pseud,
        related_name="series",
        blank=True
    )

    class Meta:
        verbose_name_plural = "series"

    def __str__(self):
        return self.title


# ============================================================
#   GIFTS
# ============================================================
class Gift(models.Model):
    work = models.ForeignKey(
        Work,
        on_delete=models.CASCADE,
        related_name="gifts"
    )
    recipient_name = models.CharField(max_length=120)
    notified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.work} for {self.recipient_name}"


# ============================================================
#   RELATED WORKS (remixes, translations, inspired-by)
# ============================================================
class RelatedWork(models.Model):
    work = models.ForeignKey(
        Work,
        on_delete=models.CASCADE,
        related_name="parent_work_relationships"
    )
    parent = models.ForeignKey(
        Work,
        on_delete=models.CASCADE,
        related_name="child_work_relationships"
    )
    translation = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.work} inspired by {self.parent}"

    def notify_parent_owners(self):
        """
        Email every owner of the parent work that a new work responds
        to it, skipping owners who turned these emails off.
        """
        # local imports avoid a works ↔ notifications import cycle
        from accounts.models import Preference
        from notifications.services.mailers import send_related_work_notification

        owner_ids = self.parent.owner_user_ids()
        wanted = Preference.objects.users_with_flag_off(
            "related_works_emails_off", owner_ids
        )

        for user_id in wanted:
            send_related_work_notification(user_id, self)

        return len(wanted)


# ============================================================
#   PROMPT CHALLENGES
# ============================================================
class ChallengeClaim(models.Model):
    work = models.ForeignKey(
        Work,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="challenge_claims"
    )
    collection = models.ForeignKey(
        "curation.Collection",
        on_delete=models.CASCADE,
        related_name="challenge_claims"
    )
    requesting_pseud = models.ForeignKey(
        Pseud,
        on_delete=models.CASCADE,
        related_name="requested_claims"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Claim on {self.requesting_pseud}'s prompt in {self.collection}"


# ============================================================
#   WORK LINK STATISTICS
# ============================================================
class WorkLink(models.Model):
    """A referring URL that sent readers to a work."""

    work = models.ForeignKey(
        Work,
        on_delete=models.CASCADE,
        related_name="links"
    )
    url = models.URLField(max_length=500)
    count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return self.url
