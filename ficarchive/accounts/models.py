from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """
    Archive account. The login is ``username``; everything the user
    publishes is credited to one of their pseuds.
    """

    @property
    def default_pseud(self):
        return self.pseuds.filter(is_default=True).first()

    def __str__(self):
        return self.username


class Pseud(models.Model):
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="pseuds"
    )
    name = models.CharField(max_length=40, db_index=True)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "name"],
                name="unique_pseud_name_per_user",
            ),
        ]

    @property
    def byline(self):
        if self.name == self.user.username:
            return self.name
        return f"{self.name} ({self.user.username})"

    def __str__(self):
        return self.byline


class PreferenceQuerySet(models.QuerySet):
    def users_with_flag_off(self, flag, user_ids):
        """
        Return the ids of users (among ``user_ids``) whose ``flag``
        preference is switched off. Each user has one preference row,
        so the result carries no duplicates.
        """
        return list(
            self.filter(user_id__in=user_ids, **{flag: False})
            .values_list("user_id", flat=True)
        )


class Preference(models.Model):
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="preference"
    )

    # Gift works
    recipient_emails_off = models.BooleanField(default=False)

    # Works inspired by one of the user's works
    related_works_emails_off = models.BooleanField(default=False)

    objects = PreferenceQuerySet.as_manager()

    def __str__(self):
        return f"Preferences for {self.user}"
