from django.db.models.signals import post_save
from django.dispatch import receiver

from accounts.models import User, Pseud, Preference


# ===========================================================
# NEW ACCOUNT: DEFAULT PSEUD + PREFERENCES
# ===========================================================
@receiver(post_save, sender=User)
def create_default_pseud_and_preference(sender, instance, created, **kwargs):
    if not created:
        return

    Pseud.objects.get_or_create(
        user=instance,
        name=instance.username,
        defaults={"is_default": True},
    )
    Preference.objects.get_or_create(user=instance)
