from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.users.models import CustomUser, SwapProfile


@receiver(post_save, sender=CustomUser)
def create_swap_profile(sender, instance, created, **kwargs):
    """Every user gets a swap profile with zeroed stats on creation."""
    if not created:
        return
    SwapProfile.objects.get_or_create(user=instance)
