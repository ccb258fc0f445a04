from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel

from apps.users.managers import CustomUserManager


class UserRole(models.TextChoices):
    """Platform roles"""

    ALUMNI = "alumni", _("Alumni")
    MODERATOR = "moderator", _("Moderator")
    ADMIN = "admin", _("Admin")
    SUPER_ADMIN = "super_admin", _("Super Admin")


class CustomUser(AbstractUser, BaseModel):
    """
    CustomUser is a custom user model that extends Django's AbstractUser.
    It uses email as the unique identifier instead of the username.
    """

    username = None

    email = models.EmailField(_("email address"), unique=True)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.ALUMNI,
    )
    graduation_year = models.PositiveSmallIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = [
        "first_name",
        "last_name",
    ]

    objects = CustomUserManager()

    class Meta:
        db_table = "core_user"
        indexes = [
            models.Index(fields=["email", "is_active"], name="core_user_email_a1b2c3_idx"),
            models.Index(fields=["role"], name="core_user_role_d4e5f6_idx"),
        ]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]
