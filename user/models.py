# user/models.py
from django.db import models
from django.contrib.auth.models import (
    AbstractUser,
    BaseUserManager,
    Group,
    Permission,
)


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, name="", password=None, **extra_fields):
        if not email:
            raise ValueError("Users must have an email address")
        email = self.normalize_email(email)
        user = self.model(email=email, name=name, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        name = extra_fields.pop("name", "Admin")
        return self.create_user(email=email, name=name, password=password, **extra_fields)


class User(AbstractUser):
    """
    Storefront account. Customers and admins share this table; admins are
    the is_staff users and see every order instead of only their own.
    """
    username = None
    name = models.CharField(max_length=150, blank=True)
    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=15, blank=True)

    # override to avoid reverse accessor clashes with auth.User
    groups = models.ManyToManyField(
        Group,
        related_name="storefront_user_groups",
        blank=True,
        help_text="The groups this user belongs to.",
        verbose_name="groups",
    )
    user_permissions = models.ManyToManyField(
        Permission,
        related_name="storefront_user_permissions",
        blank=True,
        help_text="Specific permissions for this user.",
        verbose_name="user permissions",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.name or "Customer"
