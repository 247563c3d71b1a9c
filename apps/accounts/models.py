from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class UserType(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    SUPPLIER = 'SUPPLIER', 'Supplier'
    CLIENT = 'CLIENT', 'Client'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('user_type', UserType.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Client, supplier or admin of the bookkeeping back office."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Managing admin (null for top-level admins)
    admin = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_users'
    )

    # Identity
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    username = models.CharField(max_length=50, unique=True, null=True, blank=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    company_name = models.CharField(max_length=200, blank=True)
    user_type = models.CharField(
        max_length=20,
        choices=UserType.choices,
        default=UserType.CLIENT
    )

    # Addresses
    address = models.TextField(blank=True)
    postcode = models.CharField(max_length=20, blank=True)
    shipping_address = models.TextField(blank=True)
    shipping_postcode = models.CharField(max_length=20, blank=True)

    # Contact
    phone_office = models.CharField(max_length=20, blank=True)
    phone_home = models.CharField(max_length=20, blank=True)
    mobile = models.CharField(max_length=20, blank=True)
    fax = models.CharField(max_length=20, blank=True)
    vat_number = models.CharField(max_length=50, blank=True)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['user_type', 'is_active'], name='users_user_ty_3f0c1e_idx'),
            models.Index(fields=['admin', 'is_active'], name='users_admin_i_8b2d4a_idx'),
            models.Index(fields=['created_at'], name='users_created_5e7a9c_idx'),
        ]
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.get_full_name()} <{self.email}>"

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_short_name(self):
        return self.first_name or self.email.split('@')[0]

    def get_display_name(self):
        """Company name for businesses, full name otherwise."""
        return self.company_name or self.get_full_name() or self.email

    @property
    def is_admin(self):
        return self.user_type == UserType.ADMIN

    @property
    def is_client(self):
        return self.user_type == UserType.CLIENT

    @property
    def is_supplier(self):
        return self.user_type == UserType.SUPPLIER
