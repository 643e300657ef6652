"""
Accounts app models.

Defines the closed role set and a custom User model that extends
Django's ``AbstractUser``.  Only ``role`` and ``department`` matter to
the request workflow; everything else is profile data.
"""

from django.contrib.auth.models import AbstractUser
from django.contrib.auth.models import UserManager as DjangoUserManager
from django.db import models


class UserRole(models.TextChoices):
    """
    The fixed set of portal roles.

    * ``CITIZEN``: submits requests and pays fees.
    * ``OFFICER``: claims and decides requests of their department.
    * ``HEAD``   : department head; same review rights as an officer
      plus the department workload dashboard.
    * ``ADMIN``  : portal administrator; reads and reports on every
      request but never changes a request's status.
    """

    CITIZEN = "citizen", "Citizen"
    OFFICER = "officer", "Officer"
    HEAD = "head", "Department Head"
    ADMIN = "admin", "Administrator"


#: Roles that belong to a department and review its requests.
STAFF_ROLES = frozenset({UserRole.OFFICER, UserRole.HEAD})


class UserManager(DjangoUserManager):
    """Superusers created from the CLI are portal administrators."""

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", UserRole.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom user model for the service portal.

    Citizens self-register with their e-mail address; officers, heads and
    admins are created by an administrator.  Login is supported via
    ``email``, ``username`` or ``national_id`` together with the password.

    Officers and heads belong to exactly one department; citizens and
    admins normally have none.
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CITIZEN,
        verbose_name="Role",
        db_index=True,
    )
    department = models.ForeignKey(
        "catalog.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="staff",
        verbose_name="Department",
    )

    # ── Profile (not used by the workflow) ───────────────────────────
    national_id = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        verbose_name="National ID",
    )
    date_of_birth = models.DateField(
        null=True,
        blank=True,
        verbose_name="Date of Birth",
    )
    contact_info = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Contact Information",
    )
    job_title = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Job Title",
    )

    objects = UserManager()

    REQUIRED_FIELDS = ["email"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    @property
    def is_staff_member(self) -> bool:
        """True for officers and department heads."""
        return self.role in STAFF_ROLES
