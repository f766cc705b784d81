"""
Accounts constants.
"""

from django.db import models

MIN_PASSWORD_LENGTH = 6


class Role(models.TextChoices):
    """
    Application roles carried on a Profile.

    Values are stored uppercase and shared with the UI.
    """

    ADMIN = "ADMIN"
    ACADEMIC = "ACADEMIC"
    TEACHER = "TEACHER"
    FINANCE = "FINANCE"
    STUDENT = "STUDENT"
    PARENT = "PARENT"
