import os
import secrets

from django.conf import settings
from django.db import models

from .storage_backends import media_storage


def _unique_key(prefix, instance, filename):
    ext = os.path.splitext(filename)[1].lower() or ".bin"
    return f"{prefix}/{instance.user_id}-{secrets.token_hex(16)}{ext}"


def avatar_upload_to(instance, filename):
    return _unique_key("avatars", instance, filename)


def portfolio_upload_to(instance, filename):
    return _unique_key("portfolio", instance, filename)


def _file_url(fieldfile):
    if not fieldfile:
        return None
    try:
        return fieldfile.url
    except ValueError:
        if fieldfile.name and getattr(settings, "MEDIA_URL", ""):
            return f"{settings.MEDIA_URL.rstrip('/')}/{fieldfile.name}"
    return None


class Profile(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    display_name = models.CharField(max_length=120, blank=True)
    bio = models.TextField(blank=True)

    avatar = models.ImageField(upload_to=avatar_upload_to, storage=media_storage, blank=True, null=True)
    avatar_url = models.URLField(max_length=500, blank=True)

    # Public contact details shown on the page: {email, phone, location, website}
    contact_info = models.JSONField(default=dict, blank=True)
    # {"preset": ..., "colors": {...}}; older rows may hold other shapes, see themes.normalize_theme
    theme = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name or self.user.username

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        new_url = _file_url(self.avatar)
        if new_url and new_url != self.avatar_url:
            self.avatar_url = new_url
            type(self).objects.filter(pk=self.pk).update(avatar_url=new_url)


class About(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="about")
    # JSON-encoded list of blocks; legacy rows hold plain text
    content = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "about sections"

    def __str__(self):
        return f"About {self.user.username}"


class PortfolioItem(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="portfolio_items")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    link = models.URLField(blank=True)
    image = models.ImageField(upload_to=portfolio_upload_to, storage=media_storage, blank=True, null=True)
    image_url = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        new_url = _file_url(self.image)
        if new_url and new_url != self.image_url:
            self.image_url = new_url
            type(self).objects.filter(pk=self.pk).update(image_url=new_url)


class Category(models.TextChoices):
    EDUCATION = "EDUCATION", "Education"
    WORK = "WORK", "Work"
    INTERNSHIP = "INTERNSHIP", "Internship"
    CERTIFICATE = "CERTIFICATE", "Certificate"
    # Deprecated spellings still present in older rows
    LEGACY_EDUCATION = "education", "Education (legacy)"
    LEGACY_INTERNSHIP = "internship", "Internship (legacy)"


class TimelineEntry(models.Model):
    """An education, work, internship or certificate record.

    ``order`` is the display position inside the owner's category; values of
    different categories are unrelated.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="timeline_entries")
    type = models.CharField(max_length=20, choices=Category.choices, default=Category.EDUCATION)
    institution = models.CharField(max_length=200)
    degree = models.CharField(max_length=200)
    field = models.CharField(max_length=200, blank=True)
    period = models.CharField(max_length=100, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    location = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    gpa = models.CharField(max_length=20, blank=True)
    skills = models.TextField(blank=True, help_text="Comma-separated skills")
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "-created_at", "-id"]
        verbose_name_plural = "timeline entries"
        indexes = [models.Index(fields=["user", "type", "order"], name="timeline_user_type_order_idx")]

    def __str__(self):
        return f"{self.degree} @ {self.institution}"


class ContactMessage(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="contact_messages")
    sender_name = models.CharField(max_length=120)
    sender_email = models.EmailField()
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Message from {self.sender_name} to {self.user.username}"
