import re

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import serializers

from .blocks import clean_block, decode_blocks, encode_blocks
from .models import About, ContactMessage, PortfolioItem, Profile, TimelineEntry
from .themes import normalize_theme
from .timeline import (
    CANONICAL_CATEGORIES,
    DOWN,
    UP,
    canonical_category,
    format_date_range,
    format_duration,
)

User = get_user_model()

PASSWORD_RE = re.compile(r"((?=.*\d)|(?=.*\W+))(?![.\n])(?=.*[A-Z])(?=.*[a-z]).*$")
CONTACT_KEYS = ("email", "phone", "location", "website")

# Column limits: PositiveIntegerField for order, BigAutoField for ids
ORDER_MAX = 2147483647
ID_MAX = 2**63 - 1


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email"]


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=4, max_length=20)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)

    def validate_username(self, value):
        if not re.fullmatch(r"[\w.-]+", value):
            raise serializers.ValidationError("Username may only contain letters, digits, '.', '-' and '_'.")
        return value

    def validate_password(self, value):
        if not PASSWORD_RE.match(value):
            raise serializers.ValidationError(
                "Password too weak. Must contain uppercase, lowercase, and number or special character"
            )
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    avatar = serializers.ImageField(write_only=True, required=False, allow_null=True)
    # Flat contact fields accepted from the profile form, stored in contact_info
    email = serializers.EmailField(write_only=True, required=False, allow_blank=True)
    phone = serializers.CharField(write_only=True, required=False, allow_blank=True, max_length=40)
    location = serializers.CharField(write_only=True, required=False, allow_blank=True, max_length=120)
    website = serializers.URLField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = Profile
        fields = [
            "id",
            "user_id",
            "username",
            "display_name",
            "bio",
            "avatar",
            "avatar_url",
            "contact_info",
            "theme",
            "email",
            "phone",
            "location",
            "website",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["avatar_url", "theme", "created_at", "updated_at"]

    def validate_avatar(self, value):
        if value is None:
            return value
        if value.size > settings.AVATAR_MAX_BYTES:
            raise serializers.ValidationError("Image size must be less than 5MB")
        ctype = getattr(value, "content_type", "")
        if ctype and ctype not in settings.ALLOWED_IMAGE_TYPES:
            raise serializers.ValidationError("Only JPEG, PNG, GIF or WebP images are allowed")
        return value

    def validate_contact_info(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("contact_info must be an object")
        return value

    def update(self, instance, validated_data):
        contact = dict(validated_data.pop("contact_info", instance.contact_info) or {})
        for key in CONTACT_KEYS:
            if key in validated_data:
                contact[key] = validated_data.pop(key)
        validated_data["contact_info"] = contact
        if "avatar" in validated_data and validated_data["avatar"] is None:
            validated_data["avatar_url"] = ""
        return super().update(instance, validated_data)


class ThemeSerializer(serializers.Serializer):
    preset = serializers.CharField(required=False, allow_blank=True, max_length=40)
    colors = serializers.DictField(child=serializers.CharField(max_length=60), required=False)

    def to_internal_value(self, data):
        if not isinstance(data, dict):
            raise serializers.ValidationError({"detail": "Theme must be a JSON object"})
        # Store whatever the editor sends; legacy keys are folded in on read
        super().to_internal_value(data)
        return dict(data)


class AboutSerializer(serializers.ModelSerializer):
    blocks = serializers.ListField(child=serializers.JSONField(), required=False)

    class Meta:
        model = About
        fields = ["id", "content", "blocks", "updated_at"]
        read_only_fields = ["updated_at"]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["blocks"] = decode_blocks(instance.content)
        return data

    def validate_blocks(self, value):
        cleaned = []
        for block in value:
            try:
                cleaned.append(clean_block(block))
            except ValueError as exc:
                raise serializers.ValidationError(str(exc))
        return cleaned

    def update(self, instance, validated_data):
        blocks = validated_data.pop("blocks", None)
        if blocks is not None:
            validated_data["content"] = encode_blocks(blocks)
        return super().update(instance, validated_data)


class ImageUploadSerializer(serializers.Serializer):
    image = serializers.ImageField()

    def validate_image(self, value):
        if value.size > settings.AVATAR_MAX_BYTES:
            raise serializers.ValidationError("Image size must be less than 5MB")
        return value


class PortfolioItemSerializer(serializers.ModelSerializer):
    image = serializers.ImageField(write_only=True, required=False, allow_null=True)

    class Meta:
        model = PortfolioItem
        fields = ["id", "user", "title", "description", "link", "image", "image_url", "created_at", "updated_at"]
        read_only_fields = ["user", "image_url", "created_at", "updated_at"]


class TimelineEntrySerializer(serializers.ModelSerializer):
    category = serializers.SerializerMethodField()
    duration = serializers.SerializerMethodField()
    date_range = serializers.SerializerMethodField()
    order = serializers.IntegerField(min_value=0, max_value=ORDER_MAX, required=False)

    class Meta:
        model = TimelineEntry
        fields = [
            "id",
            "user",
            "type",
            "category",
            "institution",
            "degree",
            "field",
            "period",
            "start_date",
            "end_date",
            "duration",
            "date_range",
            "location",
            "description",
            "gpa",
            "skills",
            "order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["user", "created_at", "updated_at"]

    def get_category(self, obj: TimelineEntry):
        return canonical_category(obj.type)

    def get_duration(self, obj: TimelineEntry):
        return format_duration(obj.start_date, obj.end_date)

    def get_date_range(self, obj: TimelineEntry):
        return format_date_range(obj.start_date, obj.end_date)

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date"})
        return attrs


class ReorderItemSerializer(serializers.Serializer):
    # Ids arrive as strings from the client
    id = serializers.CharField()
    order = serializers.IntegerField(min_value=0, max_value=ORDER_MAX)

    def validate_id(self, value):
        try:
            pk = int(str(value).strip())
        except ValueError:
            raise serializers.ValidationError("id must be a numeric string")
        if pk <= 0:
            raise serializers.ValidationError("id must be positive")
        if pk > ID_MAX:
            raise serializers.ValidationError("id is out of range")
        return pk


class ReorderSerializer(serializers.Serializer):
    items = ReorderItemSerializer(many=True, allow_empty=False)

    def validate_items(self, value):
        ids = [item["id"] for item in value]
        if len(ids) != len(set(ids)):
            raise serializers.ValidationError("Each entry may appear only once in a reorder batch")
        return value

    def batch(self):
        return [(item["id"], item["order"]) for item in self.validated_data["items"]]


class MoveSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=[(UP, UP), (DOWN, DOWN)])


class ContactMessageSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField()
    sender_name = serializers.CharField(min_length=1, max_length=120)
    message = serializers.CharField(min_length=1, max_length=5000)

    class Meta:
        model = ContactMessage
        fields = ["id", "user_id", "sender_name", "sender_email", "message", "created_at"]
        read_only_fields = ["created_at"]


class PublicPageSerializer(serializers.Serializer):
    """Everything a visitor's page needs, in one payload."""

    profile = serializers.SerializerMethodField()
    theme = serializers.SerializerMethodField()
    about = serializers.SerializerMethodField()
    portfolio = serializers.SerializerMethodField()
    timeline = serializers.SerializerMethodField()

    def get_profile(self, user):
        return ProfileSerializer(user.profile, context=self.context).data

    def get_theme(self, user):
        return normalize_theme(user.profile.theme)

    def get_about(self, user):
        about = getattr(user, "about", None)
        return decode_blocks(about.content) if about else []

    def get_portfolio(self, user):
        return PortfolioItemSerializer(user.portfolio_items.all(), many=True, context=self.context).data

    def get_timeline(self, user):
        grouped = {c.value: [] for c in CANONICAL_CATEGORIES}
        for entry in TimelineEntrySerializer(user.timeline_entries.all(), many=True, context=self.context).data:
            grouped[entry["category"]].append(entry)
        return grouped
