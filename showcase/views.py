import logging
import mimetypes
import os
import secrets

from django.contrib.auth import get_user_model
from django.core.exceptions import SuspiciousFileOperation
from django.db import transaction
from django.http import FileResponse, Http404
from django.shortcuts import get_object_or_404
from django_filters.utils import translate_validation
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed, NotFound, PermissionDenied
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .exceptions import Conflict
from .filters import TimelineEntryFilter
from .models import About, Category, ContactMessage, PortfolioItem, Profile, TimelineEntry
from .permissions import IsOwnerOrReadOnly
from .serializers import (
    AboutSerializer,
    ContactMessageSerializer,
    ImageUploadSerializer,
    LoginSerializer,
    MoveSerializer,
    PortfolioItemSerializer,
    ProfileSerializer,
    PublicPageSerializer,
    RegisterSerializer,
    ReorderSerializer,
    ThemeSerializer,
    TimelineEntrySerializer,
    UserSerializer,
)
from .storage_backends import media_storage
from .tasks import notify_contact_message
from .themes import normalize_theme
from .timeline import canonical_category, category_members, move_entry, next_order, reorder_entries

logger = logging.getLogger(__name__)

User = get_user_model()


def resolve_user(identifier: str):
    """Look a page owner up by username, or by e-mail when it contains '@'."""
    lookup = {"email__iexact": identifier} if "@" in identifier else {"username": identifier}
    user = User.objects.filter(**lookup).first()
    if user is None:
        raise NotFound("User not found")
    return user


def _token_response(user, status_code=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response(
        {
            "access_token": str(refresh.access_token),
            "refresh_token": str(refresh),
            "user": UserSerializer(user).data,
        },
        status=status_code,
    )


class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"

    @extend_schema(request=RegisterSerializer, responses={201: None})
    def post(self, request):
        s = RegisterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        if User.objects.filter(username__iexact=data["username"]).exists() or User.objects.filter(
            email__iexact=data["email"]
        ).exists():
            raise Conflict("Username or email already exists")
        with transaction.atomic():
            user = User.objects.create_user(username=data["username"], email=data["email"], password=data["password"])
            Profile.objects.create(user=user, display_name=user.username)
            About.objects.create(user=user)
        logger.info("Registered user %s (%s)", user.pk, user.username)
        return _token_response(user, status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"

    @extend_schema(request=LoginSerializer, responses={200: None})
    def post(self, request):
        s = LoginSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = User.objects.filter(email__iexact=s.validated_data["email"]).first()
        if user is None or not user.is_active or not user.check_password(s.validated_data["password"]):
            raise AuthenticationFailed("Invalid credentials")
        return _token_response(user)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: UserSerializer})
    def get(self, request):
        data = UserSerializer(request.user).data
        profile = Profile.objects.filter(user=request.user).first()
        data["profile"] = ProfileSerializer(profile, context={"request": request}).data if profile else None
        return Response(data)


class UserProfileView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: ProfileSerializer})
    def get(self, request, username):
        profile = Profile.objects.select_related("user").filter(user=resolve_user(username)).first()
        if profile is None:
            raise NotFound("Profile not found")
        return Response(ProfileSerializer(profile, context={"request": request}).data)


class UserAboutView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: AboutSerializer})
    def get(self, request, username):
        about = About.objects.filter(user=resolve_user(username)).first()
        if about is None:
            raise NotFound("About not found")
        return Response(AboutSerializer(about).data)


class UserPortfolioView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses={200: PortfolioItemSerializer(many=True)})
    def get(self, request, username):
        items = PortfolioItem.objects.filter(user=resolve_user(username))
        return Response(PortfolioItemSerializer(items, many=True, context={"request": request}).data)


class UserTimelineView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        parameters=[OpenApiParameter("category", str, description="EDUCATION, WORK, INTERNSHIP or CERTIFICATE")],
        responses={200: TimelineEntrySerializer(many=True)},
    )
    def get(self, request, username):
        f = TimelineEntryFilter(request.query_params, queryset=TimelineEntry.objects.filter(user=resolve_user(username)))
        if not f.is_valid():
            raise translate_validation(f.errors)
        return Response(TimelineEntrySerializer(f.qs, many=True).data)


class PublicPageView(APIView):
    """Profile, theme, about blocks, portfolio and timeline for one page."""

    permission_classes = [AllowAny]

    @extend_schema(responses={200: PublicPageSerializer})
    def get(self, request, username):
        user = resolve_user(username)
        if not Profile.objects.filter(user=user).exists():
            raise NotFound("Profile not found")
        user = User.objects.select_related("profile", "about").get(pk=user.pk)
        return Response(PublicPageSerializer(user, context={"request": request}).data)


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def _profile(self, request):
        profile = Profile.objects.filter(user=request.user).first()
        if profile is None:
            raise NotFound("Profile not found")
        return profile

    @extend_schema(responses={200: ProfileSerializer})
    def get(self, request):
        return Response(ProfileSerializer(self._profile(request), context={"request": request}).data)

    @extend_schema(request=ProfileSerializer, responses={200: ProfileSerializer})
    def patch(self, request):
        s = ProfileSerializer(self._profile(request), data=request.data, partial=True, context={"request": request})
        s.is_valid(raise_exception=True)
        profile = s.save()
        return Response(ProfileSerializer(profile, context={"request": request}).data)


class ThemeView(APIView):
    permission_classes = [IsAuthenticated]

    def _profile(self, request):
        profile = Profile.objects.filter(user=request.user).first()
        if profile is None:
            raise NotFound("Profile not found")
        return profile

    @extend_schema(responses={200: ThemeSerializer})
    def get(self, request):
        return Response(normalize_theme(self._profile(request).theme))

    @extend_schema(request=ThemeSerializer, responses={200: ThemeSerializer})
    def patch(self, request):
        profile = self._profile(request)
        s = ThemeSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        profile.theme = s.validated_data
        profile.save(update_fields=["theme", "updated_at"])
        return Response(normalize_theme(profile.theme))


class AboutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=AboutSerializer, responses={200: AboutSerializer})
    def patch(self, request):
        about = About.objects.filter(user=request.user).first()
        if about is None:
            raise NotFound("About not found")
        s = AboutSerializer(about, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(AboutSerializer(s.save()).data)


class AboutImageUploadView(APIView):
    """Stores an image for an about ``image`` block and returns its URL."""

    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=ImageUploadSerializer, responses={201: None})
    def post(self, request):
        s = ImageUploadSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        image = s.validated_data["image"]
        ext = os.path.splitext(image.name)[1].lower() or ".bin"
        storage = media_storage()
        name = storage.save(f"about/{request.user.pk}-{secrets.token_hex(16)}{ext}", image)
        return Response({"url": storage.url(name), "path": name}, status=status.HTTP_201_CREATED)


class PortfolioItemViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = PortfolioItem.objects.all()
    serializer_class = PortfolioItemSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    lookup_value_regex = r"\d+"

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)


class TimelineEntryViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = TimelineEntry.objects.all()
    serializer_class = TimelineEntrySerializer
    permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
    lookup_value_regex = r"\d+"

    def perform_create(self, serializer):
        order = serializer.validated_data.get("order")
        if order is None:
            order = next_order(self.request.user, serializer.validated_data.get("type", Category.EDUCATION))
        serializer.save(user=self.request.user, order=order)

    def perform_update(self, serializer):
        data = serializer.validated_data
        new_type = data.get("type")
        if (
            new_type is not None
            and "order" not in data
            and canonical_category(new_type) != canonical_category(serializer.instance.type)
        ):
            # Moving to another category appends the entry there
            serializer.save(order=next_order(self.request.user, new_type))
        else:
            serializer.save()

    @extend_schema(request=ReorderSerializer, responses={200: TimelineEntrySerializer(many=True)})
    @action(detail=False, methods=["patch"], url_path="reorder")
    def reorder(self, request):
        s = ReorderSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        entries = reorder_entries(request.user, s.batch())
        return Response(TimelineEntrySerializer(entries, many=True).data)

    @extend_schema(request=MoveSerializer, responses={200: TimelineEntrySerializer(many=True)})
    @action(detail=True, methods=["post"])
    def move(self, request, pk=None):
        entry = self.get_object()
        s = MoveSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        siblings = TimelineEntry.objects.filter(user=request.user, type__in=category_members(entry.type))
        batch = move_entry(siblings, entry.pk, s.validated_data["direction"])
        if batch is not None:
            reorder_entries(request.user, batch)
        current = TimelineEntry.objects.filter(user=request.user, type__in=category_members(entry.type))
        return Response(TimelineEntrySerializer(current, many=True).data)


class ContactView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "contact"

    def get_permissions(self):
        if self.request.method == "POST":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get_throttles(self):
        if self.request.method == "POST":
            return super().get_throttles()
        return []

    @extend_schema(responses={200: ContactMessageSerializer(many=True)})
    def get(self, request):
        messages = ContactMessage.objects.filter(user=request.user)
        return Response(ContactMessageSerializer(messages, many=True).data)

    @extend_schema(request=ContactMessageSerializer, responses={201: ContactMessageSerializer})
    def post(self, request):
        s = ContactMessageSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        get_object_or_404(User, pk=s.validated_data["user_id"])
        msg = s.save()
        try:
            notify_contact_message.delay(msg.user_id, msg.sender_name, msg.sender_email, msg.message)
        except Exception as exc:  # noqa: BLE001
            # The message is stored; the e-mail copy is optional
            logger.warning("Could not enqueue contact notification for message %s: %s", msg.pk, exc)
        return Response(ContactMessageSerializer(msg).data, status=status.HTTP_201_CREATED)


class ContactUserMessagesView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: ContactMessageSerializer(many=True)})
    def get(self, request, user_id):
        if request.user.pk != user_id:
            raise PermissionDenied("You can only view your own messages")
        messages = ContactMessage.objects.filter(user_id=user_id)
        return Response(ContactMessageSerializer(messages, many=True).data)


class FileProxyView(APIView):
    """Streams an uploaded object through the API with long-lived caching."""

    permission_classes = [AllowAny]

    @extend_schema(exclude=True)
    def get(self, request, path):
        storage = media_storage()
        try:
            handle = storage.open(path, "rb")
        except (OSError, SuspiciousFileOperation) as exc:
            logger.warning("File not found: %s (%s)", path, exc)
            raise Http404("File not found")
        content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        response = FileResponse(handle, content_type=content_type)
        response["Cache-Control"] = "public, max-age=31536000"
        return response
