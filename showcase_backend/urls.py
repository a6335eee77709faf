"""
URL configuration for showcase_backend project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import routers
from rest_framework_simplejwt.views import TokenRefreshView

from showcase import views as showcase_views

router = routers.DefaultRouter(trailing_slash=False)
router.register(r"portfolio", showcase_views.PortfolioItemViewSet, basename="portfolio")
router.register(r"educations", showcase_views.TimelineEntryViewSet, basename="education")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health", lambda request: JsonResponse({"status": "ok"})),
    path(
        "api/info",
        lambda request: JsonResponse(
            {
                "app": "showcase-backend",
                "env": settings.DJANGO_ENV,
                "debug": settings.DEBUG,
                "version": "1.0.0",
            }
        ),
    ),
    path("api/auth/register", showcase_views.RegisterView.as_view(), name="auth-register"),
    path("api/auth/login", showcase_views.LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh", TokenRefreshView.as_view(), name="auth-refresh"),
    path("api/auth/me", showcase_views.MeView.as_view(), name="auth-me"),
    path("api/users/<str:username>/profile", showcase_views.UserProfileView.as_view(), name="user-profile"),
    path("api/users/<str:username>/about", showcase_views.UserAboutView.as_view(), name="user-about"),
    path("api/users/<str:username>/portfolio", showcase_views.UserPortfolioView.as_view(), name="user-portfolio"),
    path("api/users/<str:username>/educations", showcase_views.UserTimelineView.as_view(), name="user-educations"),
    path("api/users/<str:username>/page", showcase_views.PublicPageView.as_view(), name="user-page"),
    path("api/profile", showcase_views.ProfileView.as_view(), name="profile"),
    path("api/profile/theme", showcase_views.ThemeView.as_view(), name="profile-theme"),
    path("api/about", showcase_views.AboutView.as_view(), name="about"),
    path("api/about/images", showcase_views.AboutImageUploadView.as_view(), name="about-images"),
    path("api/contact", showcase_views.ContactView.as_view(), name="contact"),
    path("api/contact/<int:user_id>", showcase_views.ContactUserMessagesView.as_view(), name="contact-user"),
    path("api/files/<path:path>", showcase_views.FileProxyView.as_view(), name="files"),
    path("api/", include(router.urls)),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="docs"),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
