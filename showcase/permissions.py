from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsOwnerOrReadOnly(BasePermission):
    """Writes are allowed only on objects whose ``user`` is the caller."""

    message = "You can only modify your own records"

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return obj.user_id == getattr(request.user, "pk", None)
