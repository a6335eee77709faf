"""Timeline ordering: categories, auto-assigned order, moves and batch reorder."""

import datetime
import logging

from django.db import DatabaseError, transaction
from django.db.models import Max
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from .exceptions import ReorderFailed
from .models import Category, TimelineEntry

logger = logging.getLogger(__name__)

UP = "up"
DOWN = "down"

CANONICAL = {
    Category.LEGACY_EDUCATION: Category.EDUCATION,
    Category.LEGACY_INTERNSHIP: Category.INTERNSHIP,
}

CANONICAL_CATEGORIES = (Category.EDUCATION, Category.WORK, Category.INTERNSHIP, Category.CERTIFICATE)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def canonical_category(value):
    """Upper-case category for a stored ``type``, folding deprecated aliases."""
    value = CANONICAL.get(value, value)
    upper = str(value).upper()
    if upper in Category.values:
        return upper
    raise ValueError(f"Unknown category: {value!r}")


def category_members(category):
    """All stored ``type`` values that belong to ``category``'s order partition."""
    canonical = canonical_category(category)
    return [canonical] + [alias for alias, target in CANONICAL.items() if target == canonical]


def next_order(user, category):
    """Order for a new entry: one past the highest order in its category."""
    top = (
        TimelineEntry.objects.filter(user=user, type__in=category_members(category))
        .aggregate(top=Max("order"))["top"]
    )
    return 0 if top is None else top + 1


def _display_sorted(entries):
    """Sort like TimelineEntry.Meta.ordering: order, then newest, then highest id."""
    entries = sorted(entries, key=lambda e: e.pk or 0, reverse=True)
    entries = sorted(entries, key=lambda e: e.created_at, reverse=True)
    return sorted(entries, key=lambda e: e.order)


def move_entry(entries, entry_id, direction):
    """Reorder batch for moving one entry a step up or down.

    ``entries`` is the owner's timeline (any categories). Only the target's
    category is considered: it is sorted by display order, the target swaps
    places with its neighbour and the category is renumbered ``0..n-1``.
    Returns a list of ``(id, order)`` pairs, or ``None`` when the entry is
    already at that end of its category.
    """
    if direction not in (UP, DOWN):
        raise ValueError(f"direction must be {UP!r} or {DOWN!r}")
    entries = list(entries)
    target = next((e for e in entries if e.pk == entry_id), None)
    if target is None:
        raise LookupError(entry_id)

    category = canonical_category(target.type)
    siblings = _display_sorted(e for e in entries if canonical_category(e.type) == category)
    index = siblings.index(target)
    other = index - 1 if direction == UP else index + 1
    if other < 0 or other >= len(siblings):
        return None

    siblings[index], siblings[other] = siblings[other], siblings[index]
    return [(e.pk, position) for position, e in enumerate(siblings)]


def _write_order(pk, order, now):
    TimelineEntry.objects.filter(pk=pk).update(order=order, updated_at=now)


def reorder_entries(user, items):
    """Persist a reorder batch for ``user`` atomically.

    ``items`` is a validated list of ``(id, order)`` pairs. Every id must name
    an entry owned by ``user``; otherwise nothing is written. Orders are
    stored exactly as given. Returns the batch's entries in their new order.
    """
    ids = [pk for pk, _ in items]
    try:
        with transaction.atomic():
            rows = {e.pk: e for e in TimelineEntry.objects.select_for_update().filter(pk__in=ids)}
            missing = [pk for pk in ids if pk not in rows]
            if missing:
                raise NotFound(f"Timeline entry {missing[0]} not found")
            if any(rows[pk].user_id != user.pk for pk in ids):
                raise PermissionDenied("You can only reorder your own timeline entries")

            now = timezone.now()
            for pk, order in items:
                _write_order(pk, order, now)
    except DatabaseError as exc:
        logger.exception("Reorder of %d entries for user %s rolled back", len(items), user.pk)
        raise ReorderFailed() from exc

    logger.info("User %s reordered entries %s", user.pk, ", ".join(f"{pk}->{o}" for pk, o in items))
    return list(TimelineEntry.objects.filter(pk__in=ids).order_by("order", "-id"))


def _months_between(start, end):
    years = end.year - start.year
    months = end.month - start.month
    if months < 0:
        years -= 1
        months += 12
    if end.day < start.day:
        months -= 1
        if months < 0:
            years -= 1
            months += 12
    return years, months


def format_duration(start, end, today=None):
    """Human duration such as ``"2 Years 4 Months"``; an open end runs to today."""
    if not start:
        return ""
    stop = end or today or datetime.date.today()
    if stop < start:
        return ""
    years, months = _months_between(start, stop)
    parts = []
    if years > 0:
        parts.append(f"{years} {'Year' if years == 1 else 'Years'}")
    if months > 0:
        parts.append(f"{months} {'Month' if months == 1 else 'Months'}")
    if not parts:
        return "Present" if end is None else "Less than 1 month"
    return " ".join(parts)


def format_date_range(start, end):
    if not start:
        return ""
    first = f"{MONTHS[start.month - 1]} {start.year}"
    if end is None:
        return f"{first} - Present"
    return f"{first} - {MONTHS[end.month - 1]} {end.year}"
