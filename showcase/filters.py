import django_filters

from .models import Category, TimelineEntry
from .timeline import category_members


class TimelineEntryFilter(django_filters.FilterSet):
    # Filtering by a category also matches rows stored under its legacy alias
    category = django_filters.ChoiceFilter(choices=Category.choices, method="filter_category")

    class Meta:
        model = TimelineEntry
        fields = ["category"]

    def filter_category(self, queryset, name, value):
        return queryset.filter(type__in=category_members(value))
