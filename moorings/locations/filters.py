import django_filters
from django.db.models import Q

from moorings.locations.models import MooringLocation


class MooringLocationFilter(django_filters.FilterSet):
    """List filters. Blank values are ignored; matching is case-insensitive."""

    type = django_filters.CharFilter(
        lookup_expr="iexact",
        label="pier, jetty or marina",
    )
    region = django_filters.CharFilter(lookup_expr="iexact")
    search = django_filters.CharFilter(
        method="filter_search",
        label="Name, address or county",
    )

    class Meta:
        model = MooringLocation
        fields = []  # explicit filters above

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(address__icontains=value)
            | Q(county__icontains=value),
        )
