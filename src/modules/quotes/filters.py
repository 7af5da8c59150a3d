import django_filters

from modules.quotes.models import QuoteRequest


class QuoteRequestFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    product = django_filters.UUIDFilter(field_name="product_id")
    role = django_filters.ChoiceFilter(
        method="filter_role",
        choices=(("customer", "customer"), ("artisan", "artisan")),
    )
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = QuoteRequest
        fields = ["status", "product", "role", "start_date", "end_date"]

    def filter_role(self, queryset, name, value):
        """Restrict to quotes the requesting user takes part in as ``value``."""
        user = getattr(self.request, "user", None)
        if user is None:
            return queryset
        if value == "artisan":
            return queryset.filter(artisan_id=user.id)
        return queryset.filter(customer_id=user.id)
