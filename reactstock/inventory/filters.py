import django_filters
from django.db.models import Q

from .constants import CATEGORY_DELETE, types_for_category
from .models import ItemTransaction

DELETION_Q = Q(is_deletion=True) | Q(transaction_type__icontains='delete')


class ItemTransactionFilter(django_filters.FilterSet):
    """
    Item transaction history filters.

    ``type`` is a category (in, out, transfer, delete, ...); ``transaction_type``
    may be repeated to select several exact types.
    """
    item_id = django_filters.NumberFilter(field_name='item_id')
    box_id = django_filters.NumberFilter(field_name='box_id')
    customer_id = django_filters.NumberFilter(field_name='customer_id')
    type = django_filters.CharFilter(method='filter_category')
    transaction_type = django_filters.CharFilter(method='filter_transaction_type')
    start_date = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    end_date = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')
    is_deletion = django_filters.BooleanFilter(method='filter_is_deletion')

    class Meta:
        model = ItemTransaction
        fields = ['item_id', 'box_id', 'customer_id', 'type', 'transaction_type',
                  'start_date', 'end_date', 'is_deletion']

    def filter_category(self, queryset, name, value):
        category = value.strip().lower()
        if category == CATEGORY_DELETE:
            return queryset.filter(DELETION_Q)
        return queryset.exclude(DELETION_Q).filter(transaction_type__in=types_for_category(category))

    def filter_transaction_type(self, queryset, name, value):
        values = self.data.getlist(name) if hasattr(self.data, 'getlist') else [value]
        values = [v.strip().upper() for v in values if v and v.strip()]
        if len(values) > 1:
            return queryset.filter(transaction_type__in=values)
        return queryset.filter(transaction_type__iexact=values[0]) if values else queryset

    def filter_is_deletion(self, queryset, name, value):
        if value:
            return queryset.filter(DELETION_Q)
        return queryset.exclude(DELETION_Q)
