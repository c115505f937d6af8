import django_filters
from .models import BoxTransaction


class BoxTransactionFilter(django_filters.FilterSet):
    item_id = django_filters.NumberFilter(field_name='item_id')
    box_id = django_filters.NumberFilter(field_name='box_id')
    transaction_type = django_filters.CharFilter(field_name='transaction_type', lookup_expr='iexact')
    start_date = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='gte')
    end_date = django_filters.DateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = BoxTransaction
        fields = ['item_id', 'box_id', 'transaction_type', 'start_date', 'end_date']
