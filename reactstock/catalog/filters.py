import django_filters
from django.db.models import Q
from .models import Item

# Largest value that fits a bigint primary key
MAX_ID_DIGITS = 18


def build_search_q(value):
    """
    Translate the item search box into a Q object.

    Grammar:
      id:<n>      exact id
      ref:<x>     exact serial number, EAN or QR code
      <digits>    name contains, exact id, exact serial/EAN/QR, or description contains
      <text>      case-insensitive contains over name, description, serial, EAN, type, supplier

    Returns None when the term cannot match anything (e.g. "id:abc").
    """
    value = (value or '').strip()
    if not value:
        return Q()

    lowered = value.lower()
    if lowered.startswith('id:'):
        raw_id = value[3:].strip()
        if not raw_id.isdigit() or len(raw_id) > MAX_ID_DIGITS:
            return None
        return Q(id=int(raw_id))

    if lowered.startswith('ref:'):
        ref = value[4:].strip()
        if not ref:
            return None
        return Q(serial_number=ref) | Q(ean_code=ref) | Q(qr_code=ref)

    if value.isdigit():
        q = (
            Q(name__icontains=value)
            | Q(serial_number=value)
            | Q(ean_code=value)
            | Q(qr_code=value)
            | Q(description__icontains=value)
        )
        if len(value) <= MAX_ID_DIGITS:
            q |= Q(id=int(value))
        return q

    return (
        Q(name__icontains=value)
        | Q(description__icontains=value)
        | Q(serial_number__icontains=value)
        | Q(ean_code__icontains=value)
        | Q(type__icontains=value)
        | Q(supplier__icontains=value)
    )


class ItemFilter(django_filters.FilterSet):
    """
    Item list filters. Field names are shared by the items table and the
    items_complete_view mapping so the same filterset serves both sources.
    """
    search = django_filters.CharFilter(method='filter_search', label='Search')
    box_id = django_filters.NumberFilter(field_name='box_id', lookup_expr='exact')
    parent_id = django_filters.NumberFilter(field_name='parent_item_id', lookup_expr='exact')
    group_id = django_filters.NumberFilter(field_name='group_id', lookup_expr='exact')
    qr_code = django_filters.CharFilter(field_name='qr_code', lookup_expr='exact')
    ean_code = django_filters.CharFilter(field_name='ean_code', lookup_expr='exact')
    serial_number = django_filters.CharFilter(field_name='serial_number', lookup_expr='exact')
    type = django_filters.CharFilter(field_name='type', lookup_expr='iexact')

    class Meta:
        model = Item
        fields = ['search', 'box_id', 'parent_id', 'group_id', 'qr_code', 'ean_code', 'serial_number', 'type']

    def filter_search(self, queryset, name, value):
        q = build_search_q(value)
        if q is None:
            return queryset.none()
        return queryset.filter(q)
