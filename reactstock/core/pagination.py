from django.core.paginator import Paginator


def paginate(object_list, page, page_size):
    """Page an already-evaluated list or queryset into the standard response shape"""
    paginator = Paginator(object_list, page_size)
    page_obj = paginator.get_page(page)
    return {
        'results': list(page_obj.object_list),
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': page_size,
        'total_pages': paginator.num_pages,
    }
