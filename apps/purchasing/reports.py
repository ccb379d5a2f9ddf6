"""
Revenue read-models computed on demand from the purchase table.
"""

from django.db.models import Count, Q, Sum

from apps.learning.models import Course

from .models import Purchase

COMPLETED = Q(status=Purchase.STATUS_COMPLETED)
PENDING = Q(status=Purchase.STATUS_PENDING)


def revenue_summary():
    """Totals over completed and pending purchases."""
    return Purchase.objects.aggregate(
        total_revenue=Sum('amount', filter=COMPLETED, default=0),
        total_sales=Count('id', filter=COMPLETED),
        pending_revenue=Sum('amount', filter=PENDING, default=0),
        pending_count=Count('id', filter=PENDING),
    )


def course_revenue_breakdown():
    """
    One row per course, including courses without sales, highest revenue first.
    """
    completed = Q(purchases__status=Purchase.STATUS_COMPLETED)
    pending = Q(purchases__status=Purchase.STATUS_PENDING)

    courses = Course.objects.annotate(
        total_sales=Count('purchases', filter=completed),
        total_revenue=Sum('purchases__amount', filter=completed, default=0),
        pending_sales=Count('purchases', filter=pending),
        pending_revenue=Sum('purchases__amount', filter=pending, default=0),
    ).order_by('-total_revenue', 'title')

    return [
        {
            'course_id': course.id,
            'title': course.title,
            'price': course.price,
            'total_sales': course.total_sales,
            'total_revenue': course.total_revenue,
            'pending_sales': course.pending_sales,
            'pending_revenue': course.pending_revenue,
        }
        for course in courses
    ]
