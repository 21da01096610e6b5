from datetime import datetime, time

from django.db.models import Avg, Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone

from src.core.exceptions.base import ValidationError
from src.core.models.enums import DeliveryStatus

from ..models import DeliveryRecord
from ..pagination import paginate, query_date
from ..responses import api_response, api_view
from ..serializers import serialize

HISTORY_SORT_FIELDS = ("scheduled_at", "sent_at", "created_at", "clicks", "conversions", "processing_time_ms")
DELIVERED_STATUSES = (DeliveryStatus.SENT.value, DeliveryStatus.DELIVERED.value, DeliveryStatus.READ.value)


def _query_id(request, name: str):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return None
    if not raw.isdigit():
        raise ValidationError(name, raw, "must be a numeric id")
    return int(raw)


def _filtered_history(request):
    """Records narrowed by group, product, status and an inclusive date range."""
    records = DeliveryRecord.objects.all()
    group_id = _query_id(request, "group")
    if group_id is not None:
        records = records.filter(target_id=group_id)
    product_id = _query_id(request, "product")
    if product_id is not None:
        records = records.filter(product_id=product_id)
    status = request.GET.get("status")
    if status:
        if status not in {s.value for s in DeliveryStatus}:
            raise ValidationError("status", status, "unknown delivery status")
        records = records.filter(status=status)

    zone = timezone.get_current_timezone()
    start_date = query_date(request, "start_date")
    if start_date is not None:
        records = records.filter(scheduled_at__gte=datetime.combine(start_date, time.min, tzinfo=zone))
    end_date = query_date(request, "end_date")
    if end_date is not None:
        records = records.filter(scheduled_at__lte=datetime.combine(end_date, time.max, tzinfo=zone))
    return records


@api_view("GET")
def history_collection(request):
    page = paginate(_filtered_history(request), request, serialize, HISTORY_SORT_FIELDS, "-scheduled_at")
    return api_response(page, "History retrieved")


@api_view("GET")
def engagement_stats(request):
    totals = _filtered_history(request).aggregate(
        total_messages=Count("id"),
        delivered_messages=Count("id", filter=Q(status__in=DELIVERED_STATUSES)),
        failed_messages=Count("id", filter=Q(status=DeliveryStatus.FAILED.value)),
        total_clicks=Sum("clicks", default=0),
        total_reactions=Sum("reactions", default=0),
        total_replies=Sum("replies", default=0),
        total_conversions=Sum("conversions", default=0),
        avg_clicks=Avg("clicks", default=0),
        avg_reactions=Avg("reactions", default=0),
    )
    total = totals["total_messages"]
    if total:
        interactions = totals["total_clicks"] + totals["total_reactions"] + totals["total_replies"]
        totals["engagement_rate"] = round(interactions / total, 3)
        totals["conversion_rate"] = round(totals["total_conversions"] / total, 3)
    else:
        totals["engagement_rate"] = 0
        totals["conversion_rate"] = 0
    return api_response(totals, "Engagement statistics retrieved")


@api_view("GET")
def history_detail(request, record_id):
    record = get_object_or_404(DeliveryRecord, pk=record_id)
    return api_response(serialize(record), "History entry retrieved")
