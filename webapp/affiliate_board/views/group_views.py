from django.db import transaction
from django.shortcuts import get_object_or_404

from src.core.exceptions.base import ValidationError

from ..models import MessageTarget, MessageTemplate
from ..pagination import paginate, query_bool
from ..responses import api_response, api_view, parse_body
from ..schemas import GroupWrite
from ..serializers import serialize

GROUP_SORT_FIELDS = ("created_at", "updated_at", "name", "members_count", "total_sent", "last_sent_at")
WRITABLE_FIELDS = tuple(GroupWrite.model_fields)


def _save_group(group: MessageTarget, payload: GroupWrite) -> MessageTarget:
    template_id = payload.message_template_id
    if template_id is not None and not MessageTemplate.objects.filter(pk=template_id).exists():
        raise ValidationError("message_template_id", template_id, "template does not exist")
    for name, value in payload.model_dump(mode="json").items():
        setattr(group, name, value)
    with transaction.atomic():
        group.save()
    return group


@api_view("GET", "POST")
def group_collection(request):
    if request.method == "POST":
        group = _save_group(MessageTarget(), parse_body(request, GroupWrite))
        return api_response(serialize(group), "Group created", status=201)

    groups = MessageTarget.objects.all()
    category = request.GET.get("category")
    if category:
        groups = groups.filter(category=category)
    for name in ("is_active", "sending_enabled"):
        value = query_bool(request, name)
        if value is not None:
            groups = groups.filter(**{name: value})

    page = paginate(groups, request, serialize, GROUP_SORT_FIELDS, "-created_at")
    return api_response(page, "Groups retrieved")


@api_view("GET", "PUT", "DELETE")
def group_detail(request, group_id):
    group = get_object_or_404(MessageTarget, pk=group_id)

    if request.method == "PUT":
        current = {name: getattr(group, name) for name in WRITABLE_FIELDS}
        _save_group(group, parse_body(request, GroupWrite, base=current))
        return api_response(serialize(group), "Group updated")

    if request.method == "DELETE":
        group.delete()
        return api_response({"id": group_id}, "Group deleted")

    return api_response(serialize(group), "Group retrieved")


@api_view("PATCH")
def toggle_group_sending(request, group_id):
    group = get_object_or_404(MessageTarget, pk=group_id)
    enabled = group.toggle_sending()
    return api_response(
        serialize(group),
        "Sending enabled" if enabled else "Sending disabled",
    )
