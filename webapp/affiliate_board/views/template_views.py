from django.db import transaction
from django.shortcuts import get_object_or_404

from ..models import MessageTemplate
from ..pagination import paginate, query_bool
from ..responses import api_response, api_view, parse_body
from ..schemas import ProcessTemplate, TemplateWrite
from ..serializers import serialize

TEMPLATE_SORT_FIELDS = ("created_at", "updated_at", "name", "times_used", "last_used_at")
WRITABLE_FIELDS = tuple(TemplateWrite.model_fields)


def _save_template(template: MessageTemplate, payload: TemplateWrite) -> MessageTemplate:
    for name, value in payload.model_dump(mode="json").items():
        setattr(template, name, value)
    with transaction.atomic():
        template.save()
    return template


@api_view("GET", "POST")
def template_collection(request):
    if request.method == "POST":
        template = _save_template(MessageTemplate(), parse_body(request, TemplateWrite))
        return api_response(serialize(template), "Template created", status=201)

    templates = MessageTemplate.objects.all()
    category = request.GET.get("category")
    if category:
        templates = templates.filter(category=category)
    is_active = query_bool(request, "is_active")
    if is_active is not None:
        templates = templates.filter(is_active=is_active)

    page = paginate(templates, request, serialize, TEMPLATE_SORT_FIELDS, "-created_at")
    return api_response(page, "Templates retrieved")


@api_view("GET", "PUT", "DELETE")
def template_detail(request, template_id):
    template = get_object_or_404(MessageTemplate, pk=template_id)

    if request.method == "PUT":
        current = {name: getattr(template, name) for name in WRITABLE_FIELDS}
        _save_template(template, parse_body(request, TemplateWrite, base=current))
        return api_response(serialize(template), "Template updated")

    if request.method == "DELETE":
        template.delete()
        return api_response({"id": template_id}, "Template deleted")

    return api_response(serialize(template), "Template retrieved")


@api_view("POST")
def process_template(request, template_id):
    template = get_object_or_404(MessageTemplate, pk=template_id)
    payload = parse_body(request, ProcessTemplate)
    content = template.render(payload.variables)
    return api_response(
        {"template_id": template.pk, "content": content, "length": len(content)},
        "Template processed",
    )
