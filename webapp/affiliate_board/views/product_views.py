from django.db import transaction
from django.db.models import Avg, Count, Q, Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone

from src.core.exceptions.base import ValidationError
from src.core.models.enums import CommissionQuality, ProductCategory
from src.core.utils.listing_utils import build_affiliate_link
from src.shared.config.scraper_settings import get_scraper_config

from ..models import Product
from ..pagination import paginate, query_bool, query_decimal
from ..responses import api_response, api_view, parse_body
from ..schemas import ApproveProduct, ProductWrite, ScrapeRequest
from ..serializers import serialize
from ..services import run_scrape_cycle

PRODUCT_SORT_FIELDS = (
    "created_at", "updated_at", "last_scraped_at", "price", "rating", "sales_count",
    "commission_rate", "estimated_commission", "discount_percentage", "title",
)
WRITABLE_FIELDS = tuple(ProductWrite.model_fields)


def _apply_payload(product: Product, payload: ProductWrite) -> Product:
    values = payload.model_dump(mode="json")
    if not values.get("affiliate_link"):
        affiliate_id = get_scraper_config().affiliate_id_for(values["platform"])
        values["affiliate_link"] = build_affiliate_link(values["platform"], values["product_url"], affiliate_id)
    for name, value in values.items():
        setattr(product, name, value)
    return product


def _current_values(product: Product) -> dict:
    return {name: getattr(product, name) for name in WRITABLE_FIELDS}


@api_view("GET", "POST")
def product_collection(request):
    if request.method == "POST":
        payload = parse_body(request, ProductWrite)
        with transaction.atomic():
            product = _apply_payload(Product(), payload)
            product.save()
        return api_response(serialize(product), "Product created", status=201)

    products = Product.objects.filter(is_active=True)
    for name in ("category", "platform", "commission_quality"):
        value = request.GET.get(name)
        if value:
            products = products.filter(**{name: value})
    is_approved = query_bool(request, "is_approved")
    if is_approved is not None:
        products = products.filter(is_approved=is_approved)
    min_price = query_decimal(request, "min_price")
    if min_price is not None:
        products = products.filter(price__gte=min_price)
    max_price = query_decimal(request, "max_price")
    if max_price is not None:
        products = products.filter(price__lte=max_price)
    min_rating = query_decimal(request, "min_rating")
    if min_rating is not None:
        products = products.filter(rating__gte=float(min_rating))
    search = request.GET.get("search")
    if search:
        products = products.filter(title__icontains=search)

    page = paginate(products, request, serialize, PRODUCT_SORT_FIELDS, "-last_scraped_at")
    return api_response(page, "Products retrieved")


@api_view("GET")
def good_commission_products(request):
    products = Product.objects.filter(
        is_active=True,
        is_approved=True,
        commission_quality__in=[CommissionQuality.EXCELLENT.value, CommissionQuality.GOOD.value],
    )
    page = paginate(products, request, serialize, PRODUCT_SORT_FIELDS, "-estimated_commission", tie_breaker="-rating")
    return api_response(page, "Products with good commission retrieved")


@api_view("GET")
def products_by_category(request, category):
    if category not in {c.value for c in ProductCategory}:
        raise ValidationError("category", category, "unknown product category")
    products = Product.objects.filter(is_active=True, category=category)
    if query_bool(request, "approved"):
        products = products.filter(is_approved=True)
    page = paginate(products, request, serialize, PRODUCT_SORT_FIELDS, "-estimated_commission")
    return api_response(page, f"Products in {category} retrieved")


@api_view("GET")
def product_stats(request):
    products = Product.objects.filter(is_active=True)
    general = products.aggregate(
        total=Count("id"),
        approved=Count("id", filter=Q(is_approved=True)),
        avg_price=Avg("price"),
        avg_commission_rate=Avg("commission_rate"),
        avg_estimated_commission=Avg("estimated_commission"),
        total_estimated_commission=Sum("estimated_commission"),
        avg_rating=Avg("rating"),
    )
    by_category = list(
        products.values("category")
        .annotate(count=Count("id"), avg_price=Avg("price"), avg_commission=Avg("estimated_commission"))
        .order_by("category")
    )
    by_platform = list(
        products.values("platform").annotate(count=Count("id"), avg_price=Avg("price")).order_by("platform")
    )
    by_quality = list(
        products.values("commission_quality").annotate(count=Count("id")).order_by("commission_quality")
    )
    return api_response(
        {"general": general, "by_category": by_category, "by_platform": by_platform, "by_quality": by_quality},
        "Product statistics retrieved",
    )


@api_view("POST")
def scrape_products(request):
    payload = parse_body(request, ScrapeRequest)
    summary = run_scrape_cycle(
        [c.value for c in payload.categories],
        [p.value for p in payload.platforms],
        payload.limit,
    )
    return api_response(summary, "Scrape cycle completed")


@api_view("GET", "PUT", "DELETE")
def product_detail(request, product_id):
    product = get_object_or_404(Product, pk=product_id)

    if request.method == "PUT":
        payload = parse_body(request, ProductWrite, base=_current_values(product))
        with transaction.atomic():
            _apply_payload(product, payload).save()
        return api_response(serialize(product), "Product updated")

    if request.method == "DELETE":
        product.is_active = False
        product.save(update_fields=["is_active"])
        return api_response({"id": product.pk, "is_active": False}, "Product deactivated")

    return api_response(serialize(product), "Product retrieved")


@api_view("PATCH")
def approve_product(request, product_id):
    product = get_object_or_404(Product, pk=product_id)
    payload = parse_body(request, ApproveProduct)
    if product.is_approved:
        raise ValidationError("is_approved", True, "product is already approved")
    product.is_approved = True
    product.approved_by = payload.approved_by
    product.approved_at = timezone.now()
    product.save(update_fields=["is_approved", "approved_by", "approved_at"])
    return api_response(serialize(product), "Product approved")
