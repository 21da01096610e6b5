from decimal import Decimal
from typing import Tuple

from django.db import models
from django.db.models import F
from django.utils import timezone

from src.core.exceptions.robot_errors import InvalidStatusTransitionError
from src.core.models.enums import (
    ALLOWED_STATUS_TRANSITIONS,
    CommissionQuality,
    DeliveryStatus,
    Platform,
    ProductCategory,
    TargetCategory,
)
from src.core.models.message_template import MessageTemplate as DomainTemplate
from src.core.utils.commission_calculator import (
    calculate_discount,
    calculate_discount_percentage,
    calculate_estimated_commission,
    classify_commission,
    normalize_commission_rate,
)

PLATFORM_CHOICES = [(p.value, p.value) for p in Platform]
PRODUCT_CATEGORY_CHOICES = [(c.value, c.value) for c in ProductCategory]
TARGET_CATEGORY_CHOICES = [(c.value, c.value) for c in TargetCategory]
QUALITY_CHOICES = [(q.value, q.value) for q in CommissionQuality]
STATUS_CHOICES = [(s.value, s.value) for s in DeliveryStatus]

# fields a re-scrape refreshes, everything else (approval, counters, is_active) is kept
SCRAPED_FIELDS = (
    "title", "description", "category", "price", "original_price", "commission_rate",
    "rating", "reviews_count", "sales_count", "product_url", "affiliate_link",
    "image_url", "seller",
)


class ProductManager(models.Manager):

    def ingest(self, product) -> Tuple["Product", bool]:
        """
        Insert or refresh a scraped product by its (platform, platform_id) key.

        Args:
            product: Enriched domain product

        Returns:
            Tuple of (saved row, created flag)
        """
        values = product.model_dump(mode="json", include=set(SCRAPED_FIELDS))
        values["last_scraped_at"] = timezone.now()
        row, created = self.get_or_create(
            platform=product.platform.value,
            platform_id=product.platform_id,
            defaults=values,
        )
        if not created:
            for name, value in values.items():
                setattr(row, name, value)
            row.save()
        return row, created


class Product(models.Model):
    """
    affiliate product, one row per platform listing
    """
    platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES)
    platform_id = models.CharField(max_length=100, help_text="Listing id on the source platform.")
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=20, choices=PRODUCT_CATEGORY_CHOICES, default="other")
    price = models.DecimalField(max_digits=12, decimal_places=2)
    original_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    commission_rate = models.DecimalField(max_digits=6, decimal_places=4, help_text="Commission rate as a fraction (0.15 = 15%).")

    # derived, recomputed on every save
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0, editable=False)
    discount_percentage = models.IntegerField(default=0, editable=False)
    estimated_commission = models.DecimalField(max_digits=12, decimal_places=2, default=0, editable=False)
    commission_quality = models.CharField(max_length=10, choices=QUALITY_CHOICES, default="low", editable=False)

    rating = models.FloatField(default=0)
    reviews_count = models.PositiveIntegerField(default=0)
    sales_count = models.PositiveIntegerField(default=0)
    product_url = models.URLField(max_length=1000)
    affiliate_link = models.URLField(max_length=1200)
    image_url = models.URLField(max_length=1000, null=True, blank=True)
    seller = models.JSONField(default=dict, blank=True)

    is_approved = models.BooleanField(default=False)
    approved_by = models.CharField(max_length=100, null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True, help_text="Deleted products are deactivated, never removed.")
    last_scraped_at = models.DateTimeField(default=timezone.now)

    views = models.PositiveIntegerField(default=0)
    clicks = models.PositiveIntegerField(default=0)
    conversions = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["platform", "platform_id"], name="unique_product_platform_listing"),
        ]
        indexes = [
            models.Index(fields=["category", "is_approved"], name="product_category_approved_idx"),
            models.Index(fields=["commission_quality", "is_approved"], name="product_quality_approved_idx"),
            models.Index(fields=["-estimated_commission"], name="product_commission_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.platform})"

    def refresh_derived_fields(self):
        self.price = Decimal(str(self.price))
        if self.original_price is not None:
            self.original_price = Decimal(str(self.original_price))
        self.commission_rate = normalize_commission_rate(self.commission_rate)
        self.discount = calculate_discount(self.price, self.original_price)
        self.discount_percentage = calculate_discount_percentage(self.price, self.original_price)
        self.estimated_commission = calculate_estimated_commission(self.price, self.commission_rate)
        self.commission_quality = classify_commission(self.commission_rate).value

    def save(self, *args, **kwargs):
        self.refresh_derived_fields()
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = set(update_fields) | {
                "commission_rate", "discount", "discount_percentage",
                "estimated_commission", "commission_quality", "updated_at",
            }
        super().save(*args, **kwargs)


class MessageTemplate(models.Model):
    """
    message text with {{ variable }} placeholders, scoped to a category
    """
    name = models.CharField(max_length=50)
    description = models.CharField(max_length=200, blank=True, default="")
    category = models.CharField(max_length=20, choices=TARGET_CATEGORY_CHOICES, default="general")
    content = models.TextField()
    variables = models.JSONField(default=list, blank=True, help_text="Declared variables: name, description, type, required.")
    is_default = models.BooleanField(default=False, help_text="Fallback template of its category.")
    is_active = models.BooleanField(default=True)
    times_used = models.PositiveIntegerField(default=0)
    last_used_at = models.DateTimeField(null=True, blank=True)
    avg_engagement_rate = models.FloatField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["category", "is_active"], name="template_category_active_idx"),
            models.Index(fields=["is_default", "is_active"], name="template_default_active_idx"),
        ]

    def __str__(self):
        return self.name

    def to_domain(self) -> DomainTemplate:
        return DomainTemplate(
            id=self.pk,
            name=self.name,
            description=self.description,
            category=self.category,
            content=self.content,
            variables=self.variables or [],
            is_default=self.is_default,
            is_active=self.is_active,
        )

    def render(self, values: dict) -> str:
        return self.to_domain().render(values)


class MessageTarget(models.Model):
    """
    whatsapp group receiving product messages
    """
    name = models.CharField(max_length=100)
    whatsapp_id = models.CharField(max_length=100, unique=True, help_text="Group JID on the WhatsApp gateway.")
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=20, choices=TARGET_CATEGORY_CHOICES, default="general")
    members_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    sending_enabled = models.BooleanField(default=True)
    max_messages_per_day = models.PositiveSmallIntegerField(default=5)
    allowed_hours_start = models.PositiveSmallIntegerField(default=8)
    allowed_hours_end = models.PositiveSmallIntegerField(default=22)
    message_template = models.ForeignKey(
        MessageTemplate, on_delete=models.SET_NULL, null=True, blank=True, related_name="targets"
    )
    total_sent = models.PositiveIntegerField(default=0)
    sent_today = models.PositiveIntegerField(default=0)
    counters_date = models.DateField(null=True, blank=True, help_text="Day sent_today refers to.")
    last_sent_at = models.DateTimeField(null=True, blank=True)
    total_clicks = models.PositiveIntegerField(default=0)
    total_conversions = models.PositiveIntegerField(default=0)
    avg_engagement_rate = models.FloatField(default=0)
    last_activity_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(allowed_hours_end__gt=F("allowed_hours_start")),
                name="target_allowed_hours_window",
            ),
        ]
        indexes = [
            models.Index(fields=["category", "is_active"], name="target_category_active_idx"),
        ]

    def __str__(self):
        return self.name

    def toggle_sending(self) -> bool:
        self.sending_enabled = not self.sending_enabled
        self.save(update_fields=["sending_enabled", "updated_at"])
        return self.sending_enabled


class DeliveryRecord(models.Model):
    """
    append-only log of every message handed to the gateway;
    references are weak so deleting a product, group or template keeps the history
    """
    product = models.ForeignKey(
        Product, on_delete=models.DO_NOTHING, db_constraint=False, null=True, blank=True, related_name="deliveries"
    )
    target = models.ForeignKey(
        MessageTarget, on_delete=models.DO_NOTHING, db_constraint=False, null=True, blank=True, related_name="deliveries"
    )
    template = models.ForeignKey(
        MessageTemplate, on_delete=models.DO_NOTHING, db_constraint=False, null=True, blank=True, related_name="deliveries"
    )
    content = models.TextField()
    image_url = models.URLField(max_length=1000, null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    message_id = models.CharField(max_length=100, null=True, blank=True)
    api_success = models.BooleanField(default=False)
    api_response = models.JSONField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    http_status = models.IntegerField(null=True, blank=True)
    attempts = models.PositiveSmallIntegerField(default=0)
    processing_time_ms = models.PositiveIntegerField(default=0)
    execution_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    scheduled_at = models.DateTimeField(default=timezone.now)
    sent_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    clicks = models.PositiveIntegerField(default=0)
    reactions = models.PositiveIntegerField(default=0)
    replies = models.PositiveIntegerField(default=0)
    conversions = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "scheduled_at"], name="delivery_status_scheduled_idx"),
            models.Index(fields=["target", "scheduled_at"], name="delivery_target_scheduled_idx"),
        ]

    def __str__(self):
        return f"{self.status} to target {self.target_id} at {self.scheduled_at:%Y-%m-%d %H:%M}"

    def transition_to(self, status: str):
        """
        Move the record along its lifecycle and stamp the matching timestamp.

        Raises:
            InvalidStatusTransitionError: If the lifecycle does not allow the move
        """
        current = DeliveryStatus(self.status)
        requested = DeliveryStatus(status)
        if requested not in ALLOWED_STATUS_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(current.value, requested.value)
        self.status = requested.value
        setattr(self, f"{requested.value}_at", timezone.now())
        self.save(update_fields=["status", f"{requested.value}_at"])

    def add_engagement(self, clicks: int = 0, reactions: int = 0, replies: int = 0, conversions: int = 0):
        """Increment engagement counters; they never decrease."""
        if min(clicks, reactions, replies, conversions) < 0:
            raise ValueError("Engagement counters can only be incremented")
        DeliveryRecord.objects.filter(pk=self.pk).update(
            clicks=F("clicks") + clicks,
            reactions=F("reactions") + reactions,
            replies=F("replies") + replies,
            conversions=F("conversions") + conversions,
        )
        self.refresh_from_db(fields=["clicks", "reactions", "replies", "conversions"])
