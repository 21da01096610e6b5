import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

PLATFORMS = [('mercadolivre', 'mercadolivre'), ('shopee', 'shopee'), ('amazon', 'amazon'), ('magazineluiza', 'magazineluiza')]
PRODUCT_CATEGORIES = [('electronics', 'electronics'), ('home', 'home'), ('beauty', 'beauty'), ('fashion', 'fashion'), ('sports', 'sports'), ('books', 'books'), ('games', 'games'), ('other', 'other')]
TARGET_CATEGORIES = [('electronics', 'electronics'), ('home', 'home'), ('beauty', 'beauty'), ('fashion', 'fashion'), ('sports', 'sports'), ('books', 'books'), ('games', 'games'), ('general', 'general')]
QUALITIES = [('excellent', 'excellent'), ('good', 'good'), ('regular', 'regular'), ('low', 'low')]
STATUSES = [('pending', 'pending'), ('sent', 'sent'), ('failed', 'failed'), ('delivered', 'delivered'), ('read', 'read')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='MessageTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=50)),
                ('description', models.CharField(blank=True, default='', max_length=200)),
                ('category', models.CharField(choices=TARGET_CATEGORIES, default='general', max_length=20)),
                ('content', models.TextField()),
                ('variables', models.JSONField(blank=True, default=list, help_text='Declared variables: name, description, type, required.')),
                ('is_default', models.BooleanField(default=False, help_text='Fallback template of its category.')),
                ('is_active', models.BooleanField(default=True)),
                ('times_used', models.PositiveIntegerField(default=0)),
                ('last_used_at', models.DateTimeField(blank=True, null=True)),
                ('avg_engagement_rate', models.FloatField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['category', 'is_active'], name='template_category_active_idx'),
                    models.Index(fields=['is_default', 'is_active'], name='template_default_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('platform', models.CharField(choices=PLATFORMS, max_length=20)),
                ('platform_id', models.CharField(help_text='Listing id on the source platform.', max_length=100)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('category', models.CharField(choices=PRODUCT_CATEGORIES, default='other', max_length=20)),
                ('price', models.DecimalField(decimal_places=2, max_digits=12)),
                ('original_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('commission_rate', models.DecimalField(decimal_places=4, help_text='Commission rate as a fraction (0.15 = 15%).', max_digits=6)),
                ('discount', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=12)),
                ('discount_percentage', models.IntegerField(default=0, editable=False)),
                ('estimated_commission', models.DecimalField(decimal_places=2, default=0, editable=False, max_digits=12)),
                ('commission_quality', models.CharField(choices=QUALITIES, default='low', editable=False, max_length=10)),
                ('rating', models.FloatField(default=0)),
                ('reviews_count', models.PositiveIntegerField(default=0)),
                ('sales_count', models.PositiveIntegerField(default=0)),
                ('product_url', models.URLField(max_length=1000)),
                ('affiliate_link', models.URLField(max_length=1200)),
                ('image_url', models.URLField(blank=True, max_length=1000, null=True)),
                ('seller', models.JSONField(blank=True, default=dict)),
                ('is_approved', models.BooleanField(default=False)),
                ('approved_by', models.CharField(blank=True, max_length=100, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True, help_text='Deleted products are deactivated, never removed.')),
                ('last_scraped_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('views', models.PositiveIntegerField(default=0)),
                ('clicks', models.PositiveIntegerField(default=0)),
                ('conversions', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['category', 'is_approved'], name='product_category_approved_idx'),
                    models.Index(fields=['commission_quality', 'is_approved'], name='product_quality_approved_idx'),
                    models.Index(fields=['-estimated_commission'], name='product_commission_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('platform', 'platform_id'), name='unique_product_platform_listing'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MessageTarget',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('whatsapp_id', models.CharField(help_text='Group JID on the WhatsApp gateway.', max_length=100, unique=True)),
                ('description', models.TextField(blank=True, default='')),
                ('category', models.CharField(choices=TARGET_CATEGORIES, default='general', max_length=20)),
                ('members_count', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('sending_enabled', models.BooleanField(default=True)),
                ('max_messages_per_day', models.PositiveSmallIntegerField(default=5)),
                ('allowed_hours_start', models.PositiveSmallIntegerField(default=8)),
                ('allowed_hours_end', models.PositiveSmallIntegerField(default=22)),
                ('total_sent', models.PositiveIntegerField(default=0)),
                ('sent_today', models.PositiveIntegerField(default=0)),
                ('counters_date', models.DateField(blank=True, help_text='Day sent_today refers to.', null=True)),
                ('last_sent_at', models.DateTimeField(blank=True, null=True)),
                ('total_clicks', models.PositiveIntegerField(default=0)),
                ('total_conversions', models.PositiveIntegerField(default=0)),
                ('avg_engagement_rate', models.FloatField(default=0)),
                ('last_activity_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('message_template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='targets', to='affiliate_board.messagetemplate')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['category', 'is_active'], name='target_category_active_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('allowed_hours_end__gt', models.F('allowed_hours_start'))), name='target_allowed_hours_window'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DeliveryRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('content', models.TextField()),
                ('image_url', models.URLField(blank=True, max_length=1000, null=True)),
                ('status', models.CharField(choices=STATUSES, default='pending', max_length=10)),
                ('message_id', models.CharField(blank=True, max_length=100, null=True)),
                ('api_success', models.BooleanField(default=False)),
                ('api_response', models.JSONField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('http_status', models.IntegerField(blank=True, null=True)),
                ('attempts', models.PositiveSmallIntegerField(default=0)),
                ('processing_time_ms', models.PositiveIntegerField(default=0)),
                ('execution_id', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('scheduled_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('failed_at', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('clicks', models.PositiveIntegerField(default=0)),
                ('reactions', models.PositiveIntegerField(default=0)),
                ('replies', models.PositiveIntegerField(default=0)),
                ('conversions', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('product', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='deliveries', to='affiliate_board.product')),
                ('target', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='deliveries', to='affiliate_board.messagetarget')),
                ('template', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='deliveries', to='affiliate_board.messagetemplate')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['status', 'scheduled_at'], name='delivery_status_scheduled_idx'),
                    models.Index(fields=['target', 'scheduled_at'], name='delivery_target_scheduled_idx'),
                ],
            },
        ),
    ]
