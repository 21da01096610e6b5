from django.urls import path

from .views import group_views, history_views, product_views, robot_views, template_views

urlpatterns = [
    path('products/', product_views.product_collection, name='product_collection'),
    path('products/good-commission/', product_views.good_commission_products, name='good_commission_products'),
    path('products/category/<str:category>/', product_views.products_by_category, name='products_by_category'),
    path('products/stats/', product_views.product_stats, name='product_stats'),
    path('products/scrape/', product_views.scrape_products, name='scrape_products'),
    path('products/<int:product_id>/', product_views.product_detail, name='product_detail'),
    path('products/<int:product_id>/approve/', product_views.approve_product, name='approve_product'),

    path('groups/', group_views.group_collection, name='group_collection'),
    path('groups/<int:group_id>/', group_views.group_detail, name='group_detail'),
    path('groups/<int:group_id>/toggle-sending/', group_views.toggle_group_sending, name='toggle_group_sending'),

    path('templates/', template_views.template_collection, name='template_collection'),
    path('templates/<int:template_id>/', template_views.template_detail, name='template_detail'),
    path('templates/<int:template_id>/process/', template_views.process_template, name='process_template'),

    path('history/', history_views.history_collection, name='history_collection'),
    path('history/stats/engagement/', history_views.engagement_stats, name='engagement_stats'),
    path('history/<int:record_id>/', history_views.history_detail, name='history_detail'),

    path('robot/status/', robot_views.robot_status, name='robot_status'),
    path('robot/run/', robot_views.robot_run, name='robot_run'),
    path('robot/stop/', robot_views.robot_stop, name='robot_stop'),
    path('robot/history/', robot_views.robot_history, name='robot_history'),
    path('robot/whatsapp/status/', robot_views.whatsapp_status, name='whatsapp_status'),
    path('robot/whatsapp/test-send/', robot_views.whatsapp_test_send, name='whatsapp_test_send'),
]
