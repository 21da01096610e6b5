"""
URL configuration for webapp project.
"""
from django.urls import include, path

urlpatterns = [
    path('api/', include('affiliate_board.urls')),
]
