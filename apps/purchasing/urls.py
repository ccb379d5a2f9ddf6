"""
URL configuration for the purchase flow.
"""

from django.urls import path
from . import views

app_name = 'purchasing'

urlpatterns = [
    path('promo/validate', views.PromoValidateView.as_view(), name='promo_validate'),
    path('purchases', views.PurchaseCreateView.as_view(), name='purchase_create'),
    path('courses/<int:course_id>/purchase-intent', views.PurchaseIntentView.as_view(), name='purchase_intent'),
]
