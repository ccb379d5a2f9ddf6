from django.contrib import admin
from .models import PromoCode, Purchase


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    list_display = ('code', 'discount_percent', 'is_active', 'used_count', 'usage_limit', 'expires_at')
    list_filter = ('is_active',)
    search_fields = ('code', 'description')
    readonly_fields = ('used_count', 'created_at')


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'course', 'amount', 'payment_method', 'status', 'purchased_at')
    list_filter = ('status', 'payment_method', 'course')
    search_fields = ('user__email', 'course__title', 'payment_id', 'transfer_code')
    raw_id_fields = ('user', 'approved_by')
    readonly_fields = ('purchased_at', 'approved_at', 'approved_by')
