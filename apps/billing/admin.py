from django.contrib import admin
from django.utils.html import format_html

from .models import Folio, FolioCharge, Payment, ShiftSession, FolioStatus


class FolioChargeInline(admin.TabularInline):
    model = FolioCharge
    extra = 0
    fields = ['charge_type', 'description', 'base_amount', 'service_charge_amount', 'vat_amount', 'amount']
    readonly_fields = fields


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['amount', 'payment_method', 'reference', 'status', 'processed_by', 'created_at']
    readonly_fields = fields


@admin.register(Folio)
class FolioAdmin(admin.ModelAdmin):
    list_display = ['folio_number', 'tenant', 'status_badge', 'total_charges', 'total_payments', 'balance']
    list_filter = ['status', 'tenant']
    search_fields = ['folio_number', 'reservation__guest_name']
    readonly_fields = ['total_charges', 'total_payments', 'balance', 'closed_at', 'closed_by']
    inlines = [FolioChargeInline, PaymentInline]

    def status_badge(self, obj):
        color = '#6B8E5E' if obj.status == FolioStatus.OPEN else '#888'
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            color,
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['amount', 'payment_method', 'status', 'folio', 'processed_by', 'created_at']
    list_filter = ['payment_method', 'status', 'tenant']
    search_fields = ['reference', 'folio__folio_number']


@admin.register(ShiftSession)
class ShiftSessionAdmin(admin.ModelAdmin):
    list_display = ['staff', 'role', 'status', 'start_time', 'end_time', 'expected_cash', 'cash_total', 'variance']
    list_filter = ['status', 'role', 'tenant']

    def variance(self, obj):
        if obj.cash_variance is None:
            return '-'
        color = '#B85C5C' if obj.cash_variance else '#6B8E5E'
        return format_html('<span style="color: {};">{}</span>', color, obj.cash_variance)
    variance.short_description = 'Variance'
