from django.contrib import admin

from .models import ProductVariant


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ('sku_code', 'style_code', 'colour_name', 'size_code', 'single_price', 'sku_status')
    list_filter = ('sku_status', 'brand')
    search_fields = ('sku_code', 'style_code', 'style_name', 'colour_name')
