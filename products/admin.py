"""Django admin configuration for product catalog models."""

from django.contrib import admin
from django.utils.html import format_html

from .models import Brand, Category, Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin configuration for products."""

    list_display = ('name', 'brand', 'category', 'price', 'colored_stock', 'draft', 'featured')
    search_fields = ('name', 'slug')
    list_filter = ('brand', 'category', 'draft', 'featured')
    readonly_fields = ('average_rating', 'num_reviews', 'created_at', 'updated_at')

    def colored_stock(self, obj):
        """Render stock in color to highlight low inventory."""
        stock = obj.stock
        if stock <= 3:
            color = 'red'
        elif stock <= 10:
            color = 'orange'
        else:
            color = 'green'
        return format_html('<b style="color: {};">{}</b>', color, stock)

    colored_stock.short_description = 'Stock'
    colored_stock.admin_order_field = 'stock'


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'is_active', 'order')
    list_editable = ('is_active', 'order')


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'is_active')
