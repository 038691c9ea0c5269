from django.contrib import admin

from .models import BlogPost


@admin.register(BlogPost)
class BlogPostAdmin(admin.ModelAdmin):
    list_display = ('slug', 'category', 'status', 'featured', 'published_at', 'author')
    list_filter = ('status', 'featured', 'category')
    search_fields = ('slug', 'category')
    readonly_fields = ('slug', 'created_at', 'updated_at')
    raw_id_fields = ('author',)
