import blog.models
import core.i18n
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BlogPost',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.JSONField(default=core.i18n.empty_bilingual)),
                ('slug', models.SlugField(allow_unicode=True, blank=True, max_length=200, unique=True)),
                ('content', models.JSONField(default=core.i18n.empty_bilingual)),
                ('excerpt', models.JSONField(blank=True, default=core.i18n.empty_bilingual)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('published', 'Published')], default='draft', max_length=10)),
                ('featured', models.BooleanField(default=False)),
                ('main_image', models.URLField(blank=True, max_length=500)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('category', models.CharField(max_length=100)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('seo', models.JSONField(blank=True, default=blog.models.default_seo)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='blog_posts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-published_at', '-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'published_at'], name='blogpost_status_pub_idx'),
                    models.Index(fields=['category', 'status'], name='blogpost_category_idx'),
                ],
            },
        ),
    ]
