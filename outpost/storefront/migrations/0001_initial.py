from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ProductVariant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku_code', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('style_code', models.CharField(db_index=True, max_length=64)),
                ('style_name', models.CharField(blank=True, max_length=255)),
                ('brand', models.CharField(blank=True, max_length=120)),
                ('product_type', models.CharField(blank=True, max_length=120)),
                ('colour_code', models.CharField(max_length=64)),
                ('colour_name', models.CharField(blank=True, max_length=120)),
                ('colour_image', models.CharField(blank=True, max_length=500)),
                ('rgb', models.CharField(blank=True, help_text='"R G B" triplets separated by "|", or "Not available"', max_length=255)),
                ('size_code', models.CharField(blank=True, max_length=32)),
                ('size_name', models.CharField(blank=True, max_length=64)),
                ('size_range', models.CharField(blank=True, max_length=64)),
                ('single_price', models.CharField(blank=True, help_text='Unit price as supplied, may be blank', max_length=32)),
                ('sku_status', models.CharField(blank=True, max_length=32)),
                ('primary_product_image_url', models.CharField(blank=True, max_length=500)),
                ('back_image_url', models.CharField(blank=True, max_length=500)),
                ('side_image_url', models.CharField(blank=True, max_length=500)),
                ('additional_image_url', models.CharField(blank=True, max_length=500)),
                ('fabric', models.TextField(blank=True)),
                ('washing_instructions', models.TextField(blank=True)),
                ('accreditations', models.TextField(blank=True)),
                ('specification', models.TextField(blank=True)),
                ('retail_description', models.TextField(blank=True)),
            ],
            options={
                'ordering': ['style_code', 'id'],
                'indexes': [models.Index(fields=['style_code', 'colour_code'], name='idx_variant_style_colour')],
            },
        ),
    ]
