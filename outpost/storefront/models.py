from django.db import models

NOT_AVAILABLE = 'not available'
DISCONTINUED = 'discontinued'


class ProductVariantQuerySet(models.QuerySet):
    def for_style(self, style_code):
        """Rows of one style in catalog order (the order the feed delivered them)."""
        return self.filter(style_code=style_code).order_by('id')


class ProductVariant(models.Model):
    """
    One purchasable SKU (style x colour x size) as delivered by the supplier feed.

    Rows are imported by the catalog sync and only read by the storefront.
    """
    sku_code = models.CharField(max_length=64, unique=True, verbose_name='SKU')
    style_code = models.CharField(max_length=64, db_index=True)
    style_name = models.CharField(max_length=255, blank=True)
    brand = models.CharField(max_length=120, blank=True)
    product_type = models.CharField(max_length=120, blank=True)

    colour_code = models.CharField(max_length=64)
    colour_name = models.CharField(max_length=120, blank=True)
    colour_image = models.CharField(max_length=500, blank=True)
    rgb = models.CharField(
        max_length=255,
        blank=True,
        help_text='"R G B" triplets separated by "|", or "Not available"',
    )

    size_code = models.CharField(max_length=32, blank=True)
    size_name = models.CharField(max_length=64, blank=True)
    size_range = models.CharField(max_length=64, blank=True)

    single_price = models.CharField(max_length=32, blank=True, help_text='Unit price as supplied, may be blank')
    sku_status = models.CharField(max_length=32, blank=True)

    primary_product_image_url = models.CharField(max_length=500, blank=True)
    back_image_url = models.CharField(max_length=500, blank=True)
    side_image_url = models.CharField(max_length=500, blank=True)
    additional_image_url = models.CharField(max_length=500, blank=True)

    fabric = models.TextField(blank=True)
    washing_instructions = models.TextField(blank=True)
    accreditations = models.TextField(blank=True)
    specification = models.TextField(blank=True)
    retail_description = models.TextField(blank=True)

    objects = ProductVariantQuerySet.as_manager()

    class Meta:
        ordering = ['style_code', 'id']
        indexes = [
            models.Index(fields=['style_code', 'colour_code'], name='idx_variant_style_colour'),
        ]

    def __str__(self):
        return f'{self.style_code} {self.colour_name or self.colour_code} {self.size_code}'.strip()

    @property
    def is_discontinued(self):
        return (self.sku_status or '').strip().lower() == DISCONTINUED

    @property
    def swatch_image(self):
        """Colour image, else the primary product shot; feed placeholders are ignored."""
        for candidate in (self.colour_image, self.primary_product_image_url):
            value = (candidate or '').strip()
            if value and value.lower() != NOT_AVAILABLE:
                return value
        return ''
