import re

from django.db import models

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_rgb_text(raw):
    """
    Collapses runs of whitespace to single spaces and trims the ends.

    Lookup keys and catalog descriptors must go through the same
    normalisation, otherwise "0  0 0" and "0 0 0" never meet.
    """
    if not raw:
        return ''
    return _WHITESPACE_RE.sub(' ', raw).strip()


class RgbValue(models.Model):
    """
    Authoritative swatch colour for a raw supplier RGB triplet.

    The supplier feed ships colours as "R G B" text that is often off from
    what the garment actually looks like; rows here override the numeric value.
    """
    rgb_text = models.CharField(max_length=64, unique=True, help_text='"R G B" as it appears in the feed')
    hex = models.CharField(max_length=7, help_text='#RRGGBB')

    class Meta:
        ordering = ['rgb_text']
        verbose_name = 'RGB value'
        verbose_name_plural = 'RGB values'

    def __str__(self):
        return f'{self.rgb_text} -> {self.hex}'

    def save(self, *args, **kwargs):
        self.rgb_text = normalize_rgb_text(self.rgb_text)
        self.hex = (self.hex or '').strip()
        super().save(*args, **kwargs)
