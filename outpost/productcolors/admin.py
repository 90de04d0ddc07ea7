from django.contrib import admin

from .models import RgbValue


@admin.register(RgbValue)
class RgbValueAdmin(admin.ModelAdmin):
    list_display = ('rgb_text', 'hex')
    search_fields = ('rgb_text', 'hex')
