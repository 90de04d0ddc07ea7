from django.apps import AppConfig


class CustomizerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'customizer'
    verbose_name = 'Logo preview'
