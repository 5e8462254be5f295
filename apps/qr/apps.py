from django.apps import AppConfig


class QrConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.qr'
    verbose_name = 'QR Guest Services'
