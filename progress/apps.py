from django.apps import AppConfig


class ProgressConfig(AppConfig):
    name = "progress"
    verbose_name = "Word progress"

    def ready(self):
        # stores are process-wide; load both documents once at startup
        from .services import init_stores
        init_stores()
