from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = "ruleevaluator.core"
    verbose_name = "Core"
