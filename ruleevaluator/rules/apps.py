from django.apps import AppConfig


class RulesConfig(AppConfig):
    name = "ruleevaluator.rules"
    verbose_name = "Rules"
