from django.apps import AppConfig


class AssessmentConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "mindpulse.assessment"
    verbose_name = "Cognitive assessment"
