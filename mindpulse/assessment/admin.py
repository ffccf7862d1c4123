from django.contrib import admin

from .models import AssessmentReport
from .models import AssessmentSession
from .models import Child
from .models import CognitiveProfile
from .models import TaskResult


@admin.register(Child)
class ChildAdmin(admin.ModelAdmin):
    list_display = ["id", "guardian", "grade", "created_at"]
    list_filter = ["grade"]
    search_fields = ["guardian__username", "guardian__email"]


@admin.register(AssessmentSession)
class AssessmentSessionAdmin(admin.ModelAdmin):
    list_display = ["id", "child", "status", "started_at", "ended_at", "app_version"]
    list_filter = ["status", "app_version"]
    ordering = ["-started_at"]


@admin.register(TaskResult)
class TaskResultAdmin(admin.ModelAdmin):
    list_display = ["id", "session", "game_id", "index_value"]
    list_filter = ["game_id"]


@admin.register(CognitiveProfile)
class CognitiveProfileAdmin(admin.ModelAdmin):
    list_display = ["child", "priority_domain", "asi", "ici", "wme", "pci", "cfi", "created_at"]
    list_filter = ["priority_domain"]
    ordering = ["-created_at"]


@admin.register(AssessmentReport)
class AssessmentReportAdmin(admin.ModelAdmin):
    list_display = ["session", "created_at", "updated_at"]
