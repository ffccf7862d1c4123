from django.urls import path

from .views import (
    child_create_view,
    child_history_view,
    game_submit_view,
    session_partial_view,
    session_start_view,
)

app_name = "assessment"
urlpatterns = [
    path("api/children/", view=child_create_view, name="create_child"),
    path("api/sessions/start/", view=session_start_view, name="start_session"),
    path("api/sessions/submit-game/", view=game_submit_view, name="submit_game"),
    path("api/sessions/partial/", view=session_partial_view, name="mark_partial"),
    path("children/<uuid:child_id>/history/", view=child_history_view, name="child_history"),
]
