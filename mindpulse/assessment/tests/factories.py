from django.contrib.auth import get_user_model
from factory import Faker
from factory import Sequence
from factory import SubFactory
from factory.django import DjangoModelFactory

from mindpulse.assessment.models import AssessmentSession
from mindpulse.assessment.models import Child


class UserFactory(DjangoModelFactory):
    username = Sequence(lambda n: f"guardian{n}")
    email = Faker("email")
    password = "password"

    class Meta:
        model = get_user_model()
        django_get_or_create = ["username"]

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        manager = cls._get_manager(model_class)
        return manager.create_user(*args, **kwargs)


class ChildFactory(DjangoModelFactory):
    guardian = SubFactory(UserFactory)
    grade = 5

    class Meta:
        model = Child


class AssessmentSessionFactory(DjangoModelFactory):
    child = SubFactory(ChildFactory)
    app_version = "test"
    config_version = "test"

    class Meta:
        model = AssessmentSession


def make_trials(game_id, count=10, base_rt=400.0):
    """Plausible trial dicts for *game_id*; every fifth trial is a miss."""
    trials = []
    for index in range(count):
        missed = index % 5 == 4
        trials.append(
            {
                "game_id": game_id,
                "trial_index": index,
                "trial_start_ms": index * 1000.0,
                "stimulus_type": "NOGO" if index % 4 == 3 else "GO",
                "rt_ms": None if missed else base_rt + (index % 3) * 40,
                "response_code": None if missed else "TAP",
                "correct": not missed,
                "flags": {
                    "rule": "COLOR",
                    "is_switch": index % 5 == 0 and index > 0,
                    "target": [1, 2],
                    "taps": [1, 2],
                },
            }
        )
    return trials
