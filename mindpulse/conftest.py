import pytest

from mindpulse.assessment.tests.factories import ChildFactory
from mindpulse.assessment.tests.factories import UserFactory


@pytest.fixture
def guardian(db):
    return UserFactory()


@pytest.fixture
def child(guardian):
    return ChildFactory(guardian=guardian, grade=5)
