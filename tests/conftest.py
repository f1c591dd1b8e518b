import os
import pytest


@pytest.fixture(autouse=True, scope="session")
def quiet_side_effects():
    os.environ.setdefault('JOBSCRAPER_DISABLE_FILE_LOGS', '1')
    os.environ.setdefault('JOBSCRAPER_DISABLE_EVENTS', '1')
    yield
