import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / 'scripts' / 'seed_dev_data.py'


@pytest.fixture
def seed_module():
    spec = importlib.util.spec_from_file_location('seed_dev_data', SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_seed_is_idempotent(seed_module, database):
    assert seed_module.seed(database) == {'users': 2, 'listings': 1}
    assert seed_module.seed(database) == {'users': 0, 'listings': 0}
    assert database.get_collection('listings').find_one({'_id': 'l1'})['user_id'] == 'u2'
