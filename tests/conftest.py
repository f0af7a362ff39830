import mongomock
import pytest

from config import Config
from server import create_app
from tijara_server.dto.listing_dto import ListingDTO
from tijara_server.dto.user_dto import UserDTO
from tijara_server.repository.mongo_helper import MongoDatabase
from tijara_server.security.authentication import AuthSecurity

TEST_SECRET = 'test-secret'


def make_settings(**sections):
    overrides = {
        'security': {'jwt': {'secret': TEST_SECRET, 'algorithm': 'HS256'}},
        'database': {'name': 'tijara_test', 'use_transactions': False},
        'cors': {'origins': '*'},
    }
    for key, value in sections.items():
        overrides.setdefault(key, {}).update(value)
    return Config(overrides=overrides)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def database(settings):
    db = MongoDatabase.from_config(settings, client=mongomock.MongoClient())
    db.init()
    yield db
    db.close()


@pytest.fixture
def app(settings, database):
    app = create_app(settings, database=database)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions['tijara']


@pytest.fixture
def socketio(services):
    return services.hub.socketio


def add_user(services, user_id, username=None):
    user = UserDTO(id=user_id, email=f'{user_id}@example.com', username=username or user_id)
    services.users.create_user(user)
    return user


def add_listing(services, listing_id, owner_id, title='Used bike'):
    listing = ListingDTO(
        id=listing_id, user_id=owner_id, title=title, price=120,
        category='Vehicles', location='Casablanca'
    )
    services.listing_repo.create_listing(listing)
    return listing


@pytest.fixture
def marketplace(services):
    """Buyer u1, seller u2 owning listing l1, and a bystander u3."""
    return {
        'u1': add_user(services, 'u1', 'buyer'),
        'u2': add_user(services, 'u2', 'seller'),
        'u3': add_user(services, 'u3', 'bystander'),
        'l1': add_listing(services, 'l1', 'u2'),
    }


def token_for(user_id):
    return AuthSecurity.create_access_token(user_id)


def auth_headers(user_id):
    return {'Authorization': f'Bearer {token_for(user_id)}'}
