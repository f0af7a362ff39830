"""Seed script: create demo users and a listing for local development.

Creates (idempotently):
- users u1 (buyer) and u2 (seller)
- listing l1 owned by u2

and prints a Bearer token for each user so the API and the Socket.IO
channel can be exercised by hand. Indexes are ensured on the way.

Usage:
    python scripts/seed_dev_data.py

Ensure MONGO_URI / MONGO_DB (or the YAML config) point at the right database.
"""
import logging
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from tijara_server.dto.listing_dto import ListingDTO
from tijara_server.dto.user_dto import UserDTO
from tijara_server.repository import ListingRepository, MongoDatabase, UserRepository
from tijara_server.security.authentication import AuthSecurity

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEMO_USERS = [
    UserDTO(id='u1', email='buyer@example.com', username='buyer', name='Demo Buyer'),
    UserDTO(id='u2', email='seller@example.com', username='seller', name='Demo Seller'),
]

DEMO_LISTINGS = [
    ListingDTO(id='l1', user_id='u2', title='Used bike', price=120, category='Vehicles',
               location='Casablanca', listing_action='SELL',
               images=[{'url': 'https://picsum.photos/seed/bike/800/600', 'order': 0}]),
]


def seed(database: MongoDatabase) -> dict:
    """Insert the demo rows that are missing; returns how many of each were created."""
    users = UserRepository(database)
    listings = ListingRepository(database)
    created = {'users': 0, 'listings': 0}

    for user in DEMO_USERS:
        if users.find_by_id(user.id) is None:
            users.create_user(user)
            created['users'] += 1
            logger.info(f'  Created user {user.id} ({user.username})')
        else:
            logger.info(f'  User {user.id} already exists')

    for listing in DEMO_LISTINGS:
        if listings.find_by_id(listing.id) is None:
            listings.create_listing(listing)
            created['listings'] += 1
            logger.info(f'  Created listing {listing.id} ({listing.title})')
        else:
            logger.info(f'  Listing {listing.id} already exists')

    return created


def main():
    database = MongoDatabase.from_config(config).init()
    try:
        logger.info(f'Seeding {config.MONGO_DB}...')
        seed(database)
        if config.JWT_SECRET:
            AuthSecurity.configure(config.JWT_SECRET, config.JWT_ALGORITHM, config.ACCESS_TOKEN_EXPIRE_MINUTES)
            for user in DEMO_USERS:
                logger.info(f'Token for {user.id}: {AuthSecurity.create_access_token(user.id)}')
        else:
            logger.warning('JWT_SECRET not set; skipping token generation')
    finally:
        database.close()


if __name__ == '__main__':
    main()
