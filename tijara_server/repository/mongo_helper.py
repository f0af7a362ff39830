"""MongoDB connection handle with an explicit lifecycle.

The handle is built once at process start (`init()`), handed to every
repository, and released at shutdown (`close()`). Nothing in the package
reaches for a module-level client.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from tijara_server.exception import PersistenceError

logger = logging.getLogger(__name__)


class MongoDatabase:
    """Owns the MongoClient and the application database."""

    def __init__(
        self,
        uri: str = 'mongodb://localhost:27017',
        db_name: str = 'tijara',
        use_transactions: bool = False,
        client: Optional[MongoClient] = None,
        server_selection_timeout_ms: int = 5000
    ):
        self.uri = uri
        self.db_name = db_name
        self.use_transactions = use_transactions
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self._client = client
        self._db = None

    @classmethod
    def from_config(cls, cfg, client: Optional[MongoClient] = None) -> 'MongoDatabase':
        return cls(
            uri=cfg.MONGO_URI,
            db_name=cfg.MONGO_DB,
            use_transactions=cfg.MONGO_USE_TRANSACTIONS,
            client=client,
            server_selection_timeout_ms=cfg.MONGO_SERVER_SELECTION_TIMEOUT_MS
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def init(self) -> 'MongoDatabase':
        """Connect (unless a client was injected) and ensure indexes. Idempotent."""
        if self._db is not None:
            return self
        if self._client is None:
            logger.info(f"Connecting to MongoDB DB: {self.db_name}")
            self._client = MongoClient(self.uri, serverSelectionTimeoutMS=self.server_selection_timeout_ms)
        self._db = self._client[self.db_name]
        self.ensure_indexes()
        return self

    def close(self):
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB client closed")
        self._client = None
        self._db = None

    @property
    def is_initialized(self) -> bool:
        return self._db is not None

    @property
    def db(self):
        if self._db is None:
            raise RuntimeError("MongoDatabase used before init()")
        return self._db

    def get_collection(self, collection_name: str):
        return self.db[collection_name]

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self):
        """Yield a session with an open transaction, or None when disabled.

        Transactions need a replica set; on a standalone server set
        `database.use_transactions: false` and the same code runs statement
        by statement. Repositories accept `session=None` either way.
        """
        if not self.use_transactions:
            yield None
            return
        with self._client.start_session() as session:
            with session.start_transaction():
                yield session

    # =========================================================================
    # Indexes
    # =========================================================================

    def ensure_indexes(self):
        """Create the indexes the query paths and uniqueness rules rely on (idempotent)."""
        db = self._db
        db['users'].create_index([('email', ASCENDING)], unique=True, name='users_email')
        db['users'].create_index([('username', ASCENDING)], unique=True, name='users_username')
        db['listings'].create_index([('user_id', ASCENDING), ('created_at', DESCENDING)], name='listings_user_created_at')
        db['favorites'].create_index(
            [('user_id', ASCENDING), ('listing_id', ASCENDING)], unique=True, name='favorites_user_listing'
        )
        db['favorites'].create_index([('listing_id', ASCENDING)], name='favorites_listing')
        # One conversation per (participant pair, listing)
        db['conversations'].create_index([('pair_key', ASCENDING)], unique=True, name='conversations_pair_key')
        db['conversations'].create_index(
            [('participants', ASCENDING), ('last_message_at', DESCENDING)], name='conversations_participant_last_message'
        )
        db['messages'].create_index(
            [('conversation_id', ASCENDING), ('created_at', DESCENDING)], name='messages_conversation_created_at'
        )
        db['messages'].create_index(
            [('recipient_id', ASCENDING), ('read', ASCENDING)], name='messages_recipient_read'
        )
        db['notifications'].create_index(
            [('user_id', ASCENDING), ('created_at', DESCENDING)], name='notifications_user_created_at'
        )
        logger.info('Ensured DB indexes')


@contextmanager
def persistence_errors(action: str):
    """Turn driver failures into PersistenceError, logging the original cause."""
    try:
        yield
    except PyMongoError as e:
        logger.exception(f"Failed to {action}: {e}")
        raise PersistenceError(f"Failed to {action}") from e
