from typing import Any, Dict, List, Optional


class BaseRepository:
    """Thin CRUD wrapper around one collection of a MongoDatabase.

    Every method takes an optional `session`; it is only forwarded to the
    driver when set so the same calls work with and without transactions.
    """
    collection_name: str = None

    def __init__(self, database):
        self.database = database

    @property
    def collection(self):
        return self.database.get_collection(self.collection_name)

    @staticmethod
    def _session_kwargs(session) -> Dict[str, Any]:
        return {'session': session} if session is not None else {}

    def create(self, data: Dict[str, Any], session=None) -> str:
        """Insert a new document into the collection."""
        result = self.collection.insert_one(data, **self._session_kwargs(session))
        return str(result.inserted_id)

    def find(self, query=None, sort=None, skip: int = 0, limit: int = 0, session=None) -> List[Dict[str, Any]]:
        """Find multiple documents matching the query."""
        cursor = self.collection.find(query or {}, **self._session_kwargs(session))
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def find_one(self, query: Dict[str, Any], sort=None, session=None) -> Optional[Dict[str, Any]]:
        """Find a single document matching the query."""
        kwargs = self._session_kwargs(session)
        if sort:
            kwargs['sort'] = sort
        return self.collection.find_one(query, **kwargs)

    def update(self, query: Dict[str, Any], update_fields: Dict[str, Any], multi: bool = False, session=None) -> int:
        """$set the given fields; returns the number of modified documents."""
        kwargs = self._session_kwargs(session)
        if multi:
            result = self.collection.update_many(query, {'$set': update_fields}, **kwargs)
        else:
            result = self.collection.update_one(query, {'$set': update_fields}, **kwargs)
        return result.modified_count

    def delete(self, query: Dict[str, Any], multi: bool = False, session=None) -> int:
        """Delete matching documents; returns the number deleted."""
        kwargs = self._session_kwargs(session)
        if multi:
            return self.collection.delete_many(query, **kwargs).deleted_count
        return self.collection.delete_one(query, **kwargs).deleted_count

    def count(self, query: Dict[str, Any], session=None) -> int:
        return self.collection.count_documents(query, **self._session_kwargs(session))
