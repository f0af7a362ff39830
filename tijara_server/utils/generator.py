from bson import ObjectId


def new_id() -> str:
    """Return a new opaque document id.

    ObjectId hex strings grow with creation order inside one process, which
    lets queries break timestamp ties on `_id`.
    """
    return str(ObjectId())
