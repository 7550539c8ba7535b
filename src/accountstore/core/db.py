from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pymongo.errors import DuplicateKeyError, PyMongoError

from accountstore.errors import AccountStoreError, OperationRejectedError

logger = structlog.get_logger(__name__)


class MongoModel(BaseModel):
    id: ObjectId | None = Field(alias="_id", serialization_alias="id", default=None)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage.

        An unset id is left out so that the server assigns one on insert.
        """
        data = self.model_dump()
        object_id = data.pop("id", None)
        if object_id is not None:
            data["_id"] = object_id
        return data


def translate_write_error(exc: PyMongoError, duplicate_error: AccountStoreError | None = None) -> AccountStoreError:
    """Map a driver write failure to the matching account store error.

    Duplicate key violations become `duplicate_error` when one is given,
    everything else becomes OperationRejectedError.
    """
    if duplicate_error is not None and isinstance(exc, DuplicateKeyError):
        return duplicate_error
    logger.warning("store_write_rejected", error_type=type(exc).__name__, code=getattr(exc, "code", None))
    return OperationRejectedError()


@contextmanager
def guarded_write(duplicate_error: AccountStoreError | None = None) -> Iterator[None]:
    """Run a store write, re-raising driver errors as account store errors."""
    try:
        yield
    except PyMongoError as e:
        raise translate_write_error(e, duplicate_error) from e
