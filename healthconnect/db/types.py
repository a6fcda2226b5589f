from sqlalchemy.types import DateTime, TypeDecorator

from healthconnect.core.utils import to_utc

class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.

    Postgres keeps the offset in ``timestamptz``; SQLite drops it, so values
    read back without tzinfo are marked UTC again.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return to_utc(value)

    def process_result_value(self, value, dialect):
        return to_utc(value)
