from .sqlalchemy_record_store import SqlAlchemyRecordStore

__all__ = ["SqlAlchemyRecordStore"]
