# database.py
from databases import Database
from fastapi import Request
from sqlalchemy import MetaData, create_engine

metadata = MetaData()


def create_database(database_url: str) -> Database:
    """Build the async database handle. Connecting is left to the app lifespan."""
    return Database(database_url)


def create_tables(database_url: str):
    # Tables are created through a short-lived sync engine
    engine = create_engine(database_url)
    try:
        metadata.create_all(bind=engine)
    finally:
        engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database
