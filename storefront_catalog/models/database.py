from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from datetime import datetime

from ..config import settings


def build_engine(database_url: str, echo: bool = False):
    """Create an engine, keeping SQLite usable for local runs and tests"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300
    )


# Create engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


class Store(Base):
    """Registered storefronts and their Admin API access tokens"""
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    shop = Column(String(255), nullable=False, unique=True, index=True)
    access_token = Column(Text, nullable=False)
    installed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Store(id={self.id}, shop='{self.shop}', installed_at={self.installed_at})>"


def create_tables(bind=None):
    """Create all database tables"""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind=None):
    """Drop all database tables (use with caution)"""
    Base.metadata.drop_all(bind=bind or engine)
