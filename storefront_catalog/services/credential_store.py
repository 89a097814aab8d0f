import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from storefront_catalog.exceptions import ValidationError
from storefront_catalog.models.database import SessionLocal, Store, create_tables
from storefront_catalog.utils.helpers import normalize_shop

logger = logging.getLogger(__name__)


class CredentialStore:
    """Persistent mapping of shop domain to Admin API access token"""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal
        if session_factory is None:
            # Ensure tables exist
            create_tables()

    def get_session(self) -> Session:
        """Get database session"""
        return self.session_factory()

    def register(self, shop: Optional[str], access_token: Optional[str]) -> Store:
        """
        Insert or update the access token for a shop

        Args:
            shop: Shop domain, with or without scheme and trailing slash
            access_token: Admin API access token

        Returns:
            Store: The stored record, detached from its session

        Raises:
            ValidationError: If shop or token is empty after trimming
        """
        shop = normalize_shop(shop)
        access_token = (access_token or "").strip()

        if not shop or not access_token:
            raise ValidationError("Shop domain and access token are required")

        db = self.get_session()
        try:
            store = db.query(Store).filter(Store.shop == shop).first()
            if store is None:
                store = Store(shop=shop)
                db.add(store)

            store.access_token = access_token
            store.installed_at = datetime.utcnow()

            db.commit()
            db.refresh(store)
            db.expunge(store)
            logger.info(f"Saved credentials for store {shop}")

            return store

        except Exception as e:
            db.rollback()
            logger.error(f"Error saving store {shop}: {e}")
            raise
        finally:
            db.close()

    def resolve(self, shop: Optional[str]) -> Optional[str]:
        """Return the access token for a shop, or None if it is not registered"""
        shop = normalize_shop(shop)
        if not shop:
            return None

        db = self.get_session()
        try:
            store = db.query(Store).filter(Store.shop == shop).first()
            if not store or not store.access_token:
                return None
            return store.access_token

        except Exception as e:
            logger.error(f"Error resolving credentials for {shop}: {e}")
            raise
        finally:
            db.close()

    def list(self) -> List[Tuple[str, datetime]]:
        """List registered shops in registration order, without their tokens"""
        db = self.get_session()
        try:
            rows = db.query(Store.shop, Store.installed_at).order_by(Store.installed_at, Store.id).all()
            return [(row.shop, row.installed_at) for row in rows]

        except Exception as e:
            logger.error(f"Error listing stores: {e}")
            raise
        finally:
            db.close()
