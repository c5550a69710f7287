"""
Food Repository - Data access layer for the food catalog
"""

from typing import Optional
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Food


class FoodRepository(BaseRepository[Food]):
    """Repository for food catalog data access"""

    def __init__(self, db: Session):
        super().__init__(db, Food)

    def get_by_external_id(self, external_id: str) -> Optional[Food]:
        """Get a cached provider food by its external identifier"""
        return self.db.query(Food).filter(Food.external_id == str(external_id)).first()
