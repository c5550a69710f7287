"""
Food catalog model.
Foods are read by the nutrition engine; rows are only written to cache an
external lookup or to keep a custom food the user asked to save.
"""

from sqlalchemy import Column, Text, TIMESTAMP, Float, Boolean, Uuid, UniqueConstraint
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


NUTRIENT_FIELDS = (
    "calories",
    "protein",
    "carbohydrates",
    "fat",
    "fiber",
    "sugar",
    "sodium",
    "cholesterol",
)


class Food(Base):
    """Catalog entry with nutrient values per reference portion"""

    __tablename__ = "food"

    food_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, index=True)
    brand = Column(Text)
    external_id = Column(Text, index=True)  # FoodData Central fdcId
    serving_size = Column(Float, nullable=False, default=100)
    serving_unit = Column(Text, nullable=False, default="g")

    calories = Column(Float, default=0)
    protein = Column(Float, default=0)
    carbohydrates = Column(Float, default=0)
    fat = Column(Float, default=0)
    fiber = Column(Float)
    sugar = Column(Float)
    sodium = Column(Float)  # mg
    cholesterol = Column(Float)  # mg

    is_custom = Column(Boolean, nullable=False, default=False)
    owner_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("external_id", name="uq_food_external_id"),)

    def __repr__(self):
        return f"<Food(id={self.food_id}, name='{self.name}')>"
