"""SQLAlchemy models package; import all models so Base.metadata is populated."""

from esg_api.models.base import BaseModel, ModelMixin, TimestampedModel
from esg_api.models.core import User
from esg_api.models.esg import ESGResponse

__all__ = [
    "BaseModel",
    "ESGResponse",
    "ModelMixin",
    "TimestampedModel",
    "User",
]
