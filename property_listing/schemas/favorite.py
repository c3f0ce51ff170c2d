from datetime import datetime
from uuid import UUID

from .common import CamelModel


class FavoriteRead(CamelModel):
    id: UUID
    user_id: UUID
    property_id: UUID
    created_at: datetime
