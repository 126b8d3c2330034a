from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from storefront.constants.order_status import UserType


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    password: str  # salted hash, never serialised
    user_type: str = Field(default=UserType.customer.value)
    address: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.admin.value

    def public_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "user_type": self.user_type,
            "address": self.address,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
