from enum import Enum

from pydantic import BaseModel


class UserRole(str, Enum):
    admin = "Admin"
    manager = "Manager"  # can manage dragons and breeding operations
    user = "User"  # view dragons and traits


class UserModel(BaseModel):
    """This class is used to create a user model for basic authentication."""
    username: str
    hash_password: str
    salt: str
    role: UserRole

    class Config:
        from_attributes = True
