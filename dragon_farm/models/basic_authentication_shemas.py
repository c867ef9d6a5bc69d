from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column
from sqlalchemy.types import String


class Base(DeclarativeBase):
    pass


class UserTable(Base):
    __tablename__ = "users"
    username = Column(String, primary_key=True, index=True)
    hash_password = Column(String)
    salt = Column(String)
    role = Column(String, nullable=False, default="User")
