import hashlib
import logging
import secrets
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from dragon_farm.models.basic_authentication_shemas import UserTable, Base
from dragon_farm.models.basic_authentication_models import UserModel, UserRole
from dragon_farm.load_secrets import pepper_data


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((password + salt + pepper_data).encode()).hexdigest()


class CreateAuthentication:

    @staticmethod
    async def create_table(engine: AsyncEngine) -> None:
        """Create table if not exists"""
        try:
            async with engine.begin() as conn:
                # テーブル作成 (既存テーブルがある場合はスキップされる)
                await conn.run_sync(Base.metadata.create_all)
        except IntegrityError as e:
            logging.warning(f"Table already exists or other integrity error: {e}")

    @staticmethod
    async def create_user_data(username: str, password: str, role: UserRole, session: AsyncSession) -> UserModel:
        """Create user data to authenticate the user

        Args:
            username (str): Login name
            password (str): Plain password; only the salted and peppered hash is stored
            role (UserRole): Admin, Manager or User
        """
        salt = secrets.token_hex(8)
        user = UserModel(
            username=username,
            hash_password=hash_password(password, salt),
            salt=salt,
            role=role,
        )
        try:
            async with session.begin():
                session.add(
                    UserTable(
                        username=user.username,
                        hash_password=user.hash_password,
                        salt=user.salt,
                        role=user.role.value,
                    )
                )
        except SQLAlchemyError as e:
            logging.error(f"Error creating user data: {e}")
            raise
        return user


class ReadAuthentication:
    @staticmethod
    async def read_user_data(username: str, session: AsyncSession) -> UserModel | None:
        """Read user data to get salt, password hash and role

        Args:
            username (str): username of the user

        Returns:
            UserModel: username, password hash, salt and role. None if the user does not exist
        """
        try:
            stmt = select(UserTable).where(UserTable.username == username)
            result = await session.execute(stmt)
            result = result.scalars().first()
        except SQLAlchemyError as e:
            logging.error(f"Error reading user data: {e}")
            raise

        if result is None:
            logging.warning(f"User not found: {username}")
            return None
        return UserModel.model_validate(result)
