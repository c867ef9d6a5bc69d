import argparse
from fastapi import Depends, status, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession
import secrets
import asyncio
import logging
from typing import Iterable

from dragon_farm.models.basic_authentication_models import UserModel, UserRole
from dragon_farm.authentication.basic_authentication_crud import (
    CreateAuthentication,
    ReadAuthentication,
    hash_password,
)
from dragon_farm.create_sqlite_engine import engine

Session = async_sessionmaker(autocommit=False, class_=AsyncSession, bind=engine)
security = HTTPBasic()
create_auth = CreateAuthentication()
read_auth = ReadAuthentication()


class BasicAuthentication:
    def __init__(self):
        pass

    async def check_user_data(
        self, credentials: HTTPBasicCredentials = Depends(security)
    ) -> UserModel:
        """Check if the user data is valid.

        Args:
            credentials (HTTPBasicCredentials, optional): Username and password. Defaults to Depends(security).

        Raises:
            HTTPException: The user data is not found in the database
            HTTPException: The password is incorrect

        Returns:
            UserModel: The authenticated user with its role
        """
        async with Session() as session:
            user_data: UserModel = await read_auth.read_user_data(credentials.username, session)
        if user_data is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username",
                headers={"WWW-Authenticate": "Basic"},
            )

        hashed_password = hash_password(credentials.password, user_data.salt)
        if not secrets.compare_digest(hashed_password, user_data.hash_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid password",
                headers={"WWW-Authenticate": "Basic"},
            )
        return user_data

    async def create_table(self) -> None:
        await create_auth.create_table(engine)

    async def store_user_data(self, user_name: str, password: str, role: UserRole) -> UserModel:
        async with Session() as session:
            return await create_auth.create_user_data(user_name, password, role, session)


basic_auth = BasicAuthentication()


class RoleChecker:
    """Capability check for a route: the authenticated user must hold one of the roles."""

    def __init__(self, roles: Iterable[UserRole]):
        self.roles = frozenset(roles)

    async def __call__(self, user_data: UserModel = Depends(basic_auth.check_user_data)) -> UserModel:
        if user_data.role not in self.roles:
            logging.warning(f"User {user_data.username} ({user_data.role.value}) lacks a required role")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return user_data


any_role = RoleChecker([UserRole.admin, UserRole.manager, UserRole.user])
keeper_role = RoleChecker([UserRole.admin, UserRole.manager])


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Basic Authentication")
    parser.add_argument("--username", type=str, help="Username", required=True)
    parser.add_argument("--password", type=str, help="Password", required=True)
    parser.add_argument(
        "--role",
        type=UserRole,
        choices=list(UserRole),
        default=UserRole.user,
        help="Role of the user",
    )
    return parser


async def main(user_name: str, password: str, role: UserRole):
    await basic_auth.create_table()
    user_data = await basic_auth.store_user_data(user_name, password, role)
    print(user_data.username, user_data.role.value)


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.username, args.password, args.role))
