from sqlalchemy.ext.asyncio import create_async_engine

from dragon_farm.load_secrets import auth_db_path

sqlite_url = f"sqlite+aiosqlite:///{auth_db_path}"


engine = create_async_engine(url=sqlite_url, echo=False)
