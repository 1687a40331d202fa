import logging
import random
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from faker import Faker
from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import Column, DateTime, Integer, String, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from datatable_adapter import (
    DataAccessError,
    DataTableAdapter,
    DataTableFactory,
    DataTablesRequest,
    DataTablesResponse,
    Operator,
    load_column_map,
    render_table,
)


class Settings(BaseSettings):
    """Demo app settings, read from DATATABLES_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="DATATABLES_", env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./users.db"
    echo_sql: bool = False
    log_level: str = "INFO"


settings = Settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# ----------------------
# Database setup
# ----------------------
engine = create_async_engine(settings.database_url, echo=settings.echo_sql)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with async_session() as session:
        yield session


# ----------------------
# Models
# ----------------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    deleted_at = Column(DateTime, nullable=True)


class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    created_at: datetime
    deleted_at: Optional[datetime] = None


# Validated once at import; a broken entry stops the app from starting.
USER_COLUMNS = load_column_map(
    {
        "name": {
            "operator": Operator.LIKE_LOOSE,
            "model_column": User.first_name + " " + User.last_name,
        },
        "first_name": {"operator": Operator.LIKE_LOOSE, "model_column": "users.first_name"},
        "last_name": {"operator": Operator.LIKE_LOOSE, "model_column": "users.last_name"},
        "email": {"model_column": "users.email"},
        "created_at": {"model_column": User.created_at},
    }
)

ACTIVE_USERS = [{"column": "users.deleted_at", "operator": Operator.IS_NULL}]

# ----------------------
# FastAPI app
# ----------------------
app = FastAPI()
faker = Faker()


@app.on_event("startup")
async def on_startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.exception_handler(DataAccessError)
async def data_access_error_handler(request: Request, exc: DataAccessError):
    logger.exception("Table query failed for %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"draw": 0, "recordsTotal": 0, "recordsFiltered": 0, "data": [], "error": str(exc)},
    )


# ----------------------
# Insert random users
# ----------------------
@app.get("/insert_users")
async def insert_users(count: int = 1000, db: AsyncSession = Depends(get_db)):
    now = datetime.now()
    users = [
        User(
            first_name=faker.first_name(),
            last_name=faker.last_name(),
            email=faker.unique.email(),
            created_at=now - timedelta(days=random.randint(0, 365)),
            deleted_at=now if random.random() < 0.1 else None,
        )
        for _ in range(count)
    ]
    db.add_all(users)
    await db.commit()
    return {"message": f"{count} random users inserted successfully!"}


# ----------------------
# Table endpoints
# ----------------------
@app.post("/users", response_model=DataTablesResponse[list[UserSchema]])
async def list_users(datatable_request: DataTablesRequest, db: AsyncSession = Depends(get_db)):
    datatable = await DataTableAdapter.create(db, select(User), datatable_request, USER_COLUMNS, ACTIVE_USERS)
    return await datatable.render()


@app.get("/users", response_model=DataTablesResponse[list[UserSchema]])
async def list_users_query(request: Request, db: AsyncSession = Depends(get_db)):
    datatable_request = DataTablesRequest.from_query_params(request.query_params)
    datatable = await DataTableAdapter.create(db, select(User), datatable_request, USER_COLUMNS, ACTIVE_USERS)
    return await datatable.render()


@app.get("/users/table", response_class=HTMLResponse)
async def users_table():
    table = DataTableFactory("Users")
    table.set_html_id("users-table")
    table.set_ajax_url(app.url_path_for("list_users_query"))
    table.set_table_header(["Name", "Email", "Created"])
    return render_table(table)
