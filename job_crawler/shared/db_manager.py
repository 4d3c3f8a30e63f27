from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base

# Base class for models
Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///jobs.db"


def create_db_engine(database_url: str = DEFAULT_DATABASE_URL) -> Engine:
    """
    创建数据库引擎
    SQLite 文件库会自动创建父目录；其他数据库开启 pool_pre_ping 防止连接超时
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(database_url)
    return create_engine(database_url, pool_recycle=3600, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    """Initialize database tables"""
    import job_crawler.crawl.infrastructure.database.models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def create_session(database_url: str = DEFAULT_DATABASE_URL):
    """
    创建表并返回 scoped session

    返回:
        (engine, session) 元组
    """
    engine = create_db_engine(database_url)
    init_db(engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, scoped_session(session_factory)
