"""
Contest store backed by SQLAlchemy.

One table, ``gewinnspiele``, keyed by the participation URL
(``link_zur_webseite``). The importer only proposes inserts; rows are
never updated or deleted here.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine, URL, make_url
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.models import ContestStatus
from .errors import StoreConnectionError, StoreWriteError

logger = structlog.get_logger(__name__)

Base = declarative_base()

# 768 chars keeps the unique index within InnoDB's utf8mb4 key limit
MAX_LINK_LENGTH = 768

# Binary collation on MySQL so lookups compare links byte for byte
LinkType = String(MAX_LINK_LENGTH).with_variant(
    String(MAX_LINK_LENGTH, collation="utf8mb4_bin"), "mysql", "mariadb"
)


class Gewinnspiel(Base):
    """A stored contest."""
    __tablename__ = "gewinnspiele"

    id = Column(Integer, primary_key=True, autoincrement=True)
    link_zur_webseite = Column(LinkType, nullable=False, unique=True, index=True)
    description = Column("beschreibung", Text, nullable=True)
    status = Column(String(32), nullable=False, default=ContestStatus.PLANNED.value)
    ends_at = Column("endet_am", DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Gewinnspiel id={self.id} link={self.link_zur_webseite!r}>"


@dataclass
class StoreConfig:
    """Connection parameters for the contest store."""
    host: str = "localhost"
    database: str = "gewinne_final2"
    user: str = "root"
    password: str = ""
    driver: str = "mysql+pymysql"
    url: Optional[str] = None  # Full SQLAlchemy URL, overrides the parts above

    def to_url(self) -> URL:
        """Build the SQLAlchemy URL."""
        if self.url:
            return make_url(self.url)
        query = {"charset": "utf8mb4"} if self.driver.startswith("mysql") else {}
        return URL.create(
            self.driver,
            username=self.user or None,
            password=self.password or None,
            host=self.host or None,
            database=self.database or None,
            query=query,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "StoreConfig":
        """Create from dictionary (e.g., from YAML)."""
        return cls(
            host=str(data.get("host") or "localhost"),
            database=str(data.get("database") or "gewinne_final2"),
            user=str(data.get("user", "root") or ""),
            password=str(data.get("password") or ""),
            driver=data.get("driver") or "mysql+pymysql",
            url=data.get("url") or None,
        )


class ContestStore:
    """
    Check-then-insert store for contests.

    Usage:
        store = ContestStore.from_config(StoreConfig(...))
        store.connect()
        if not store.exists_by_link(url):
            store.insert(url, description="...", ends_at=None)
    """

    def __init__(self, engine: Engine):
        """
        Initialize store.

        Args:
            engine: SQLAlchemy engine
        """
        self.engine = engine
        self._session_factory = sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_config(cls, config: StoreConfig) -> "ContestStore":
        """Create a store from connection parameters."""
        return cls(create_engine(config.to_url(), pool_pre_ping=True))

    @classmethod
    def from_url(cls, url: str) -> "ContestStore":
        """Create a store from a SQLAlchemy URL string."""
        return cls(create_engine(make_url(url), pool_pre_ping=True))

    def connect(self) -> None:
        """
        Verify the store is reachable.

        Raises:
            StoreConnectionError: If no connection can be opened
        """
        try:
            with self.engine.connect():
                pass
        except SQLAlchemyError as e:
            url = self.engine.url.render_as_string(hide_password=True)
            raise StoreConnectionError(f"Cannot connect to store {url}: {e}") from e

        logger.info("store_connected", dialect=self.engine.dialect.name)

    def create_schema(self) -> None:
        """Create the contest table (with unique link constraint) if missing."""
        Base.metadata.create_all(self.engine)
        logger.info("store_schema_ready", table=Gewinnspiel.__tablename__)

    def _session(self) -> Session:
        return self._session_factory()

    def _link_matches(self, link: str):
        column = Gewinnspiel.link_zur_webseite
        if self.engine.dialect.name in ("mysql", "mariadb"):
            # Tables created elsewhere may use a case-insensitive collation
            return column == func.binary(link)
        return column == link

    def exists_by_link(self, link: str) -> bool:
        """Check for a contest with exactly this participation URL."""
        stmt = (
            select(Gewinnspiel.id)
            .where(self._link_matches(link))
            .limit(1)
        )
        with self._session() as session:
            return session.execute(stmt).first() is not None

    def insert(
        self,
        link: str,
        description: Optional[str] = None,
        ends_at: Optional[datetime] = None,
        status: ContestStatus = ContestStatus.PLANNED,
    ) -> bool:
        """
        Insert a new contest.

        Args:
            link: Participation URL
            description: Contest title
            ends_at: Naive local deadline
            status: Initial status

        Returns:
            True if inserted, False if a row with this link already
            existed (unique constraint violation)

        Raises:
            StoreWriteError: If the link does not fit the column or the
                             database rejects the values
        """
        if len(link) > MAX_LINK_LENGTH:
            raise StoreWriteError(
                f"Link longer than {MAX_LINK_LENGTH} characters ({len(link)}): {link[:80]}..."
            )

        record = Gewinnspiel(
            link_zur_webseite=link,
            description=description,
            status=status.value,
            ends_at=ends_at,
        )
        with self._session() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.info("insert_conflict", link=link, error=str(e.orig))
                return False
            except DataError as e:
                session.rollback()
                raise StoreWriteError(f"Store rejected {link}: {e.orig}") from e

        logger.debug("contest_inserted", link=link)
        return True

    def get_by_link(self, link: str) -> Optional[Gewinnspiel]:
        """Load the contest stored for a participation URL."""
        stmt = select(Gewinnspiel).where(self._link_matches(link))
        with self._session() as session:
            return session.execute(stmt).scalars().first()

    def count(self) -> int:
        """Number of stored contests."""
        with self._session() as session:
            return session.scalar(select(func.count()).select_from(Gewinnspiel))
