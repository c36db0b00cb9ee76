"""Database storage and models"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Type

from sqlalchemy import create_engine, Column, String, Text, Float, DateTime, JSON
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, scoped_session, Session

from matchday.data.models import Dossier, RecentMatches, UnavailablePlayers, WeatherData
from matchday.data.variants import SportVariant
from matchday.utils.config import config
from matchday.utils.errors import StorageError
from matchday.utils.logging import get_logger

logger = get_logger("data.storage")

Base = declarative_base()

# Native text[] on PostgreSQL, JSON everywhere else
StringList = JSON().with_variant(postgresql.ARRAY(Text), "postgresql")


class DossierColumnsMixin:
    """Columns shared by every sport's dossier table"""
    id = Column(String(255), primary_key=True)  # match key
    match_input = Column(String(255), nullable=False)
    home_team = Column(String(255), nullable=False)
    away_team = Column(String(255), nullable=False)
    venue = Column(Text, nullable=False, default="")
    recent_matches_home = Column(StringList, nullable=False)
    recent_matches_away = Column(StringList, nullable=False)
    recent_matches_between = Column(StringList, nullable=False)
    weather_temperature = Column(Float, nullable=False)
    weather_condition = Column(Text, nullable=False)
    weather_humidity = Column(Float, nullable=False)
    weather_wind_speed = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now)


class FootballDossierModel(DossierColumnsMixin, Base):
    """Football dossier database model"""
    __tablename__ = 'match_data'

    unavailable_players_home = Column(StringList, nullable=True)
    unavailable_players_away = Column(StringList, nullable=True)


class BasketballDossierModel(DossierColumnsMixin, Base):
    """Basketball dossier database model"""
    __tablename__ = 'basketball_data'


DOSSIER_MODELS: Dict[str, Type[Any]] = {
    'football': FootballDossierModel,
    'basketball': BasketballDossierModel,
}


class Database:
    """Database interface"""

    def __init__(self, database_url: Optional[str] = None):
        """Initialize database connection"""
        self.database_url = database_url or config.get_database_url()
        try:
            self._ensure_sqlite_directory()
            self.engine = create_engine(self.database_url, echo=False)
            Base.metadata.create_all(self.engine)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Failed to open database: {e}") from e
        self.SessionLocal = scoped_session(sessionmaker(bind=self.engine))

    def _ensure_sqlite_directory(self):
        """Create the parent directory of a file-backed SQLite database"""
        prefix = 'sqlite:///'
        if self.database_url.startswith(prefix) and ':memory:' not in self.database_url:
            db_path = Path(self.database_url[len(prefix):])
            db_path.parent.mkdir(parents=True, exist_ok=True)

    def get_session(self) -> Session:
        """Get database session"""
        return self.SessionLocal()

    def close(self):
        """Close database connection"""
        self.SessionLocal.remove()


class RecordStore:
    """Permanent dossier cache for one sport, keyed by match key.

    Entries never expire. A second write under the same key replaces every
    non-key column in a single INSERT ... ON CONFLICT statement, so concurrent
    writers resolve to last-write-wins inside the database.
    """

    def __init__(self, db: Database, variant: SportVariant):
        self.db = db
        self.variant = variant
        self.model = DOSSIER_MODELS[variant.key]

    def get(self, match_key: str) -> Optional[Dossier]:
        """Return the stored dossier, or None on a miss"""
        session = self.db.get_session()
        try:
            row = session.get(self.model, match_key)
            if row is None:
                logger.debug(f"No stored {self.variant.key} dossier for {match_key}")
                return None
            return self._to_dossier(row)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read dossier {match_key}: {e}") from e
        finally:
            session.close()

    def upsert(self, dossier: Dossier) -> None:
        """Insert the dossier or overwrite the existing row under its key"""
        values = self._to_row(dossier)
        session = self.db.get_session()
        try:
            session.execute(self._upsert_statement(values))
            session.commit()
            logger.info(f"Saved {self.variant.key} dossier {dossier.match_key}")
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to save dossier {dossier.match_key}: {e}") from e
        finally:
            session.close()

    def delete(self, match_key: str) -> bool:
        """Purge a stored dossier. Returns True if a row was removed."""
        session = self.db.get_session()
        try:
            deleted = session.query(self.model).filter_by(id=match_key).delete()
            session.commit()
            return deleted > 0
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to delete dossier {match_key}: {e}") from e
        finally:
            session.close()

    def _upsert_statement(self, values: Dict[str, Any]):
        table = self.model.__table__
        dialect = self.db.engine.dialect.name
        update_columns = [name for name in values if name not in ('id', 'created_at')]

        if dialect in ('postgresql', 'sqlite'):
            insert = postgresql.insert if dialect == 'postgresql' else sqlite.insert
            stmt = insert(table).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[table.c.id],
                set_={name: stmt.excluded[name] for name in update_columns},
            )
        if dialect in ('mysql', 'mariadb'):
            stmt = mysql.insert(table).values(**values)
            return stmt.on_duplicate_key_update(
                {name: stmt.inserted[name] for name in update_columns}
            )
        raise StorageError(f"Upsert is not supported on the '{dialect}' dialect")

    def _to_row(self, dossier: Dossier) -> Dict[str, Any]:
        now = datetime.now()
        row = {
            'id': dossier.match_key,
            'match_input': dossier.match_key,
            'home_team': dossier.home_team,
            'away_team': dossier.away_team,
            'venue': dossier.venue,
            'recent_matches_home': list(dossier.recent_matches.home),
            'recent_matches_away': list(dossier.recent_matches.away),
            'recent_matches_between': list(dossier.recent_matches.between),
            'weather_temperature': dossier.weather.temperature,
            'weather_condition': dossier.weather.condition,
            'weather_humidity': dossier.weather.humidity,
            'weather_wind_speed': dossier.weather.wind_speed,
            'created_at': now,
            'updated_at': now,
        }
        if self.variant.roster_aware:
            players = dossier.unavailable_players or UnavailablePlayers()
            row['unavailable_players_home'] = list(players.home)
            row['unavailable_players_away'] = list(players.away)
        return row

    def _to_dossier(self, row: Any) -> Dossier:
        unavailable = None
        if self.variant.roster_aware:
            unavailable = UnavailablePlayers(
                home=list(row.unavailable_players_home or []),
                away=list(row.unavailable_players_away or []),
            )
        return Dossier(
            match_key=row.id,
            home_team=row.home_team,
            away_team=row.away_team,
            venue=row.venue or "",
            recent_matches=RecentMatches(
                home=list(row.recent_matches_home or []),
                away=list(row.recent_matches_away or []),
                between=list(row.recent_matches_between or []),
            ),
            weather=WeatherData(
                temperature=row.weather_temperature,
                condition=row.weather_condition,
                humidity=row.weather_humidity,
                wind_speed=row.weather_wind_speed,
            ),
            unavailable_players=unavailable,
        )
