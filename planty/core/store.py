import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, delete, select

from planty.core.exceptions import EmailInUse, StorageError
from planty.models.growth_log import GrowthLogCreate, GrowthLogRecord
from planty.models.plant import PlantCreate, PlantRecord, PlantUpdate
from planty.models.plant_image import PlantImageCreate, PlantImageRecord
from planty.models.tables.api_key import ApiKey
from planty.models.tables.growth_log import GrowthLog
from planty.models.tables.ids import utc_now
from planty.models.tables.plant import Plant
from planty.models.tables.plant_image import PlantImage
from planty.models.tables.user import User
from planty.models.tables.watering_event import WateringEvent
from planty.models.user_info import ApiKeyInfo
from planty.models.watering import WateringRecord

logger = logging.getLogger(__name__)


class PlantStore:
    """
    Persists users, api keys and plant data.

    Every plant related operation takes the owning user id first and only
    ever touches rows owned by that user. A plant owned by somebody else is
    reported exactly like a plant that does not exist (None / False).
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def init_db(self) -> None:
        try:
            SQLModel.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.error(f"could not create tables: {e}")
            raise StorageError(str(e)) from e

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"storage failure: {e}")
            raise StorageError(str(e)) from e

    # users

    def create_user(self, email: str | None = None, existing_ok: bool = True) -> str:
        """
        Insert a user and return its id.

        When the email is already taken the existing user's id is returned,
        or :class:`EmailInUse` is raised if ``existing_ok`` is False. Callers
        acting for an unauthenticated party must pass ``existing_ok=False``.
        """
        with self._session() as session:
            user = User(email=email)
            session.add(user)
            try:
                session.commit()
                return user.id
            except IntegrityError:
                session.rollback()
                if email is None:
                    raise
                if not existing_ok:
                    raise EmailInUse(email)

            # a concurrent insert already created this email
            existing = session.exec(select(User).where(User.email == email)).first()
            if existing is None:
                raise StorageError(f"could not create user for {email}")
            return existing.id

    def get_user(self, user_id: str) -> User | None:
        with self._session() as session:
            return session.get(User, user_id)

    def add_email(self, user_id: str, email: str) -> bool:
        with self._session() as session:
            user = session.get(User, user_id)
            if user is None or user.email is not None:
                return False

            user.email = email
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return False
            return True

    # api keys

    def add_api_key(self, user_id: str, key_hash: str, key_prefix: str) -> ApiKey:
        with self._session() as session:
            api_key = ApiKey(user_id=user_id, key_hash=key_hash, key_prefix=key_prefix)
            session.add(api_key)
            session.commit()
            session.refresh(api_key)
            return api_key

    def list_api_keys(self, user_id: str) -> list[ApiKeyInfo]:
        with self._session() as session:
            statement = (select(ApiKey)
                         .where(ApiKey.user_id == user_id)
                         .order_by(ApiKey.created_at.desc())
                         )
            return [ApiKeyInfo.model_validate(key) for key in session.exec(statement)]

    def find_user_by_key_hash(self, key_hash: str) -> User | None:
        with self._session() as session:
            statement = (select(User)
                         .join(ApiKey, onclause=(ApiKey.user_id == User.id))
                         .where(ApiKey.key_hash == key_hash)
                         .where(ApiKey.is_active == True)  # noqa: E712
                         )
            return session.exec(statement).first()

    def touch_api_key(self, key_hash: str) -> None:
        with self._session() as session:
            api_key = session.exec(select(ApiKey).where(ApiKey.key_hash == key_hash)).first()
            if api_key is None:
                return
            api_key.last_used_at = utc_now()
            session.add(api_key)
            session.commit()

    def deactivate_api_key(self, key_hash: str) -> bool:
        with self._session() as session:
            api_key = session.exec(select(ApiKey).where(ApiKey.key_hash == key_hash)).first()
            if api_key is None:
                return False
            if api_key.is_active:
                api_key.is_active = False
                session.add(api_key)
                session.commit()
            return True

    # plants

    @staticmethod
    def _owned_plant(session: Session, user_id: str, plant_id: str) -> Plant | None:
        statement = select(Plant).where(Plant.id == plant_id, Plant.user_id == user_id)
        return session.exec(statement).first()

    def add_plant(self, user_id: str, plant_in: PlantCreate) -> PlantRecord:
        with self._session() as session:
            now = utc_now()
            plant = Plant(
                user_id=user_id,
                name=plant_in.name,
                species=plant_in.species,
                location=plant_in.location,
                acquired_date=plant_in.acquired_date,
                watering_frequency=plant_in.watering_frequency,
                notes=plant_in.notes,
                created_at=now,
                updated_at=now,
            )
            session.add(plant)
            session.commit()
            session.refresh(plant)
            return PlantRecord.model_validate(plant)

    def get_plant(self, user_id: str, plant_id: str) -> PlantRecord | None:
        with self._session() as session:
            plant = self._owned_plant(session, user_id, plant_id)
            return PlantRecord.model_validate(plant) if plant is not None else None

    def list_plants(
            self,
            user_id: str,
            location: str | None = None,
            species: str | None = None,
    ) -> list[PlantRecord]:
        statement = select(Plant).where(Plant.user_id == user_id)
        if location is not None:
            statement = statement.where(Plant.location == location)
        if species is not None:
            statement = statement.where(Plant.species == species)
        statement = statement.order_by(Plant.name.asc())

        with self._session() as session:
            return [PlantRecord.model_validate(plant) for plant in session.exec(statement)]

    def update_plant(self, user_id: str, plant_id: str, update: PlantUpdate) -> PlantRecord | None:
        with self._session() as session:
            plant = self._owned_plant(session, user_id, plant_id)
            if plant is None:
                return None

            changes = update.changes()
            if not changes:
                return PlantRecord.model_validate(plant)

            for column, value in changes.items():
                setattr(plant, column, value)
            plant.updated_at = utc_now()

            session.add(plant)
            session.commit()
            session.refresh(plant)
            return PlantRecord.model_validate(plant)

    def delete_plant(self, user_id: str, plant_id: str) -> bool:
        with self._session() as session:
            # watering events, growth logs and images cascade in the database
            statement = delete(Plant).where(Plant.id == plant_id, Plant.user_id == user_id)
            result = session.exec(statement)
            session.commit()
            return result.rowcount > 0

    # watering

    @staticmethod
    def _mark_watered(plant: Plant, watered_date: date, now: datetime) -> None:
        plant.last_watered = watered_date
        plant.updated_at = now

    def water_plant(
            self,
            user_id: str,
            plant_id: str,
            watered_date: date,
            notes: str | None = None,
    ) -> WateringRecord | None:
        with self._session() as session:
            plant = self._owned_plant(session, user_id, plant_id)
            if plant is None:
                return None

            now = utc_now()
            event = WateringEvent(
                user_id=user_id,
                plant_id=plant.id,
                watered_date=watered_date,
                notes=notes or None,
                created_at=now,
            )
            session.add(event)
            session.flush()

            # same transaction as the event insert, a failure here rolls both back
            self._mark_watered(plant, watered_date, now)
            session.add(plant)

            session.commit()
            session.refresh(event)
            return WateringRecord.model_validate(event)

    def get_watering_history(self, user_id: str, plant_id: str) -> list[WateringRecord] | None:
        with self._session() as session:
            if self._owned_plant(session, user_id, plant_id) is None:
                return None

            statement = (select(WateringEvent)
                         .where(WateringEvent.plant_id == plant_id)
                         .order_by(WateringEvent.watered_date.desc(), WateringEvent.created_at.desc())
                         )
            return [WateringRecord.model_validate(event) for event in session.exec(statement)]

    # growth logs

    def add_growth_log(self, user_id: str, log_in: GrowthLogCreate) -> GrowthLogRecord | None:
        with self._session() as session:
            if self._owned_plant(session, user_id, log_in.plant_id) is None:
                return None

            log = GrowthLog(
                user_id=user_id,
                plant_id=log_in.plant_id,
                log_date=log_in.log_date,
                measure_type=log_in.measure_type,
                measure_unit=log_in.measure_unit,
                value=log_in.value,
                notes=log_in.notes or None,
            )
            session.add(log)
            session.commit()
            session.refresh(log)
            return GrowthLogRecord.model_validate(log)

    def get_growth_logs(self, user_id: str, plant_id: str) -> list[GrowthLogRecord] | None:
        with self._session() as session:
            if self._owned_plant(session, user_id, plant_id) is None:
                return None

            statement = (select(GrowthLog)
                         .where(GrowthLog.plant_id == plant_id)
                         .order_by(GrowthLog.log_date.desc(), GrowthLog.created_at.desc())
                         )
            return [GrowthLogRecord.model_validate(log) for log in session.exec(statement)]

    # images

    def add_plant_image(self, user_id: str, image_in: PlantImageCreate) -> PlantImageRecord | None:
        with self._session() as session:
            if self._owned_plant(session, user_id, image_in.plant_id) is None:
                return None

            image = PlantImage(
                user_id=user_id,
                plant_id=image_in.plant_id,
                filename=image_in.filename,
                caption=image_in.caption or None,
                taken_at=image_in.taken_at,
            )
            session.add(image)
            session.commit()
            session.refresh(image)
            return PlantImageRecord.model_validate(image)

    def get_plant_image(self, user_id: str, image_id: str) -> PlantImageRecord | None:
        with self._session() as session:
            statement = select(PlantImage).where(PlantImage.id == image_id, PlantImage.user_id == user_id)
            image = session.exec(statement).first()
            return PlantImageRecord.model_validate(image) if image is not None else None

    def get_plant_images(self, user_id: str, plant_id: str) -> list[PlantImageRecord] | None:
        with self._session() as session:
            if self._owned_plant(session, user_id, plant_id) is None:
                return None

            statement = (select(PlantImage)
                         .where(PlantImage.plant_id == plant_id)
                         .order_by(PlantImage.taken_at.desc(), PlantImage.created_at.desc())
                         )
            return [PlantImageRecord.model_validate(image) for image in session.exec(statement)]
