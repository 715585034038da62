# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import datetime
import logging
import pathlib
import typing
import uuid

import msgspec
from dateutil.tz import tzlocal
from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    MetaData,
    Table,
    UniqueConstraint,
    event,
    func,
    or_,
    select,
)
from sqlalchemy.dialects.sqlite import DATETIME, insert
from sqlalchemy.engine import URL as EngineURL
from sqlalchemy.engine import Connection, Engine, create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import column, literal_column, text
from sqlalchemy.types import Float, Integer, String, TypeDecorator, UnicodeText, Uuid

from .commontypes import KeyfolioError, PresetNotFoundError
from .keymap.bindings import KeyBinding
from .keymap.fingers import FingerAssignmentMap
from .keymap.keycodes import normalize
from .keymap.remaps import KeyRemap, PendingTarget
from .profile.doctypes import (
    ChangeType,
    CustomKey,
    DeviceConfig,
    HistoryEntry,
    HotbarSlot,
    ItemLayout,
    Preset,
    SearchCraft,
)
from .util import chunked, now

logger = logging.getLogger(__name__)

DEFAULT_MAX_STATEMENTS_PER_BATCH = 50

# ids are random, so sqlite's implicit rowid is what remembers insertion order
INSERTION_ORDER = literal_column("rowid")


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class AwareDateTime(TypeDecorator):
    """
    A DateTime type which can only store tz-aware DateTimes
    """

    impl = DATETIME
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if isinstance(value, datetime.datetime):
            if value.tzinfo is None:
                raise ValueError("{!r} must be TZ-aware".format(value))
            else:
                value = value.astimezone(datetime.timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if isinstance(value, datetime.datetime):
            value = value.replace(tzinfo=datetime.timezone.utc).astimezone(tzlocal())
        return value

    def __repr__(self):
        return "AwareDateTime()"


class JsonValue(TypeDecorator):
    """
    Any JSON-encodable value; comes back as plain lists, dicts and scalars.
    """

    impl = UnicodeText
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return msgspec.json.encode(value).decode("utf-8")

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return msgspec.json.decode(value)

    def __repr__(self):
        return "JsonValue()"


metadata = MetaData()


def _timestamps():
    return (
        Column("created_at", AwareDateTime, nullable=False),
        Column("updated_at", AwareDateTime, nullable=False),
    )


keybinding_table = Table(
    "keybindings",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("action", String, nullable=False),
    Column("key_code", String, nullable=False),
    Column("category", String, nullable=False, index=True),
    *_timestamps(),
    UniqueConstraint("user_id", "action"),
)

device_config_table = Table(
    "device_configs",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, unique=True),
    Column("keyboard_layout", String, nullable=True),
    Column("keyboard_model", String, nullable=True),
    Column("mouse_dpi", Integer, nullable=True),
    Column("game_sensitivity", Float, nullable=True),
    Column("windows_speed", Integer, nullable=True),
    Column("windows_speed_multiplier", Float, nullable=True),
    Column("mouse_acceleration", Boolean, nullable=True),
    Column("raw_input", Boolean, nullable=True),
    Column("cm360", Float, nullable=True),
    Column("mouse_model", String, nullable=True),
    Column("toggle_sprint", Boolean, nullable=True),
    Column("toggle_sneak", Boolean, nullable=True),
    Column("auto_jump", Boolean, nullable=True),
    Column("game_language", String, nullable=True),
    Column("fov", Integer, nullable=True),
    Column("gui_scale", Integer, nullable=True),
    Column("input_mode", String, nullable=False),
    Column("notes", UnicodeText, nullable=True),
    Column("finger_assignments", UnicodeText, nullable=True),
    *_timestamps(),
)

remap_table = Table(
    "key_remaps",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("source_key", String, nullable=False),
    Column("target_key", String, nullable=True),
    Column("software", String, nullable=True),
    Column("notes", UnicodeText, nullable=True),
    *_timestamps(),
    UniqueConstraint("user_id", "source_key"),
)

custom_key_table = Table(
    "custom_keys",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("key_code", String, nullable=False),
    Column("key_name", String, nullable=False),
    Column("category", String, nullable=False),
    Column("notes", UnicodeText, nullable=True),
    *_timestamps(),
    UniqueConstraint("user_id", "key_code"),
)

item_layout_table = Table(
    "item_layouts",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("segment", String, nullable=False),
    Column("slots", JsonValue, nullable=False),
    Column("offhand", JsonValue, nullable=True),
    Column("notes", UnicodeText, nullable=True),
    Column("display_order", Integer, nullable=False, default=0),
    *_timestamps(),
    UniqueConstraint("user_id", "segment"),
)

search_craft_table = Table(
    "search_crafts",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("sequence", Integer, nullable=False),
    Column("items", JsonValue, nullable=False),
    Column("keys", JsonValue, nullable=False),
    Column("search_str", String, nullable=True),
    Column("comment", UnicodeText, nullable=True),
    *_timestamps(),
    UniqueConstraint("user_id", "sequence"),
)

preset_table = Table(
    "config_presets",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("description", UnicodeText, nullable=True),
    Column("is_active", Boolean, nullable=False, default=False, index=True),
    Column("keybindings_data", UnicodeText, nullable=True),
    Column("device_config_data", UnicodeText, nullable=True),
    Column("remaps_data", UnicodeText, nullable=True),
    Column("finger_assignments_data", UnicodeText, nullable=True),
    Column("item_layouts_data", UnicodeText, nullable=True),
    Column("search_crafts_data", UnicodeText, nullable=True),
    *_timestamps(),
)

history_table = Table(
    "config_history",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("change_type", String, nullable=False, index=True),
    Column("change_description", UnicodeText, nullable=False),
    Column("previous_data", UnicodeText, nullable=True),
    Column("new_data", UnicodeText, nullable=True),
    Column("preset_id", ForeignKey("config_presets.id", ondelete="SET NULL"), nullable=True),
    Column("created_at", AwareDateTime, nullable=False, index=True),
)

DB_VERSION = 1


class DbVersionError(KeyfolioError):
    pass


def check_version(conn: Connection, path: pathlib.Path, expected_version: int):
    found_version = conn.scalar(text("PRAGMA user_version").columns(column("version", Integer)))
    if found_version != expected_version:
        raise DbVersionError(f"Expected DB version {expected_version} in {path}, but found {found_version}.")


def set_version(conn: Connection, version: int):
    # looks like pragma does not support bindparams, hence the f-string
    conn.execute(text(f"PRAGMA user_version = {version}"))


def make_db(sqlite_path: pathlib.Path, max_statements_per_batch: int = DEFAULT_MAX_STATEMENTS_PER_BATCH):
    exists = sqlite_path.is_file()
    sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    engine_url = EngineURL.create(drivername="sqlite", database=sqlite_path.__fspath__())
    engine = create_engine(engine_url)
    with engine.begin() as conn:
        if exists:
            check_version(conn, sqlite_path, DB_VERSION)
        else:
            metadata.create_all(conn)
            set_version(conn, DB_VERSION)
    return KeyfolioDb(engine, max_statements_per_batch=max_statements_per_batch)


def make_memory_db(max_statements_per_batch: int = DEFAULT_MAX_STATEMENTS_PER_BATCH):
    # every connection must see the same in-memory database
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    with engine.begin() as conn:
        metadata.create_all(conn)
        set_version(conn, DB_VERSION)
    return KeyfolioDb(engine, max_statements_per_batch=max_statements_per_batch)


def _binding_from_row(row) -> KeyBinding:
    return KeyBinding.from_wire(row.action, row.key_code, row.category, id=row.id)


def _remap_from_row(row) -> KeyRemap:
    return KeyRemap.from_wire(row.source_key, row.target_key, software=row.software, notes=row.notes, id=row.id)


DEVICE_CONFIG_FIELDS = tuple(DeviceConfig.__struct_fields__)


class KeyfolioDb:
    def __init__(self, engine: Engine, max_statements_per_batch: int = DEFAULT_MAX_STATEMENTS_PER_BATCH):
        self.engine = engine
        self.max_statements_per_batch = max_statements_per_batch

    def insert_chunked(self, conn: Connection, table: Table, rows: typing.Sequence[dict]) -> int:
        """Insert rows a batch at a time; no single statement carries more than
        max_statements_per_batch rows.
        """
        batches = 0
        for batch in chunked(rows, self.max_statements_per_batch):
            conn.execute(table.insert(), batch)
            batches += 1
        logger.debug("Inserted %d rows into %s in %d batches", len(rows), table.name, batches)
        return len(rows)

    def _replace_user_rows(self, conn: Connection, table: Table, user_id: str, rows: list[dict]) -> int:
        conn.execute(table.delete().where(table.c.user_id == user_id))
        timestamp = now()
        for row in rows:
            row.update(id=uuid.uuid4(), user_id=user_id, created_at=timestamp, updated_at=timestamp)
        return self.insert_chunked(conn, table, rows)

    # keybindings

    def load_bindings(self, user_id: str) -> list[KeyBinding]:
        s = select(keybinding_table).where(keybinding_table.c.user_id == user_id).order_by(keybinding_table.c.created_at.asc(), INSERTION_ORDER)
        with self.engine.begin() as conn:
            return [_binding_from_row(row) for row in conn.execute(s)]

    def _upsert_bindings(self, conn: Connection, user_id: str, bindings: typing.Iterable[KeyBinding]):
        timestamp = now()
        rows = [
            dict(
                id=uuid.uuid4(),
                user_id=user_id,
                action=b.action,
                key_code=b.key_code,
                category=b.category.value,
                created_at=timestamp,
                updated_at=timestamp,
            )
            for b in bindings
        ]
        if not rows:
            return
        stmt = insert(keybinding_table)
        on_update = stmt.on_conflict_do_update(
            index_elements=["user_id", "action"],
            set_=dict(key_code=stmt.excluded.key_code, category=stmt.excluded.category, updated_at=stmt.excluded.updated_at),
        )
        for batch in chunked(rows, self.max_statements_per_batch):
            conn.execute(on_update, batch)

    def save_bindings(self, user_id: str, bindings: typing.Iterable[KeyBinding]):
        "Upsert by action; actions not mentioned are left alone."
        with self.engine.begin() as conn:
            self._upsert_bindings(conn, user_id, bindings)

    def replace_bindings(self, user_id: str, bindings: typing.Iterable[KeyBinding]) -> int:
        rows = [dict(action=b.action, key_code=b.key_code, category=b.category.value) for b in bindings]
        with self.engine.begin() as conn:
            return self._replace_user_rows(conn, keybinding_table, user_id, rows)

    # device config and finger assignments

    def load_device_config(self, user_id: str) -> typing.Optional[DeviceConfig]:
        s = select(device_config_table).where(device_config_table.c.user_id == user_id)
        with self.engine.begin() as conn:
            row = conn.execute(s).one_or_none()
        if row is None:
            return None
        mapping = row._mapping
        return DeviceConfig(**{name: mapping[name] for name in DEVICE_CONFIG_FIELDS})

    def _write_device_config(self, conn: Connection, user_id: str, values: dict):
        # a brand new row starts from the defaults; an existing row only gets values' columns
        timestamp = now()
        stmt = insert(device_config_table).values(
            id=uuid.uuid4(),
            user_id=user_id,
            created_at=timestamp,
            updated_at=timestamp,
            **(DeviceConfig().to_db_dict() | values),
        )
        set_ = {name: getattr(stmt.excluded, name) for name in values}
        set_["updated_at"] = stmt.excluded.updated_at
        conn.execute(stmt.on_conflict_do_update(index_elements=["user_id"], set_=set_))

    def save_device_config(self, user_id: str, config: DeviceConfig):
        with self.engine.begin() as conn:
            self._write_device_config(conn, user_id, config.to_db_dict())

    def update_device_config(self, user_id: str, values: dict):
        "Set only the given columns, creating the row from defaults if the user has none."
        unknown = set(values) - set(DEVICE_CONFIG_FIELDS)
        if unknown:
            raise ValueError(f"Not device config fields: {sorted(unknown)}")
        with self.engine.begin() as conn:
            self._write_device_config(conn, user_id, dict(values))

    def load_finger_assignments(self, user_id: str) -> FingerAssignmentMap:
        s = select(device_config_table.c.finger_assignments).where(device_config_table.c.user_id == user_id)
        with self.engine.begin() as conn:
            return FingerAssignmentMap.from_json(conn.scalar(s))

    def save_finger_assignments(self, user_id: str, fingers: FingerAssignmentMap):
        with self.engine.begin() as conn:
            self._write_device_config(conn, user_id, {"finger_assignments": fingers.to_json() if fingers else None})

    # remaps

    def load_remaps(self, user_id: str) -> list[KeyRemap]:
        s = select(remap_table).where(remap_table.c.user_id == user_id).order_by(remap_table.c.created_at.asc(), INSERTION_ORDER)
        with self.engine.begin() as conn:
            return [_remap_from_row(row) for row in conn.execute(s)]

    def replace_remaps(self, user_id: str, remaps: typing.Iterable[KeyRemap]) -> int:
        rows = [_remap_values(r) for r in remaps if not isinstance(r.target, PendingTarget)]
        with self.engine.begin() as conn:
            return self._replace_user_rows(conn, remap_table, user_id, rows)

    def _upsert_remap(self, conn: Connection, user_id: str, remap: KeyRemap) -> uuid.UUID:
        normalized = normalize(remap.source_key)
        candidates = conn.execute(
            select(remap_table.c.id, remap_table.c.source_key).where(
                remap_table.c.user_id == user_id,
                or_(
                    remap_table.c.source_key == normalized,
                    func.upper(remap_table.c.source_key) == remap.source_key.upper(),
                ),
            )
        ).all()
        timestamp = now()
        values = _remap_values(remap) | {"source_key": normalized, "updated_at": timestamp}
        if not candidates:
            remap_id = uuid.uuid4()
            conn.execute(remap_table.insert().values(id=remap_id, user_id=user_id, created_at=timestamp, **values))
            return remap_id

        # a row already spelled the canonical way wins over legacy spellings
        candidates.sort(key=lambda c: c.source_key != normalized)
        keep, *duplicates = candidates
        if duplicates:
            logger.warning("Collapsing %d duplicate remaps for %s", len(duplicates), normalized)
            conn.execute(remap_table.delete().where(remap_table.c.id.in_([d.id for d in duplicates])))
        conn.execute(remap_table.update().where(remap_table.c.id == keep.id).values(**values))
        return keep.id

    def upsert_remap(self, user_id: str, remap: KeyRemap) -> uuid.UUID:
        with self.engine.begin() as conn:
            return self._upsert_remap(conn, user_id, remap)

    def save_edits(
        self,
        user_id: str,
        bindings: typing.Iterable[KeyBinding] = (),
        deleted_remap_ids: typing.Iterable[uuid.UUID] = (),
        remaps: typing.Iterable[KeyRemap] = (),
        fingers: typing.Optional[FingerAssignmentMap] = None,
    ):
        "Commit one editing session in a single transaction. Remap deletes go before remap upserts."
        deleted_remap_ids = list(deleted_remap_ids)
        with self.engine.begin() as conn:
            self._upsert_bindings(conn, user_id, bindings)
            if deleted_remap_ids:
                conn.execute(remap_table.delete().where(remap_table.c.user_id == user_id, remap_table.c.id.in_(deleted_remap_ids)))
            for remap in remaps:
                self._upsert_remap(conn, user_id, remap)
            if fingers is not None:
                self._write_device_config(conn, user_id, {"finger_assignments": fingers.to_json() if fingers else None})

    def delete_remap(self, user_id: str, remap_id: uuid.UUID):
        with self.engine.begin() as conn:
            conn.execute(remap_table.delete().where(remap_table.c.user_id == user_id, remap_table.c.id == remap_id))

    # custom keys, item layouts and search crafts

    def load_custom_keys(self, user_id: str) -> list[CustomKey]:
        s = select(custom_key_table).where(custom_key_table.c.user_id == user_id).order_by(custom_key_table.c.created_at.asc(), INSERTION_ORDER)
        with self.engine.begin() as conn:
            return [
                CustomKey(key_code=row.key_code, key_name=row.key_name, category=row.category, notes=row.notes, id=row.id)
                for row in conn.execute(s)
            ]

    def replace_custom_keys(self, user_id: str, custom_keys: typing.Iterable[CustomKey]) -> int:
        rows = [dict(key_code=k.key_code, key_name=k.key_name, category=k.category, notes=k.notes) for k in custom_keys]
        with self.engine.begin() as conn:
            return self._replace_user_rows(conn, custom_key_table, user_id, rows)

    def load_item_layouts(self, user_id: str) -> list[ItemLayout]:
        s = (
            select(item_layout_table)
            .where(item_layout_table.c.user_id == user_id)
            .order_by(item_layout_table.c.display_order.asc(), INSERTION_ORDER)
        )
        with self.engine.begin() as conn:
            return [
                ItemLayout(
                    segment=row.segment,
                    slots=msgspec.convert(row.slots, list[HotbarSlot]),
                    offhand=row.offhand or [],
                    notes=row.notes,
                    display_order=row.display_order,
                )
                for row in conn.execute(s)
            ]

    def replace_item_layouts(self, user_id: str, layouts: typing.Iterable[ItemLayout]) -> int:
        rows = [msgspec.structs.asdict(layout) for layout in layouts]
        with self.engine.begin() as conn:
            return self._replace_user_rows(conn, item_layout_table, user_id, rows)

    def load_search_crafts(self, user_id: str) -> list[SearchCraft]:
        s = select(search_craft_table).where(search_craft_table.c.user_id == user_id).order_by(search_craft_table.c.sequence.asc())
        with self.engine.begin() as conn:
            return [
                SearchCraft(sequence=row.sequence, items=row.items, keys=row._mapping["keys"], search_str=row.search_str, comment=row.comment)
                for row in conn.execute(s)
            ]

    def replace_search_crafts(self, user_id: str, crafts: typing.Iterable[SearchCraft]) -> int:
        rows = [msgspec.structs.asdict(craft) for craft in crafts]
        with self.engine.begin() as conn:
            return self._replace_user_rows(conn, search_craft_table, user_id, rows)

    # presets and history

    def _deactivate_presets(self, conn: Connection, user_id: str, except_id: typing.Optional[uuid.UUID] = None):
        stmt = preset_table.update().where(preset_table.c.user_id == user_id, preset_table.c.is_active.is_(True))
        if except_id is not None:
            stmt = stmt.where(preset_table.c.id != except_id)
        conn.execute(stmt.values(is_active=False))

    def _add_history(self, conn: Connection, history: HistoryEntry):
        conn.execute(history_table.insert().values(**_history_values(history)))

    def insert_preset(self, preset: Preset, history: HistoryEntry):
        "Store a new preset and its history entry together, deactivating others if it is active."
        with self.engine.begin() as conn:
            if preset.is_active:
                self._deactivate_presets(conn, preset.user_id)
            conn.execute(preset_table.insert().values(**preset.to_db_dict()))
            self._add_history(conn, history)
        logger.debug("Created preset %s for %s (active=%s)", preset.id, preset.user_id, preset.is_active)

    def load_preset(self, user_id: str, preset_id: uuid.UUID) -> Preset:
        s = select(preset_table).where(preset_table.c.user_id == user_id, preset_table.c.id == preset_id)
        with self.engine.begin() as conn:
            row = conn.execute(s).one_or_none()
        if row is None:
            raise PresetNotFoundError(preset_id)
        return Preset(**row._mapping)

    def list_presets(self, user_id: str) -> list[Preset]:
        s = (
            select(preset_table)
            .where(preset_table.c.user_id == user_id)
            .order_by(preset_table.c.is_active.desc(), preset_table.c.updated_at.desc(), preset_table.c.id.desc())
        )
        with self.engine.begin() as conn:
            return [Preset(**row._mapping) for row in conn.execute(s)]

    def active_preset(self, user_id: str) -> typing.Optional[Preset]:
        s = select(preset_table).where(preset_table.c.user_id == user_id, preset_table.c.is_active.is_(True))
        with self.engine.begin() as conn:
            row = conn.execute(s).first()
        return None if row is None else Preset(**row._mapping)

    def apply_snapshot(
        self,
        user_id: str,
        preset_id: uuid.UUID,
        history: HistoryEntry,
        bindings: typing.Optional[list[KeyBinding]] = None,
        device_config: typing.Optional[DeviceConfig] = None,
        fingers_json: typing.Optional[str] = None,
        remaps: typing.Optional[list[KeyRemap]] = None,
        item_layouts: typing.Optional[list[ItemLayout]] = None,
        search_crafts: typing.Optional[list[SearchCraft]] = None,
    ):
        """Write a preset's contents over the live rows and make it the active preset.

        Collections passed as None are left untouched. Everything happens in one
        transaction.
        """
        with self.engine.begin() as conn:
            if bindings is not None:
                self._upsert_bindings(conn, user_id, bindings)
            if device_config is not None:
                self._write_device_config(conn, user_id, device_config.to_db_dict())
            if fingers_json is not None:
                self._write_device_config(conn, user_id, {"finger_assignments": fingers_json})
            if remaps is not None:
                rows = [_remap_values(r) for r in remaps if not isinstance(r.target, PendingTarget)]
                self._replace_user_rows(conn, remap_table, user_id, rows)
            if item_layouts is not None:
                self._replace_user_rows(conn, item_layout_table, user_id, [msgspec.structs.asdict(i) for i in item_layouts])
            if search_crafts is not None:
                self._replace_user_rows(conn, search_craft_table, user_id, [msgspec.structs.asdict(c) for c in search_crafts])
            self._deactivate_presets(conn, user_id, except_id=preset_id)
            conn.execute(
                preset_table.update()
                .where(preset_table.c.user_id == user_id, preset_table.c.id == preset_id)
                .values(is_active=True, updated_at=now())
            )
            self._add_history(conn, history)
        logger.debug("Activated preset %s for %s", preset_id, user_id)

    def list_history(self, user_id: str, limit: typing.Optional[int] = None) -> list[HistoryEntry]:
        s = select(history_table).where(history_table.c.user_id == user_id).order_by(history_table.c.created_at.desc(), history_table.c.id.desc())
        if limit is not None:
            s = s.limit(limit)
        with self.engine.begin() as conn:
            return [
                HistoryEntry(**(dict(row._mapping) | {"change_type": ChangeType(row.change_type)})) for row in conn.execute(s)
            ]


def _remap_values(remap: KeyRemap) -> dict:
    return dict(source_key=remap.source_key, target_key=remap.target_key, software=remap.software, notes=remap.notes)


def _history_values(history: HistoryEntry) -> dict:
    return history.to_db_dict() | {"change_type": history.change_type.value}
