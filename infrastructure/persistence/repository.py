import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import fields
from typing import Dict, Iterable, List, Optional, Tuple

from domain.models import (
    AssetKind, Equipment, Hardware, Incident, IncidentStatus, Location, Maintenance,
    Predicate, Software, User, UserRole, editable_values,
)
from infrastructure.persistence.db_schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

OPERATORS = ('=', 'LIKE', '>=', '<=')

# Columnas filtrables de cada listado: nombre lógico -> expresión SQL
EQUIPMENT_FILTERS = {
    'tipo': 'e.tipo',
    'marca': 'e.marca',
    'sistema_operativo': 'e.sistema_operativo',
    'id_ubicacion': 'e.id_ubicacion',
    'fecha_creacion': 'e.fecha_creacion',
    'fecha_modificacion': 'e.fecha_modificacion',
}
HARDWARE_FILTERS = {
    'tipo_componente': 'h.tipo_componente',
    'marca': 'h.marca',
    'estado': 'h.estado',
    'id_ubicacion': 'h.id_ubicacion',
    'fecha_creacion': 'h.fecha_creacion',
    'fecha_modificacion': 'h.fecha_modificacion',
}
SOFTWARE_FILTERS = {
    'nombre': 'nombre',
    'fecha_vencimiento': 'date(fecha_vencimiento)',
    'fecha_creacion': 'date(fecha_creacion)',
    'fecha_modificacion': 'date(fecha_modificacion)',
}
INCIDENT_FILTERS = {
    'fecha_reporte': 'date(i.fecha_reporte)',
    'estado': 'i.estado',
    'prioridad': 'i.prioridad',
    'id_ubicacion': 'i.id_ubicacion',
    'fecha_creacion': 'date(i.fecha_creacion)',
    'fecha_modificacion': 'date(i.fecha_modificacion)',
}
MAINTENANCE_FILTERS = {
    'estado': 'm.estado',
    'tipo': 'm.tipo',
    'id_ubicacion': 'm.id_ubicacion',
    'fecha_mantenimiento': 'date(m.fecha_mantenimiento)',
}

# Tabla, clave y expresión de nombre visible de cada tipo de activo
_ASSETS = {
    AssetKind.EQUIPO: ('Equipos', 'id_equipo', 'nombre_equipo'),
    AssetKind.HARDWARE: ('Hardware', 'id_hardware', 'nombre_hardware'),
}


def compile_predicates(predicates: Iterable[Predicate], allowed: Dict[str, str]) -> Tuple[str, list]:
    """Convierte los predicados en un fragmento ' AND ...' con sus parámetros."""
    sql = ""
    params = []
    for predicate in predicates:
        column = allowed.get(predicate.column)
        if column is None:
            raise ValueError(f"Columna no filtrable: {predicate.column}")
        if predicate.operator not in OPERATORS:
            raise ValueError(f"Operador no soportado: {predicate.operator}")
        sql += f" AND {column} {predicate.operator} ?"
        params.append(f"%{predicate.value}%" if predicate.operator == 'LIKE' else predicate.value)
    return sql, params


def _build(cls, row):
    if row is None:
        return None
    names = {f.name for f in fields(cls)}
    return cls(**{k: row[k] for k in row.keys() if k in names})


class SQLiteRepository:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def _get_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def init_schema(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    # --- Utilidades ---
    def _fetch_all(self, query: str, params=()) -> List[dict]:
        with self._get_connection() as conn:
            return [dict(row) for row in conn.execute(query, params).fetchall()]

    def _fetch_one(self, query: str, params=()):
        with self._get_connection() as conn:
            return conn.execute(query, params).fetchone()

    def _execute(self, query: str, params=()) -> sqlite3.Cursor:
        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor

    def _insert(self, table: str, values: dict) -> int:
        columns = ", ".join(values.keys())
        placeholders = ", ".join(["?"] * len(values))
        cursor = self._execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", list(values.values()))
        return cursor.lastrowid

    def _update(self, table: str, key: str, key_value: int, values: dict, touch: bool = True) -> bool:
        query = f"UPDATE {table} SET "
        query += ", ".join([f"{k} = ?" for k in values.keys()])
        if touch:
            query += ", fecha_modificacion = CURRENT_TIMESTAMP"
        query += f" WHERE {key} = ?"
        cursor = self._execute(query, list(values.values()) + [key_value])
        return cursor.rowcount > 0

    def _delete(self, table: str, column: str, value) -> int:
        cursor = self._execute(f"DELETE FROM {table} WHERE {column} = ?", (value,))
        logger.debug("DELETE %s WHERE %s=%s -> %s filas", table, column, value, cursor.rowcount)
        return cursor.rowcount

    # --- Usuarios ---
    def _user_from_row(self, row) -> Optional[User]:
        if row is None:
            return None
        return User(
            id=row['id'],
            username=row['username'],
            email=row['email'],
            password=row['password'],
            rol=UserRole(row['rol']),
            activo=bool(row['activo']),
            fecha_creacion=row['fecha_creacion'],
            fecha_ultimo_acceso=row['fecha_ultimo_acceso'],
        )

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self._user_from_row(self._fetch_one("SELECT * FROM Usuarios WHERE id = ?", (user_id,)))

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._user_from_row(self._fetch_one("SELECT * FROM Usuarios WHERE email = ?", (email,)))

    def list_users(self) -> List[dict]:
        return self._fetch_all("""
            SELECT id, username, email, rol, activo, fecha_creacion, fecha_ultimo_acceso
            FROM Usuarios ORDER BY username
        """)

    def create_user(self, user: User) -> User:
        user.id = self._insert('Usuarios', {
            'username': user.username,
            'email': user.email,
            'password': user.password,
            'rol': user.rol.value,
            'activo': int(user.activo),
        })
        return user

    def update_user(self, user: User) -> bool:
        return self._update('Usuarios', 'id', user.id, {
            'username': user.username,
            'email': user.email,
            'password': user.password,
            'rol': user.rol.value,
            'activo': int(user.activo),
        }, touch=False)

    def touch_last_access(self, user_id: int) -> None:
        self._execute("UPDATE Usuarios SET fecha_ultimo_acceso = CURRENT_TIMESTAMP WHERE id = ?", (user_id,))

    def delete_user(self, user_id: int) -> bool:
        return self._delete('Usuarios', 'id', user_id) > 0

    # --- Ubicaciones ---
    def list_locations(self) -> List[dict]:
        return self._fetch_all("SELECT * FROM Ubicaciones ORDER BY nombre_ubicacion")

    def get_location(self, location_id: int) -> Optional[Location]:
        return _build(Location, self._fetch_one("SELECT * FROM Ubicaciones WHERE id_ubicacion = ?", (location_id,)))

    def create_location(self, location: Location) -> Location:
        location.id_ubicacion = self._insert('Ubicaciones', editable_values(location))
        return location

    def update_location(self, location: Location) -> bool:
        return self._update('Ubicaciones', 'id_ubicacion', location.id_ubicacion,
                            editable_values(location), touch=False)

    def delete_location(self, location_id: int) -> bool:
        return self._delete('Ubicaciones', 'id_ubicacion', location_id) > 0

    # --- Equipos ---
    def list_equipment(self, predicates: Iterable[Predicate] = ()) -> List[dict]:
        query = """
            SELECT e.*, u.nombre_ubicacion
            FROM Equipos e
            JOIN Ubicaciones u ON e.id_ubicacion = u.id_ubicacion
            WHERE 1=1
        """
        where, params = compile_predicates(predicates, EQUIPMENT_FILTERS)
        query += where + " ORDER BY e.id_equipo"
        return self._fetch_all(query, params)

    def list_equipment_by_location(self, location_id: int) -> List[dict]:
        return self._fetch_all("SELECT * FROM Equipos WHERE id_ubicacion = ? ORDER BY id_equipo", (location_id,))

    def list_equipment_options(self) -> List[dict]:
        return self._fetch_all("SELECT id_equipo, marca, modelo, id_ubicacion FROM Equipos ORDER BY marca, modelo")

    def get_equipment(self, equipment_id: int) -> Optional[Equipment]:
        return _build(Equipment, self._fetch_one("SELECT * FROM Equipos WHERE id_equipo = ?", (equipment_id,)))

    def create_equipment(self, equipment: Equipment) -> Equipment:
        equipment.id_equipo = self._insert('Equipos', editable_values(equipment))
        return equipment

    def update_equipment(self, equipment: Equipment) -> bool:
        return self._update('Equipos', 'id_equipo', equipment.id_equipo, editable_values(equipment))

    def delete_equipment(self, equipment_id: int) -> bool:
        return self._delete('Equipos', 'id_equipo', equipment_id) > 0

    def delete_equipment_by_location(self, location_id: int) -> int:
        return self._delete('Equipos', 'id_ubicacion', location_id)

    # --- Hardware ---
    def list_hardware(self, predicates: Iterable[Predicate] = ()) -> List[dict]:
        query = """
            SELECT h.*, u.nombre_ubicacion
            FROM Hardware h
            JOIN Ubicaciones u ON h.id_ubicacion = u.id_ubicacion
            WHERE 1=1
        """
        where, params = compile_predicates(predicates, HARDWARE_FILTERS)
        query += where + " ORDER BY h.id_hardware"
        return self._fetch_all(query, params)

    def list_hardware_by_location(self, location_id: int) -> List[dict]:
        return self._fetch_all("SELECT * FROM Hardware WHERE id_ubicacion = ? ORDER BY id_hardware", (location_id,))

    def list_hardware_options(self) -> List[dict]:
        return self._fetch_all(
            "SELECT id_hardware, tipo_componente, marca, modelo, id_ubicacion FROM Hardware ORDER BY tipo_componente, marca"
        )

    def get_hardware(self, hardware_id: int) -> Optional[Hardware]:
        return _build(Hardware, self._fetch_one("SELECT * FROM Hardware WHERE id_hardware = ?", (hardware_id,)))

    def create_hardware(self, hardware: Hardware) -> Hardware:
        hardware.id_hardware = self._insert('Hardware', editable_values(hardware))
        return hardware

    def update_hardware(self, hardware: Hardware) -> bool:
        return self._update('Hardware', 'id_hardware', hardware.id_hardware, editable_values(hardware))

    def delete_hardware(self, hardware_id: int) -> bool:
        return self._delete('Hardware', 'id_hardware', hardware_id) > 0

    def delete_hardware_by_location(self, location_id: int) -> int:
        return self._delete('Hardware', 'id_ubicacion', location_id)

    # --- Software ---
    def list_software(self, predicates: Iterable[Predicate] = ()) -> List[dict]:
        where, params = compile_predicates(predicates, SOFTWARE_FILTERS)
        return self._fetch_all("SELECT * FROM Software WHERE 1=1" + where + " ORDER BY nombre", params)

    def get_software(self, software_id: int) -> Optional[Software]:
        return _build(Software, self._fetch_one("SELECT * FROM Software WHERE id_software = ?", (software_id,)))

    def create_software(self, software: Software) -> Software:
        software.id_software = self._insert('Software', editable_values(software))
        return software

    def update_software(self, software: Software) -> bool:
        return self._update('Software', 'id_software', software.id_software, editable_values(software))

    def delete_software(self, software_id: int) -> bool:
        return self._delete('Software', 'id_software', software_id) > 0

    # --- Incidencias ---
    def list_incidents(self, kind: AssetKind, predicates: Iterable[Predicate] = ()) -> List[dict]:
        table, key, label = _ASSETS[kind]
        query = f"""
            SELECT i.*,
                   TRIM(COALESCE(a.marca, '') || ' ' || COALESCE(a.modelo, '')) AS {label},
                   u.username AS nombre_usuario,
                   loc.nombre_ubicacion
            FROM Incidencias i
            JOIN Ubicaciones loc ON i.id_ubicacion = loc.id_ubicacion
            JOIN Usuarios u ON i.id_usuario = u.id
            JOIN {table} a ON i.{key} = a.{key}
            WHERE 1=1
        """
        where, params = compile_predicates(predicates, INCIDENT_FILTERS)
        query += where + " ORDER BY i.fecha_reporte DESC, i.id_incidencia DESC"
        return self._fetch_all(query, params)

    def get_incident(self, incident_id: int) -> Optional[Incident]:
        return _build(Incident, self._fetch_one("SELECT * FROM Incidencias WHERE id_incidencia = ?", (incident_id,)))

    def create_incident(self, incident: Incident) -> Incident:
        incident.id_incidencia = self._insert('Incidencias', editable_values(incident))
        return incident

    def update_incident(self, incident: Incident) -> bool:
        return self._update('Incidencias', 'id_incidencia', incident.id_incidencia, editable_values(incident))

    def set_incident_status_for_asset(self, kind: AssetKind, asset_id: int, estado: IncidentStatus) -> int:
        cursor = self._execute(
            f"UPDATE Incidencias SET estado = ?, fecha_modificacion = CURRENT_TIMESTAMP WHERE {kind.column} = ?",
            (estado.value, asset_id)
        )
        return cursor.rowcount

    def delete_incident(self, incident_id: int) -> bool:
        return self._delete('Incidencias', 'id_incidencia', incident_id) > 0

    def delete_incidents_for_asset(self, kind: AssetKind, asset_id: int) -> int:
        return self._delete('Incidencias', kind.column, asset_id)

    def delete_incidents_by_location(self, location_id: int) -> int:
        return self._delete('Incidencias', 'id_ubicacion', location_id)

    # --- Mantenimiento ---
    def list_maintenance(self, kind: AssetKind, predicates: Iterable[Predicate] = ()) -> List[dict]:
        table, key, label = _ASSETS[kind]
        query = f"""
            SELECT m.*,
                   TRIM(COALESCE(a.marca, '') || ' ' || COALESCE(a.modelo, '')) AS {label},
                   u.username AS nombre_usuario,
                   ubic.nombre_ubicacion,
                   (SELECT GROUP_CONCAT(i.descripcion_incidencia, ' | ')
                      FROM Incidencias i WHERE i.{key} = m.{key}) AS descripcion_incidencia
            FROM Mantenimiento m
            JOIN {table} a ON m.{key} = a.{key}
            JOIN Usuarios u ON m.id_usuario = u.id
            JOIN Ubicaciones ubic ON m.id_ubicacion = ubic.id_ubicacion
            WHERE 1=1
        """
        where, params = compile_predicates(predicates, MAINTENANCE_FILTERS)
        query += where + " ORDER BY m.fecha_mantenimiento DESC, m.id_mantenimiento DESC"
        return self._fetch_all(query, params)

    def get_maintenance(self, maintenance_id: int) -> Optional[Maintenance]:
        return _build(Maintenance, self._fetch_one(
            "SELECT * FROM Mantenimiento WHERE id_mantenimiento = ?", (maintenance_id,)))

    def create_maintenance(self, maintenance: Maintenance) -> Maintenance:
        maintenance.id_mantenimiento = self._insert('Mantenimiento', editable_values(maintenance))
        return maintenance

    def update_maintenance(self, maintenance: Maintenance) -> bool:
        return self._update('Mantenimiento', 'id_mantenimiento', maintenance.id_mantenimiento,
                            editable_values(maintenance))

    def delete_maintenance(self, maintenance_id: int) -> bool:
        return self._delete('Mantenimiento', 'id_mantenimiento', maintenance_id) > 0

    def delete_maintenance_for_asset(self, kind: AssetKind, asset_id: int) -> int:
        return self._delete('Mantenimiento', kind.column, asset_id)

    def delete_maintenance_by_location(self, location_id: int) -> int:
        return self._delete('Mantenimiento', 'id_ubicacion', location_id)

    # --- Panel de inicio ---
    def get_dashboard_kpis(self) -> dict:
        with self._get_connection() as conn:
            return {
                "equipos": conn.execute("SELECT COUNT(*) FROM Equipos").fetchone()[0],
                "hardware": conn.execute("SELECT COUNT(*) FROM Hardware").fetchone()[0],
                "incidencias_abiertas": conn.execute(
                    "SELECT COUNT(*) FROM Incidencias WHERE estado IN (?, ?)",
                    (IncidentStatus.ABIERTA.value, IncidentStatus.EN_PROGRESO.value)).fetchone()[0],
                "mantenimientos_pendientes": conn.execute(
                    "SELECT COUNT(*) FROM Mantenimiento WHERE estado = ?", ("pendiente",)).fetchone()[0],
            }
