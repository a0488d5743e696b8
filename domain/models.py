from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Optional

class UserRole(Enum):
    ADMIN = "admin"
    TECNICO = "tecnico"
    USUARIO = "usuario"

class IncidentStatus(Enum):
    ABIERTA = "abierta"
    EN_PROGRESO = "en progreso"
    CERRADA = "cerrada"
    CANCELADA = "cancelada"

class MaintenanceStatus(Enum):
    PENDIENTE = "pendiente"
    COMPLETADO = "completado"
    CANCELADO = "cancelado"

class AssetKind(Enum):
    """Tipo de activo al que se asocian incidencias y mantenimientos."""
    EQUIPO = "id_equipo"
    HARDWARE = "id_hardware"

    @property
    def column(self) -> str:
        return self.value


# Estado de la incidencia que resulta de guardar un mantenimiento
INCIDENT_STATUS_BY_MAINTENANCE = {
    MaintenanceStatus.COMPLETADO: IncidentStatus.CERRADA,
    MaintenanceStatus.PENDIENTE: IncidentStatus.EN_PROGRESO,
    MaintenanceStatus.CANCELADO: IncidentStatus.CANCELADA,
}

def derive_incident_status(estado: Optional[str]) -> IncidentStatus:
    """Traduce el estado de un mantenimiento al de sus incidencias.

    Cualquier valor desconocido o vacío deja la incidencia 'abierta'.
    """
    try:
        maintenance_status = MaintenanceStatus((estado or "").strip())
    except ValueError:
        return IncidentStatus.ABIERTA
    return INCIDENT_STATUS_BY_MAINTENANCE.get(maintenance_status, IncidentStatus.ABIERTA)


@dataclass(frozen=True)
class Predicate:
    """Condición de filtrado (columna, operador, valor) para los listados."""
    column: str
    operator: str
    value: Any


def editable_values(entity) -> dict:
    """Columnas editables de una entidad (todo salvo la clave y las fechas de auditoría)."""
    skip = {'fecha_creacion', 'fecha_modificacion', 'fecha_ultimo_acceso'}
    return {
        f.name: getattr(entity, f.name)
        for f in fields(entity)
        if f.name not in skip and not f.metadata.get('pk')
    }


@dataclass
class User:
    username: str
    email: str
    password: str
    rol: UserRole = UserRole.USUARIO
    activo: bool = True
    id: Optional[int] = field(default=None, metadata={'pk': True})
    fecha_creacion: Optional[datetime] = None
    fecha_ultimo_acceso: Optional[datetime] = None

    def to_session(self) -> dict:
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'rol': self.rol.value,
        }

@dataclass
class Location:
    nombre_ubicacion: str
    departamento_responsable: Optional[str] = None
    id_ubicacion: Optional[int] = field(default=None, metadata={'pk': True})

@dataclass
class Equipment:
    id_ubicacion: int
    tipo: Optional[str] = None
    marca: Optional[str] = None
    modelo: Optional[str] = None
    sistema_operativo: Optional[str] = None
    placa_base: Optional[str] = None
    procesador: Optional[str] = None
    memoria_ram: Optional[str] = None
    disco_duro: Optional[str] = None
    tarjeta_grafica: Optional[str] = None
    sistema_refrigeracion: Optional[str] = None
    unidad_optica: Optional[str] = None
    tarjeta_sonido: Optional[str] = None
    tarjeta_red: Optional[str] = None
    teclado: Optional[str] = None
    raton: Optional[str] = None
    monitor: Optional[str] = None
    altavoces: Optional[str] = None
    cables_conectores: Optional[str] = None
    estado: Optional[str] = None
    id_equipo: Optional[int] = field(default=None, metadata={'pk': True})
    fecha_creacion: Optional[datetime] = None
    fecha_modificacion: Optional[datetime] = None

@dataclass
class Hardware:
    id_ubicacion: int
    tipo_componente: Optional[str] = None
    marca: Optional[str] = None
    modelo: Optional[str] = None
    especificaciones: Optional[str] = None
    estado: Optional[str] = None
    id_hardware: Optional[int] = field(default=None, metadata={'pk': True})
    fecha_creacion: Optional[datetime] = None
    fecha_modificacion: Optional[datetime] = None

@dataclass
class Software:
    nombre: str
    version: Optional[str] = None
    fecha_vencimiento: Optional[str] = None
    detalles_licencia: Optional[str] = None
    id_software: Optional[int] = field(default=None, metadata={'pk': True})
    fecha_creacion: Optional[datetime] = None
    fecha_modificacion: Optional[datetime] = None

@dataclass
class Incident:
    descripcion_incidencia: str
    id_usuario: int
    id_ubicacion: int
    fecha_reporte: Optional[str] = None
    estado: str = IncidentStatus.ABIERTA.value
    prioridad: Optional[str] = None
    id_equipo: Optional[int] = None
    id_hardware: Optional[int] = None
    id_incidencia: Optional[int] = field(default=None, metadata={'pk': True})
    fecha_creacion: Optional[datetime] = None
    fecha_modificacion: Optional[datetime] = None

    @property
    def asset_kind(self) -> AssetKind:
        return AssetKind.EQUIPO if self.id_equipo is not None else AssetKind.HARDWARE

    @property
    def asset_id(self) -> Optional[int]:
        return self.id_equipo if self.id_equipo is not None else self.id_hardware

@dataclass
class Maintenance:
    tipo: str
    id_usuario: int
    id_ubicacion: int
    descripcion_mantenimiento: Optional[str] = None
    fecha_mantenimiento: Optional[str] = None
    estado: Optional[str] = None
    id_equipo: Optional[int] = None
    id_hardware: Optional[int] = None
    id_mantenimiento: Optional[int] = field(default=None, metadata={'pk': True})
    fecha_creacion: Optional[datetime] = None
    fecha_modificacion: Optional[datetime] = None

    @property
    def asset_kind(self) -> AssetKind:
        return AssetKind.EQUIPO if self.id_equipo is not None else AssetKind.HARDWARE

    @property
    def asset_id(self) -> Optional[int]:
        return self.id_equipo if self.id_equipo is not None else self.id_hardware
