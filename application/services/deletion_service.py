import logging

from domain.models import AssetKind
from infrastructure.persistence.repository import SQLiteRepository

logger = logging.getLogger(__name__)

class DeletionService:
    """
    Borrados en cascada orquestados por la aplicación.
    Cada paso se confirma por separado y siempre se borran los hijos antes que
    el padre; si un paso falla, los anteriores quedan aplicados.
    """

    def __init__(self, repository: SQLiteRepository):
        self.repository = repository

    def _eliminar_activo(self, kind: AssetKind, asset_id: int) -> bool:
        incidencias = self.repository.delete_incidents_for_asset(kind, asset_id)
        mantenimientos = self.repository.delete_maintenance_for_asset(kind, asset_id)
        if kind is AssetKind.EQUIPO:
            eliminado = self.repository.delete_equipment(asset_id)
        else:
            eliminado = self.repository.delete_hardware(asset_id)
        logger.info("Eliminado %s=%s (%s incidencias, %s mantenimientos)",
                    kind.column, asset_id, incidencias, mantenimientos)
        return eliminado

    def eliminar_equipo(self, equipo_id: int) -> bool:
        return self._eliminar_activo(AssetKind.EQUIPO, equipo_id)

    def eliminar_hardware(self, hardware_id: int) -> bool:
        return self._eliminar_activo(AssetKind.HARDWARE, hardware_id)

    def eliminar_incidencia(self, incidencia_id: int) -> bool:
        incidencia = self.repository.get_incident(incidencia_id)
        if not incidencia:
            return False
        self.repository.delete_maintenance_for_asset(incidencia.asset_kind, incidencia.asset_id)
        return self.repository.delete_incident(incidencia_id)

    def eliminar_mantenimiento(self, mantenimiento_id: int) -> bool:
        mantenimiento = self.repository.get_maintenance(mantenimiento_id)
        if not mantenimiento:
            return False
        self.repository.delete_incidents_for_asset(mantenimiento.asset_kind, mantenimiento.asset_id)
        return self.repository.delete_maintenance(mantenimiento_id)

    def eliminar_ubicacion(self, ubicacion_id: int) -> bool:
        resumen = {
            'incidencias': self.repository.delete_incidents_by_location(ubicacion_id),
            'mantenimientos': self.repository.delete_maintenance_by_location(ubicacion_id),
        }
        # Registros de otras ubicaciones que apuntan a los activos de esta
        for equipo in self.repository.list_equipment_by_location(ubicacion_id):
            self.repository.delete_incidents_for_asset(AssetKind.EQUIPO, equipo['id_equipo'])
            self.repository.delete_maintenance_for_asset(AssetKind.EQUIPO, equipo['id_equipo'])
        for hardware in self.repository.list_hardware_by_location(ubicacion_id):
            self.repository.delete_incidents_for_asset(AssetKind.HARDWARE, hardware['id_hardware'])
            self.repository.delete_maintenance_for_asset(AssetKind.HARDWARE, hardware['id_hardware'])
        resumen['equipos'] = self.repository.delete_equipment_by_location(ubicacion_id)
        resumen['hardware'] = self.repository.delete_hardware_by_location(ubicacion_id)
        eliminada = self.repository.delete_location(ubicacion_id)
        logger.info("Ubicación %s eliminada=%s %s", ubicacion_id, eliminada, resumen)
        return eliminada
