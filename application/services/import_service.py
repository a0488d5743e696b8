import logging
import os
import sqlite3
import zipfile
from dataclasses import dataclass, fields

import pandas as pd

from domain.models import Equipment
from infrastructure.persistence.repository import SQLiteRepository

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = {'.csv'}
EXCEL_EXTENSIONS = {'.xlsx'}

# Columnas del alta de equipos que se leen del archivo
EQUIPMENT_COLUMNS = [f.name for f in fields(Equipment)
                     if f.name not in ('id_equipo', 'fecha_creacion', 'fecha_modificacion')]

class UnsupportedFormatError(Exception):
    pass

class UnreadableFileError(Exception):
    """El archivo tiene una extensión admitida pero su contenido no se puede leer."""

@dataclass
class ImportResult:
    insertados: int = 0
    fallidos: int = 0


def read_table(stream, filename: str) -> pd.DataFrame:
    extension = os.path.splitext(filename or '')[1].lower()
    if extension not in CSV_EXTENSIONS | EXCEL_EXTENSIONS:
        raise UnsupportedFormatError(extension)
    try:
        if extension in CSV_EXTENSIONS:
            df = pd.read_csv(stream, dtype=str)
        else:
            df = pd.read_excel(stream, dtype=str, engine='openpyxl')
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError,
            ValueError, zipfile.BadZipFile) as e:
        raise UnreadableFileError(str(e)) from e
    df.columns = [str(c).strip() for c in df.columns]
    return df


def equipment_rows(df: pd.DataFrame):
    columnas = [c for c in EQUIPMENT_COLUMNS if c in df.columns]
    limpio = df[columnas].astype(object).where(pd.notna(df[columnas]), None)
    for registro in limpio.to_dict(orient='records'):
        valores = {k: (v.strip() if isinstance(v, str) else v) for k, v in registro.items()}
        valores.setdefault('id_ubicacion', None)
        yield valores


class EquipmentImportService:
    def __init__(self, repository: SQLiteRepository):
        self.repository = repository

    def importar(self, stream, filename: str) -> ImportResult:
        df = read_table(stream, filename)
        resultado = ImportResult()
        for fila, valores in enumerate(equipment_rows(df), start=1):
            try:
                if valores['id_ubicacion'] is not None:
                    valores['id_ubicacion'] = int(float(valores['id_ubicacion']))
                equipo = Equipment(**valores)
                self.repository.create_equipment(equipo)
                resultado.insertados += 1
            except (sqlite3.Error, ValueError, OverflowError) as e:
                resultado.fallidos += 1
                logger.warning("Fila %s de '%s' no importada: %s", fila, filename, e)
        logger.info("Importación '%s': %s insertados, %s fallidos",
                    filename, resultado.insertados, resultado.fallidos)
        return resultado
