from dataclasses import dataclass, fields
from typing import Iterable, List

from domain.models import Predicate

def texto(form, name):
    valor = (form.get(name) or '').strip()
    return valor or None

def entero(form, name):
    return form.get(name, type=int)

def campos_texto(form, names: Iterable[str]) -> dict:
    return {name: texto(form, name) for name in names}

def columnas_de(cls, excluir=()) -> List[str]:
    """Nombres de columnas editables de una entidad del dominio."""
    auditoria = {'fecha_creacion', 'fecha_modificacion'}
    return [f.name for f in fields(cls)
            if f.name not in auditoria and not f.metadata.get('pk') and f.name not in excluir]


@dataclass(frozen=True)
class FilterField:
    """Parámetro de la URL que se convierte en un predicado del listado."""
    param: str
    column: str
    operator: str = '='
    suffix: str = ''

def build_predicates(args, campos: Iterable[FilterField]) -> List[Predicate]:
    predicates = []
    for campo in campos:
        valor = (args.get(campo.param) or '').strip()
        if valor and valor != 'Todos':
            predicates.append(Predicate(campo.column, campo.operator, valor + campo.suffix))
    return predicates
