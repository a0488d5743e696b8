import sqlite3

from flask import Blueprint, flash, redirect, render_template, request, url_for

from application.services.deletion_service import DeletionService
from application.services.maintenance_service import MaintenanceService
from domain.models import AssetKind, Maintenance
from presentation.forms import FilterField, build_predicates, entero, texto
from presentation.security import GESTION, current_user, get_repository, roles_required
from config import ESTADOS_MANTENIMIENTO, TIPOS_MANTENIMIENTO

FILTROS = [
    FilterField('estado', 'estado'),
    FilterField('tipo', 'tipo'),
    FilterField('id_ubicacion', 'id_ubicacion'),
    FilterField('fecha_desde', 'fecha_mantenimiento', '>='),
    FilterField('fecha_hasta', 'fecha_mantenimiento', '<='),
]

ETIQUETAS = {AssetKind.EQUIPO: 'Equipo', AssetKind.HARDWARE: 'Hardware'}


def _desde_formulario(form, kind: AssetKind, mantenimiento_id=None) -> Maintenance:
    id_usuario = entero(form, 'id_usuario')
    if id_usuario is None:
        id_usuario = current_user()['id']
    return Maintenance(
        id_mantenimiento=mantenimiento_id,
        tipo=texto(form, 'tipo'),
        descripcion_mantenimiento=texto(form, 'descripcion_mantenimiento'),
        fecha_mantenimiento=texto(form, 'fecha_mantenimiento'),
        estado=texto(form, 'estado'),
        id_ubicacion=entero(form, 'id_ubicacion'),
        id_usuario=id_usuario,
        **{kind.column: entero(form, kind.column)}
    )


def crear_blueprint(kind: AssetKind) -> Blueprint:
    nombre = 'mantenimiento_equipos' if kind is AssetKind.EQUIPO else 'mantenimiento_hardware'
    bp = Blueprint(nombre, __name__, url_prefix=f'/{nombre}')

    def _formulario(mantenimiento):
        repo = get_repository()
        activos = repo.list_equipment_options() if kind is AssetKind.EQUIPO else repo.list_hardware_options()
        return render_template(
            'mantenimiento/formulario.html', mantenimiento=mantenimiento, blueprint=nombre,
            etiqueta=ETIQUETAS[kind], campo_activo=kind.column, activos=activos,
            usuarios=repo.list_users(), ubicaciones=repo.list_locations(),
            estados=ESTADOS_MANTENIMIENTO, tipos=TIPOS_MANTENIMIENTO,
        )

    def _cargar(mantenimiento_id):
        mantenimiento = get_repository().get_maintenance(mantenimiento_id)
        if mantenimiento is None or mantenimiento.asset_kind is not kind:
            return None
        return mantenimiento

    @bp.route('/alta', methods=['GET', 'POST'])
    @roles_required(*GESTION)
    def alta():
        if request.method == 'POST':
            try:
                MaintenanceService(get_repository()).registrar(_desde_formulario(request.form, kind))
            except sqlite3.IntegrityError:
                flash('Faltan campos obligatorios en el mantenimiento.', 'danger')
                return redirect(url_for(f'{nombre}.alta'))
            flash('Mantenimiento registrado correctamente.', 'success')
            return redirect(url_for(f'{nombre}.listar'))
        return _formulario(None)

    @bp.route('/listar')
    @roles_required(*GESTION)
    def listar():
        repo = get_repository()
        mantenimientos = repo.list_maintenance(kind, build_predicates(request.args, FILTROS))
        return render_template(
            'mantenimiento/listar.html', mantenimientos=mantenimientos, blueprint=nombre,
            etiqueta=ETIQUETAS[kind], ubicaciones=repo.list_locations(), filtros=request.args,
            estados=ESTADOS_MANTENIMIENTO, tipos=TIPOS_MANTENIMIENTO,
        )

    @bp.route('/actualizar/<int:mantenimiento_id>', methods=['GET', 'POST'])
    @roles_required(*GESTION)
    def actualizar(mantenimiento_id):
        repo = get_repository()
        mantenimiento = _cargar(mantenimiento_id)
        if not mantenimiento:
            return 'Mantenimiento no encontrado', 404

        if request.method == 'POST':
            try:
                MaintenanceService(repo).actualizar(_desde_formulario(request.form, kind, mantenimiento_id))
            except sqlite3.IntegrityError:
                flash('Faltan campos obligatorios en el mantenimiento.', 'danger')
                return redirect(url_for(f'{nombre}.actualizar', mantenimiento_id=mantenimiento_id))
            flash('Mantenimiento actualizado correctamente.', 'success')
            return redirect(url_for(f'{nombre}.listar'))
        return _formulario(mantenimiento)

    @bp.route('/eliminar/<int:mantenimiento_id>', methods=['POST'])
    @roles_required(*GESTION)
    def eliminar(mantenimiento_id):
        if not _cargar(mantenimiento_id):
            return 'Mantenimiento no encontrado', 404
        DeletionService(get_repository()).eliminar_mantenimiento(mantenimiento_id)
        flash('Mantenimiento eliminado exitosamente', 'success')
        return redirect(url_for(f'{nombre}.listar'))

    return bp
