import sqlite3

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for

from application.services.deletion_service import DeletionService
from domain.models import Hardware
from presentation.forms import FilterField, build_predicates, campos_texto, columnas_de, entero
from presentation.security import GESTION, TODOS, get_repository, roles_required

bp = Blueprint('hardware', __name__, url_prefix='/hardware')

CAMPOS = columnas_de(Hardware, excluir=('id_ubicacion',))

FILTROS = [
    FilterField('tipo_componente', 'tipo_componente'),
    FilterField('marca', 'marca', 'LIKE'),
    FilterField('estado', 'estado'),
    FilterField('id_ubicacion', 'id_ubicacion'),
    FilterField('fecha_creacion', 'fecha_creacion', '>=', ' 00:00:00'),
    FilterField('fecha_modificacion', 'fecha_modificacion', '<=', ' 23:59:59'),
]

def _desde_formulario(form, hardware_id=None) -> Hardware:
    return Hardware(id_ubicacion=entero(form, 'id_ubicacion'), id_hardware=hardware_id, **campos_texto(form, CAMPOS))

@bp.route('/alta', methods=['GET', 'POST'])
@roles_required(*GESTION)
def alta():
    repo = get_repository()
    if request.method == 'POST':
        try:
            repo.create_hardware(_desde_formulario(request.form))
        except sqlite3.IntegrityError:
            flash('Faltan campos obligatorios o la ubicación no existe.', 'danger')
            return redirect(url_for('hardware.alta'))
        flash('Hardware registrado correctamente.', 'success')
        return redirect(url_for('hardware.listar'))
    return render_template('hardware/formulario.html', hardware=None, ubicaciones=repo.list_locations())

@bp.route('/listar')
@roles_required(*GESTION)
def listar():
    repo = get_repository()
    hardware = repo.list_hardware(build_predicates(request.args, FILTROS))
    return render_template('hardware/listar.html', hardware=hardware, ubicaciones=repo.list_locations(),
                           filtros=request.args)

@bp.route('/actualizar/<int:hardware_id>', methods=['GET', 'POST'])
@roles_required(*GESTION)
def actualizar(hardware_id):
    repo = get_repository()
    hardware = repo.get_hardware(hardware_id)
    if not hardware:
        return 'Hardware no encontrado', 404

    if request.method == 'POST':
        try:
            repo.update_hardware(_desde_formulario(request.form, hardware_id))
        except sqlite3.IntegrityError:
            flash('Faltan campos obligatorios o la ubicación no existe.', 'danger')
            return redirect(url_for('hardware.actualizar', hardware_id=hardware_id))
        flash('Hardware actualizado correctamente.', 'success')
        return redirect(url_for('hardware.listar'))
    return render_template('hardware/formulario.html', hardware=hardware, ubicaciones=repo.list_locations())

@bp.route('/eliminar/<int:hardware_id>', methods=['POST'])
@roles_required(*GESTION)
def eliminar(hardware_id):
    DeletionService(get_repository()).eliminar_hardware(hardware_id)
    flash('Hardware eliminado exitosamente', 'success')
    return redirect(url_for('hardware.listar'))

@bp.route('/ubicacion/<int:id_ubicacion>')
@roles_required(*TODOS)
def por_ubicacion(id_ubicacion):
    try:
        return jsonify(get_repository().list_hardware_by_location(id_ubicacion))
    except sqlite3.Error:
        current_app.logger.exception("Error al obtener el hardware de la ubicación %s", id_ubicacion)
        return jsonify({'error': 'Error al obtener el hardware'}), 500
