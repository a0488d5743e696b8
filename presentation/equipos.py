import sqlite3

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for

from application.services.deletion_service import DeletionService
from application.services.import_service import EquipmentImportService, UnreadableFileError, UnsupportedFormatError
from domain.models import Equipment
from presentation.forms import FilterField, build_predicates, campos_texto, columnas_de, entero
from presentation.security import GESTION, TODOS, get_repository, roles_required

bp = Blueprint('equipos', __name__, url_prefix='/equipos')

CAMPOS = columnas_de(Equipment, excluir=('id_ubicacion',))

FILTROS = [
    FilterField('tipo', 'tipo'),
    FilterField('marca', 'marca', 'LIKE'),
    FilterField('sistema_operativo', 'sistema_operativo'),
    FilterField('ubicacion', 'id_ubicacion'),
    FilterField('fecha_creacion_desde', 'fecha_creacion', '>='),
    FilterField('fecha_modificacion_hasta', 'fecha_modificacion', '<='),
]

def _desde_formulario(form, equipo_id=None) -> Equipment:
    return Equipment(id_ubicacion=entero(form, 'id_ubicacion'), id_equipo=equipo_id, **campos_texto(form, CAMPOS))

@bp.route('/alta', methods=['GET', 'POST'])
@roles_required(*GESTION)
def alta():
    repo = get_repository()
    if request.method == 'POST':
        try:
            repo.create_equipment(_desde_formulario(request.form))
        except sqlite3.IntegrityError:
            flash('Faltan campos obligatorios o la ubicación no existe.', 'danger')
            return redirect(url_for('equipos.alta'))
        flash('Equipo registrado correctamente.', 'success')
        return redirect(url_for('equipos.listar'))
    return render_template('equipos/formulario.html', equipo=None, ubicaciones=repo.list_locations())

@bp.route('/listar')
@roles_required(*GESTION)
def listar():
    repo = get_repository()
    equipos = repo.list_equipment(build_predicates(request.args, FILTROS))
    return render_template('equipos/listar.html', equipos=equipos, ubicaciones=repo.list_locations(),
                           filtros=request.args)

@bp.route('/actualizar/<int:equipo_id>', methods=['GET', 'POST'])
@roles_required(*GESTION)
def actualizar(equipo_id):
    repo = get_repository()
    equipo = repo.get_equipment(equipo_id)
    if not equipo:
        return 'Equipo no encontrado', 404

    if request.method == 'POST':
        try:
            repo.update_equipment(_desde_formulario(request.form, equipo_id))
        except sqlite3.IntegrityError:
            flash('Faltan campos obligatorios o la ubicación no existe.', 'danger')
            return redirect(url_for('equipos.actualizar', equipo_id=equipo_id))
        flash('Equipo actualizado correctamente.', 'success')
        return redirect(url_for('equipos.listar'))
    return render_template('equipos/formulario.html', equipo=equipo, ubicaciones=repo.list_locations())

@bp.route('/eliminar/<int:equipo_id>', methods=['POST'])
@roles_required(*GESTION)
def eliminar(equipo_id):
    DeletionService(get_repository()).eliminar_equipo(equipo_id)
    flash('Equipo eliminado exitosamente', 'success')
    return redirect(url_for('equipos.listar'))

@bp.route('/upload', methods=['POST'])
@roles_required(*GESTION)
def upload():
    archivo = request.files.get('file')
    if not archivo or not archivo.filename:
        flash('No se ha subido ningún archivo', 'danger')
        return redirect(url_for('equipos.listar'))
    try:
        resultado = EquipmentImportService(get_repository()).importar(archivo.stream, archivo.filename)
    except UnsupportedFormatError:
        flash('Formato de archivo no soportado', 'danger')
        return redirect(url_for('equipos.listar'))
    except UnreadableFileError as e:
        current_app.logger.warning("Archivo '%s' ilegible: %s", archivo.filename, e)
        flash('No se pudo leer el archivo. Revisa que no esté vacío ni dañado.', 'danger')
        return redirect(url_for('equipos.listar'))

    if resultado.fallidos:
        flash(f'Equipos cargados: {resultado.insertados}. Filas con errores: {resultado.fallidos}.', 'warning')
    else:
        flash('Equipos cargados exitosamente', 'success')
    return redirect(url_for('equipos.listar'))

@bp.route('/ubicacion/<int:id_ubicacion>')
@roles_required(*TODOS)
def por_ubicacion(id_ubicacion):
    try:
        return jsonify(get_repository().list_equipment_by_location(id_ubicacion))
    except sqlite3.Error:
        current_app.logger.exception("Error al obtener los equipos de la ubicación %s", id_ubicacion)
        return jsonify({'error': 'Error al obtener los equipos'}), 500
