import time

from flask import Blueprint, current_app, flash, redirect, render_template, request, session, url_for

from application.services.account_service import AccountError, AccountService
from presentation.security import get_repository, login_required

bp = Blueprint('auth', __name__)

def _cuentas() -> AccountService:
    return AccountService(get_repository(), current_app.config['ALLOWED_EMAIL_DOMAIN'])

@bp.route('/')
def raiz():
    return redirect(url_for('auth.logup'))

@bp.route('/logup')
def logup():
    return render_template('logup.html')

@bp.route('/index')
@login_required
def index():
    kpis = get_repository().get_dashboard_kpis()
    return render_template('index.html', user=session['user'], kpis=kpis)

@bp.route('/signup', methods=['POST'])
def signup():
    try:
        _cuentas().registrar(request.form.get('username'), request.form.get('email'), request.form.get('password'))
    except AccountError as e:
        flash(str(e), 'danger')
        return redirect(url_for('auth.logup'))
    flash('Registro exitoso. Ahora puedes iniciar sesión.', 'success')
    return redirect(url_for('auth.logup'))

@bp.route('/login', methods=['POST'])
def login():
    try:
        user = _cuentas().autenticar(request.form.get('email'), request.form.get('password'))
    except AccountError as e:
        flash(str(e), 'danger')
        return redirect(url_for('auth.logup'))
    if not user:
        flash('Credenciales inválidas', 'danger')
        return redirect(url_for('auth.logup'))

    session.clear()
    session.permanent = True
    session['user'] = user.to_session()
    session['created_at'] = time.time()
    current_app.logger.info("Inicio de sesión de %s (%s)", user.email, user.rol.value)
    flash('¡Bienvenido! Has iniciado sesión correctamente.', 'success')
    return redirect(url_for('auth.index'))

@bp.route('/logout')
@login_required
def logout():
    session.clear()
    return redirect(url_for('auth.logup'))
