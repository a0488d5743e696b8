import time
from functools import wraps

from flask import current_app, flash, redirect, session, url_for

from application.services.access_gate import LOGIN_ENDPOINT, Admission, check_role, evaluate_session

# Listas de roles usadas en las rutas
SOLO_ADMIN = ('admin',)
GESTION = ('admin', 'tecnico')
TODOS = ('admin', 'tecnico', 'usuario')

def get_repository():
    return current_app.extensions['repository']

def current_user():
    return session.get('user')

def _evaluar(roles) -> Admission:
    timeout = current_app.config['SESSION_TIMEOUT_MINUTES'] * 60
    admission = evaluate_session(session.get('user'), session.get('created_at'), time.time(),
                                 get_repository().get_user_by_id, timeout)
    if not admission.admitted:
        return admission
    session['created_at'] = admission.refreshed_at
    if roles:
        return check_role(session['user'].get('rol'), roles)
    return admission

def _rechazar(admission: Admission):
    if admission.destroy_session:
        session.clear()
    current_app.logger.info("Acceso rechazado (%s) a %s", admission.reason.value, admission.redirect_endpoint)
    flash(admission.message, 'warning' if admission.redirect_endpoint == LOGIN_ENDPOINT else 'danger')
    return redirect(url_for(admission.redirect_endpoint))

# --- Decoradores ---
def roles_required(*roles):
    """Valida la sesión y, si se indican roles, que el del usuario esté entre ellos."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            admission = _evaluar(roles)
            if not admission.admitted:
                return _rechazar(admission)
            return f(*args, **kwargs)
        return decorated_function
    return decorator

def login_required(f):
    return roles_required()(f)
